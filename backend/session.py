import argparse
import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional

import cv2

from color_logic import PersonalColorAnalyst
from config import Settings
from errors import (
    AnalysisInProgressError,
    CredentialError,
    FaceNotFoundError,
    RemoteParseFailure,
    RemoteTransportFailure,
)
from hair_compositor import apply_hair_color
from hair_mask import build_hair_mask
from remote_edit import RemoteEditClient
from season_data import get_recommended_hair_colors
from vision_engine import FeatureExtractor, decode_image, resize_for_analysis, sample_colors


@dataclass(frozen=True)
class GeneratedResult:
    color_label: str
    color_hex: str
    provenance: str
    image: Any = None
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


@dataclass
class SessionState:
    source_image: Any = None
    landmarks: Any = None
    color_sample: Any = None
    diagnosis: Any = None
    hair_color: Any = None
    history: List[GeneratedResult] = field(default_factory=list)
    analyzing: bool = False


class HairSimulationSession:
    """Owns one user's image, diagnosis and generated hair color history"""

    def __init__(self, detector, gateway=None, settings=None, analyst=None):
        self.detector = detector
        self.gateway = gateway
        self.settings = settings or Settings.from_env()
        self.analyst = analyst or PersonalColorAnalyst()
        self.state = SessionState()

    def reset(self):
        self.state = SessionState()

    def analyze(self, image_rgb):
        """Detect the face, sample colors and diagnose; state is replaced only on success"""
        if self.state.analyzing:
            raise AnalysisInProgressError("An image is already being analyzed")
        self.state.analyzing = True
        try:
            landmarks = self.detector(image_rgb)
            if landmarks is None:
                raise FaceNotFoundError("No face detected. Please try a different image.")

            sample = sample_colors(image_rgb, landmarks)
            diagnosis = self.analyst.analyze(sample)

            self.state.source_image = image_rgb
            self.state.landmarks = landmarks
            self.state.color_sample = sample
            self.state.hair_color = sample.hair
            self.state.diagnosis = diagnosis
            logging.info(f"Diagnosis: {diagnosis.season} {dict(diagnosis.scores)}")
            return diagnosis
        finally:
            self.state.analyzing = False

    def _require_analysis(self):
        if self.state.diagnosis is None or self.state.source_image is None:
            raise RuntimeError("Analyze an image before generating hair colors")

    def hair_mask(self):
        self._require_analysis()
        return build_hair_mask(
            self.state.source_image,
            self.state.landmarks,
            self.state.hair_color,
            strategy=self.settings.hair_mask_strategy,
        )

    def apply_color(self, color_hex, mask=None):
        """Local preview of one color on the current image"""
        if mask is None:
            mask = self.hair_mask()
        return apply_hair_color(self.state.source_image, mask, color_hex)

    def _use_remote(self, password):
        if not password or self.gateway is None:
            return False
        check = self.gateway.verify_password(password)
        if not check["google_api_configured"]:
            logging.warning("Password accepted but GOOGLE_API_KEY is not configured; using local mode")
            return False
        return True

    def generate_hair_colors(self, password="", on_progress=None):
        """Generate the season's recommended hair colors one at a time, in order.

        With a password the remote editor is tried first; a transport or parse
        failure switches the rest of the batch to local recoloring. A credential
        error stops the batch. Returns the results appended by this batch.
        """
        self._require_analysis()
        password = password.strip()
        colors = get_recommended_hair_colors(self.state.diagnosis.season)
        try:
            use_remote = self._use_remote(password)
        except (RemoteParseFailure, RemoteTransportFailure) as e:
            logging.error(f"Password check failed, using local mode: {e}")
            use_remote = False
        mask = None
        batch = []

        for i, info in enumerate(colors):
            if on_progress:
                on_progress(i, len(colors), info)

            result = None
            if use_remote:
                try:
                    edited = self.gateway.request_edit(
                        self.state.source_image, info['description'], info['ai_color'], password
                    )
                    result = GeneratedResult(
                        color_label=info['name'],
                        color_hex=info['color'],
                        provenance='remote',
                        image=edited.to_rgb(),
                        image_url=edited.data_url,
                    )
                except CredentialError:
                    logging.error("Remote edit rejected the access password; batch aborted")
                    raise
                except RemoteParseFailure as e:
                    logging.warning(f"Remote edit returned no image for {info['name']}: {e}")
                    use_remote = False
                except RemoteTransportFailure as e:
                    logging.error(f"Remote edit failed for {info['name']}: {e}")
                    use_remote = False

            if result is None:
                if mask is None:
                    mask = self.hair_mask()
                result = GeneratedResult(
                    color_label=info['name'],
                    color_hex=info['color'],
                    provenance='local',
                    image=self.apply_color(info['color'], mask),
                )

            self.state.history.append(result)
            batch.append(result)

        return batch


def main():
    ap = argparse.ArgumentParser(description='Diagnose a portrait and render its recommended hair colors')
    ap.add_argument('--input', required=True)
    ap.add_argument('--output-dir', default='hair_results')
    ap.add_argument('--proxy', help='Base URL of the edit proxy, e.g. http://localhost:8000')
    ap.add_argument('--password', default='', help='Access password for remote edits')
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    settings = Settings.from_env()

    with open(args.input, 'rb') as f:
        image = decode_image(f.read())
    if image is None:
        raise SystemExit(f"Could not read image {args.input}")
    image = resize_for_analysis(image, settings.max_image_width)

    gateway = RemoteEditClient(args.proxy, settings.remote_timeout_seconds) if args.proxy else None
    session = HairSimulationSession(FeatureExtractor(settings.face_model_path), gateway, settings)

    diagnosis = session.analyze(image)
    print(f"Season: {diagnosis.season} {dict(diagnosis.scores)}")

    os.makedirs(args.output_dir, exist_ok=True)

    def progress(i, total, info):
        print(f"[{i + 1}/{total}] {info['name']}")

    for i, result in enumerate(session.generate_hair_colors(args.password, on_progress=progress), 1):
        path = os.path.join(args.output_dir, f"{i}_{result.color_hex.lstrip('#')}_{result.provenance}.png")
        cv2.imwrite(path, cv2.cvtColor(result.image, cv2.COLOR_RGB2BGR))
        print(f"  {result.color_label} ({result.provenance}) -> {path}")


if __name__ == "__main__":
    main()
