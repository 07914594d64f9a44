import logging
import math
from dataclasses import dataclass

import cv2
import numpy as np

from color_math import as_rgb, image_to_hsl, rgb_to_hsl
from errors import InvalidLandmarksError
from morphology import smooth_mask

# FaceMesh indices
FOREHEAD_CENTER = 10
CHIN = 152
LEFT_TEMPLE = 234
RIGHT_TEMPLE = 454
LEFT_FOREHEAD = 103
RIGHT_FOREHEAD = 332

STRATEGIES = ('geometric', 'color')

# Hairline control points are lifted by this many pixels
HAIRLINE_LIFT = 20
BEZIER_SAMPLES = 64


@dataclass(frozen=True)
class ColorThresholds:
    hue: float = 40
    saturation: float = 40
    lightness: float = 40
    max_lightness: float = 70


@dataclass(frozen=True)
class RegionShape:
    top: float
    bottom: float
    side: float


GEOMETRIC_REGION = RegionShape(top=0.8, bottom=0.05, side=0.3)
PRECISE_REGION = RegionShape(top=1.0, bottom=0.1, side=0.4)


@dataclass(frozen=True)
class FaceFrame:
    """Pixel-space face metrics derived from the landmark set"""
    forehead: tuple
    chin: tuple
    left_temple: tuple
    right_temple: tuple
    face_width: float
    face_height: float

    def hair_region(self, shape, w, h):
        top = max(0.0, self.forehead[1] - self.face_height * shape.top)
        bottom = self.forehead[1] + self.face_height * shape.bottom
        left = max(0.0, self.left_temple[0] - self.face_width * shape.side)
        right = min(float(w), self.right_temple[0] + self.face_width * shape.side)
        return top, bottom, left, right


def landmark_px(landmarks, index, w, h):
    try:
        point = landmarks[index]
        x, y = float(point.x) * w, float(point.y) * h
    except (IndexError, KeyError, TypeError, AttributeError):
        raise InvalidLandmarksError(f"Landmark {index} is missing")
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidLandmarksError(f"Landmark {index} is not finite")
    return x, y


def face_frame(landmarks, w, h):
    if landmarks is None:
        raise InvalidLandmarksError("No landmarks for this image")

    forehead = landmark_px(landmarks, FOREHEAD_CENTER, w, h)
    chin = landmark_px(landmarks, CHIN, w, h)
    left_temple = landmark_px(landmarks, LEFT_TEMPLE, w, h)
    right_temple = landmark_px(landmarks, RIGHT_TEMPLE, w, h)

    face_width = abs(right_temple[0] - left_temple[0])
    face_height = abs(forehead[1] - chin[1])
    if face_width <= 0 or face_height <= 0:
        raise InvalidLandmarksError(
            f"Degenerate face size {face_width:.1f}x{face_height:.1f}px"
        )

    return FaceFrame(forehead, chin, left_temple, right_temple, face_width, face_height)


def cubic_bezier(p0, p1, p2, p3, samples=BEZIER_SAMPLES):
    t = np.linspace(0.0, 1.0, samples)[:, None]
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    return ((1 - t) ** 3) * p0 + 3 * ((1 - t) ** 2) * t * p1 + 3 * (1 - t) * (t ** 2) * p2 + (t ** 3) * p3


def geometric_hair_mask(image, landmarks):
    """Ellipse over the crown with the face carved out along the hairline"""
    h, w = image.shape[:2]
    frame = face_frame(landmarks, w, h)
    top, bottom, left, right = frame.hair_region(GEOMETRIC_REGION, w, h)

    mask = np.zeros((h, w), dtype=np.uint8)

    center = (int(round((left + right) / 2)), int(round((top + bottom) / 2)))
    axes = (int(round((right - left) / 2)), int(round((bottom - top) / 2)))
    cv2.ellipse(mask, center, axes, 0, 0, 360, 255, -1)

    left_forehead = landmark_px(landmarks, LEFT_FOREHEAD, w, h)
    right_forehead = landmark_px(landmarks, RIGHT_FOREHEAD, w, h)

    start = (frame.left_temple[0] - frame.face_width * GEOMETRIC_REGION.side, bottom)
    end = (frame.right_temple[0] + frame.face_width * GEOMETRIC_REGION.side, bottom)
    curve = cubic_bezier(
        start,
        (left_forehead[0], left_forehead[1] - HAIRLINE_LIFT),
        (right_forehead[0], right_forehead[1] - HAIRLINE_LIFT),
        end,
    )
    cutout = np.vstack([curve, [[end[0], h], [left, h]]])
    cv2.fillPoly(mask, [np.round(cutout).astype(np.int32)], 0)

    return mask


def color_hair_mask(image, landmarks, reference_hair_color, thresholds=ColorThresholds()):
    """Keep dark pixels close to the sampled hair color, fading toward the region edge"""
    h, w = image.shape[:2]
    frame = face_frame(landmarks, w, h)
    top, bottom, left, right = frame.hair_region(PRECISE_REGION, w, h)

    ys, xs = np.indices((h, w), dtype=np.float64)
    in_region = (xs >= left) & (xs <= right) & (ys >= top) & (ys <= bottom)

    ref = rgb_to_hsl(*as_rgb(reference_hair_color))
    hue, sat, light = image_to_hsl(image)

    similar = (
        (np.abs(hue - ref.h) < thresholds.hue)
        & (np.abs(sat - ref.s) < thresholds.saturation)
        & (np.abs(light - ref.l) < thresholds.lightness)
    )
    dark = light < thresholds.max_lightness
    included = in_region & similar & dark

    center_x = (left + right) / 2
    center_y = (top + bottom) / 2
    max_dist = math.sqrt((frame.face_width / 2) ** 2 + frame.face_height ** 2)
    dist = np.sqrt((xs - center_x) ** 2 + (ys - center_y) ** 2)
    strength = np.clip(1.0 - dist / max_dist, 0.0, 1.0)

    mask = np.where(included, np.round(strength * 255), 0).astype(np.uint8)
    logging.debug(f"Color hair mask: {int(np.count_nonzero(mask))} px of region "
                  f"[{top:.0f}:{bottom:.0f}, {left:.0f}:{right:.0f}]")
    return mask


def estimate_hair_mask(image, landmarks, reference_hair_color=None, strategy='color',
                       thresholds=ColorThresholds()):
    if strategy == 'geometric':
        return geometric_hair_mask(image, landmarks)
    if strategy == 'color':
        if reference_hair_color is None:
            raise ValueError("The color strategy needs a reference hair color")
        return color_hair_mask(image, landmarks, reference_hair_color, thresholds)
    raise ValueError(f"Unknown hair mask strategy: {strategy!r}")


def build_hair_mask(image, landmarks, reference_hair_color=None, strategy='color',
                    thresholds=ColorThresholds()):
    """Estimate the hair mask and smooth it when it came from per-pixel color tests"""
    mask = estimate_hair_mask(image, landmarks, reference_hair_color, strategy, thresholds)
    if strategy == 'color':
        mask = smooth_mask(mask)
    return mask
