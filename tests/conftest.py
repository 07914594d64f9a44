import base64
from typing import NamedTuple

import cv2
import numpy as np
import pytest

HAIR_RGB = (60, 40, 30)
SKIN_RGB = (220, 180, 150)
IMAGE_SIZE = 200
HAIR_ROWS = 90


class LandmarkPoint(NamedTuple):
    x: float
    y: float


FACE_POINTS = {
    1: (0.5, 0.7),      # nose tip
    10: (0.5, 0.4),     # forehead center
    13: (0.5, 0.8),     # inner lip
    103: (0.4, 0.45),   # left forehead
    152: (0.5, 0.9),    # chin
    234: (0.3, 0.6),    # left temple
    332: (0.6, 0.45),   # right forehead
    454: (0.7, 0.6),    # right temple
    468: (0.42, 0.6),   # left iris
    473: (0.58, 0.6),   # right iris
}


def make_landmarks(overrides=None):
    """478 FaceMesh points with the indices used by the pipeline placed on a face"""
    points = [LandmarkPoint(0.5, 0.5) for _ in range(478)]
    for index, (x, y) in FACE_POINTS.items():
        points[index] = LandmarkPoint(x, y)
    for index, (x, y) in (overrides or {}).items():
        points[index] = LandmarkPoint(x, y)
    return points


def make_portrait(hair=HAIR_RGB, skin=SKIN_RGB, size=IMAGE_SIZE, hair_rows=HAIR_ROWS):
    image = np.empty((size, size, 3), dtype=np.uint8)
    image[:] = skin
    image[:hair_rows] = hair
    return image


def encode_png_b64(image_rgb):
    ok, buffer = cv2.imencode('.png', cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return base64.b64encode(buffer.tobytes()).decode('ascii')


@pytest.fixture
def landmarks():
    return make_landmarks()


@pytest.fixture
def portrait():
    return make_portrait()


@pytest.fixture
def png_b64():
    # noisy so the encoded payload is well past the minimum base64 length
    tile = np.random.default_rng(0).integers(0, 256, size=(16, 16, 3), dtype=np.uint8)
    return encode_png_b64(tile)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeHttp:
    """Stands in for the requests module; replies are consumed in order"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def post(self, url, **kwargs):
        return self._next('POST', url, kwargs)

    def get(self, url, **kwargs):
        return self._next('GET', url, kwargs)


def gemini_reply(*parts):
    return {"candidates": [{"content": {"parts": list(parts)}}]}
