import logging
import os
import urllib.request

import cv2
import numpy as np

from color_logic import ColorSample
from color_math import RGBColor
from hair_mask import CHIN, FOREHEAD_CENTER, LEFT_TEMPLE, RIGHT_TEMPLE, landmark_px

MODEL_URL = ('https://storage.googleapis.com/mediapipe-models/face_landmarker/'
             'face_landmarker/float16/1/face_landmarker.task')

NOSE_TIP = 1
LEFT_IRIS = 468
RIGHT_IRIS = 473
INNER_LIP = 13


def resize_for_analysis(image_rgb, max_width=800):
    h, w = image_rgb.shape[:2]
    scale = min(1.0, max_width / w)
    if scale >= 1.0:
        return image_rgb
    size = (int(w * scale), int(h * scale))
    return cv2.resize(image_rgb, size, interpolation=cv2.INTER_AREA)


def decode_image(data):
    """Decode uploaded bytes into an RGB array, or None"""
    nparr = np.frombuffer(data, np.uint8)
    img = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if img is None:
        return None
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def color_at(image_rgb, x, y, radius=5):
    """Mean color of the 2r x 2r window whose corner is (x - r, y - r)"""
    h, w = image_rgb.shape[:2]
    radius = max(1, int(radius))
    x0 = min(max(0, int(x - radius)), w - 1)
    y0 = min(max(0, int(y - radius)), h - 1)
    window = image_rgb[y0:y0 + 2 * radius, x0:x0 + 2 * radius]
    mean = window.reshape(-1, 3).mean(axis=0)
    return RGBColor(*(int(round(v)) for v in mean))


def sample_colors(image_rgb, landmarks):
    """Sample skin, eye, lip and hair colors around fixed landmarks"""
    h, w = image_rgb.shape[:2]

    forehead = landmark_px(landmarks, FOREHEAD_CENTER, w, h)
    chin = landmark_px(landmarks, CHIN, w, h)
    left_cheek = landmark_px(landmarks, LEFT_TEMPLE, w, h)
    right_cheek = landmark_px(landmarks, RIGHT_TEMPLE, w, h)

    face_height = abs(chin[1] - forehead[1])
    face_width = abs(right_cheek[0] - left_cheek[0])
    face_size = (face_height + face_width) / 2

    # ~1.5% of the face size
    base_radius = max(2, min(15, round(face_size * 0.015)))

    # 1. Skin at the nose tip, wider window to average out pores
    nose = landmark_px(landmarks, NOSE_TIP, w, h)
    skin = color_at(image_rgb, *nose, radius=round(base_radius * 1.5))

    # 2. Eyes, small window to stay inside the iris
    eye_radius = max(1, round(base_radius * 0.5))
    left = color_at(image_rgb, *landmark_px(landmarks, LEFT_IRIS, w, h), radius=eye_radius)
    right = color_at(image_rgb, *landmark_px(landmarks, RIGHT_IRIS, w, h), radius=eye_radius)
    eye = RGBColor(*(int(round((a + b) / 2)) for a, b in zip(left, right)))

    # 3. Lips
    lip = color_at(image_rgb, *landmark_px(landmarks, INNER_LIP, w, h), radius=base_radius)

    # 4. Hair, a quarter face height above the forehead
    hair_x = forehead[0]
    hair_y = max(5, forehead[1] - face_height * 0.25)
    hair = color_at(image_rgb, hair_x, hair_y, radius=round(base_radius * 2))

    return ColorSample(hair=hair, eye=eye, skin=skin, lip=lip)


class FeatureExtractor:
    """MediaPipe FaceLandmarker wrapper returning one landmark set or None"""

    def __init__(self, model_path='face_landmarker.task'):
        import mediapipe as mp
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        if not os.path.exists(model_path):
            logging.info(f"Downloading face landmark model to {model_path}")
            urllib.request.urlretrieve(MODEL_URL, model_path)

        base_options = python.BaseOptions(model_asset_path=model_path)
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False,
            num_faces=1,
            min_face_detection_confidence=0.6,
            min_face_presence_confidence=0.6,
        )
        self._mp = mp
        self.face_landmarker = vision.FaceLandmarker.create_from_options(options)

    def detect_landmarks(self, image_rgb):
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB,
                                  data=np.ascontiguousarray(image_rgb))
        result = self.face_landmarker.detect(mp_image)
        if not result.face_landmarks:
            return None
        return result.face_landmarks[0]

    __call__ = detect_landmarks
