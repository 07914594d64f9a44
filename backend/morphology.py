import cv2
import numpy as np

SMOOTH_ITERATIONS = 3
SMOOTH_RADIUS = 3


def smooth_mask(mask, iterations=SMOOTH_ITERATIONS, radius=SMOOTH_RADIUS):
    """Grow the alpha plane with repeated max filters to close small gaps"""
    size = 2 * radius + 1
    kernel = np.ones((size, size), dtype=np.uint8)
    return cv2.dilate(mask, kernel, iterations=iterations)
