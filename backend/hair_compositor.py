import numpy as np

from color_math import as_rgb

MASK_CUTOFF = 0.1
MID_GRAY = 128.0
MAX_BLEND = 0.7


def apply_hair_color(image, mask, target_color):
    """Shift masked pixels toward target_color while keeping their shading.

    The candidate color is the target scaled by the pixel's mean intensity
    relative to mid gray, and is blended in at most MAX_BLEND of the mask
    alpha. Pixels whose alpha is at or under MASK_CUTOFF are copied as is.
    """
    if mask.shape[:2] != image.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape[:2]} does not match image {image.shape[:2]}")

    target = np.array(as_rgb(target_color), dtype=np.float64)
    src = image.astype(np.float64)
    alpha = mask.astype(np.float64) / 255.0

    ratio = src.mean(axis=2, keepdims=True) / MID_GRAY
    candidate = np.minimum(255.0, target * ratio)

    strength = (alpha * MAX_BLEND)[:, :, None]
    blended = src * (1.0 - strength) + candidate * strength
    blended = np.clip(np.round(blended), 0, 255).astype(np.uint8)

    active = (alpha > MASK_CUTOFF)[:, :, None]
    return np.where(active, blended, image).astype(np.uint8)
