import numpy as np
import pytest

from conftest import make_portrait
from hair_compositor import apply_hair_color


def gray(size=4, value=128):
    return np.full((size, size, 3), value, dtype=np.uint8)


def full_mask(image, alpha=255):
    return np.full(image.shape[:2], alpha, dtype=np.uint8)


def test_empty_mask_returns_identical_pixels():
    image = make_portrait()
    result = apply_hair_color(image, np.zeros(image.shape[:2], dtype=np.uint8), (255, 0, 0))
    assert np.array_equal(result, image)


def test_full_alpha_blends_seventy_percent():
    image = gray()
    result = apply_hair_color(image, full_mask(image), (200, 100, 50))
    # 0.3 * 128 + 0.7 * target, rounded
    assert tuple(result[0, 0]) == (178, 108, 73)


def test_candidate_follows_pixel_shading():
    dark = gray(value=64)
    result = apply_hair_color(dark, full_mask(dark), (200, 100, 50))
    # ratio 0.5 -> candidate (100, 50, 25)
    assert tuple(result[0, 0]) == (89, 54, 37)


def test_candidate_is_capped_at_white():
    bright = gray(value=255)
    result = apply_hair_color(bright, full_mask(bright), (200, 200, 200))
    assert tuple(result[0, 0]) == (255, 255, 255)


def test_low_alpha_pixels_are_untouched():
    image = gray()
    mask = np.zeros(image.shape[:2], dtype=np.uint8)
    mask[0, 0] = 25    # 25 / 255 is under the cutoff
    mask[1, 1] = 26

    result = apply_hair_color(image, mask, (255, 0, 0))

    assert tuple(result[0, 0]) == (128, 128, 128)
    assert tuple(result[1, 1]) != (128, 128, 128)
    assert result[1, 1, 0] > 128


def test_bright_pixel_candidate_is_clamped():
    # ratio 251 / 128 ~ 1.96; an unclamped white candidate would be ~500
    image = gray(value=251)
    mask = full_mask(image)

    assert tuple(apply_hair_color(image, mask, (255, 255, 255))[0, 0]) == (254, 254, 254)
    assert tuple(apply_hair_color(image, mask, (0, 0, 0))[0, 0]) == (75, 75, 75)


@pytest.mark.parametrize("target", [(255, 255, 255), (0, 0, 0), (255, 0, 128)])
def test_matches_float_reference(target):
    rng = np.random.default_rng(11)
    image = rng.integers(128, 256, size=(32, 32, 3), dtype=np.uint8)
    mask = rng.integers(0, 256, size=(32, 32), dtype=np.uint8)

    result = apply_hair_color(image, mask, target)

    src = image.astype(np.float64)
    alpha = mask.astype(np.float64) / 255.0
    candidate = np.minimum(255.0, np.array(target, dtype=np.float64) * src.mean(axis=2, keepdims=True) / 128.0)
    strength = (alpha * 0.7)[:, :, None]
    expected = src * (1 - strength) + candidate * strength
    expected = np.where((alpha > 0.1)[:, :, None], expected, src)

    assert result.dtype == np.uint8
    assert result.shape == image.shape
    assert np.all(np.abs(result.astype(np.float64) - expected) <= 0.5 + 1e-9)


def test_inputs_are_not_modified():
    image = make_portrait()
    mask = full_mask(image, 200)
    image_before, mask_before = image.copy(), mask.copy()

    apply_hair_color(image, mask, (10, 200, 10))

    assert np.array_equal(image, image_before)
    assert np.array_equal(mask, mask_before)


def test_hex_target_matches_tuple_target():
    image = make_portrait()
    mask = full_mask(image)
    assert np.array_equal(
        apply_hair_color(image, mask, "#C8643C"),
        apply_hair_color(image, mask, (200, 100, 60)),
    )


def test_mask_shape_must_match_image():
    image = gray(size=4)
    with pytest.raises(ValueError):
        apply_hair_color(image, np.zeros((5, 5), dtype=np.uint8), (0, 0, 0))
