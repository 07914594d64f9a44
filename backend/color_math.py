import colorsys
import re
from typing import NamedTuple

import cv2
import numpy as np


class RGBColor(NamedTuple):
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    h: float
    s: float
    l: float


HEX_PATTERN = re.compile(r'^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$', re.IGNORECASE)

# Skin hues below/above these bounds read as pink (cool) rather than yellow
SKIN_COOL_HUE_LOW = 18
SKIN_COOL_HUE_HIGH = 340


def rgb_to_hsl(r, g, b):
    """Convert 0-255 RGB to HSL with h in degrees, s and l in percent"""
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return HSL(h * 360.0, s * 100.0, l * 100.0)


def brightness(rgb):
    """Perceptual luma on a 0-255 scale"""
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def saturation(rgb):
    """HSV-style saturation in percent; black has no saturation"""
    high = max(rgb)
    if high == 0:
        return 0.0
    return (high - min(rgb)) / high * 100.0


def tone(rgb):
    """Coarse warm/cool split for arbitrary colors (yellow-red hues are warm)"""
    hue = rgb_to_hsl(*rgb).h
    if 0 <= hue <= 60 or 300 <= hue <= 360:
        return 'warm'
    return 'cool'


def skin_tone(rgb):
    """Warm/cool split tuned for skin, where almost every hue sits in 18-340"""
    hue = rgb_to_hsl(*rgb).h
    if hue < SKIN_COOL_HUE_LOW or hue > SKIN_COOL_HUE_HIGH:
        return 'cool'
    return 'warm'


def is_hex_color(value):
    return isinstance(value, str) and HEX_PATTERN.match(value.strip()) is not None


def hex_to_rgb(value):
    """Parse '#RRGGBB'; unparseable input maps to black"""
    match = HEX_PATTERN.match(value.strip())
    if not match:
        return RGBColor(0, 0, 0)
    return RGBColor(*(int(part, 16) for part in match.groups()))


def rgb_to_hex(rgb):
    r, g, b = rgb
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def as_rgb(color):
    """Accept an RGBColor, a 3-sequence or a hex string"""
    if isinstance(color, str):
        return hex_to_rgb(color)
    r, g, b = color
    return RGBColor(int(r), int(g), int(b))


def image_to_hsl(image_rgb):
    """Per-pixel HSL planes (h degrees, s and l percent) of an RGB uint8 image"""
    hls = cv2.cvtColor(image_rgb.astype(np.float32) / 255.0, cv2.COLOR_RGB2HLS)
    return hls[:, :, 0], hls[:, :, 2] * 100.0, hls[:, :, 1] * 100.0
