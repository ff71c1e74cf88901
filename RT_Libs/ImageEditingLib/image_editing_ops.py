"""
Core pixel operations for Retouch.

This module provides the low-level kernels shared by the adjustment
pipeline, the stylistic filters and the retouch engine. Kernels work on
H x W x 3 float32 RGB arrays in [0, 1]; alpha is carried separately by
``map_rgb`` so no kernel has to think about transparency.

Functions:
    map_rgb: Run an RGB kernel over a RasterImage, preserving alpha
    mask_blend: Per-pixel interpolation of two rasters through a grayscale mask
    srgb_to_linear / linear_to_srgb: Transfer functions for the working space
    luminance: Rec. 709 luma of an RGB array
    adjust_color_controls: Saturation, brightness and contrast
    adjust_exposure: Exposure in EV stops (linear light)
    adjust_highlights_shadows: Tone split on luminance
    adjust_vibrance: Saturation boost weighted towards muted colors
    kelvin_to_rgb / white_balance_gains / adjust_white_balance: Temperature and tint
    sharpen_luminance: Luminance-only sharpening
    unsharp_mask: Classic RGB unsharp mask
    apply_vignette: Radial darkening towards the corners
"""

import math
from typing import Any, Callable, Tuple

import numpy as np
from scipy import ndimage

from RT_Libs.constants import (
    HIGHLIGHT_PIVOT,
    HIGHLIGHT_SHADOW_STRENGTH,
    NEUTRAL_KELVIN,
    KELVIN_PER_TEMPERATURE_UNIT,
    SHADOW_PIVOT,
    SHARPEN_SIGMA,
    SHARPEN_STRENGTH,
    TINT_GREEN_GAIN_PER_OFFSET,
    TINT_OFFSET_PER_UNIT,
    VIGNETTE_DARKEN_PER_INTENSITY,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.pillow_compat import Image

RgbKernel = Callable[[np.ndarray], np.ndarray]

LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)


# ============================================================================
# Raster helpers
# ============================================================================

def map_rgb(image: RasterImage, kernel: RgbKernel) -> RasterImage:
    """
    Apply an RGB kernel to a raster and return a new raster.

    Args:
        image: Source RasterImage
        kernel: Callable taking and returning an H x W x 3 float array

    Returns:
        New RasterImage with the kernel's RGB output and the source alpha
    """
    array = image.to_array()
    rgb = kernel(array[..., :3])
    if rgb.shape != array[..., :3].shape:
        raise ValueError(f"Kernel changed array shape to {rgb.shape}")
    array[..., :3] = rgb
    return image.with_array(array)


def mask_blend(background: RasterImage, overlay: RasterImage, mask: Any) -> RasterImage:
    """
    Blend ``overlay`` over ``background`` using a grayscale mask.

    White mask pixels show the overlay, black pixels show the background,
    gray values interpolate.

    Args:
        background: RasterImage shown where the mask is transparent
        overlay: RasterImage shown where the mask is opaque
        mask: PIL Image in L mode, same size as both rasters

    Returns:
        Blended RasterImage carrying the background's orientation and scale
    """
    if background.size != overlay.size:
        raise ValueError(
            f"Cannot blend rasters of different sizes: {background.size} vs {overlay.size}"
        )
    if mask.mode != "L":
        mask = mask.convert("L")
    if mask.size != background.size:
        raise ValueError(f"Mask size {mask.size} does not match raster size {background.size}")
    return background.with_pixels(Image.composite(overlay.pixels, background.pixels, mask))


# ============================================================================
# Color space
# ============================================================================

def srgb_to_linear(rgb: np.ndarray) -> np.ndarray:
    """Decode sRGB-encoded values to linear light."""
    rgb = np.clip(rgb, 0.0, 1.0)
    return np.where(rgb <= 0.04045, rgb / 12.92, ((rgb + 0.055) / 1.055) ** 2.4).astype(np.float32)


def linear_to_srgb(linear: np.ndarray) -> np.ndarray:
    """Encode linear light values as sRGB."""
    linear = np.clip(linear, 0.0, 1.0)
    return np.where(
        linear <= 0.0031308,
        linear * 12.92,
        1.055 * np.power(linear, 1.0 / 2.4) - 0.055,
    ).astype(np.float32)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Rec. 709 luma of an H x W x 3 array."""
    return (rgb @ LUMA_WEIGHTS).astype(np.float32)


# ============================================================================
# Tone and color kernels
# ============================================================================

def adjust_color_controls(
    rgb: np.ndarray,
    saturation: float = 1.0,
    brightness: float = 0.0,
    contrast: float = 1.0,
) -> np.ndarray:
    """
    Apply saturation, brightness and contrast, in that order.

    Saturation interpolates between the pixel's luma and its color,
    brightness is an additive offset and contrast scales around mid-gray.
    """
    out = rgb
    if saturation != 1.0:
        gray = luminance(out)[..., None]
        out = gray + (out - gray) * np.float32(saturation)
    if brightness != 0.0:
        out = out + np.float32(brightness)
    if contrast != 1.0:
        out = (out - 0.5) * np.float32(contrast) + 0.5
    return np.clip(out, 0.0, 1.0).astype(np.float32)


def adjust_exposure(rgb: np.ndarray, ev: float) -> np.ndarray:
    """Multiply linear light by 2**ev."""
    if ev == 0.0:
        return rgb
    linear = srgb_to_linear(rgb) * np.float32(2.0 ** ev)
    return linear_to_srgb(linear)


def adjust_highlights_shadows(rgb: np.ndarray, highlights: float, shadows: float) -> np.ndarray:
    """
    Split-tone luminance adjustment.

    ``highlights`` runs from 0 (strongest recovery) to 1 (no change);
    ``shadows`` lifts (positive) or deepens (negative) dark tones. The
    luminance shift is added to every channel so hue is kept.
    """
    lum = luminance(rgb)
    shift = np.zeros_like(lum)
    if highlights != 1.0:
        weight = _smoothstep(HIGHLIGHT_PIVOT, 1.0, lum)
        shift -= np.float32((1.0 - highlights) * HIGHLIGHT_SHADOW_STRENGTH) * weight
    if shadows != 0.0:
        weight = 1.0 - _smoothstep(0.0, SHADOW_PIVOT, lum)
        shift += np.float32(shadows * HIGHLIGHT_SHADOW_STRENGTH) * weight
    return np.clip(rgb + shift[..., None], 0.0, 1.0).astype(np.float32)


def adjust_vibrance(rgb: np.ndarray, amount: float) -> np.ndarray:
    """Scale saturation, weighting muted pixels more than saturated ones."""
    if amount == 0.0:
        return rgb
    chroma = rgb.max(axis=2) - rgb.min(axis=2)
    factor = 1.0 + np.float32(amount) * (1.0 - chroma)
    gray = luminance(rgb)[..., None]
    return np.clip(gray + (rgb - gray) * factor[..., None], 0.0, 1.0).astype(np.float32)


def kelvin_to_rgb(kelvin: float) -> Tuple[float, float, float]:
    """
    Approximate the RGB white point of a black-body radiator.

    Args:
        kelvin: Color temperature (clamped to 1000-40000 K)

    Returns:
        Tuple of (r, g, b) in [0, 1]
    """
    temp = max(1000.0, min(40000.0, float(kelvin))) / 100.0

    if temp <= 66.0:
        red = 255.0
        green = 99.4708025861 * math.log(temp) - 161.1195681661
    else:
        red = 329.698727446 * math.pow(temp - 60.0, -0.1332047592)
        green = 288.1221695283 * math.pow(temp - 60.0, -0.0755148492)

    if temp >= 66.0:
        blue = 255.0
    elif temp <= 19.0:
        blue = 0.0
    else:
        blue = 138.5177312231 * math.log(temp - 10.0) - 305.0447927307

    return tuple(max(0.0, min(255.0, c)) / 255.0 for c in (red, green, blue))


def white_balance_gains(temperature: float, tint: float) -> Tuple[float, float, float]:
    """
    Per-channel gains adapting the neutral white point to the target.

    The target temperature is ``NEUTRAL_KELVIN + temperature * 1500`` and the
    tint offset is ``tint * 150`` on the green-magenta axis (positive leans
    magenta). Gains are normalized to unit luma so overall brightness holds.
    """
    target_kelvin = NEUTRAL_KELVIN + temperature * KELVIN_PER_TEMPERATURE_UNIT
    tint_offset = tint * TINT_OFFSET_PER_UNIT

    neutral = kelvin_to_rgb(NEUTRAL_KELVIN)
    target = kelvin_to_rgb(target_kelvin)
    gains = [n / max(t, 1e-6) for n, t in zip(neutral, target)]
    gains[1] *= 1.0 - tint_offset * TINT_GREEN_GAIN_PER_OFFSET

    norm = float(np.dot(LUMA_WEIGHTS, gains))
    return tuple(g / norm for g in gains)


def adjust_white_balance(rgb: np.ndarray, temperature: float, tint: float) -> np.ndarray:
    if temperature == 0.0 and tint == 0.0:
        return rgb
    gains = np.array(white_balance_gains(temperature, tint), dtype=np.float32)
    linear = srgb_to_linear(rgb) * gains
    return linear_to_srgb(linear)


# ============================================================================
# Detail kernels
# ============================================================================

def sharpen_luminance(rgb: np.ndarray, sharpness: float) -> np.ndarray:
    """Add high-frequency luma detail back to every channel."""
    if sharpness <= 0.0:
        return rgb
    lum = luminance(rgb)
    blurred = ndimage.gaussian_filter(lum, sigma=SHARPEN_SIGMA, mode="nearest")
    detail = (lum - blurred) * np.float32(sharpness * SHARPEN_STRENGTH)
    return np.clip(rgb + detail[..., None], 0.0, 1.0).astype(np.float32)


def unsharp_mask(rgb: np.ndarray, radius: float, intensity: float) -> np.ndarray:
    """Sharpen by adding ``intensity`` times the difference from a Gaussian blur."""
    if radius <= 0.0 or intensity == 0.0:
        return rgb
    blurred = ndimage.gaussian_filter(rgb, sigma=(radius, radius, 0), mode="nearest")
    return np.clip(rgb + (rgb - blurred) * np.float32(intensity), 0.0, 1.0).astype(np.float32)


def apply_vignette(rgb: np.ndarray, intensity: float, radius: float) -> np.ndarray:
    """
    Darken the image towards its corners.

    Distance is measured from the center and normalized so the corners sit
    at 1.0. Darkening starts at ``1 / (1 + radius / 10)`` of that distance,
    so a larger radius pulls the falloff towards the center. The center
    pixel is never changed.
    """
    if intensity <= 0.0:
        return rgb
    height, width = rgb.shape[:2]
    ys = (np.arange(height, dtype=np.float32) + 0.5 - height / 2.0) / max(height / 2.0, 1e-6)
    xs = (np.arange(width, dtype=np.float32) + 0.5 - width / 2.0) / max(width / 2.0, 1e-6)
    distance = np.sqrt(ys[:, None] ** 2 + xs[None, :] ** 2) / np.float32(math.sqrt(2.0))

    start = 1.0 / (1.0 + max(0.0, radius) / 10.0)
    falloff = _smoothstep(start, 1.0, distance)
    shade = np.clip(1.0 - VIGNETTE_DARKEN_PER_INTENSITY * intensity * falloff, 0.0, 1.0)
    return (rgb * shade[..., None].astype(np.float32)).astype(np.float32)


def _smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    if edge1 <= edge0:
        return (x >= edge1).astype(np.float32)
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return (t * t * (3.0 - 2.0 * t)).astype(np.float32)
