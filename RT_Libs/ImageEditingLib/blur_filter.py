"""
Blur and smoothing operations.

Provides the two blur algorithms used by Retouch:
- Gaussian blur: Natural smooth blur with circular falloff (the "Dreamy" look)
- Surface smoothing: Edge-preserving blur used for skin retouching

Example:
    >>> raster = RasterImage.decode(open("portrait.jpg", "rb").read())
    >>>
    >>> # Gaussian blur
    >>> dreamy = apply_gaussian_blur(raster, radius=5)
    >>>
    >>> # Smooth flat areas while keeping edges
    >>> smooth = apply_surface_smoothing(raster, radius=6, intensity=0.9)
"""

import numpy as np
from scipy import ndimage

from RT_Libs.constants import SURFACE_EDGE_TOLERANCE
from RT_Libs.ImageEditingLib.image_editing_ops import luminance, map_rgb
from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.pillow_compat import ImageFilter


MAX_BLUR_RADIUS = 100.0


# ============================================================================
# Gaussian Blur
# ============================================================================

def apply_gaussian_blur(image: RasterImage, radius: float = 5.0) -> RasterImage:
    """
    Apply Gaussian blur to a raster.

    Args:
        image: RasterImage to blur
        radius: Blur radius in pixels (0-100); 0 returns the input

    Returns:
        Blurred RasterImage (same size as input)

    Raises:
        ValueError: If radius < 0 or > 100
        TypeError: If image is not a RasterImage
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")

    if not (0 <= radius <= MAX_BLUR_RADIUS):
        raise ValueError(f"radius must be 0 <= r <= {MAX_BLUR_RADIUS:g}, got {radius}")

    if radius == 0:
        return image

    return image.with_pixels(image.pixels.filter(ImageFilter.GaussianBlur(radius=radius)))


# ============================================================================
# Surface Smoothing
# ============================================================================

def apply_surface_smoothing(
    image: RasterImage,
    radius: float,
    intensity: float,
) -> RasterImage:
    """
    Smooth low-contrast areas while leaving edges intact.

    Each pixel is pulled towards its Gaussian-blurred value, weighted by how
    close its luminance already is to the blurred luminance. Large local
    differences (edges, eyelashes, hair) keep their detail. ``intensity``
    widens the tolerance, so stronger settings smooth more texture.

    Args:
        image: RasterImage to smooth
        radius: Spatial radius in pixels
        intensity: Tonal tolerance multiplier (0 disables)

    Returns:
        Smoothed RasterImage
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")

    if radius <= 0 or intensity <= 0:
        return image

    sigma = radius / 2.0
    tolerance = np.float32(SURFACE_EDGE_TOLERANCE * intensity)

    def smooth(rgb: np.ndarray) -> np.ndarray:
        blurred = ndimage.gaussian_filter(rgb, sigma=(sigma, sigma, 0), mode="nearest")
        difference = np.abs(luminance(rgb) - luminance(blurred))
        weight = np.exp(-np.square(difference / tolerance))[..., None]
        return (rgb + (blurred - rgb) * weight).astype(np.float32)

    return map_rgb(image, smooth)
