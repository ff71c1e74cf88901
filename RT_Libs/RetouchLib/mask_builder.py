"""
Region masks for face-aware retouching.

A region mask is a feathered disc covering the bounding box of a landmark
region. Masks are Pillow "L" images (255 = fully selected) the size of the
raster they will be blended onto.

Functions:
    empty_mask: Fully transparent mask
    region_mask: Feathered disc around a set of points
    union_masks: Source-over union of several masks
"""

from typing import Sequence, Tuple

import numpy as np

from RT_Libs.ImageEditingLib.image_models import Size
from RT_Libs.pillow_compat import Image

Point = Tuple[float, float]


def empty_mask(size: Size):
    return Image.new("L", size, 0)


def region_radii(points: Sequence[Point], feather: float) -> Tuple[Point, float, float]:
    """
    Center, solid radius and fade-out radius for a region.

    Returns:
        Tuple of (center, r0, r1); r0 is 0 for an empty or degenerate region
    """
    if not points:
        return (0.0, 0.0), 0.0, 0.0
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    center = ((min(xs) + max(xs)) / 2.0, (min(ys) + max(ys)) / 2.0)
    extent = max(max(xs) - min(xs), max(ys) - min(ys))
    r0 = extent / 2.0 + extent * feather
    r1 = r0 + r0 * feather * 2.0
    return center, r0, r1


def region_mask(points: Sequence[Point], size: Size, feather: float = 0.1):
    """
    Build a feathered circular mask around a landmark region.

    White inside the solid radius, a linear fade to black at the outer
    radius, cropped to the image.

    Args:
        points: Region points in image pixels
        size: (width, height) of the mask
        feather: Feather fraction of the region extent

    Returns:
        PIL Image in L mode; all black when the region is empty
    """
    (cx, cy), r0, r1 = region_radii(points, feather)
    if r0 <= 0:
        return empty_mask(size)

    width, height = size
    yy, xx = np.ogrid[0:height, 0:width]
    distance = np.hypot(xx + 0.5 - cx, yy + 0.5 - cy)

    if r1 > r0:
        alpha = np.clip((r1 - distance) / (r1 - r0), 0.0, 1.0)
    else:
        alpha = (distance <= r0).astype(np.float64)

    return Image.fromarray(np.rint(alpha * 255.0).astype(np.uint8))


def union_masks(*masks):
    """Source-over union (a + b * (1 - a)) of same-sized L masks."""
    if not masks:
        raise ValueError("union_masks needs at least one mask")
    result = np.asarray(masks[0], dtype=np.float32) / 255.0
    for mask in masks[1:]:
        if mask.size != masks[0].size:
            raise ValueError(f"Mask size mismatch: {mask.size} vs {masks[0].size}")
        other = np.asarray(mask, dtype=np.float32) / 255.0
        result = result + other * (1.0 - result)
    return Image.fromarray(np.rint(np.clip(result, 0.0, 1.0) * 255.0).astype(np.uint8))


def is_empty(mask) -> bool:
    """True when no pixel of the mask is selected."""
    return mask.getbbox() is None
