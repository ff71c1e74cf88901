"""
Geometric transforms: rotate, straighten, flip and center crop.

Positive angles turn the picture clockwise as seen on screen (pixel
coordinates with y pointing down). The output canvas is the bounding box of
the source rotated by the total angle, so content is never clipped; areas
outside the source are transparent.

Functions:
    straightened_canvas_size: Canvas size for a rotated rectangle
    apply_transforms: Discrete rotation, flips and straightening
    center_crop_rect: Largest centered rectangle with a given aspect
    center_crop: Crop a raster to that rectangle
    apply_transform_parameters: Transforms followed by the optional crop
"""

from dataclasses import dataclass
import logging
import math
from typing import Optional, Tuple

from RT_Libs.constants import MAX_STRAIGHTEN_DEGREES
from RT_Libs.ImageEditingLib.image_models import RasterImage, Size
from RT_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]

_CANVAS_EPSILON = 1e-9

_QUARTER_TURNS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def snap_rotation(degrees: float) -> int:
    """Snap an angle to the nearest multiple of 90, normalized to 0-270."""
    return int(round(float(degrees) / 90.0)) * 90 % 360


def clamp_straighten(degrees: float) -> float:
    return max(-MAX_STRAIGHTEN_DEGREES, min(MAX_STRAIGHTEN_DEGREES, float(degrees)))


@dataclass(frozen=True)
class TransformParameters:
    """Geometry settings for one transform pass.

    Attributes:
        straighten_angle: Fine rotation in degrees, clamped to [-45, 45]
        rotation: Discrete rotation, snapped to 0, 90, 180 or 270
        flip_h: Mirror left-right
        flip_v: Mirror top-bottom
        aspect_ratio: Optional crop aspect (width / height)
    """
    straighten_angle: float = 0.0
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    aspect_ratio: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "straighten_angle", clamp_straighten(self.straighten_angle))
        object.__setattr__(self, "rotation", snap_rotation(self.rotation))

    def is_identity(self) -> bool:
        return (
            self.straighten_angle == 0.0
            and self.rotation == 0
            and not self.flip_h
            and not self.flip_v
            and self.aspect_ratio is None
        )


def straightened_canvas_size(width: int, height: int, angle_degrees: float) -> Size:
    """
    Size of the bounding box of a ``width`` x ``height`` rectangle rotated
    about its center.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        angle_degrees: Rotation angle

    Returns:
        Tuple of (width, height), rounded up to whole pixels
    """
    theta = math.radians(angle_degrees)
    cos_t = abs(math.cos(theta))
    sin_t = abs(math.sin(theta))
    new_width = width * cos_t + height * sin_t
    new_height = width * sin_t + height * cos_t
    return (
        max(1, math.ceil(new_width - _CANVAS_EPSILON)),
        max(1, math.ceil(new_height - _CANVAS_EPSILON)),
    )


def _inverse_affine(
    source_size: Size,
    canvas_size: Size,
    rotation: float,
    straighten: float,
    flip_h: bool,
    flip_v: bool,
) -> Tuple[float, float, float, float, float, float]:
    """
    Coefficients mapping canvas coordinates back to source coordinates.

    The forward map is translate(canvas center) * rotate(rotation) *
    flip * rotate(straighten) * translate(-source center).
    """
    def rotation_matrix(degrees):
        t = math.radians(degrees)
        return ((math.cos(t), -math.sin(t)), (math.sin(t), math.cos(t)))

    def multiply(m, n):
        return (
            (m[0][0] * n[0][0] + m[0][1] * n[1][0], m[0][0] * n[0][1] + m[0][1] * n[1][1]),
            (m[1][0] * n[0][0] + m[1][1] * n[1][0], m[1][0] * n[0][1] + m[1][1] * n[1][1]),
        )

    flip = ((-1.0 if flip_h else 1.0, 0.0), (0.0, -1.0 if flip_v else 1.0))
    inverse = multiply(multiply(rotation_matrix(-straighten), flip), rotation_matrix(-rotation))

    src_cx, src_cy = source_size[0] / 2.0, source_size[1] / 2.0
    dst_cx, dst_cy = canvas_size[0] / 2.0, canvas_size[1] / 2.0
    (a, b), (d, e) = inverse
    c = src_cx - (a * dst_cx + b * dst_cy)
    f = src_cy - (d * dst_cx + e * dst_cy)
    return (a, b, c, d, e, f)


def apply_transforms(
    image: RasterImage,
    straighten_angle: float = 0.0,
    rotation: float = 0,
    flip_h: bool = False,
    flip_v: bool = False,
) -> RasterImage:
    """
    Rotate, flip and straighten a raster.

    The raster's orientation tag is baked in first. Without straightening,
    the result is an exact pixel transpose (flip, then quarter turns).

    Args:
        image: Source RasterImage
        straighten_angle: Degrees, clamped to [-45, 45]
        rotation: Degrees, snapped to a multiple of 90
        flip_h: Mirror left-right
        flip_v: Mirror top-bottom

    Returns:
        Transformed RasterImage (orientation UP)
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")

    straighten = clamp_straighten(straighten_angle)
    quarter = snap_rotation(rotation)
    source = image.upright()

    if straighten == 0.0:
        pixels = source.pixels
        if flip_h:
            pixels = pixels.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
        if flip_v:
            pixels = pixels.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        if quarter:
            pixels = pixels.transpose(_QUARTER_TURNS[quarter])
        if pixels is source.pixels:
            return source
        return source.with_pixels(pixels)

    canvas = straightened_canvas_size(source.width, source.height, quarter + straighten)
    coefficients = _inverse_affine(source.size, canvas, quarter, straighten, flip_h, flip_v)
    logger.debug(f"Straightening {source.size} by {straighten:g} deg onto canvas {canvas}")
    pixels = source.pixels.transform(
        canvas,
        Image.Transform.AFFINE,
        coefficients,
        resample=Image.Resampling.BICUBIC,
        fillcolor=(0, 0, 0, 0),
    )
    return source.with_pixels(pixels)


def center_crop_rect(size: Size, aspect_ratio: float) -> Rect:
    """
    Largest centered rectangle with ``width / height == aspect_ratio``.

    A source wider than the target keeps its height; otherwise it keeps its
    width.

    Returns:
        Tuple of (x, y, width, height); the full frame when aspect_ratio <= 0
    """
    width, height = size
    if width <= 0 or height <= 0:
        return (0, 0, width, height)
    if not aspect_ratio or aspect_ratio <= 0 or not math.isfinite(aspect_ratio):
        return (0, 0, width, height)

    if width / height > aspect_ratio:
        new_height = height
        new_width = min(width, max(1, int(round(height * aspect_ratio))))
    else:
        new_width = width
        new_height = min(height, max(1, int(round(width / aspect_ratio))))

    return ((width - new_width) // 2, (height - new_height) // 2, new_width, new_height)


def center_crop(image: RasterImage, aspect_ratio: float) -> RasterImage:
    """Crop to the largest centered rectangle with the given aspect ratio."""
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")
    if not aspect_ratio or aspect_ratio <= 0:
        return image

    source = image.upright()
    x, y, width, height = center_crop_rect(source.size, aspect_ratio)
    if (width, height) == source.size:
        return source
    return source.with_pixels(source.pixels.crop((x, y, x + width, y + height)))


def apply_transform_parameters(image: RasterImage, params: TransformParameters) -> RasterImage:
    result = apply_transforms(
        image,
        straighten_angle=params.straighten_angle,
        rotation=params.rotation,
        flip_h=params.flip_h,
        flip_v=params.flip_v,
    )
    if params.aspect_ratio is not None:
        result = center_crop(result, params.aspect_ratio)
    return result
