"""
Object-removal masks.

The user paints over an aspect-fit preview of the image. ``CanvasMapping``
is the exact affine between that preview (view points) and image pixels,
and ``render_removal_mask`` replays the brush strokes at image resolution:
white where the user painted, black elsewhere.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from RT_Libs.constants import DEFAULT_BRUSH_SIZE, MAX_BRUSH_SIZE, MIN_BRUSH_SIZE
from RT_Libs.ImageEditingLib.image_models import RasterImage, Size
from RT_Libs.pillow_compat import Image, ImageDraw

Point = Tuple[float, float]


@dataclass(frozen=True)
class CanvasMapping:
    """Uniform scale plus offset from image pixels to view points.

    ``view = image * scale + offset``
    """
    scale: float
    offset: Point
    image_size: Size

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")

    @classmethod
    def aspect_fit(cls, image_size: Size, view_size: Tuple[float, float]) -> "CanvasMapping":
        """
        Mapping for an image scaled to fit inside a view, centered.

        Raises:
            ValueError: If either size has a non-positive dimension
        """
        image_w, image_h = image_size
        view_w, view_h = view_size
        if min(image_w, image_h, view_w, view_h) <= 0:
            raise ValueError(f"Invalid sizes: image {image_size}, view {view_size}")
        scale = min(view_w / image_w, view_h / image_h)
        offset = ((view_w - image_w * scale) / 2.0, (view_h - image_h * scale) / 2.0)
        return cls(scale, offset, (int(image_w), int(image_h)))

    def view_to_image(self, point: Point) -> Point:
        return (
            (point[0] - self.offset[0]) / self.scale,
            (point[1] - self.offset[1]) / self.scale,
        )

    def image_to_view(self, point: Point) -> Point:
        return (
            point[0] * self.scale + self.offset[0],
            point[1] * self.scale + self.offset[1],
        )

    def view_length_to_image(self, length: float) -> float:
        return length / self.scale


@dataclass(frozen=True)
class MaskStroke:
    """A brush stroke in view coordinates.

    Attributes:
        points: Stroke path in view points
        brush_size: Brush diameter in view points (clamped to 10-100)
    """
    points: Tuple[Point, ...]
    brush_size: float = DEFAULT_BRUSH_SIZE

    def __post_init__(self):
        object.__setattr__(self, "points", tuple((float(x), float(y)) for x, y in self.points))
        object.__setattr__(
            self,
            "brush_size",
            max(MIN_BRUSH_SIZE, min(MAX_BRUSH_SIZE, float(self.brush_size))),
        )


def _draw_stroke(draw, points: Sequence[Point], width: float) -> None:
    radius = width / 2.0
    for x, y in (points[0], points[-1]):
        draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=255)
    if len(points) > 1:
        draw.line(points, fill=255, width=max(1, int(round(width))), joint="curve")


def render_removal_mask(
    strokes: Iterable[MaskStroke],
    mapping: CanvasMapping,
    image_size: Optional[Size] = None,
) -> RasterImage:
    """
    Rasterize brush strokes into a removal mask at image resolution.

    Args:
        strokes: Strokes in view coordinates
        mapping: View-to-image mapping of the canvas the strokes were drawn on
        image_size: Output size (defaults to the mapping's image size)

    Returns:
        Opaque RasterImage, white where painted and black elsewhere
    """
    size = tuple(image_size or mapping.image_size)
    mask = Image.new("L", size, 0)
    draw = ImageDraw.Draw(mask)

    for stroke in strokes:
        if not stroke.points:
            continue
        points = [mapping.view_to_image(p) for p in stroke.points]
        _draw_stroke(draw, points, mapping.view_length_to_image(stroke.brush_size))

    return RasterImage.from_pil(mask)
