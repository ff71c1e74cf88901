"""
Overlay Compositor.

Bakes committed text overlays into a raster. Each item's text is rendered
at its scaled font size onto a tight transparent layer, which is then mapped
onto the canvas with an affine transform (translate to the item's position,
rotate, text centered on the origin) and alpha-composited over the result.
Items are drawn in list order, so later items end up on top.

Example:
    >>> items = [OverlayItem(text="Summer", position=(200, 120), rotation=-10)]
    >>> baked = bake_overlays(items, raster)
"""

from functools import lru_cache
import logging
import math
from typing import Any, Iterable, Sequence, Tuple

from RT_Libs.constants import FONT_FALLBACKS
from RT_Libs.ImageEditingLib.image_models import RasterImage, Size
from RT_Libs.OverlayLib.overlay_items import OverlayItem
from RT_Libs.pillow_compat import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)


def _font_candidates(font_name: str) -> Tuple[str, ...]:
    candidates = [font_name]
    if not font_name.lower().endswith((".ttf", ".otf", ".ttc")):
        candidates.append(f"{font_name}.ttf")
    candidates.extend(FONT_FALLBACKS.get(font_name, ()))
    for fallbacks in FONT_FALLBACKS.values():
        candidates.extend(fallbacks)
    return tuple(dict.fromkeys(candidates))


@lru_cache(maxsize=64)
def resolve_font(font_name: str, font_size: int) -> Any:
    """
    Load a font by name.

    Tries the name as given, then the fallback table, then Pillow's
    built-in scalable font.

    Args:
        font_name: Font family or file name
        font_size: Pixel size

    Returns:
        A Pillow font object
    """
    for candidate in _font_candidates(font_name):
        try:
            return ImageFont.truetype(candidate, font_size)
        except OSError:
            continue
    logger.debug(f"Font '{font_name}' not found, using Pillow's default font")
    return ImageFont.load_default(size=font_size)


def render_text_layer(item: OverlayItem) -> Any:
    """
    Render an item's text at its scaled size, unrotated, onto a tight RGBA layer.

    Returns:
        PIL Image in RGBA mode sized to the text's bounding box
    """
    font = resolve_font(item.font_name, max(1, int(round(item.font_size * item.scale))))
    left, top, right, bottom = ImageDraw.Draw(Image.new("RGBA", (1, 1))).textbbox(
        (0, 0), item.text, font=font
    )
    width = max(1, right - left)
    height = max(1, bottom - top)

    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    ImageDraw.Draw(layer).text((-left, -top), item.text, font=font, fill=tuple(item.color))
    return layer


def overlay_affine(item: OverlayItem, layer_size: Size) -> Tuple[float, ...]:
    """
    Inverse affine coefficients mapping canvas pixels into the text layer.

    The layer is already drawn at the item's scale. The forward mapping is:
    move the layer center to the origin, rotate clockwise by
    ``item.rotation``, then translate to ``item.position``.
    """
    theta = math.radians(item.rotation)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    px, py = item.position
    half_w = layer_size[0] / 2.0
    half_h = layer_size[1] / 2.0

    a = cos_t
    b = sin_t
    c = -(cos_t * px + sin_t * py) + half_w
    d = -sin_t
    e = cos_t
    f = (sin_t * px - cos_t * py) + half_h
    return (a, b, c, d, e, f)


def bake_overlays(items: Iterable[OverlayItem], base: RasterImage) -> RasterImage:
    """
    Draw overlay items onto a raster.

    Args:
        items: Committed overlay items in drawing order
        base: RasterImage to draw on

    Returns:
        New RasterImage with every non-empty item drawn; ``base`` itself when
        there is nothing to draw
    """
    if not isinstance(base, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(base)}")

    drawable: Sequence[OverlayItem] = [item for item in items if item.text]
    if not drawable:
        return base

    result = base.to_pil()
    for item in drawable:
        layer = render_text_layer(item)
        placed = layer.transform(
            result.size,
            Image.Transform.AFFINE,
            overlay_affine(item, layer.size),
            resample=Image.Resampling.BICUBIC,
            fillcolor=(0, 0, 0, 0),
        )
        result = Image.alpha_composite(result, placed)

    logger.debug(f"Baked {len(drawable)} overlay item(s)")
    return base.with_pixels(result)
