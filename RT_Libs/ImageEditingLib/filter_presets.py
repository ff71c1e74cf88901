"""
Stylistic filter presets.

Filters form a closed catalogue. Every ``FilterKind`` maps to a
``FilterPreset`` holding a typed parameter record; the record decides how the
user's intensity slider is applied (``with_intensity``) and how pixel radii
shrink for thumbnails (``scaled``). Each parameter type has exactly one
transform registered in ``_TRANSFORMS``; the table is checked for
completeness at import time.

Intensity rules:
- Sepia, monochrome, vignette and unsharp mask take intensity directly
- Gaussian blur: radius = intensity * 10
- Color controls ("Cool"): contrast = 1.1 + intensity * 0.5
- Everything else applies its baked parameters

Example:
    >>> descriptor = FilterDescriptor(FilterKind.SEPIA, intensity=0.6)
    >>> toned = apply_filter(raster, descriptor)
    >>> previews = {kind: generate_thumbnail(raster, kind) for kind in all_filters()}
"""

from dataclasses import dataclass, replace
from enum import Enum
import logging
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Tuple

import numpy as np

from RT_Libs.constants import (
    BLUR_RADIUS_PER_INTENSITY,
    COOL_CONTRAST_BASE,
    COOL_CONTRAST_PER_INTENSITY,
    THUMBNAIL_SIZE,
)
from RT_Libs.ImageEditingLib.blur_filter import MAX_BLUR_RADIUS, apply_gaussian_blur
from RT_Libs.ImageEditingLib.image_editing_ops import (
    adjust_color_controls,
    adjust_highlights_shadows,
    apply_vignette,
    luminance,
    map_rgb,
    unsharp_mask,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage, Size
from RT_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)

Rgb = Tuple[float, float, float]


class FilterKind(Enum):
    """Closed set of stylistic presets; values are display names."""

    ORIGINAL = "Original"
    CLASSIC = "Classic"
    VIVID = "Vivid"
    PORTRAIT = "Portrait"
    BW = "B&W"
    FILM = "Film"
    WARM = "Warm"
    COOL = "Cool"
    CINEMATIC = "Cinematic"
    PASTEL = "Pastel"
    BOLD = "Bold"
    MATTE = "Matte"
    RETRO = "Retro"
    SEPIA = "Sepia"
    HDR_POP = "HDR Pop"
    MONO_BLUE = "Mono Blue"
    SUNSET = "Sunset"
    URBAN = "Urban"
    DREAMY = "Dreamy"
    CHROME = "Chrome"


# ============================================================================
# Parameter records
# ============================================================================

class _BakedParams:
    """Mixin for presets whose look ignores the intensity slider."""

    def with_intensity(self, intensity: float):
        return self

    def scaled(self, factor: float):
        return self


@dataclass(frozen=True)
class IdentityParams(_BakedParams):
    pass


@dataclass(frozen=True)
class PhotoEffectParams(_BakedParams):
    """Canned film-style look: tone, color cast and faded blacks."""
    saturation: float = 1.0
    contrast: float = 1.0
    black_lift: float = 0.0
    gains: Rgb = (1.0, 1.0, 1.0)
    monochrome: bool = False


@dataclass(frozen=True)
class SepiaParams:
    intensity: float = 1.0

    def with_intensity(self, intensity: float) -> "SepiaParams":
        return replace(self, intensity=intensity)

    def scaled(self, factor: float) -> "SepiaParams":
        return self


@dataclass(frozen=True)
class ColorControlsParams:
    saturation: float = 1.0
    brightness: float = 0.0
    contrast: float = 1.0

    def with_intensity(self, intensity: float) -> "ColorControlsParams":
        return ColorControlsParams(
            saturation=1.0,
            brightness=0.0,
            contrast=COOL_CONTRAST_BASE + intensity * COOL_CONTRAST_PER_INTENSITY,
        )

    def scaled(self, factor: float) -> "ColorControlsParams":
        return self


@dataclass(frozen=True)
class ColorMatrixParams(_BakedParams):
    """Rows are the output R, G, B weights of the input R, G, B."""
    matrix: Tuple[Rgb, Rgb, Rgb] = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
    bias: Rgb = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class PosterizeParams(_BakedParams):
    levels: int = 6


@dataclass(frozen=True)
class UnsharpMaskParams:
    radius: float = 2.5
    intensity: float = 0.5

    def with_intensity(self, intensity: float) -> "UnsharpMaskParams":
        return replace(self, intensity=intensity)

    def scaled(self, factor: float) -> "UnsharpMaskParams":
        return replace(self, radius=self.radius * factor)


@dataclass(frozen=True)
class GammaParams(_BakedParams):
    power: float = 0.75


@dataclass(frozen=True)
class VignetteParams:
    intensity: float = 1.0
    radius: float = 10.0

    def with_intensity(self, intensity: float) -> "VignetteParams":
        return replace(self, intensity=intensity)

    def scaled(self, factor: float) -> "VignetteParams":
        # Radius is relative to the image diagonal, not in pixels.
        return self


@dataclass(frozen=True)
class HighlightShadowParams(_BakedParams):
    highlights: float = 1.0
    shadows: float = 0.0


@dataclass(frozen=True)
class MonochromeParams:
    color: Rgb = (0.6, 0.45, 0.3)
    intensity: float = 1.0

    def with_intensity(self, intensity: float) -> "MonochromeParams":
        return replace(self, intensity=intensity)

    def scaled(self, factor: float) -> "MonochromeParams":
        return self


@dataclass(frozen=True)
class ColorMapParams(_BakedParams):
    """Luminance-indexed gradient given as (position, color) stops."""
    stops: Tuple[Tuple[float, Rgb], ...] = ((0.0, (0.0, 0.0, 0.0)), (1.0, (1.0, 1.0, 1.0)))


@dataclass(frozen=True)
class GaussianBlurParams:
    radius: float = 10.0

    def with_intensity(self, intensity: float) -> "GaussianBlurParams":
        return replace(self, radius=intensity * BLUR_RADIUS_PER_INTENSITY)

    def scaled(self, factor: float) -> "GaussianBlurParams":
        return replace(self, radius=self.radius * factor)


FilterParams = Any


@dataclass(frozen=True)
class FilterPreset:
    """A catalogue entry: display name, transform identifier and baked parameters."""
    kind: FilterKind
    transform_id: str
    params: FilterParams

    @property
    def name(self) -> str:
        return self.kind.value


# ============================================================================
# Transforms
# ============================================================================

_SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
], dtype=np.float32)


def _apply_identity(image: RasterImage, params: IdentityParams) -> RasterImage:
    return image


def _apply_photo_effect(image: RasterImage, params: PhotoEffectParams) -> RasterImage:
    def effect(rgb: np.ndarray) -> np.ndarray:
        if params.monochrome:
            rgb = np.repeat(luminance(rgb)[..., None], 3, axis=2)
        rgb = adjust_color_controls(rgb, saturation=params.saturation, contrast=params.contrast)
        rgb = rgb * np.array(params.gains, dtype=np.float32)
        rgb = params.black_lift + rgb * (1.0 - params.black_lift)
        return np.clip(rgb, 0.0, 1.0).astype(np.float32)

    return map_rgb(image, effect)


def _apply_sepia(image: RasterImage, params: SepiaParams) -> RasterImage:
    if params.intensity <= 0:
        return image

    def sepia(rgb: np.ndarray) -> np.ndarray:
        toned = np.clip(rgb @ _SEPIA_MATRIX.T, 0.0, 1.0)
        return (rgb + (toned - rgb) * np.float32(params.intensity)).astype(np.float32)

    return map_rgb(image, sepia)


def _apply_color_controls(image: RasterImage, params: ColorControlsParams) -> RasterImage:
    return map_rgb(
        image,
        lambda rgb: adjust_color_controls(
            rgb,
            saturation=params.saturation,
            brightness=params.brightness,
            contrast=params.contrast,
        ),
    )


def _apply_color_matrix(image: RasterImage, params: ColorMatrixParams) -> RasterImage:
    matrix = np.array(params.matrix, dtype=np.float32)
    bias = np.array(params.bias, dtype=np.float32)
    return map_rgb(
        image,
        lambda rgb: np.clip(rgb @ matrix.T + bias, 0.0, 1.0).astype(np.float32),
    )


def _apply_posterize(image: RasterImage, params: PosterizeParams) -> RasterImage:
    steps = max(1, int(params.levels) - 1)
    return map_rgb(
        image,
        lambda rgb: (np.rint(rgb * steps) / steps).astype(np.float32),
    )


def _apply_unsharp_mask(image: RasterImage, params: UnsharpMaskParams) -> RasterImage:
    return map_rgb(image, lambda rgb: unsharp_mask(rgb, params.radius, params.intensity))


def _apply_gamma(image: RasterImage, params: GammaParams) -> RasterImage:
    return map_rgb(
        image,
        lambda rgb: np.power(np.clip(rgb, 0.0, 1.0), params.power).astype(np.float32),
    )


def _apply_vignette(image: RasterImage, params: VignetteParams) -> RasterImage:
    return map_rgb(image, lambda rgb: apply_vignette(rgb, params.intensity, params.radius))


def _apply_highlight_shadow(image: RasterImage, params: HighlightShadowParams) -> RasterImage:
    return map_rgb(
        image,
        lambda rgb: adjust_highlights_shadows(rgb, params.highlights, params.shadows),
    )


def _apply_monochrome(image: RasterImage, params: MonochromeParams) -> RasterImage:
    if params.intensity <= 0:
        return image
    color = np.array(params.color, dtype=np.float32)

    def monochrome(rgb: np.ndarray) -> np.ndarray:
        tinted = luminance(rgb)[..., None] * color
        return (rgb + (tinted - rgb) * np.float32(params.intensity)).astype(np.float32)

    return map_rgb(image, monochrome)


def _apply_color_map(image: RasterImage, params: ColorMapParams) -> RasterImage:
    positions = np.array([stop[0] for stop in params.stops], dtype=np.float32)
    colors = np.array([stop[1] for stop in params.stops], dtype=np.float32)

    def color_map(rgb: np.ndarray) -> np.ndarray:
        lum = luminance(rgb)
        channels = [np.interp(lum, positions, colors[:, c]) for c in range(3)]
        return np.stack(channels, axis=-1).astype(np.float32)

    return map_rgb(image, color_map)


def _apply_gaussian_blur(image: RasterImage, params: GaussianBlurParams) -> RasterImage:
    return apply_gaussian_blur(image, radius=min(max(params.radius, 0.0), MAX_BLUR_RADIUS))


_TRANSFORMS: Mapping[type, Callable[[RasterImage, Any], RasterImage]] = MappingProxyType({
    IdentityParams: _apply_identity,
    PhotoEffectParams: _apply_photo_effect,
    SepiaParams: _apply_sepia,
    ColorControlsParams: _apply_color_controls,
    ColorMatrixParams: _apply_color_matrix,
    PosterizeParams: _apply_posterize,
    UnsharpMaskParams: _apply_unsharp_mask,
    GammaParams: _apply_gamma,
    VignetteParams: _apply_vignette,
    HighlightShadowParams: _apply_highlight_shadow,
    MonochromeParams: _apply_monochrome,
    ColorMapParams: _apply_color_map,
    GaussianBlurParams: _apply_gaussian_blur,
})


# ============================================================================
# Catalogue
# ============================================================================

PRESETS: Mapping[FilterKind, FilterPreset] = MappingProxyType({
    preset.kind: preset for preset in (
        FilterPreset(FilterKind.ORIGINAL, "", IdentityParams()),
        FilterPreset(FilterKind.CLASSIC, "photo_effect.process", PhotoEffectParams(
            saturation=0.9, contrast=1.1, black_lift=0.02, gains=(0.95, 1.0, 1.08),
        )),
        FilterPreset(FilterKind.VIVID, "photo_effect.instant", PhotoEffectParams(
            saturation=1.25, contrast=1.05, black_lift=0.04, gains=(1.06, 1.0, 0.92),
        )),
        FilterPreset(FilterKind.PORTRAIT, "photo_effect.tonal", PhotoEffectParams(
            monochrome=True,
        )),
        FilterPreset(FilterKind.BW, "photo_effect.noir", PhotoEffectParams(
            monochrome=True, contrast=1.35,
        )),
        FilterPreset(FilterKind.FILM, "photo_effect.fade", PhotoEffectParams(
            saturation=0.7, contrast=0.9, black_lift=0.08, gains=(1.02, 1.0, 0.97),
        )),
        FilterPreset(FilterKind.WARM, "sepia_tone", SepiaParams()),
        FilterPreset(FilterKind.COOL, "color_controls", ColorControlsParams()),
        FilterPreset(FilterKind.CINEMATIC, "color_matrix", ColorMatrixParams(
            matrix=((1.10, 0.05, -0.05), (0.00, 1.00, 0.05), (-0.10, 0.05, 1.05)),
            bias=(0.02, 0.0, 0.03),
        )),
        FilterPreset(FilterKind.PASTEL, "color_posterize", PosterizeParams(levels=6)),
        FilterPreset(FilterKind.BOLD, "unsharp_mask", UnsharpMaskParams(radius=2.5)),
        FilterPreset(FilterKind.MATTE, "gamma_adjust", GammaParams(power=0.75)),
        FilterPreset(FilterKind.RETRO, "vignette", VignetteParams(radius=10.0)),
        FilterPreset(FilterKind.SEPIA, "sepia_tone", SepiaParams()),
        FilterPreset(FilterKind.HDR_POP, "highlight_shadow_adjust", HighlightShadowParams(
            highlights=0.7, shadows=0.6,
        )),
        FilterPreset(FilterKind.MONO_BLUE, "color_monochrome", MonochromeParams(
            color=(0.2, 0.4, 0.8),
        )),
        FilterPreset(FilterKind.SUNSET, "color_map", ColorMapParams(stops=(
            (0.0, (0.18, 0.05, 0.30)),
            (0.5, (0.90, 0.35, 0.25)),
            (1.0, (1.00, 0.85, 0.45)),
        ))),
        FilterPreset(FilterKind.URBAN, "photo_effect.transfer", PhotoEffectParams(
            saturation=1.1, contrast=1.1, gains=(1.08, 1.0, 0.9),
        )),
        FilterPreset(FilterKind.DREAMY, "gaussian_blur", GaussianBlurParams()),
        FilterPreset(FilterKind.CHROME, "photo_effect.chrome", PhotoEffectParams(
            saturation=1.3, contrast=1.15,
        )),
    )
})


def _check_catalogue() -> None:
    missing_kinds = [kind.value for kind in FilterKind if kind not in PRESETS]
    if missing_kinds:
        raise RuntimeError(f"Filter kinds without a preset: {missing_kinds}")
    missing_transforms = sorted({
        type(preset.params).__name__
        for preset in PRESETS.values()
        if type(preset.params) not in _TRANSFORMS
    })
    if missing_transforms:
        raise RuntimeError(f"Filter parameter types without a transform: {missing_transforms}")


_check_catalogue()


# ============================================================================
# Public API
# ============================================================================

@dataclass(frozen=True)
class FilterDescriptor:
    """A selected preset plus the user's intensity (clamped to [0, 1])."""
    kind: FilterKind = FilterKind.ORIGINAL
    intensity: float = 1.0

    def __post_init__(self):
        if not isinstance(self.kind, FilterKind):
            raise TypeError(f"Expected FilterKind, got {type(self.kind)}")
        object.__setattr__(self, "intensity", min(1.0, max(0.0, float(self.intensity))))

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def transform_id(self) -> str:
        return PRESETS[self.kind].transform_id

    @property
    def is_identity(self) -> bool:
        return self.kind is FilterKind.ORIGINAL


def all_filters() -> List[FilterKind]:
    """Return every filter kind in display order."""
    return list(FilterKind)


def get_filter_kind(name: str) -> FilterKind:
    """
    Look up a filter kind by display name.

    Raises:
        KeyError: If no preset has that name
    """
    try:
        return FilterKind(name)
    except ValueError:
        raise KeyError(f"Unknown filter: {name}") from None


def _run_preset(image: RasterImage, kind: FilterKind, params: FilterParams) -> RasterImage:
    transform = _TRANSFORMS[type(params)]
    try:
        return transform(image, params)
    except Exception as e:
        logger.warning(f"Filter '{kind.value}' failed, returning input: {e}")
        return image


def apply_filter(image: RasterImage, descriptor: FilterDescriptor) -> RasterImage:
    """
    Apply a stylistic preset.

    Args:
        image: Source RasterImage
        descriptor: Preset kind and intensity

    Returns:
        Filtered RasterImage; the input itself for "Original" or on failure

    Raises:
        TypeError: If image is not a RasterImage
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")
    if descriptor.is_identity:
        return image

    params = PRESETS[descriptor.kind].params.with_intensity(descriptor.intensity)
    return _run_preset(image, descriptor.kind, params)


def generate_thumbnail(
    image: RasterImage,
    kind: FilterKind,
    size: Size = THUMBNAIL_SIZE,
) -> RasterImage:
    """
    Render a small preview of a preset at full intensity.

    The image is downscaled to fit ``size`` (aspect kept) and pixel-radius
    parameters are scaled by the same factor so the preview looks like the
    full-resolution result.
    """
    pixels = image.to_pil()
    pixels.thumbnail(size, Image.Resampling.LANCZOS)
    thumbnail = image.with_pixels(pixels)

    factor = thumbnail.width / image.width if image.width else 1.0
    params = PRESETS[kind].params.with_intensity(1.0).scaled(factor)
    return _run_preset(thumbnail, kind, params)
