"""
Adjustment Pipeline.

Applies the ten tone/color sliders to a raster in a fixed stage order:

1. Color controls (saturation, contrast)
2. Exposure
3. Highlights / shadows
4. Vibrance
5. White balance (temperature, tint)
6. Sharpen
7. Vignette

The order never depends on the slider values. Stages whose sliders sit at
their defaults are skipped, so all-default parameters return the input
untouched. A stage that raises is logged and passed through; later stages
still run on its input.

Example:
    >>> params = AdjustmentParameters(exposure=0.5, vignette=1.0)
    >>> result = apply_adjustments(raster, params)
"""

from dataclasses import dataclass, fields, replace
import logging
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple

import numpy as np

from RT_Libs.constants import ADJUSTMENT_TABLE, VIGNETTE_RADIUS_PER_INTENSITY
from RT_Libs.ImageEditingLib.image_editing_ops import (
    adjust_color_controls,
    adjust_exposure,
    adjust_highlights_shadows,
    adjust_vibrance,
    adjust_white_balance,
    apply_vignette,
    sharpen_luminance,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage

logger = logging.getLogger(__name__)

# name -> (minimum, maximum, default)
ADJUSTMENT_RANGES: Mapping[str, Tuple[float, float, float]] = MappingProxyType(dict(ADJUSTMENT_TABLE))

Stage = Tuple[str, Callable[[np.ndarray], np.ndarray]]


@dataclass(frozen=True)
class AdjustmentParameters:
    """Slider values for one adjustment pass.

    Attributes:
        exposure: EV stops, -1 to 1
        contrast: Multiplier around mid-gray, 0.5 to 1.5
        highlights: 0 (full recovery) to 1 (unchanged)
        shadows: -1 (deepen) to 1 (lift)
        saturation: 0 (grayscale) to 2
        vibrance: -1 to 1
        temperature: -1 (cool) to 1 (warm)
        tint: -1 (green) to 1 (magenta)
        sharpen: 0 to 10
        vignette: 0 to 2
    """
    exposure: float = 0.0
    contrast: float = 1.0
    highlights: float = 1.0
    shadows: float = 0.0
    saturation: float = 1.0
    vibrance: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    sharpen: float = 0.0
    vignette: float = 0.0

    def clamped(self) -> "AdjustmentParameters":
        """Return a copy with every slider inside its range."""
        values = {}
        for field in fields(self):
            low, high, _ = ADJUSTMENT_RANGES[field.name]
            values[field.name] = min(high, max(low, float(getattr(self, field.name))))
        return replace(self, **values)

    def is_default(self) -> bool:
        return all(
            getattr(self, field.name) == ADJUSTMENT_RANGES[field.name][2]
            for field in fields(self)
        )


def build_stages(params: AdjustmentParameters) -> List[Stage]:
    """
    Build the list of non-identity stages for ``params`` in pipeline order.

    Args:
        params: Already-clamped parameters

    Returns:
        List of (stage name, RGB kernel) tuples
    """
    stages: List[Stage] = []

    if params.saturation != 1.0 or params.contrast != 1.0:
        stages.append((
            "color_controls",
            lambda rgb: adjust_color_controls(
                rgb, saturation=params.saturation, contrast=params.contrast
            ),
        ))
    if params.exposure != 0.0:
        stages.append(("exposure", lambda rgb: adjust_exposure(rgb, params.exposure)))
    if params.highlights != 1.0 or params.shadows != 0.0:
        stages.append((
            "highlights_shadows",
            lambda rgb: adjust_highlights_shadows(rgb, params.highlights, params.shadows),
        ))
    if params.vibrance != 0.0:
        stages.append(("vibrance", lambda rgb: adjust_vibrance(rgb, params.vibrance)))
    if params.temperature != 0.0 or params.tint != 0.0:
        stages.append((
            "white_balance",
            lambda rgb: adjust_white_balance(rgb, params.temperature, params.tint),
        ))
    if params.sharpen > 0.0:
        stages.append(("sharpen", lambda rgb: sharpen_luminance(rgb, params.sharpen)))
    if params.vignette > 0.0:
        stages.append((
            "vignette",
            lambda rgb: apply_vignette(
                rgb, params.vignette, params.vignette * VIGNETTE_RADIUS_PER_INTENSITY
            ),
        ))

    return stages


def apply_adjustments(
    image: RasterImage,
    params: Optional[AdjustmentParameters] = None,
) -> RasterImage:
    """
    Run the adjustment pipeline.

    Args:
        image: Source RasterImage
        params: Slider values (defaults when None); out-of-range values are clamped

    Returns:
        Adjusted RasterImage, or ``image`` itself when nothing changes

    Raises:
        TypeError: If image is not a RasterImage
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")

    params = (params or AdjustmentParameters()).clamped()
    stages = build_stages(params)
    if not stages:
        return image

    array = image.to_array()
    rgb = array[..., :3]
    for name, stage in stages:
        try:
            rgb = stage(rgb)
        except Exception as e:
            logger.warning(f"Adjustment stage '{name}' failed, passing input through: {e}")
            continue
        logger.debug(f"Applied adjustment stage '{name}'")

    array[..., :3] = rgb
    return image.with_array(array)
