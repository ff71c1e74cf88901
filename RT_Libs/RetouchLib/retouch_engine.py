"""
Face-aware retouch engine.

Each feature builds a whole-image "enhanced" variant, then blends it with
the current image through a landmark mask:

- Skin: edge-preserving smoothing everywhere except the eyes and mouth
- Eyes: exposure, saturation and unsharp mask inside the eye regions
- Teeth: exposure and desaturation inside the inner lips

Features run in the order skin, eyes, teeth, and a feature whose amount is
zero is skipped. Landmarks are expected in the raster's stored pixel space.

Example:
    >>> landmarks = detector.detect(raster)
    >>> result = apply_retouch(raster, landmarks, skin_smooth=0.5, eye_brighten=0.3)
"""

from dataclasses import dataclass, field
import logging
from typing import Optional

from RT_Libs.constants import (
    EYE_EXPOSURE_PER_AMOUNT,
    EYE_FEATHER,
    EYE_SATURATION_PER_AMOUNT,
    EYE_UNSHARP_RADIUS,
    SKIN_PROTECT_FEATHER,
    SKIN_SMOOTH_INTENSITY_PER_AMOUNT,
    SKIN_SMOOTH_RADIUS_PER_AMOUNT,
    TEETH_DESATURATION_PER_AMOUNT,
    TEETH_EXPOSURE_PER_AMOUNT,
    TEETH_FEATHER,
)
from RT_Libs.ImageEditingLib.blur_filter import apply_surface_smoothing
from RT_Libs.ImageEditingLib.image_editing_ops import (
    adjust_color_controls,
    adjust_exposure,
    map_rgb,
    mask_blend,
    unsharp_mask,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.RetouchLib.face_landmarks import FaceLandmarks, RetouchParameters
from RT_Libs.RetouchLib.mask_builder import is_empty, region_mask, union_masks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetouchRequest:
    """Landmarks of the face to retouch together with the slider values."""
    landmarks: Optional[FaceLandmarks]
    parameters: RetouchParameters = field(default_factory=RetouchParameters)


def _clamp_amount(amount: float) -> float:
    return min(1.0, max(0.0, float(amount)))


def smooth_skin(image: RasterImage, landmarks: FaceLandmarks, amount: float) -> RasterImage:
    """Smooth skin while protecting both eyes and the inner lips."""
    amount = _clamp_amount(amount)
    if amount == 0.0:
        return image

    smoothed = apply_surface_smoothing(
        image,
        radius=amount * SKIN_SMOOTH_RADIUS_PER_AMOUNT,
        intensity=amount * SKIN_SMOOTH_INTENSITY_PER_AMOUNT,
    )
    protection = union_masks(
        region_mask(landmarks.left_eye, image.size, SKIN_PROTECT_FEATHER),
        region_mask(landmarks.right_eye, image.size, SKIN_PROTECT_FEATHER),
        region_mask(landmarks.inner_lips, image.size, SKIN_PROTECT_FEATHER),
    )
    # Protected features keep the original pixels.
    return mask_blend(background=smoothed, overlay=image, mask=protection)


def brighten_eyes(image: RasterImage, landmarks: FaceLandmarks, amount: float) -> RasterImage:
    amount = _clamp_amount(amount)
    if amount == 0.0:
        return image

    mask = union_masks(
        region_mask(landmarks.left_eye, image.size, EYE_FEATHER),
        region_mask(landmarks.right_eye, image.size, EYE_FEATHER),
    )
    if is_empty(mask):
        logger.debug("No eye landmarks, skipping eye brightening")
        return image

    enhanced = map_rgb(
        image,
        lambda rgb: unsharp_mask(
            adjust_color_controls(
                adjust_exposure(rgb, amount * EYE_EXPOSURE_PER_AMOUNT),
                saturation=1.0 + amount * EYE_SATURATION_PER_AMOUNT,
            ),
            EYE_UNSHARP_RADIUS,
            amount,
        ),
    )
    return mask_blend(background=image, overlay=enhanced, mask=mask)


def whiten_teeth(image: RasterImage, landmarks: FaceLandmarks, amount: float) -> RasterImage:
    amount = _clamp_amount(amount)
    if amount == 0.0:
        return image

    mask = region_mask(landmarks.inner_lips, image.size, TEETH_FEATHER)
    if is_empty(mask):
        logger.debug("No inner lip landmarks, skipping teeth whitening")
        return image

    whitened = map_rgb(
        image,
        lambda rgb: adjust_color_controls(
            adjust_exposure(rgb, amount * TEETH_EXPOSURE_PER_AMOUNT),
            saturation=1.0 - amount * TEETH_DESATURATION_PER_AMOUNT,
        ),
    )
    return mask_blend(background=image, overlay=whitened, mask=mask)


def apply_retouch(
    image: RasterImage,
    landmarks: Optional[FaceLandmarks],
    skin_smooth: float = 0.0,
    eye_brighten: float = 0.0,
    teeth_whiten: float = 0.0,
) -> RasterImage:
    """
    Apply skin smoothing, eye brightening and teeth whitening.

    Args:
        image: Source RasterImage
        landmarks: Landmarks of the face to retouch; None returns the input
        skin_smooth: Amount in [0, 1]
        eye_brighten: Amount in [0, 1]
        teeth_whiten: Amount in [0, 1]

    Returns:
        Retouched RasterImage, or ``image`` itself when nothing applies

    Raises:
        TypeError: If image is not a RasterImage
    """
    if not isinstance(image, RasterImage):
        raise TypeError(f"Expected RasterImage, got {type(image)}")
    if landmarks is None:
        logger.debug("No face landmarks, returning input unchanged")
        return image

    result = smooth_skin(image, landmarks, skin_smooth)
    result = brighten_eyes(result, landmarks, eye_brighten)
    result = whiten_teeth(result, landmarks, teeth_whiten)
    return result


def apply_retouch_parameters(
    image: RasterImage,
    landmarks: Optional[FaceLandmarks],
    params: RetouchParameters,
) -> RasterImage:
    return apply_retouch(
        image,
        landmarks,
        skin_smooth=params.skin_smooth,
        eye_brighten=params.eye_brighten,
        teeth_whiten=params.teeth_whiten,
    )
