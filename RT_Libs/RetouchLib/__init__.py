"""
RetouchLib - Face-aware retouching

Landmark models, feathered region masks, the retouch engine and the
face detection session.
"""

from RT_Libs.RetouchLib.face_landmarks import (
    REGION_NAMES,
    FaceLandmarks,
    RetouchParameters,
)
from RT_Libs.RetouchLib.mask_builder import empty_mask, region_mask, union_masks
from RT_Libs.RetouchLib.retouch_engine import (
    RetouchRequest,
    apply_retouch,
    apply_retouch_parameters,
)
from RT_Libs.RetouchLib.face_detection import (
    DetectionOutcome,
    FaceDetectionSession,
    FaceDetector,
)

__all__ = [
    "REGION_NAMES",
    "FaceLandmarks",
    "RetouchParameters",
    "empty_mask",
    "region_mask",
    "union_masks",
    "RetouchRequest",
    "apply_retouch",
    "apply_retouch_parameters",
    "DetectionOutcome",
    "FaceDetectionSession",
    "FaceDetector",
]
