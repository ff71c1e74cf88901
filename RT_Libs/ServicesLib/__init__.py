"""
ServicesLib - External service collaborators

The generative AI editing client and the object-removal mask builder that
feeds it.
"""

from RT_Libs.ServicesLib.ai_service import (
    AIResult,
    AIServiceError,
    AIServiceSettings,
    GenerativeEditService,
    ModelError,
    NoContentError,
    NoDataError,
    start,
)
from RT_Libs.ServicesLib.removal_mask import CanvasMapping, MaskStroke, render_removal_mask

__all__ = [
    "AIResult",
    "AIServiceError",
    "AIServiceSettings",
    "GenerativeEditService",
    "ModelError",
    "NoContentError",
    "NoDataError",
    "start",
    "CanvasMapping",
    "MaskStroke",
    "render_removal_mask",
]
