"""
Operator Registry.

This module provides a centralized registry of image operators. An operator
is a pure callable ``(image, params) -> RasterImage``; the registry maps
operator names to operators plus descriptive metadata, so edit chains can
refer to operators by name.

Classes:
    OperatorRegistry: Registry of named operators

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_operators: Register all built-in operators
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

from RT_Libs.constants import (
    OPERATOR_ADJUSTMENTS,
    OPERATOR_CENTER_CROP,
    OPERATOR_FILTER,
    OPERATOR_OVERLAY_BAKE,
    OPERATOR_RETOUCH,
    OPERATOR_TRANSFORM,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage

logger = logging.getLogger(__name__)

# Type alias for operator function
OperatorFunction = Callable[[RasterImage, Any], RasterImage]


class OperatorRegistry:
    """
    Registry for image operators.

    Example:
        >>> registry = OperatorRegistry()
        >>> registry.register("Adjustments", adjustments_operator, param_type=AdjustmentParameters)
        >>> result = registry.execute("Adjustments", raster, AdjustmentParameters(exposure=0.3))
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._operators: Dict[str, OperatorFunction] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        operator_type: str,
        operator: OperatorFunction,
        description: str = "",
        param_type: Optional[Any] = None,
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register an operator.

        Args:
            operator_type: Unique operator name (e.g., "Filter")
            operator: Callable accepting (image, params) and returning a RasterImage
            description: Human-readable description of the operator
            param_type: Expected type (or tuple of types) of ``params``; checked by ``execute``
            tags: Optional list of tags for categorization (e.g., ["color", "tone"])

        Raises:
            ValueError: If operator_type is empty or operator is not callable
            RuntimeError: If operator_type is already registered
        """
        operator_type = str(operator_type).strip()

        if not operator_type:
            raise ValueError("operator_type cannot be empty")

        if not callable(operator):
            raise ValueError(f"operator must be callable, got {type(operator)}")

        if operator_type in self._operators:
            raise RuntimeError(
                f"Operator '{operator_type}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._operators[operator_type] = operator
        self._metadata[operator_type] = {
            "description": str(description),
            "param_type": param_type,
            "tags": list(tags) if tags else [],
        }

        logger.debug(f"Registered operator: {operator_type}")

    def unregister(self, operator_type: str) -> bool:
        """
        Unregister an operator.

        Returns:
            True if unregistered, False if operator_type was not registered
        """
        operator_type = str(operator_type).strip()

        if operator_type in self._operators:
            del self._operators[operator_type]
            del self._metadata[operator_type]
            logger.debug(f"Unregistered operator: {operator_type}")
            return True

        return False

    def get_operator(self, operator_type: str) -> OperatorFunction:
        """
        Get an operator by name.

        Raises:
            KeyError: If operator_type is not registered
        """
        operator_type = str(operator_type).strip()

        if operator_type not in self._operators:
            available = ", ".join(self.list_operator_types())
            raise KeyError(
                f"No operator registered as '{operator_type}'. "
                f"Available operators: {available}"
            )

        return self._operators[operator_type]

    def has_operator(self, operator_type: str) -> bool:
        return str(operator_type).strip() in self._operators

    def execute(self, operator_type: str, image: RasterImage, params: Any) -> RasterImage:
        """
        Run an operator by name.

        Args:
            operator_type: The operator to run
            image: Input RasterImage
            params: Operator parameters

        Returns:
            Result from the operator

        Raises:
            KeyError: If operator_type is not registered
            TypeError: If params is not of the operator's registered param_type
        """
        operator = self.get_operator(operator_type)
        param_type = self._metadata[operator_type.strip()]["param_type"]
        if param_type is not None and not isinstance(params, param_type):
            allowed = param_type if isinstance(param_type, tuple) else (param_type,)
            expected = " or ".join(t.__name__ for t in allowed)
            raise TypeError(
                f"Operator '{operator_type}' expects {expected}, "
                f"got {type(params).__name__}"
            )
        return operator(image, params)

    def list_operator_types(self) -> List[str]:
        """
        Get list of all registered operator names.

        Returns:
            Sorted list of operator names
        """
        return sorted(self._operators.keys())

    def get_metadata(self, operator_type: str) -> Dict[str, Any]:
        """
        Get metadata for an operator.

        Returns:
            Dictionary with description, param_type, tags

        Raises:
            KeyError: If operator_type is not registered
        """
        operator_type = str(operator_type).strip()

        if operator_type not in self._metadata:
            raise KeyError(f"No metadata for operator: {operator_type}")

        return dict(self._metadata[operator_type])

    def get_all_metadata(self) -> Dict[str, Dict[str, Any]]:
        return {
            operator_type: dict(meta)
            for operator_type, meta in self._metadata.items()
        }

    def filter_by_tag(self, tag: str) -> List[str]:
        """
        Get all operator names with a specific tag (case-insensitive).

        Returns:
            Sorted list of operator names with the tag
        """
        tag = str(tag).strip().lower()
        return sorted([
            operator_type
            for operator_type, meta in self._metadata.items()
            if tag in [t.lower() for t in meta.get("tags", [])]
        ])

    def clear(self) -> None:
        """Clear all registered operators. Use with caution."""
        self._operators.clear()
        self._metadata.clear()
        logger.warning("Operator registry cleared")


# Global singleton registry
_default_registry: Optional[OperatorRegistry] = None


def get_default_registry() -> OperatorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the built-in operators.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = OperatorRegistry()
        register_default_operators(_default_registry)

    return _default_registry


def register_default_operators(registry: OperatorRegistry) -> None:
    """
    Register all built-in operators.

    This function registers:
    - Adjustments (AdjustmentParameters)
    - Filter (FilterDescriptor)
    - Retouch (RetouchRequest)
    - Transform (TransformParameters)
    - Center Crop (aspect ratio as a float)
    - Overlay Bake (sequence of OverlayItem)

    Args:
        registry: The registry to register operators with
    """
    from RT_Libs.ImageEditingLib.adjustment_pipeline import AdjustmentParameters, apply_adjustments
    from RT_Libs.ImageEditingLib.filter_presets import FilterDescriptor, apply_filter
    from RT_Libs.ImageEditingLib.transform_ops import (
        TransformParameters,
        apply_transform_parameters,
        center_crop,
    )
    from RT_Libs.OverlayLib.overlay_compositor import bake_overlays
    from RT_Libs.RetouchLib.retouch_engine import RetouchRequest, apply_retouch_parameters

    def retouch_operator(image: RasterImage, request: RetouchRequest) -> RasterImage:
        return apply_retouch_parameters(image, request.landmarks, request.parameters)

    def overlay_operator(image: RasterImage, items: Sequence[Any]) -> RasterImage:
        return bake_overlays(items, image)

    registry.register(
        operator_type=OPERATOR_ADJUSTMENTS,
        operator=apply_adjustments,
        description="Tone and color sliders (exposure, contrast, white balance, ...)",
        param_type=AdjustmentParameters,
        tags=["tone", "color"],
    )

    registry.register(
        operator_type=OPERATOR_FILTER,
        operator=apply_filter,
        description="Apply a stylistic filter preset at an intensity",
        param_type=FilterDescriptor,
        tags=["color", "filter"],
    )

    registry.register(
        operator_type=OPERATOR_RETOUCH,
        operator=retouch_operator,
        description="Face-aware skin smoothing, eye brightening and teeth whitening",
        param_type=RetouchRequest,
        tags=["face", "retouch"],
    )

    registry.register(
        operator_type=OPERATOR_TRANSFORM,
        operator=apply_transform_parameters,
        description="Rotate, straighten, flip and optionally crop",
        param_type=TransformParameters,
        tags=["geometry"],
    )

    registry.register(
        operator_type=OPERATOR_CENTER_CROP,
        operator=center_crop,
        description="Crop to the largest centered rectangle of an aspect ratio",
        param_type=(int, float),
        tags=["geometry", "crop"],
    )

    registry.register(
        operator_type=OPERATOR_OVERLAY_BAKE,
        operator=overlay_operator,
        description="Draw text overlays into the image",
        param_type=(list, tuple),
        tags=["overlay", "composition"],
    )

    logger.info("Registered default operators")
