"""
ImageEditingLib - Core image editing functionality

This module provides the raster model and the pure operators of the
editing core: adjustments, stylistic filters, blurs, transforms and export.
"""

from RT_Libs.ImageEditingLib.image_models import (
    ImageDecodeError,
    Orientation,
    RasterImage,
    RgbaColor,
)
from RT_Libs.ImageEditingLib.image_editing_ops import map_rgb, mask_blend
from RT_Libs.ImageEditingLib.adjustment_pipeline import (
    ADJUSTMENT_RANGES,
    AdjustmentParameters,
    apply_adjustments,
)
from RT_Libs.ImageEditingLib.filter_presets import (
    FilterDescriptor,
    FilterKind,
    all_filters,
    apply_filter,
    generate_thumbnail,
    get_filter_kind,
)
from RT_Libs.ImageEditingLib.transform_ops import (
    TransformParameters,
    apply_transform_parameters,
    apply_transforms,
    center_crop,
    center_crop_rect,
    straightened_canvas_size,
)
from RT_Libs.ImageEditingLib.export_ops import (
    ExportFormat,
    ExportOptions,
    encode_image,
    save_image,
)

__all__ = [
    "ImageDecodeError",
    "Orientation",
    "RasterImage",
    "RgbaColor",
    "map_rgb",
    "mask_blend",
    "ADJUSTMENT_RANGES",
    "AdjustmentParameters",
    "apply_adjustments",
    "FilterDescriptor",
    "FilterKind",
    "all_filters",
    "apply_filter",
    "generate_thumbnail",
    "get_filter_kind",
    "TransformParameters",
    "apply_transform_parameters",
    "apply_transforms",
    "center_crop",
    "center_crop_rect",
    "straightened_canvas_size",
    "ExportFormat",
    "ExportOptions",
    "encode_image",
    "save_image",
]
