"""
Export encoding for edited rasters.

Rasters are encoded upright (the orientation tag is baked into the pixels).
JPEG has no alpha channel, so transparent areas are flattened onto black;
PNG is lossless and ignores the quality setting.
"""

from dataclasses import dataclass
from enum import Enum
from io import BytesIO
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from RT_Libs.constants import (
    DEFAULT_EXPORT_QUALITY,
    MAX_EXPORT_QUALITY,
    MIN_EXPORT_QUALITY,
    OUTPUT_FILE_PREFIX,
)
from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    JPEG = "JPEG"
    PNG = "PNG"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ExportFormat.JPEG else ".png"

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self is ExportFormat.JPEG else "image/png"


@dataclass(frozen=True)
class ExportOptions:
    """Encoder settings.

    Attributes:
        format: JPEG or PNG
        quality: JPEG quality in [0.1, 1.0] (clamped)
    """
    format: ExportFormat = ExportFormat.JPEG
    quality: float = DEFAULT_EXPORT_QUALITY

    def __post_init__(self):
        if isinstance(self.format, str):
            object.__setattr__(self, "format", ExportFormat(self.format.upper().replace("JPG", "JPEG")))
        object.__setattr__(
            self,
            "quality",
            max(MIN_EXPORT_QUALITY, min(MAX_EXPORT_QUALITY, float(self.quality))),
        )

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        kwargs: Dict[str, Any] = {"format": self.format.value}
        if self.format is ExportFormat.JPEG:
            kwargs["quality"] = max(1, min(100, int(round(self.quality * 100))))
        return kwargs


def _encodable_pixels(image: RasterImage, options: ExportOptions) -> Any:
    pixels = image.upright().pixels
    if options.format is ExportFormat.JPEG:
        background = Image.new("RGBA", pixels.size, (0, 0, 0, 255))
        pixels = Image.alpha_composite(background, pixels).convert("RGB")
    return pixels


def encode_image(image: RasterImage, options: Optional[ExportOptions] = None) -> bytes:
    """
    Encode a raster to JPEG or PNG bytes.

    Args:
        image: RasterImage to encode
        options: Encoder settings (JPEG at quality 0.9 when None)

    Returns:
        Encoded bytes
    """
    options = options or ExportOptions()
    buffer = BytesIO()
    _encodable_pixels(image, options).save(buffer, **options.get_save_kwargs())
    return buffer.getvalue()


def export_filename(stem: str, options: Optional[ExportOptions] = None) -> str:
    """Output file name for an edited image, e.g. ``edited_holiday.jpg``."""
    options = options or ExportOptions()
    return f"{OUTPUT_FILE_PREFIX}{Path(stem).stem}{options.format.extension}"


def save_image(
    image: RasterImage,
    path: Union[str, Path],
    options: Optional[ExportOptions] = None,
) -> Path:
    """
    Encode a raster and write it to ``path``.

    Args:
        image: RasterImage to save
        path: Destination file path; its directory must already exist
        options: Encoder settings

    Returns:
        The path written

    Raises:
        OSError: If the directory does not exist or the file cannot be written
    """
    path = Path(path)
    output_dir = path.parent

    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    path.write_bytes(encode_image(image, options))
    logger.info(f"Saved {image.width}x{image.height} image to {path}")
    return path
