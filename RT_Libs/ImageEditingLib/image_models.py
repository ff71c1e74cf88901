"""
Image data models for Retouch.

This module defines the core value type that flows between every operator
of the editing core.

Classes:
    Orientation: EXIF orientation tag carried alongside the pixels
    RasterImage: Immutable RGBA raster with orientation and device pixel scale
    ImageDecodeError: Raised when compressed bytes cannot be decoded

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Any, Optional, Tuple

import numpy as np

from RT_Libs.pillow_compat import Image

RgbaColor = Tuple[int, int, int, int]
Size = Tuple[int, int]

EXIF_ORIENTATION_TAG = 274


class ImageDecodeError(ValueError):
    """Compressed image data could not be decoded."""


class Orientation(Enum):
    """EXIF orientation values (1-8)."""

    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8

    @classmethod
    def from_exif(cls, value: Any) -> "Orientation":
        """Map a raw EXIF value to an Orientation, defaulting to UP."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UP

    @property
    def transpose_method(self) -> Optional[Any]:
        """Pillow transpose that renders this orientation upright."""
        return {
            Orientation.UP: None,
            Orientation.UP_MIRRORED: Image.Transpose.FLIP_LEFT_RIGHT,
            Orientation.DOWN: Image.Transpose.ROTATE_180,
            Orientation.DOWN_MIRRORED: Image.Transpose.FLIP_TOP_BOTTOM,
            Orientation.LEFT_MIRRORED: Image.Transpose.TRANSPOSE,
            Orientation.RIGHT: Image.Transpose.ROTATE_270,
            Orientation.RIGHT_MIRRORED: Image.Transpose.TRANSVERSE,
            Orientation.LEFT: Image.Transpose.ROTATE_90,
        }[self]


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Immutable raster value passed between operators.

    Operators never mutate ``pixels``; each returns a new RasterImage that
    keeps the source's orientation tag and device pixel scale.

    Attributes:
        pixels: PIL Image in RGBA mode (8 bits per channel)
        orientation: EXIF orientation tag for display
        scale: Device pixel scale (points to pixels)
    """
    pixels: Any
    orientation: Orientation = Orientation.UP
    scale: float = 1.0

    def __post_init__(self):
        if not hasattr(self.pixels, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(self.pixels)}")
        if self.pixels.mode != "RGBA":
            raise ValueError(f"RasterImage requires RGBA pixels, got {self.pixels.mode}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_pil(
        cls,
        image: Any,
        orientation: Orientation = Orientation.UP,
        scale: float = 1.0,
    ) -> "RasterImage":
        """Wrap a PIL Image of any mode, converting it to RGBA."""
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        else:
            image = image.copy()
        return cls(image, orientation, scale)

    @classmethod
    def new(cls, size: Size, color: RgbaColor = (0, 0, 0, 0)) -> "RasterImage":
        """Create a solid-color raster."""
        return cls(Image.new("RGBA", size, color))

    @classmethod
    def decode(cls, data: bytes, scale: float = 1.0) -> "RasterImage":
        """
        Decode compressed image bytes (JPEG, PNG, ...).

        The EXIF orientation tag, when present, becomes the orientation of
        the returned raster; the pixels themselves are left as stored.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image
        """
        try:
            with Image.open(BytesIO(data)) as decoded:
                decoded.load()
                orientation = Orientation.from_exif(
                    decoded.getexif().get(EXIF_ORIENTATION_TAG, 1)
                )
                pixels = decoded.convert("RGBA")
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError(f"Could not decode image data: {exc}") from exc
        return cls(pixels, orientation, scale)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    @property
    def size(self) -> Size:
        return self.pixels.size

    def to_array(self) -> np.ndarray:
        """Return an H x W x 4 float32 copy of the pixels in [0, 1]."""
        return np.asarray(self.pixels, dtype=np.float32) / np.float32(255.0)

    def to_pil(self) -> Any:
        """Return a PIL copy the caller may mutate."""
        return self.pixels.copy()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_pixels(self, pixels: Any) -> "RasterImage":
        """New raster with ``pixels`` and this raster's orientation and scale."""
        if pixels.mode != "RGBA":
            pixels = pixels.convert("RGBA")
        return RasterImage(pixels, self.orientation, self.scale)

    def with_array(self, array: np.ndarray) -> "RasterImage":
        """New raster from an H x W x 4 float array in [0, 1]."""
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"Expected H x W x 4 array, got shape {array.shape}")
        data = np.rint(np.clip(array, 0.0, 1.0) * 255.0).astype(np.uint8)
        return self.with_pixels(Image.fromarray(data))

    def upright(self) -> "RasterImage":
        """Bake the orientation tag into the pixels."""
        method = self.orientation.transpose_method
        if method is None:
            return self
        return RasterImage(
            self.pixels.transpose(method), Orientation.UP, self.scale
        )

    def pixels_equal(self, other: "RasterImage") -> bool:
        """True when both rasters hold identical pixel data."""
        return (
            self.size == other.size
            and self.pixels.tobytes() == other.pixels.tobytes()
        )
