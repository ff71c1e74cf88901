"""
Face landmark and retouch parameter models.

Landmarks are stored per region as tuples of (x, y) points in image pixel
space with a top-left origin. Regions a detector did not report read as
empty tuples.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Sequence, Tuple

from RT_Libs.ImageEditingLib.image_models import Size

Point = Tuple[float, float]
Box = Tuple[float, float, float, float]

LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"
INNER_LIPS = "inner_lips"
OUTER_LIPS = "outer_lips"
LEFT_EYEBROW = "left_eyebrow"
RIGHT_EYEBROW = "right_eyebrow"
NOSE = "nose"
FACE_CONTOUR = "face_contour"

REGION_NAMES = (
    LEFT_EYE,
    RIGHT_EYE,
    INNER_LIPS,
    OUTER_LIPS,
    LEFT_EYEBROW,
    RIGHT_EYEBROW,
    NOSE,
    FACE_CONTOUR,
)


def _freeze_regions(regions: Mapping[str, Iterable[Sequence[float]]]) -> Mapping[str, Tuple[Point, ...]]:
    frozen: Dict[str, Tuple[Point, ...]] = {}
    for name, points in regions.items():
        if name not in REGION_NAMES:
            raise ValueError(f"Unknown landmark region: {name}")
        frozen[name] = tuple((float(x), float(y)) for x, y in points)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class FaceLandmarks:
    """Landmark points of one detected face.

    Attributes:
        regions: Region name -> points in image pixels (top-left origin)
    """
    regions: Mapping[str, Tuple[Point, ...]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "regions", _freeze_regions(self.regions))

    def region(self, name: str) -> Tuple[Point, ...]:
        """Points of a region, or an empty tuple when it was not detected."""
        if name not in REGION_NAMES:
            raise ValueError(f"Unknown landmark region: {name}")
        return self.regions.get(name, ())

    @property
    def left_eye(self) -> Tuple[Point, ...]:
        return self.region(LEFT_EYE)

    @property
    def right_eye(self) -> Tuple[Point, ...]:
        return self.region(RIGHT_EYE)

    @property
    def inner_lips(self) -> Tuple[Point, ...]:
        return self.region(INNER_LIPS)

    @classmethod
    def from_normalized(
        cls,
        regions: Mapping[str, Iterable[Sequence[float]]],
        face_box: Box,
        image_size: Size,
        bottom_left_origin: bool = False,
    ) -> "FaceLandmarks":
        """
        Build landmarks from detector output normalized to a face box.

        Args:
            regions: Region name -> points in [0, 1] relative to ``face_box``
            face_box: (x, y, width, height) of the face, normalized to the image
            image_size: (width, height) of the image in pixels
            bottom_left_origin: True when y grows upwards in the detector's
                coordinate system

        Returns:
            FaceLandmarks in image pixel space with a top-left origin
        """
        box_x, box_y, box_w, box_h = face_box
        width, height = image_size
        converted: Dict[str, Tuple[Point, ...]] = {}
        for name, points in regions.items():
            pixel_points = []
            for px, py in points:
                nx = box_x + px * box_w
                ny = box_y + py * box_h
                if bottom_left_origin:
                    ny = 1.0 - ny
                pixel_points.append((nx * width, ny * height))
            converted[name] = tuple(pixel_points)
        return cls(converted)


@dataclass(frozen=True)
class RetouchParameters:
    """Retouch slider values, each clamped to [0, 1]."""
    skin_smooth: float = 0.0
    eye_brighten: float = 0.0
    teeth_whiten: float = 0.0

    def __post_init__(self):
        for name in ("skin_smooth", "eye_brighten", "teeth_whiten"):
            object.__setattr__(self, name, min(1.0, max(0.0, float(getattr(self, name)))))

    def is_identity(self) -> bool:
        return self.skin_smooth == 0.0 and self.eye_brighten == 0.0 and self.teeth_whiten == 0.0
