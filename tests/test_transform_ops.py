"""
Tests for geometric transforms.

Tests cover:
- Canvas sizing for rotated rectangles
- Exact flips and quarter turns
- Straightening onto a transparent canvas
- Center crop geometry
- TransformParameters normalisation
"""

import math

import numpy as np
import pytest
from PIL import Image

from RT_Libs.constants import COMMON_ASPECT_RATIOS
from RT_Libs.ImageEditingLib.image_models import Orientation, RasterImage
from RT_Libs.ImageEditingLib.transform_ops import (
    TransformParameters,
    apply_transform_parameters,
    apply_transforms,
    center_crop,
    center_crop_rect,
    snap_rotation,
    straightened_canvas_size,
)


def _pixels(raster):
    return np.asarray(raster.pixels)


class TestCanvasSize:
    """Tests for straightened_canvas_size."""

    def test_zero_angle_keeps_size(self):
        assert straightened_canvas_size(120, 80, 0) == (120, 80)

    def test_quarter_turn_swaps_size(self):
        assert straightened_canvas_size(120, 80, 90) == (80, 120)

    @pytest.mark.parametrize("angle", [-45, -30, -7.5, 3, 12, 30, 45])
    def test_canvas_contains_rotated_rectangle(self, angle):
        width, height = 120, 80
        canvas = straightened_canvas_size(width, height, angle)
        theta = math.radians(angle)
        corners = [(-width / 2, -height / 2), (width / 2, -height / 2),
                   (width / 2, height / 2), (-width / 2, height / 2)]
        for x, y in corners:
            rx = x * math.cos(theta) - y * math.sin(theta)
            ry = x * math.sin(theta) + y * math.cos(theta)
            assert abs(rx) <= canvas[0] / 2 + 1e-6
            assert abs(ry) <= canvas[1] / 2 + 1e-6

    def test_square_at_45_degrees(self):
        side = straightened_canvas_size(100, 100, 45)[0]
        assert side == math.ceil(100 * math.sqrt(2) - 1e-9)


class TestExactTransforms:
    """Tests for flips and quarter turns without straightening."""

    def test_identity_returns_input(self, gradient_raster):
        assert apply_transforms(gradient_raster) is gradient_raster

    def test_flip_horizontal_mirrors_columns(self, gradient_raster):
        result = apply_transforms(gradient_raster, flip_h=True)
        assert result.size == gradient_raster.size
        assert np.array_equal(_pixels(result), np.fliplr(_pixels(gradient_raster)))

    def test_flip_vertical_mirrors_rows(self, gradient_raster):
        result = apply_transforms(gradient_raster, flip_v=True)
        assert np.array_equal(_pixels(result), np.flipud(_pixels(gradient_raster)))

    def test_rotation_is_clockwise(self, gradient_raster):
        result = apply_transforms(gradient_raster, rotation=90)
        assert result.size == (gradient_raster.height, gradient_raster.width)
        assert np.array_equal(_pixels(result), np.rot90(_pixels(gradient_raster), k=-1))

    def test_rotation_snaps(self, gradient_raster):
        snapped = apply_transforms(gradient_raster, rotation=100)
        exact = apply_transforms(gradient_raster, rotation=90)
        assert snapped.pixels_equal(exact)

    def test_full_turn_is_identity(self, gradient_raster):
        assert apply_transforms(gradient_raster, rotation=360) is gradient_raster

    def test_orientation_is_baked_first(self):
        pixels = Image.new("RGBA", (4, 2), (0, 0, 0, 255))
        raster = RasterImage(pixels, Orientation.RIGHT)
        result = apply_transforms(raster, flip_h=True)
        assert result.orientation == Orientation.UP
        assert result.size == (2, 4)

    def test_rejects_non_raster(self):
        with pytest.raises(TypeError):
            apply_transforms(Image.new("RGBA", (4, 4)), rotation=90)


class TestStraighten:
    """Tests for fine rotation."""

    def test_canvas_grows_and_corners_are_transparent(self, gradient_raster):
        result = apply_transforms(gradient_raster, straighten_angle=10)
        expected = straightened_canvas_size(gradient_raster.width, gradient_raster.height, 10)
        assert result.size == expected
        assert result.pixels.getpixel((0, 0))[3] == 0
        center = (result.width // 2, result.height // 2)
        assert result.pixels.getpixel(center)[3] == 255

    def test_angle_is_clamped(self, gradient_raster):
        clamped = apply_transforms(gradient_raster, straighten_angle=80)
        limit = apply_transforms(gradient_raster, straighten_angle=45)
        assert clamped.size == limit.size

    def test_straighten_with_quarter_turn_is_not_clipped(self, gradient_raster):
        result = apply_transforms(gradient_raster, straighten_angle=5, rotation=90)
        expected = straightened_canvas_size(gradient_raster.width, gradient_raster.height, 95)
        assert result.size == expected
        assert result.height > result.width


class TestCenterCrop:
    """Tests for center crop geometry."""

    def test_wide_source_keeps_height(self):
        assert center_crop_rect((200, 100), 1.0) == (50, 0, 100, 100)

    def test_tall_source_keeps_width(self):
        assert center_crop_rect((100, 200), 16 / 9) == (0, 72, 100, 56)

    @pytest.mark.parametrize("aspect", sorted(COMMON_ASPECT_RATIOS.values()))
    def test_common_ratios(self, aspect):
        _, _, width, height = center_crop_rect((1200, 900), aspect)
        assert width / height == pytest.approx(aspect, rel=0.01)
        assert width == 1200 or height == 900

    def test_non_positive_aspect_returns_full_frame(self):
        assert center_crop_rect((80, 60), 0) == (0, 0, 80, 60)

    def test_zero_area_source_returns_full_frame(self):
        assert center_crop_rect((10, 0), 1.0) == (0, 0, 10, 0)
        assert center_crop_rect((0, 10), 1.5) == (0, 0, 0, 10)

    def test_crop_zero_height_raster(self):
        raster = RasterImage.new((10, 0))
        assert center_crop(raster, 1.0).size == (10, 0)

    def test_crop_raster(self):
        raster = RasterImage.new((200, 100), (1, 2, 3, 255))
        result = center_crop(raster, 1.0)
        assert result.size == (100, 100)

    def test_crop_takes_center_pixels(self, gradient_raster):
        result = center_crop(gradient_raster, 1.0)
        x, _, width, _ = center_crop_rect(gradient_raster.size, 1.0)
        assert result.size == (width, gradient_raster.height)
        assert result.pixels.getpixel((0, 0)) == gradient_raster.pixels.getpixel((x, 0))

    def test_zero_aspect_returns_input(self, gradient_raster):
        assert center_crop(gradient_raster, 0) is gradient_raster
        assert center_crop(gradient_raster, -1.5) is gradient_raster


class TestTransformParameters:
    """Tests for the parameter record."""

    def test_straighten_clamped(self):
        assert TransformParameters(straighten_angle=60).straighten_angle == 45
        assert TransformParameters(straighten_angle=-60).straighten_angle == -45

    def test_rotation_snapped(self):
        assert TransformParameters(rotation=100).rotation == 90
        assert TransformParameters(rotation=-90).rotation == 270
        assert snap_rotation(44) == 0

    def test_identity(self):
        assert TransformParameters().is_identity()
        assert not TransformParameters(flip_v=True).is_identity()

    def test_apply_parameters_crops_after_rotation(self):
        raster = RasterImage.new((200, 100), (9, 9, 9, 255))
        params = TransformParameters(rotation=90, aspect_ratio=1.0)
        result = apply_transform_parameters(raster, params)
        assert result.size == (100, 100)
