"""
Tests for face-aware retouching.

Tests cover:
- Landmark models and coordinate conversion
- Feathered region masks and their union
- Skin, eye and teeth features
- Identity rules for zero amounts and missing faces
"""

import unittest

import numpy as np
import pytest
from PIL import Image

from RT_Libs.RetouchLib.face_landmarks import FaceLandmarks, RetouchParameters
from RT_Libs.RetouchLib.mask_builder import (
    empty_mask,
    is_empty,
    region_mask,
    region_radii,
    union_masks,
)
from RT_Libs.RetouchLib.retouch_engine import (
    apply_retouch,
    apply_retouch_parameters,
    brighten_eyes,
    whiten_teeth,
)


SQUARE = [(10, 10), (30, 10), (30, 30), (10, 30)]


class TestFaceLandmarks(unittest.TestCase):
    """Test the landmark record."""

    def test_missing_region_is_empty(self):
        landmarks = FaceLandmarks({"left_eye": [(1, 2)]})
        self.assertEqual(landmarks.left_eye, ((1.0, 2.0),))
        self.assertEqual(landmarks.inner_lips, ())

    def test_unknown_region_rejected(self):
        with self.assertRaises(ValueError):
            FaceLandmarks({"third_eye": [(1, 2)]})
        with self.assertRaises(ValueError):
            FaceLandmarks().region("third_eye")

    def test_regions_are_read_only(self):
        landmarks = FaceLandmarks({"nose": [(5, 5)]})
        with self.assertRaises(TypeError):
            landmarks.regions["nose"] = ()

    def test_from_normalized_top_left(self):
        landmarks = FaceLandmarks.from_normalized(
            {"left_eye": [(0.5, 0.5)]},
            face_box=(0.25, 0.25, 0.5, 0.5),
            image_size=(200, 100),
        )
        self.assertEqual(landmarks.left_eye, ((100.0, 50.0),))

    def test_from_normalized_bottom_left_flips_y(self):
        landmarks = FaceLandmarks.from_normalized(
            {"right_eye": [(0.0, 0.0)]},
            face_box=(0.1, 0.2, 0.5, 0.5),
            image_size=(100, 100),
            bottom_left_origin=True,
        )
        x, y = landmarks.right_eye[0]
        self.assertAlmostEqual(x, 10.0)
        self.assertAlmostEqual(y, 80.0)


class TestRetouchParameters(unittest.TestCase):
    """Test slider clamping."""

    def test_values_are_clamped(self):
        params = RetouchParameters(skin_smooth=2.0, eye_brighten=-1.0, teeth_whiten=0.4)
        self.assertEqual(params.skin_smooth, 1.0)
        self.assertEqual(params.eye_brighten, 0.0)
        self.assertEqual(params.teeth_whiten, 0.4)

    def test_identity(self):
        self.assertTrue(RetouchParameters().is_identity())
        self.assertFalse(RetouchParameters(teeth_whiten=0.1).is_identity())


class TestRegionMasks:
    """Tests for feathered region masks."""

    def test_radii(self):
        center, r0, r1 = region_radii(SQUARE, 0.1)
        assert center == (20.0, 20.0)
        assert r0 == pytest.approx(12.0)
        assert r1 == pytest.approx(14.4)

    def test_empty_region_gives_black_mask(self):
        mask = region_mask([], (40, 40))
        assert mask.mode == "L"
        assert is_empty(mask)

    def test_solid_center_and_black_outside(self):
        mask = region_mask(SQUARE, (60, 60), feather=0.1)
        assert mask.getpixel((19, 19)) == 255
        assert mask.getpixel((35, 20)) == 0
        assert mask.getpixel((0, 0)) == 0

    def test_fade_between_radii(self):
        mask = region_mask(SQUARE, (60, 60), feather=0.1)
        # 12.5 px from the center lies between r0 = 12 and r1 = 14.4
        assert 0 < mask.getpixel((32, 19)) < 255

    def test_mask_is_cropped_to_image(self):
        mask = region_mask([(0, 0), (10, 10)], (8, 8))
        assert mask.size == (8, 8)
        assert mask.getpixel((4, 4)) == 255

    def test_union(self):
        left = region_mask([(5, 5), (15, 15)], (40, 20))
        right = region_mask([(25, 5), (35, 15)], (40, 20))
        union = union_masks(left, right)
        assert union.getpixel((10, 10)) == 255
        assert union.getpixel((30, 10)) == 255
        assert union.getpixel((20, 0)) == 0

    def test_union_of_half_masks(self):
        half = Image.new("L", (2, 2), 128)
        assert union_masks(half, half).getpixel((0, 0)) == 192

    def test_union_size_mismatch(self):
        with pytest.raises(ValueError):
            union_masks(empty_mask((4, 4)), empty_mask((5, 4)))


class TestRetouchFeatures:
    """Tests for the retouch engine."""

    def test_zero_amounts_return_input(self, portrait_raster, face_landmarks):
        assert apply_retouch(portrait_raster, face_landmarks) is portrait_raster

    def test_missing_landmarks_return_input(self, portrait_raster):
        result = apply_retouch(portrait_raster, None, skin_smooth=1, eye_brighten=1, teeth_whiten=1)
        assert result is portrait_raster

    def test_rejects_non_raster(self, face_landmarks):
        with pytest.raises(TypeError):
            apply_retouch(Image.new("RGBA", (4, 4)), face_landmarks, skin_smooth=0.5)

    def test_eye_brightening_is_local(self, portrait_raster, face_landmarks):
        result = brighten_eyes(portrait_raster, face_landmarks, 1.0)

        before = np.asarray(portrait_raster.pixels, dtype=np.int16)
        after = np.asarray(result.pixels, dtype=np.int16)
        assert after[35, 35, :3].sum() > before[35, 35, :3].sum()
        assert after[35, 65, :3].sum() > before[35, 65, :3].sum()
        assert np.array_equal(after[90:, :], before[90:, :])
        assert np.array_equal(after[:, :10], before[:, :10])

    def test_teeth_without_lips_return_input(self, portrait_raster):
        eyes_only = FaceLandmarks({"left_eye": [(25, 35), (45, 35)]})
        assert whiten_teeth(portrait_raster, eyes_only, 1.0) is portrait_raster

    def test_teeth_whitening_desaturates_mouth(self, portrait_raster, face_landmarks):
        result = whiten_teeth(portrait_raster, face_landmarks, 1.0)
        r, g, b, _ = result.pixels.getpixel((50, 70))
        r0, g0, b0, _ = portrait_raster.pixels.getpixel((50, 70))
        assert max(r, g, b) - min(r, g, b) < max(r0, g0, b0) - min(r0, g0, b0)

    def test_skin_smoothing_protects_features(self, portrait_raster, face_landmarks):
        result = apply_retouch(portrait_raster, face_landmarks, skin_smooth=1.0)

        assert result.pixels.getpixel((35, 35)) == portrait_raster.pixels.getpixel((35, 35))
        assert result.pixels.getpixel((50, 70)) == portrait_raster.pixels.getpixel((50, 70))
        cheek_before = np.asarray(portrait_raster.pixels)[45:60, 5:20, 0].astype(np.float32)
        cheek_after = np.asarray(result.pixels)[45:60, 5:20, 0].astype(np.float32)
        assert cheek_after.std() < cheek_before.std()

    def test_parameters_entry_point(self, portrait_raster, face_landmarks):
        params = RetouchParameters(eye_brighten=0.6)
        direct = apply_retouch(portrait_raster, face_landmarks, eye_brighten=0.6)
        via_params = apply_retouch_parameters(portrait_raster, face_landmarks, params)
        assert via_params.pixels_equal(direct)
