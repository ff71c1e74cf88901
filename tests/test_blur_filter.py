"""
Tests for Blur Operations.

Tests cover:
- Gaussian blur
- Surface smoothing
- Error handling
"""

import unittest

import numpy as np
from PIL import Image

from RT_Libs.ImageEditingLib.blur_filter import apply_gaussian_blur, apply_surface_smoothing
from RT_Libs.ImageEditingLib.image_models import RasterImage


def _checker(size=40, block=4):
    ys, xs = np.mgrid[0:size, 0:size]
    values = np.where(((xs // block) + (ys // block)) % 2 == 0, 110, 140).astype(np.uint8)
    data = np.stack([values, values, values, np.full_like(values, 255)], axis=-1)
    return RasterImage(Image.fromarray(data))


class TestGaussianBlur(unittest.TestCase):
    """Test Gaussian blur operation."""

    def setUp(self):
        """Create test image."""
        self.test_image = _checker()

    def test_gaussian_blur_default(self):
        result = apply_gaussian_blur(self.test_image)

        self.assertEqual(result.size, self.test_image.size)
        self.assertLess(result.to_array()[..., 0].std(), self.test_image.to_array()[..., 0].std())

    def test_gaussian_blur_zero_radius_returns_input(self):
        self.assertIs(apply_gaussian_blur(self.test_image, radius=0), self.test_image)

    def test_gaussian_blur_invalid_radius_negative(self):
        with self.assertRaises(ValueError):
            apply_gaussian_blur(self.test_image, radius=-1)

    def test_gaussian_blur_invalid_radius_too_large(self):
        with self.assertRaises(ValueError):
            apply_gaussian_blur(self.test_image, radius=101)

    def test_gaussian_blur_invalid_input_type(self):
        with self.assertRaises(TypeError):
            apply_gaussian_blur(Image.new("RGBA", (4, 4)))


class TestSurfaceSmoothing(unittest.TestCase):
    """Test edge-preserving smoothing."""

    def test_smooths_fine_texture(self):
        image = _checker()
        result = apply_surface_smoothing(image, radius=6, intensity=1.5)

        self.assertLess(result.to_array()[..., 0].std(), image.to_array()[..., 0].std())

    def test_preserves_strong_edges(self):
        data = np.zeros((20, 40, 4), dtype=np.uint8)
        data[:, 20:, :3] = 255
        data[..., 3] = 255
        image = RasterImage(Image.fromarray(data))

        result = apply_surface_smoothing(image, radius=6, intensity=0.5)

        self.assertEqual(result.pixels.getpixel((2, 10))[0], 0)
        self.assertEqual(result.pixels.getpixel((37, 10))[0], 255)
        self.assertLess(result.pixels.getpixel((19, 10))[0], 40)

    def test_zero_radius_returns_input(self):
        image = _checker()
        self.assertIs(apply_surface_smoothing(image, radius=0, intensity=1.0), image)

    def test_flat_image_unchanged(self):
        image = RasterImage.new((16, 16), (90, 90, 90, 255))
        result = apply_surface_smoothing(image, radius=5, intensity=1.0)
        self.assertTrue(result.pixels_equal(image))


if __name__ == "__main__":
    unittest.main()
