"""
Pytest configuration and shared fixtures for Retouch tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image

from RT_Libs.ImageEditingLib.image_models import RasterImage
from RT_Libs.RetouchLib.face_landmarks import FaceLandmarks


def make_gradient(width: int = 64, height: int = 48) -> RasterImage:
    """Opaque raster with a red ramp left-right and a green ramp top-bottom."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[..., 0] = np.rint(xs)[None, :]
    data[..., 1] = np.rint(ys)[:, None]
    data[..., 2] = 128
    data[..., 3] = 255
    return RasterImage(Image.fromarray(data))


def make_solid(size=(41, 41), color=(128, 128, 128, 255)) -> RasterImage:
    return RasterImage.new(size, color)


@pytest.fixture
def temp_output_dir(tmp_path):
    """
    Provide a temporary directory for exported files.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def gradient_raster():
    return make_gradient()


@pytest.fixture
def gray_raster():
    return make_solid()


@pytest.fixture
def portrait_raster():
    """100x100 skin-toned raster with some texture."""
    rng = np.random.default_rng(7)
    data = np.empty((100, 100, 4), dtype=np.uint8)
    data[..., 0] = 200
    data[..., 1] = 150
    data[..., 2] = 120
    data[..., :3] = np.clip(
        data[..., :3].astype(np.int16) + rng.integers(-20, 21, size=(100, 100, 3)), 0, 255
    ).astype(np.uint8)
    data[..., 3] = 255
    return RasterImage(Image.fromarray(data))


@pytest.fixture
def face_landmarks():
    """Landmarks for a face centered in a 100x100 image."""
    return FaceLandmarks({
        "left_eye": [(25, 35), (35, 32), (45, 35), (35, 38)],
        "right_eye": [(55, 35), (65, 32), (75, 35), (65, 38)],
        "inner_lips": [(40, 70), (50, 67), (60, 70), (50, 74)],
    })


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.

    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
    ]
