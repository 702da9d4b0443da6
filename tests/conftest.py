# HIDE Test Configuration
# This file contains test settings and fixtures

import os

import numpy as np
import pytest
from PIL import Image

from hide_core.stego.image import PixelBuffer


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return os.path.dirname(os.path.dirname(__file__))


@pytest.fixture
def temp_directory(tmp_path):
    """Provide a temporary directory for test operations."""
    return tmp_path


@pytest.fixture
def sample_data(temp_directory):
    """Provide the 10-byte sample payload file."""
    data_file = temp_directory / "hello.txt"
    data_file.write_bytes(b"hello9999\n")
    return data_file


@pytest.fixture
def sample_binary_data(temp_directory):
    """Provide sample binary data for testing."""
    binary_file = temp_directory / "sample.bin"
    binary_file.write_bytes(b'\x00\x01\x02\x03\x04\x05\xff\xfe\xfd' * 37)
    return binary_file


@pytest.fixture
def noise_buffer():
    """64x64 RGBA buffer filled with seeded noise."""
    rng = np.random.default_rng(1234)
    return PixelBuffer(rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8))


@pytest.fixture
def cover_image(temp_directory):
    """64x64 RGBA PNG cover image."""
    rng = np.random.default_rng(42)
    img_array = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
    img_array[:, :, 3] = 255  # Full opacity
    img_path = temp_directory / "cover.png"
    Image.fromarray(img_array, 'RGBA').save(str(img_path))
    return img_path


@pytest.fixture
def tiny_image(temp_directory):
    """8x8 RGB PNG, too small to hold even a header."""
    img_array = np.zeros((8, 8, 3), dtype=np.uint8)
    img_array[:, :, 0] = 255
    img_path = temp_directory / "tiny.png"
    Image.fromarray(img_array, 'RGB').save(str(img_path))
    return img_path
