"""
Unit Tests for pixel buffers and image/file I/O.
"""

import os

import numpy as np
import pytest
from PIL import Image

from hide_core.stego.errors import StegoIOError, UnsupportedFormatError
from hide_core.stego.image import (
    PixelBuffer,
    image_format_for,
    load,
    read_file_bytes,
    save,
    write_file_bytes,
)


class TestPixelBuffer:
    """Test cases for the pixel buffer wrapper."""

    def test_dimensions(self):
        buffer = PixelBuffer.blank(5, 3, 4)

        assert (buffer.width, buffer.height, buffer.channels) == (5, 3, 4)
        assert buffer.slot_count == 60
        assert buffer.slots.shape == (60,)

    def test_slot_order_is_row_major(self):
        buffer = PixelBuffer.blank(3, 2, 4)

        buffer.slots[(1 * 3 + 2) * 4 + 1] = 9

        assert buffer.pixels[1, 2, 1] == 9

    def test_grayscale_array_gets_channel_axis(self):
        buffer = PixelBuffer(np.zeros((4, 6), dtype=np.uint8))
        assert buffer.channels == 1

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((2, 2, 2, 2), dtype=np.uint8))

    def test_copy_is_independent(self):
        buffer = PixelBuffer.blank(2, 2)

        clone = buffer.copy()
        clone.slots[0] = 1

        assert buffer.slots[0] == 0

    def test_from_image_converts_to_rgba(self):
        img = Image.new("RGB", (4, 4), (10, 20, 30))

        buffer = PixelBuffer.from_image(img)

        assert buffer.channels == 4
        assert buffer.pixels[0, 0].tolist() == [10, 20, 30, 255]

    def test_to_image_unsupported_channels(self):
        with pytest.raises(UnsupportedFormatError):
            PixelBuffer.blank(2, 2, 5).to_image()


class TestImageIO:
    """Test cases for loading and saving carriers."""

    def test_load_rgba(self, cover_image):
        buffer = load(cover_image)
        assert (buffer.width, buffer.height, buffer.channels) == (64, 64, 4)

    def test_load_rgb_as_rgba(self, tiny_image):
        buffer = load(tiny_image)
        assert buffer.channels == 4
        assert buffer.pixels[0, 0].tolist() == [255, 0, 0, 255]

    def test_load_missing(self, temp_directory):
        with pytest.raises(StegoIOError):
            load(temp_directory / "missing.png")

    def test_load_not_an_image(self, sample_data):
        with pytest.raises(StegoIOError):
            load(sample_data)

    @pytest.mark.parametrize("suffix", [".png", ".tif", ".tga"])
    def test_save_lossless_round_trip(self, noise_buffer, temp_directory, suffix):
        path = temp_directory / f"out{suffix}"

        save(noise_buffer, path)

        assert np.array_equal(load(path).pixels, noise_buffer.pixels)

    @pytest.mark.parametrize("name", ["out.jpg", "out.jpeg", "out.bmp", "out.gif", "out"])
    def test_save_rejects_other_formats(self, noise_buffer, temp_directory, name):
        with pytest.raises(UnsupportedFormatError):
            save(noise_buffer, temp_directory / name)
        assert not (temp_directory / name).exists()

    def test_format_lookup_is_case_insensitive(self):
        assert image_format_for("STEGO.PNG") == "PNG"

    def test_save_into_missing_directory(self, noise_buffer, temp_directory):
        with pytest.raises(StegoIOError):
            save(noise_buffer, temp_directory / "nope" / "out.png")

    def test_no_temporary_files_left(self, noise_buffer, temp_directory):
        save(noise_buffer, temp_directory / "out.png")
        assert os.listdir(temp_directory) == ["out.png"]


class TestFileIO:
    """Test cases for raw payload files."""

    def test_round_trip(self, temp_directory):
        path = temp_directory / "data.bin"

        write_file_bytes(path, b"\x00\xff" * 10)

        assert read_file_bytes(path) == b"\x00\xff" * 10

    def test_read_missing(self, temp_directory):
        with pytest.raises(StegoIOError) as excinfo:
            read_file_bytes(temp_directory / "missing.bin")
        assert excinfo.value.code == 2001

    def test_write_into_missing_directory(self, temp_directory):
        with pytest.raises(StegoIOError):
            write_file_bytes(temp_directory / "nope" / "data.bin", b"x")
