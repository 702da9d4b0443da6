"""
Fuzz Tests for the HIDE codec

This module contains property tests for the bit packer, the container
format and the capacity model using hypothesis.
"""

import numpy as np
import hypothesis.strategies as st
from hypothesis import given, settings, Verbosity

from hide_core.stego.bits import pack, unpack
from hide_core.stego.capacity import EncodingLevel, bits_per_slot, encoded_size, max_payload_bytes
from hide_core.stego.codec import Embedder, Extractor
from hide_core.stego.container import (
    build_header,
    build_padded_payload,
    parse_header,
    strip_padding,
)
from hide_core.stego.entropy import FixedRandom
from hide_core.stego.errors import CorruptPaddingError, HeaderValidationError
from hide_core.stego.image import PixelBuffer


# Hypothesis strategies for fuzz testing
binary_data = st.binary(min_size=0, max_size=512)
levels = st.sampled_from(list(EncodingLevel))
u32 = st.integers(min_value=0, max_value=0xFFFFFFFF)
# At most 4 UTF-8 bytes per character, so 8 characters always fit the name field
names = st.text(min_size=0, max_size=8).filter(lambda s: "\x00" not in s)
seeds = st.integers(min_value=0, max_value=2 ** 32 - 1)


def noise(seed, shape=(32, 32, 4)):
    return PixelBuffer(np.random.default_rng(seed).integers(0, 256, size=shape, dtype=np.uint8))


class TestBitPackingFuzzing:
    """Fuzz tests for pack/unpack."""

    @given(data=binary_data, level=levels, start=st.integers(min_value=0, max_value=4095), seed=seeds)
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_round_trip(self, data, level, start, seed):
        buffer = noise(seed)
        if encoded_size(len(data), level) > buffer.slot_count:
            return

        pack(buffer, start, level, data)

        assert unpack(buffer, start, level, len(data)) == data

    @given(data=binary_data, level=levels, seed=seeds)
    @settings(verbosity=Verbosity.quiet, max_examples=50)
    def test_high_bits_preserved(self, data, level, seed):
        buffer = noise(seed)
        before = buffer.pixels.copy()
        keep = np.uint8(0xFF ^ ((1 << bits_per_slot(level)) - 1))

        pack(buffer, 0, level, data)

        assert np.array_equal(buffer.pixels & keep, before & keep)


class TestContainerFuzzing:
    """Fuzz tests for padding and header records."""

    @given(raw=binary_data)
    @settings(verbosity=Verbosity.quiet, max_examples=200)
    def test_padding_law(self, raw):
        padded = build_padded_payload(raw)

        assert len(padded) % 16 == 0
        assert 1 <= len(padded) - len(raw) <= 16
        assert strip_padding(padded) == raw

    @given(level=levels, offset=u32, size=u32, name=names)
    @settings(verbosity=Verbosity.quiet, max_examples=200)
    def test_header_round_trip(self, level, offset, size, name):
        header = parse_header(build_header(level, offset, size, name))

        assert (header.level, header.offset, header.size, header.name) == (level, offset, size, name)

    @given(raw=st.binary(min_size=0, max_size=32).filter(lambda b: b"\x00" not in b))
    @settings(verbosity=Verbosity.quiet, max_examples=200)
    def test_header_name_bytes_round_trip(self, raw):
        header = parse_header(build_header(EncodingLevel.LOW, 0, 16, raw))

        assert header.name.encode("utf-8", "surrogateescape") == raw

    @given(data=st.binary(min_size=60, max_size=60))
    @settings(verbosity=Verbosity.quiet, max_examples=200)
    def test_parse_random_bytes(self, data):
        try:
            header = parse_header(data)
        except HeaderValidationError:
            return
        assert data[:4] == b"HIDE"
        assert header.flags == 0

    @given(data=st.binary(min_size=0, max_size=64))
    @settings(verbosity=Verbosity.quiet, max_examples=200)
    def test_strip_random_bytes(self, data):
        try:
            stripped = strip_padding(data)
        except CorruptPaddingError:
            return
        assert len(stripped) == len(data) - data[-1]


class TestCapacityFuzzing:
    """Fuzz tests for the capacity model."""

    @given(n=st.integers(min_value=0, max_value=10 ** 6), level=levels)
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_encoded_size_monotonic(self, n, level):
        assert encoded_size(n, level) <= encoded_size(n + 1, level)
        assert encoded_size(n, EncodingLevel.LOW) >= encoded_size(n, EncodingLevel.MEDIUM)
        assert encoded_size(n, EncodingLevel.MEDIUM) >= encoded_size(n, EncodingLevel.HIGH)

    @given(
        width=st.integers(min_value=0, max_value=512),
        height=st.integers(min_value=0, max_value=512),
        channels=st.integers(min_value=1, max_value=4),
        level=levels,
    )
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_max_payload_fits(self, width, height, channels, level):
        capacity = max_payload_bytes(width, height, channels, level)

        assert capacity >= 0
        if capacity:
            assert encoded_size(capacity, level) + 480 <= width * height * channels


class TestEmbedFuzzing:
    """Fuzz tests for full embed/extract cycles."""

    @given(data=st.binary(min_size=0, max_size=200), level=levels, draw=u32, name=names, seed=seeds)
    @settings(verbosity=Verbosity.quiet, max_examples=50, deadline=None)
    def test_embed_extract(self, data, level, draw, name, seed):
        buffer = noise(seed, (64, 64, 4))

        Embedder(level=level, random_source=FixedRandom(draw)).embed(buffer, data, name)
        result = Extractor().extract(buffer)

        assert result.data == data
        assert result.filename == name
        assert result.level is level
