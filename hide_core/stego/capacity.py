"""
Capacity arithmetic for LSB embedding.

An image offers W*H*C channel-slots. At a given EncodingLevel each slot
carries a fixed number of payload bits in its low-order end, so one byte
costs 8 / bits_per_slot slots. The header always uses the LOW level and sits
at slot 0, and its slots are reserved before any payload capacity is handed
out.
"""

import logging
from enum import IntEnum

from .errors import CapacityExceededError

logger = logging.getLogger(__name__)


class EncodingLevel(IntEnum):
    """
    Density selector for the payload region.

    The integer value is what gets stored in the header's level byte.

    Attributes:
        LOW: 1 bit per channel-slot (default, least perturbation)
        MEDIUM: 2 bits per channel-slot
        HIGH: 4 bits per channel-slot
    """

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return LEVEL_LABELS[self]

    @classmethod
    def parse(cls, value) -> "EncodingLevel":
        """Accept a level, its header value, or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown encoding level: {value!r}") from None
        return cls(value)


LEVEL_LABELS = {
    EncodingLevel.LOW: "Low (Default)",
    EncodingLevel.MEDIUM: "Medium",
    EncodingLevel.HIGH: "High",
}

_BITS_PER_SLOT = {
    EncodingLevel.LOW: 1,
    EncodingLevel.MEDIUM: 2,
    EncodingLevel.HIGH: 4,
}

# Header record size, see container.HEADER_FORMAT.
HEADER_SIZE = 60
HEADER_LEVEL = EncodingLevel.LOW


def bits_per_slot(level: EncodingLevel) -> int:
    """Number of low-order bits of each channel overwritten at ``level``."""
    return _BITS_PER_SLOT[EncodingLevel(level)]


def encoded_size(byte_count: int, level: EncodingLevel) -> int:
    """
    Number of channel-slots needed to store ``byte_count`` bytes.

    Computed as ceil(byte_count * 8 / bits_per_slot(level)).
    """
    if byte_count < 0:
        raise ValueError(f"byte_count must be non-negative, got {byte_count}")
    bits = bits_per_slot(level)
    return -(-byte_count * 8 // bits)


HEADER_SLOTS = encoded_size(HEADER_SIZE, HEADER_LEVEL)


def total_slots(width: int, height: int, channels: int) -> int:
    return width * height * channels


def max_payload_bytes(width: int, height: int, channels: int, level: EncodingLevel) -> int:
    """
    Maximum padded payload size (in bytes) an image can carry at ``level``.

    The byte capacity of the whole image at ``level`` minus the header slots.
    Never negative: images smaller than one header have zero capacity.
    """
    capacity = total_slots(width, height, channels) // encoded_size(1, level) - HEADER_SLOTS
    return max(0, capacity)


def check_capacity(padded_size: int, width: int, height: int, channels: int, level: EncodingLevel) -> int:
    """
    Ensure ``padded_size`` bytes fit, returning the maximum usable size.

    Raises:
        CapacityExceededError: If the payload does not fit
    """
    available = max_payload_bytes(width, height, channels, level)
    if padded_size > available:
        raise CapacityExceededError(padded_size, available, EncodingLevel(level).name)
    logger.debug(f"Capacity ok: {padded_size}/{available} bytes at {EncodingLevel(level).name}")
    return available


def offset_window(padded_size: int, width: int, height: int, channels: int, level: EncodingLevel) -> int:
    """
    Count of valid payload offsets relative to the end of the header region.

    Any offset in ``range(offset_window(...))`` keeps the whole payload inside
    the image. Zero means the payload cannot be placed at all.
    """
    free_slots = total_slots(width, height, channels) - HEADER_SLOTS
    return max(0, free_slots - encoded_size(padded_size, level) + 1)


def format_size(size: int) -> str:
    """Render a byte count for humans, e.g. ``1.50 KiB``."""
    value = float(size)
    for unit in ("B", "KiB", "MiB"):
        if value < 1024:
            return f"{size} B" if unit == "B" else f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} GiB"
