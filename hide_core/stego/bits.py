"""
Bit packing of bytes into the low-order bits of channel-slots.

Each payload byte is split into 8 / bits_per_slot(level) groups, most
significant group first. Group i of byte j lands in slot
``start_slot + j * groups_per_byte + i``; only the low ``bits_per_slot`` bits
of that slot change. Slot indices wrap modulo the slot count.
"""

import logging
from typing import Union

import numpy as np

from .capacity import EncodingLevel, bits_per_slot

logger = logging.getLogger(__name__)


def _slot_view(buffer) -> np.ndarray:
    """Flat uint8 view over the channel-slots of a PixelBuffer or array."""
    if hasattr(buffer, "slots"):
        slots = buffer.slots
    else:
        array = np.asarray(buffer)
        if not array.flags.c_contiguous:
            raise ValueError("Channel data must be C-contiguous")
        slots = array.reshape(-1)
    if slots.dtype != np.uint8:
        raise TypeError(f"Channel data must be uint8, got {slots.dtype}")
    return slots


def _slot_indices(start_slot: int, count: int, total: int) -> np.ndarray:
    if total == 0:
        raise ValueError("Buffer has no channel-slots")
    end = start_slot + count
    if start_slot < 0 or end > total:
        logger.warning(f"Slot range {start_slot}..{end} exceeds {total} slots, wrapping")
    return (np.arange(count, dtype=np.int64) + start_slot) % total


def pack(buffer, start_slot: int, level: EncodingLevel, data: Union[bytes, bytearray]) -> None:
    """
    Write ``data`` into consecutive channel-slots starting at ``start_slot``.

    Args:
        buffer: PixelBuffer or uint8 array, modified in place
        start_slot: First slot to write
        level: Encoding level selecting bits per slot
        data: Bytes to embed
    """
    if not data:
        return

    slots = _slot_view(buffer)
    bits = bits_per_slot(level)
    mask = (1 << bits) - 1

    # MSB-first bit stream, regrouped into bits-wide integers
    stream = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
    weights = (1 << np.arange(bits - 1, -1, -1)).astype(np.uint8)
    groups = (stream.reshape(-1, bits) * weights).sum(axis=1).astype(np.uint8)

    index = _slot_indices(start_slot, groups.size, slots.size)
    slots[index] = (slots[index] & np.uint8(0xFF ^ mask)) | groups


def unpack(buffer, start_slot: int, level: EncodingLevel, byte_count: int) -> bytes:
    """
    Read ``byte_count`` bytes from consecutive slots starting at ``start_slot``.

    The inverse of pack(); the buffer is only read.
    """
    if byte_count < 0:
        raise ValueError(f"byte_count must be non-negative, got {byte_count}")
    if byte_count == 0:
        return b""

    slots = _slot_view(buffer)
    bits = bits_per_slot(level)
    mask = (1 << bits) - 1
    count = byte_count * 8 // bits

    index = _slot_indices(start_slot, count, slots.size)
    groups = slots[index] & np.uint8(mask)
    shifts = np.arange(bits - 1, -1, -1, dtype=np.uint8)
    stream = (groups[:, None] >> shifts) & np.uint8(1)
    return np.packbits(stream.reshape(-1)).tobytes()
