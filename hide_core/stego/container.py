"""
Container format: the fixed header record and payload padding.

Header layout (little-endian, 60 bytes):

    magic     4s   b"HIDE"
    version   H    FORMAT_VERSION
    level     B    EncodingLevel of the payload region
    flags     B    reserved, zero
    offset    I    payload start in slots, relative to the end of the header
    size      I    padded payload size in bytes
    name      32s  UTF-8 file name, NUL-padded (unterminated when exactly 32);
                   undecodable bytes round-trip as surrogate escapes
    reserved  12s  zero

The payload is padded with 1-16 bytes, each equal to the pad length, so the
padded size is a multiple of PAD_BLOCK and the original length can be
recovered from the last byte alone.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Union

from .capacity import HEADER_SIZE, EncodingLevel
from .errors import CorruptPaddingError, HeaderValidationError, NameTooLongError

logger = logging.getLogger(__name__)

MAGIC = b"HIDE"
FORMAT_VERSION = 1
HEADER_FORMAT = "<4sHBBII32s12s"
NAME_SIZE = 32
RESERVED_SIZE = 12
PAD_BLOCK = 16
UINT32_MAX = 0xFFFFFFFF


def build_padded_payload(raw: bytes) -> bytes:
    """Append 1-16 bytes of value ``pad`` so the length is a multiple of 16."""
    pad = PAD_BLOCK - len(raw) % PAD_BLOCK
    return bytes(raw) + bytes([pad]) * pad


def strip_padding(padded: bytes) -> bytes:
    """
    Remove the trailer added by build_padded_payload().

    Raises:
        CorruptPaddingError: If the pad byte is zero or longer than the data
    """
    if not padded:
        raise CorruptPaddingError("Payload is empty, no padding to strip")
    pad = padded[-1]
    if pad == 0 or pad > len(padded):
        raise CorruptPaddingError(
            f"Invalid pad length {pad} for {len(padded)}-byte payload",
            details={"pad": pad, "size": len(padded)},
        )
    return bytes(padded[:-pad])


def encode_name(filename: Union[str, bytes]) -> bytes:
    """UTF-8 encode a file name and check it fits the header field."""
    raw = filename if isinstance(filename, bytes) else filename.encode("utf-8", "surrogateescape")
    if len(raw) > NAME_SIZE:
        raise NameTooLongError(raw.decode("utf-8", "replace"), NAME_SIZE)
    return raw


def decode_name(field: bytes) -> str:
    # A full field carries no terminator
    if field[-1]:
        raw = field
    else:
        raw = field.split(b"\x00", 1)[0]
    return raw.decode("utf-8", "surrogateescape")


def display_name(name: str) -> str:
    """Printable form of a decoded name, with undecodable bytes as U+FFFD."""
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


@dataclass
class Header:
    """
    Decoded header record.

    Attributes:
        level: Encoding level used for the payload region
        offset: Payload start in slots after the header region
        size: Padded payload size in bytes
        name: Original file name
        version: Format version
        flags: Reserved flag byte
    """

    level: EncodingLevel
    offset: int
    size: int
    name: str
    version: int = FORMAT_VERSION
    flags: int = 0

    def to_bytes(self) -> bytes:
        for field, value in (("offset", self.offset), ("size", self.size)):
            if not 0 <= value <= UINT32_MAX:
                raise ValueError(f"Header {field} {value} does not fit in 32 bits")
        return struct.pack(
            HEADER_FORMAT,
            MAGIC,
            self.version,
            int(self.level),
            self.flags,
            self.offset,
            self.size,
            encode_name(self.name),
            bytes(RESERVED_SIZE),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Header":
        return parse_header(data)


def build_header(level: EncodingLevel, offset: int, padded_size: int, filename: Union[str, bytes]) -> bytes:
    """
    Serialize a header record.

    Raises:
        NameTooLongError: If the UTF-8 file name exceeds 32 bytes
    """
    if isinstance(filename, bytes):
        filename = filename.decode("utf-8", "surrogateescape")
    header = Header(level=EncodingLevel(level), offset=offset, size=padded_size, name=filename)
    return header.to_bytes()


def parse_header(data: bytes) -> Header:
    """
    Validate and decode a header record.

    Raises:
        HeaderValidationError: On bad length, signature, version, level,
            flags or reserved bytes
    """
    if len(data) != HEADER_SIZE:
        raise HeaderValidationError(
            f"Header must be {HEADER_SIZE} bytes, got {len(data)}",
            details={"size": len(data)},
        )

    magic, version, level, flags, offset, size, name, reserved = struct.unpack(HEADER_FORMAT, data)

    if magic != MAGIC:
        raise HeaderValidationError("Invalid header signature", details={"magic": magic})
    if version != FORMAT_VERSION:
        raise HeaderValidationError(
            f"Unsupported file-version {version}",
            details={"version": version, "supported": FORMAT_VERSION},
        )
    try:
        level = EncodingLevel(level)
    except ValueError:
        raise HeaderValidationError(f"Unknown encoding level {level}", details={"level": level}) from None
    if flags:
        raise HeaderValidationError(f"Invalid flags 0x{flags:02x}", details={"flags": flags})
    if any(reserved):
        raise HeaderValidationError("Invalid reserved bytes", details={"reserved": reserved.hex()})

    header = Header(
        level=level,
        offset=offset,
        size=size,
        name=decode_name(name),
        version=version,
        flags=flags,
    )
    logger.debug(f"Parsed header: {header}")
    return header
