"""
HIDE Steganography Module - File-in-Image Embedding.

This module hides an arbitrary file in the low-order bits of an image's
pixel channels and recovers it byte-exactly. A fixed header sits at the
start of the image at the lowest density; the padded payload follows at a
random offset at the chosen density.

Modules:
    capacity: Encoding levels and capacity arithmetic
    bits: Packing bytes into channel low-order bits
    container: Header record and payload padding
    image: Pixel buffers and image/file I/O
    entropy: Randomness sources for the payload offset
    codec: Embedder and Extractor orchestration

Usage:
    >>> from hide_core.stego import Embedder, Extractor, EncodingLevel
    >>> Embedder(level=EncodingLevel.HIGH).embed_file("cover.png", "notes.txt", "out.png")
    >>> path, result = Extractor().extract_file("out.png", "recovered/")
"""

from .capacity import (
    HEADER_SIZE,
    HEADER_SLOTS,
    EncodingLevel,
    bits_per_slot,
    encoded_size,
    format_size,
    max_payload_bytes,
)
from .bits import pack, unpack
from .container import (
    FORMAT_VERSION,
    MAGIC,
    Header,
    build_header,
    build_padded_payload,
    display_name,
    parse_header,
    strip_padding,
)
from .errors import (
    CapacityExceededError,
    CorruptPaddingError,
    HeaderValidationError,
    NameTooLongError,
    RandomnessUnavailableError,
    StegoError,
    StegoIOError,
    UnsupportedFormatError,
    VerificationFailedError,
)
from .image import PixelBuffer, load, save
from .entropy import FixedRandom, SecureRandom
from .codec import Embedder, EmbeddingResult, ExtractionResult, Extractor

__all__ = [
    # Capacity model
    "HEADER_SIZE",
    "HEADER_SLOTS",
    "EncodingLevel",
    "bits_per_slot",
    "encoded_size",
    "format_size",
    "max_payload_bytes",
    # Bit packing
    "pack",
    "unpack",
    # Container format
    "FORMAT_VERSION",
    "MAGIC",
    "Header",
    "build_header",
    "build_padded_payload",
    "display_name",
    "parse_header",
    "strip_padding",
    # Errors
    "CapacityExceededError",
    "CorruptPaddingError",
    "HeaderValidationError",
    "NameTooLongError",
    "RandomnessUnavailableError",
    "StegoError",
    "StegoIOError",
    "UnsupportedFormatError",
    "VerificationFailedError",
    # Pixel buffers and randomness
    "PixelBuffer",
    "load",
    "save",
    "FixedRandom",
    "SecureRandom",
    # Orchestration
    "Embedder",
    "EmbeddingResult",
    "ExtractionResult",
    "Extractor",
]
