"""
Embedder and Extractor: the two orchestration paths of the codec.

Embedding runs READ_INPUT -> COMPUTE_PADDING -> CHECK_CAPACITY ->
CHOOSE_OFFSET -> SERIALIZE_HEADER -> SERIALIZE_PAYLOAD -> DONE. Only the
capacity check, the file-name check and the single random draw can fail; the
pixel buffer is not touched before all three have passed.

Extraction runs READ_HEADER_REGION -> PARSE_HEADER -> READ_PAYLOAD_REGION ->
STRIP_PADDING -> DONE and aborts on the first invalid field. There is no
partial recovery and nothing is written when any stage fails.

Example:
    >>> embedder = Embedder(level=EncodingLevel.MEDIUM)
    >>> result = embedder.embed(buffer, b"secret", "notes.txt")
    >>> Extractor().extract(buffer).data
    b'secret'
"""

import logging
import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from ..config import StegoConfig
from . import image as imageio
from .bits import pack, unpack
from .capacity import (
    HEADER_LEVEL,
    HEADER_SIZE,
    HEADER_SLOTS,
    EncodingLevel,
    check_capacity,
    encoded_size,
    offset_window,
)
from .container import (
    PAD_BLOCK,
    Header,
    build_header,
    build_padded_payload,
    display_name,
    encode_name,
    parse_header,
    strip_padding,
)
from .entropy import SecureRandom
from .errors import HeaderValidationError, VerificationFailedError
from .image import PixelBuffer

logger = logging.getLogger(__name__)


class EmbedStage(Enum):
    READ_INPUT = "read_input"
    COMPUTE_PADDING = "compute_padding"
    CHECK_CAPACITY = "check_capacity"
    CHOOSE_OFFSET = "choose_offset"
    SERIALIZE_HEADER = "serialize_header"
    SERIALIZE_PAYLOAD = "serialize_payload"
    DONE = "done"


class ExtractStage(Enum):
    READ_HEADER_REGION = "read_header_region"
    PARSE_HEADER = "parse_header"
    READ_PAYLOAD_REGION = "read_payload_region"
    STRIP_PADDING = "strip_padding"
    DONE = "done"


@dataclass
class EmbeddingResult:
    """
    Result of an embedding operation.

    Attributes:
        header: Header written at slot 0
        payload_size: Size of the raw payload in bytes
        padded_size: Size after padding
        start_slot: Absolute slot where the payload begins
        capacity_total: Maximum padded payload size at this level
        level: Encoding level of the payload region
    """

    header: Header
    payload_size: int
    padded_size: int
    start_slot: int
    capacity_total: int
    level: EncodingLevel


@dataclass
class ExtractionResult:
    """
    Result of an extraction operation.

    Attributes:
        data: Recovered payload, padding removed
        filename: Name recorded in the header
        level: Encoding level read from the header
        padded_size: Payload size as stored
        start_slot: Absolute slot where the payload began
    """

    data: bytes
    filename: str
    level: EncodingLevel
    padded_size: int
    start_slot: int


class Embedder:
    """
    Writes a header and a padded payload into a pixel buffer.

    Args:
        level: Encoding level for the payload; overrides ``config.level``
        random_source: Object with ``get_u32()``; defaults to SecureRandom
        config: Embedding configuration
    """

    def __init__(
        self,
        level: Optional[EncodingLevel] = None,
        random_source=None,
        config: Optional[StegoConfig] = None,
    ):
        self.config = config or StegoConfig.default()
        if level is not None:
            self.config = replace(self.config, level=EncodingLevel.parse(level))
        self._random = random_source or SecureRandom()

    @property
    def level(self) -> EncodingLevel:
        return self.config.level

    def _enter(self, stage: EmbedStage) -> None:
        logger.debug(f"embed: {stage.value}")

    def embed(self, buffer: PixelBuffer, data: bytes, filename: Union[str, bytes]) -> EmbeddingResult:
        """
        Embed ``data`` into ``buffer`` in place.

        Raises:
            CapacityExceededError: If the padded payload does not fit
            NameTooLongError: If ``filename`` exceeds the header field
            RandomnessUnavailableError: If no offset could be drawn
        """
        level = self.level

        self._enter(EmbedStage.COMPUTE_PADDING)
        padded = build_padded_payload(data)

        self._enter(EmbedStage.CHECK_CAPACITY)
        capacity = check_capacity(len(padded), buffer.width, buffer.height, buffer.channels, level)
        encode_name(filename)

        self._enter(EmbedStage.CHOOSE_OFFSET)
        window = offset_window(len(padded), buffer.width, buffer.height, buffer.channels, level)
        offset = self._random.get_u32() % window
        start_slot = HEADER_SLOTS + offset

        self._enter(EmbedStage.SERIALIZE_HEADER)
        header_bytes = build_header(level, offset, len(padded), filename)
        pack(buffer, 0, HEADER_LEVEL, header_bytes)

        self._enter(EmbedStage.SERIALIZE_PAYLOAD)
        pack(buffer, start_slot, level, padded)

        self._enter(EmbedStage.DONE)
        logger.info(
            f"Embedded {len(data)} bytes ({len(padded)} padded) at slot {start_slot} "
            f"using level {level.name}, capacity={capacity}"
        )
        return EmbeddingResult(
            header=parse_header(header_bytes),
            payload_size=len(data),
            padded_size=len(padded),
            start_slot=start_slot,
            capacity_total=capacity,
            level=level,
        )

    def embed_file(self, image_path, embed_path, output_path) -> EmbeddingResult:
        """
        Hide the file at ``embed_path`` in the image at ``image_path``.

        The stego image is written to ``output_path`` only when every step,
        including the optional verification, has succeeded.
        """
        imageio.image_format_for(output_path)

        self._enter(EmbedStage.READ_INPUT)
        buffer = imageio.load(image_path)
        return self.embed_into(buffer, embed_path, output_path)

    def embed_into(self, buffer: PixelBuffer, embed_path, output_path) -> EmbeddingResult:
        """
        Hide the file at ``embed_path`` in an already loaded carrier.

        ``buffer`` is modified in place and saved to ``output_path`` once
        embedding and the optional verification have succeeded.
        """
        imageio.image_format_for(output_path)

        data = imageio.read_file_bytes(embed_path)
        name = Path(embed_path).name

        result = self.embed(buffer, data, name)

        if self.config.verify_after_embed:
            self._verify(buffer, data, name)

        imageio.save(buffer, output_path)
        return result

    def _verify(self, buffer: PixelBuffer, data: bytes, name: str) -> None:
        extracted = Extractor().extract(buffer)
        if extracted.data != data:
            raise VerificationFailedError(len(data), len(extracted.data))
        if extracted.filename != name:
            raise VerificationFailedError(
                display_name(name), display_name(extracted.filename), field="file name"
            )
        logger.debug("Verification passed")


class Extractor:
    """Reads a header and payload back out of a pixel buffer."""

    def _enter(self, stage: ExtractStage) -> None:
        logger.debug(f"extract: {stage.value}")

    def read_header(self, buffer: PixelBuffer) -> Header:
        """
        Read and validate the header at slot 0.

        Raises:
            HeaderValidationError: If the header is invalid or the declared
                payload region does not lie inside the buffer
        """
        self._enter(ExtractStage.READ_HEADER_REGION)
        if buffer.slot_count < HEADER_SLOTS:
            raise HeaderValidationError(
                f"Image too small to hold a header ({buffer.slot_count} < {HEADER_SLOTS} slots)"
            )
        raw = unpack(buffer, 0, HEADER_LEVEL, HEADER_SIZE)

        self._enter(ExtractStage.PARSE_HEADER)
        header = parse_header(raw)

        if header.size == 0 or header.size % PAD_BLOCK:
            raise HeaderValidationError(
                f"Invalid payload size {header.size}", details={"size": header.size}
            )
        end = HEADER_SLOTS + header.offset + encoded_size(header.size, header.level)
        if end > buffer.slot_count:
            raise HeaderValidationError(
                f"Payload region ends at slot {end}, image has {buffer.slot_count}",
                details={"offset": header.offset, "size": header.size, "slots": buffer.slot_count},
            )
        return header

    def extract(self, buffer: PixelBuffer) -> ExtractionResult:
        """
        Recover the embedded payload.

        Raises:
            HeaderValidationError: If the header is invalid
            CorruptPaddingError: If the padding trailer is invalid
        """
        header = self.read_header(buffer)
        start_slot = HEADER_SLOTS + header.offset
        logger.info(f"Detected embed {header.name!r}, level {header.level.label}")

        self._enter(ExtractStage.READ_PAYLOAD_REGION)
        padded = unpack(buffer, start_slot, header.level, header.size)

        self._enter(ExtractStage.STRIP_PADDING)
        data = strip_padding(padded)

        self._enter(ExtractStage.DONE)
        return ExtractionResult(
            data=data,
            filename=header.name,
            level=header.level,
            padded_size=header.size,
            start_slot=start_slot,
        )

    def extract_file(self, image_path, output_path=None) -> Tuple[Path, ExtractionResult]:
        """
        Recover the payload from ``image_path`` and write it out.

        When ``output_path`` is None, an existing directory, or ends in a path
        separator, the embedded file name is used inside that directory.
        Returns the path written and the extraction result.
        """
        buffer = imageio.load(image_path)
        result = self.extract(buffer)

        target = Path(output_path) if output_path is not None else Path(".")
        if output_path is None or _names_directory(output_path) or target.is_dir():
            # Never let an embedded name escape the chosen directory
            name = Path(result.filename.replace("\\", "/")).name
            if name in ("", ".", ".."):
                raise HeaderValidationError(
                    f"Embedded file name {result.filename!r} is not usable, pass an output path"
                )
            target = target / name

        imageio.write_file_bytes(target, result.data)
        logger.info(f"Wrote {len(result.data)} bytes to {target}")
        return target, result


def _names_directory(path) -> bool:
    text = os.fspath(path)
    if isinstance(text, bytes):
        text = os.fsdecode(text)
    return text.endswith(tuple(sep for sep in (os.sep, os.altsep) if sep))
