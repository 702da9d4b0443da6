"""Configuration for embedding operations."""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .stego.capacity import EncodingLevel


@dataclass
class StegoConfig:
    """
    Settings threaded through the Embedder.

    Attributes:
        level: Encoding level used for the payload region
        verify_after_embed: Re-extract the payload before saving and compare
    """

    level: EncodingLevel
    verify_after_embed: bool

    @classmethod
    def default(cls) -> "StegoConfig":
        """Get default configuration."""
        return cls(level=EncodingLevel.LOW, verify_after_embed=True)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["level"] = self.level.name.lower()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StegoConfig":
        """Create config from a dictionary, filling gaps with defaults."""
        config = cls.default()
        if "level" in data:
            config.level = EncodingLevel.parse(data["level"])
        if "verify_after_embed" in data:
            config.verify_after_embed = bool(data["verify_after_embed"])
        return config
