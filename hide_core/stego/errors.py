"""
Exception hierarchy for the HIDE steganography codec.

Every failure raised by the codec derives from StegoError, which carries a
numeric code and a details dictionary in the same way the crypto engine
reports its errors. None of these errors are retried internally; each one
aborts the current encode or decode call.
"""

from typing import Any, Dict, Optional


class StegoError(Exception):
    """
    Base exception for steganography errors.

    Attributes:
        message: Human-readable description
        code: Numeric error code (see subclasses)
        details: Extra context, e.g. sizes or offending values
    """

    default_code: Optional[int] = None

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        base = f"{type(self).__name__}: {self.message}"
        if self.code:
            base += f" (Code: {self.code})"
        return base


class StegoIOError(StegoError):
    """Raised when reading or writing a file or image fails."""

    default_code = 2001


class UnsupportedFormatError(StegoIOError):
    """Raised when an output image format would destroy the embedded bits."""

    default_code = 2002


class CapacityExceededError(StegoError):
    """Padded payload does not fit into the carrier at the chosen level."""

    default_code = 2010

    def __init__(self, required: int, available: int, level: Optional[str] = None):
        self.required = required
        self.available = available
        super().__init__(
            f"Payload needs {required} bytes, maximum possible size is {available} bytes",
            details={"required": required, "available": available, "level": level},
        )


class NameTooLongError(StegoError):
    """File name does not fit into the fixed header field."""

    default_code = 2020

    def __init__(self, name: str, limit: int):
        self.name = name
        self.limit = limit
        super().__init__(
            f"File name '{name}' is over {limit} bytes",
            details={"name": name, "limit": limit},
        )


class RandomnessUnavailableError(StegoError):
    """The randomness source could not produce an embedding offset."""

    default_code = 2030


class HeaderValidationError(StegoError):
    """Embedded header is missing, malformed or of an unsupported version."""

    default_code = 2040


class CorruptPaddingError(StegoError):
    """Pad-length byte at the end of the payload is invalid."""

    default_code = 2050


class VerificationFailedError(StegoError):
    """Data read back after embedding does not match the input."""

    default_code = 2060

    def __init__(self, expected: Any, actual: Any, field: str = "payload"):
        self.expected = expected
        self.actual = actual
        self.field = field
        super().__init__(
            f"Verification failed: extracted {field} differs from input",
            details={"field": field, "expected": expected, "actual": actual},
        )
