"""Randomness sources for choosing the payload offset."""

import logging
import secrets
from typing import Iterable

from .errors import RandomnessUnavailableError

logger = logging.getLogger(__name__)


class SecureRandom:
    """Operating-system CSPRNG, one 32-bit draw per call."""

    def get_u32(self) -> int:
        try:
            return secrets.randbits(32)
        except (OSError, NotImplementedError) as e:
            raise RandomnessUnavailableError(f"Unable to generate random number: {e}") from e


class FixedRandom:
    """
    Deterministic source replaying the given values.

    Useful for tests and for reproducing a particular embedding. Raises
    RandomnessUnavailableError once every value has been consumed.
    """

    def __init__(self, *values: int):
        self._values = iter(list(values))

    @classmethod
    def from_iterable(cls, values: Iterable[int]) -> "FixedRandom":
        return cls(*values)

    def get_u32(self) -> int:
        try:
            value = next(self._values)
        except StopIteration:
            raise RandomnessUnavailableError("Fixed random source exhausted") from None
        return value & 0xFFFFFFFF
