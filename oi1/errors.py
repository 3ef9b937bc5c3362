"""
Exception hierarchy for the O0Il codec.

Every failure the codec raises derives from OI1Error, so a host can catch the
whole family in one place. The value-shaped errors also derive from
ValueError to keep the usual Python contract for bad input.
"""

from typing import Optional, Sequence


class OI1Error(Exception):
    """Base class for all codec errors."""


class EncodingError(OI1Error):
    """Plaintext could not be encoded (not a string, or no UTF-8 form)."""


class FormatError(OI1Error, ValueError):
    """Ciphertext length matches neither the v1 nor the v2 shape."""

    def __init__(self, message: str, length: Optional[int] = None):
        super().__init__(message)
        self.length = length


class ValidationError(OI1Error, ValueError):
    """A character outside the O0Il alphabet was found."""

    def __init__(self, message: str, character: str = "", position: int = 0):
        super().__init__(message)
        self.character = character
        self.position = position


class LengthError(OI1Error, ValueError):
    """A checksum block is not exactly 16 symbols long."""

    def __init__(self, message: str, length: int = 0):
        super().__init__(message)
        self.length = length


class DecodingError(OI1Error, ValueError):
    """Recovered bytes are not valid UTF-8."""

    def __init__(self, message: str, raw_bytes: Sequence[int] = ()):
        super().__init__(message)
        self.raw_bytes = bytes(raw_bytes)


class IntegrityError(OI1Error):
    """The CRC-32 carried by a v2 ciphertext does not match its payload."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"CRC32 check failed, data may be corrupted or tampered with. "
            f"Expected: {expected:X}, actual: {actual:X}"
        )
        self.expected = expected
        self.actual = actual
