"""
oi1 - reversible O0Il visual-confusion codec.

Text is turned into a string of look-alike symbols (O, 0, I, l) with an
appended CRC-32 so transcription errors are caught on decode. This is
obfuscation, not encryption.
"""

__version__ = "2.0.0"

from .checksum import CRC32, build_table
from .codec import DecodeResult, EncodingStats, FormatInfo, OI1Codec, detect_format
from .errors import (
    DecodingError,
    EncodingError,
    FormatError,
    IntegrityError,
    LengthError,
    OI1Error,
    ValidationError,
)
from .trace import StageKind, TraceStage, generate_decoding_trace, generate_encoding_trace
from .validator import QualityReport, ValidationResult, assess_quality, validate_alphabet

__all__ = [
    "CRC32",
    "build_table",
    "OI1Codec",
    "DecodeResult",
    "EncodingStats",
    "FormatInfo",
    "detect_format",
    "OI1Error",
    "EncodingError",
    "FormatError",
    "ValidationError",
    "LengthError",
    "DecodingError",
    "IntegrityError",
    "StageKind",
    "TraceStage",
    "generate_encoding_trace",
    "generate_decoding_trace",
    "QualityReport",
    "ValidationResult",
    "assess_quality",
    "validate_alphabet",
]
