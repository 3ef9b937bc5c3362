"""
Step-by-step traces of the encode and decode pipelines.

A trace is a list of TraceStage records meant for display: what went into
each stage and what came out. Stages are tagged with a StageKind and
numbered by their position in the trace, so the v1 and v2 decode traces
stay consistent without any hand-adjusted indices.

All bit-level work goes through the codec transforms; nothing here
re-implements the packing. Trace generation never raises: a failure becomes
a single stage with index 0 carrying the error message.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .alphabet import BINARY_TO_SYMBOL, SYMBOL_TO_BINARY
from .checksum import CHECKSUM_SYMBOLS
from .codec import (
    OI1Codec,
    bits_to_bytes,
    bits_to_groups,
    bytes_to_bits,
    bytes_to_text,
    groups_to_symbols,
    symbols_to_bits,
    text_to_bytes,
)
from .errors import DecodingError, FormatError
from .validator import validate_alphabet

logger = logging.getLogger(__name__)


class StageKind(Enum):
    # encode
    UTF8_BYTES = "utf8_bytes"
    CHECKSUM = "checksum"
    BIT_EXPANSION = "bit_expansion"
    GROUPING = "grouping"
    SYMBOL_MAPPING = "symbol_mapping"
    ASSEMBLY = "assembly"
    # decode
    FORMAT_DETECTION = "format_detection"
    CHECKSUM_SPLIT = "checksum_split"
    SYMBOL_TO_BITS = "symbol_to_bits"
    BITS_TO_BYTES = "bits_to_bytes"
    UTF8_DECODE = "utf8_decode"
    CHECKSUM_VERIFY = "checksum_verify"
    LEGACY_NOTE = "legacy_note"
    # failures
    VALIDATION_FAILED = "validation_failed"
    ERROR = "error"


STAGE_TEXT = {
    StageKind.UTF8_BYTES: (
        "Text to UTF-8 bytes",
        "The plaintext is encoded as a UTF-8 byte sequence.",
    ),
    StageKind.CHECKSUM: (
        "Compute CRC32 checksum",
        "A CRC-32 over the bytes is computed and rendered as 16 symbols.",
    ),
    StageKind.BIT_EXPANSION: (
        "Bytes to binary",
        "Each byte is written as 8 bits, most significant bit first.",
    ),
    StageKind.GROUPING: (
        "Group bits in pairs",
        "The bit string is split into 2-bit groups from left to right.",
    ),
    StageKind.SYMBOL_MAPPING: (
        "Map groups to symbols",
        "Each group becomes one symbol: 00→O, 01→0, 10→I, 11→l.",
    ),
    StageKind.ASSEMBLY: (
        "Append checksum",
        "The 16 checksum symbols are appended to the main cipher (v2 format).",
    ),
    StageKind.FORMAT_DETECTION: (
        "Detect format",
        "The ciphertext length decides between v2 (with CRC32) and legacy v1.",
    ),
    StageKind.CHECKSUM_SPLIT: (
        "Split off checksum",
        "The last 16 symbols hold the expected CRC32 of the plaintext bytes.",
    ),
    StageKind.SYMBOL_TO_BITS: (
        "Symbols to binary",
        "Each symbol is replaced by its 2-bit group.",
    ),
    StageKind.BITS_TO_BYTES: (
        "Binary to bytes",
        "The bit string is cut into 8-bit bytes; an incomplete tail is dropped.",
    ),
    StageKind.UTF8_DECODE: (
        "UTF-8 decode",
        "The byte sequence is decoded back into text.",
    ),
    StageKind.CHECKSUM_VERIFY: (
        "Verify checksum",
        "The CRC32 of the recovered bytes is compared with the expected value.",
    ),
    StageKind.LEGACY_NOTE: (
        "Legacy format",
        "v1 ciphertexts carry no checksum, so corruption cannot be detected.",
    ),
    StageKind.VALIDATION_FAILED: (
        "Validation failed",
        "The ciphertext contains characters outside the O0Il alphabet.",
    ),
    StageKind.ERROR: (
        "Error",
        "The trace could not be generated.",
    ),
}


@dataclass(frozen=True)
class TraceStage:
    index: int
    kind: StageKind
    title: str
    description: str
    input: str
    output: str
    technical: str = ""


# (kind, input, output, technical)
_Pending = Tuple[StageKind, str, str, str]


def _number(pending: List[_Pending]) -> List[TraceStage]:
    stages = []
    for index, (kind, input_text, output, technical) in enumerate(pending, start=1):
        title, description = STAGE_TEXT[kind]
        stages.append(TraceStage(index, kind, title, description, input_text, output, technical))
    return stages


def _failure(kind: StageKind, input_text, message: str) -> List[TraceStage]:
    title, description = STAGE_TEXT[kind]
    return [TraceStage(0, kind, title, description, str(input_text), message, "")]


def _byte_list(data: bytes) -> str:
    return ", ".join(str(b) for b in data)


def generate_encoding_trace(plaintext: str, codec: Optional[OI1Codec] = None) -> List[TraceStage]:
    """Trace the encode pipeline for a plaintext. Empty input gives an empty trace."""
    if isinstance(plaintext, str) and not plaintext:
        return []
    if codec is None:
        codec = OI1Codec()

    try:
        if not isinstance(plaintext, str):
            raise TypeError(f"Input must be a string, got {type(plaintext).__name__}")

        pending: List[_Pending] = []

        data = text_to_bytes(plaintext)
        pending.append((StageKind.UTF8_BYTES, plaintext, _byte_list(data),
                        f"Byte array: [{_byte_list(data)}]"))

        crc = codec.checksum.calculate(data)
        crc_symbols = codec.checksum.to_symbols(crc)
        pending.append((StageKind.CHECKSUM, f"[{_byte_list(data)}]", f"CRC32: 0x{crc:X}",
                        f"CRC32 (O0Il): {crc_symbols} ({CHECKSUM_SYMBOLS} symbols)"))

        bits = bytes_to_bits(data)
        byte_bits = " ".join(bits[i:i + 8] for i in range(0, len(bits), 8))
        pending.append((StageKind.BIT_EXPANSION, _byte_list(data), byte_bits,
                        f"Full bit string: {bits} ({len(bits)} bits)"))

        groups = bits_to_groups(bits)
        pending.append((StageKind.GROUPING, bits, " | ".join(groups),
                        f"Group count: {len(groups)}"))

        main_cipher = groups_to_symbols(groups)
        mapping = " ".join(f"{g}→{BINARY_TO_SYMBOL[g]}" for g in groups)
        pending.append((StageKind.SYMBOL_MAPPING, " ".join(groups), mapping,
                        f"Main cipher: {main_cipher} ({len(main_cipher)} symbols)"))

        ciphertext = codec.encode(plaintext)
        pending.append((StageKind.ASSEMBLY, f"Main cipher: {main_cipher}\nCRC32: {crc_symbols}",
                        ciphertext,
                        f"Final ciphertext (v2): {len(ciphertext)} symbols = "
                        f"{len(main_cipher)} main + {CHECKSUM_SYMBOLS} CRC"))

        return _number(pending)
    except Exception as e:
        logger.debug("Encoding trace failed: %s", e, exc_info=True)
        return _failure(StageKind.ERROR, plaintext, str(e))


def generate_decoding_trace(ciphertext: str, codec: Optional[OI1Codec] = None) -> List[TraceStage]:
    """
    Trace the decode pipeline for a ciphertext.

    A checksum mismatch is reported by the verification stage rather than
    turned into a failure, so the trace shows where the data went wrong.
    """
    if isinstance(ciphertext, str) and not ciphertext:
        return []
    if codec is None:
        codec = OI1Codec()

    try:
        if not isinstance(ciphertext, str):
            raise TypeError(f"Ciphertext must be a string, got {type(ciphertext).__name__}")

        validation = validate_alphabet(ciphertext)
        if not validation.is_valid:
            return _failure(StageKind.VALIDATION_FAILED, ciphertext, validation.error)

        info = codec.detect_format(ciphertext)
        if not info.is_valid:
            raise FormatError(
                f"Unrecognised ciphertext format (length {len(ciphertext)} fits neither v1 nor v2)",
                length=len(ciphertext),
            )

        pending: List[_Pending] = []
        crc_note = "(with CRC32)" if info.has_crc else "(no CRC)"
        pending.append((StageKind.FORMAT_DETECTION, f"Ciphertext length: {len(ciphertext)}",
                        f"Format: {info.version} {crc_note}",
                        f"Main cipher: {info.main_cipher_length} symbols, CRC: {info.crc_length} symbols"))

        main_cipher = ciphertext[:info.main_cipher_length]
        expected = None
        if info.has_crc:
            crc_symbols = ciphertext[info.main_cipher_length:]
            expected = codec.checksum.from_symbols(crc_symbols)
            pending.append((StageKind.CHECKSUM_SPLIT, ciphertext,
                            f"Main cipher: {main_cipher}\nCRC32: {crc_symbols}",
                            f"CRC32 value: 0x{expected:X}"))

        bits = symbols_to_bits(main_cipher)
        mapping = " ".join(f"{char}→{SYMBOL_TO_BINARY[char]}" for char in main_cipher)
        pending.append((StageKind.SYMBOL_TO_BITS, main_cipher, mapping,
                        f"Full bit string: {bits} ({len(bits)} bits)"))

        data = bits_to_bytes(bits)
        byte_groups = " ".join(f"{b:08b}({b})" for b in data)
        pending.append((StageKind.BITS_TO_BYTES, bits, byte_groups,
                        f"Byte array: [{_byte_list(data)}]"))

        try:
            plaintext = bytes_to_text(data)
            detail = f"Decoded {len(plaintext)} characters"
        except DecodingError as e:
            # Keep going so the checksum stage can still report the corruption
            plaintext = data.decode('utf-8', 'replace')
            detail = f"Invalid UTF-8, undecodable bytes shown as U+FFFD. {e}"
        pending.append((StageKind.UTF8_DECODE, f"[{_byte_list(data)}]", plaintext, detail))

        if expected is not None:
            actual = codec.checksum.calculate(data)
            if actual == expected:
                outcome = "✓ CRC32 check passed - data is intact"
                detail = "Result: passed - integrity confirmed"
            else:
                outcome = "✗ CRC32 check failed - data may be corrupted or tampered with"
                detail = "Result: failed - corruption or tampering detected"
            pending.append((StageKind.CHECKSUM_VERIFY,
                            f"Expected CRC32: 0x{expected:X}\nActual CRC32: 0x{actual:X}",
                            outcome, detail))
        else:
            pending.append((StageKind.LEGACY_NOTE, "Legacy ciphertext",
                            "⚠ No integrity protection - re-encode to get the v2 format",
                            "v1 is kept for backward compatibility; v2 adds CRC32 protection"))

        return _number(pending)
    except Exception as e:
        logger.debug("Decoding trace failed: %s", e, exc_info=True)
        return _failure(StageKind.ERROR, ciphertext, str(e))
