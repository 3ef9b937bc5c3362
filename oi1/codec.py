"""
O0Il symbol codec.

Every UTF-8 byte becomes four symbols (one per 2-bit group, most significant
first). New ciphertexts are always written in the checked v2 format: the
main cipher followed by the 16-symbol CRC-32 of the plaintext bytes. The
legacy v1 format (no checksum) is still accepted on decode.

The wire data carries no version tag, so the format is inferred from the
length alone. Formats are tried in registration order, which makes v2 win
whenever both shapes fit.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from .alphabet import BINARY_TO_SYMBOL, SYMBOL_TO_BINARY, SYMBOLS_PER_BYTE
from .checksum import CHECKSUM_SYMBOLS, CRC32
from .errors import (
    DecodingError,
    EncodingError,
    FormatError,
    IntegrityError,
    ValidationError,
)
from .validator import (
    QualityReport,
    SymbolDistribution,
    ValidationResult,
    assess_quality,
    find_invalid_symbol,
    symbol_distribution,
    validate_alphabet,
)

logger = logging.getLogger(__name__)

CURRENT_FORMAT = "v2"


@dataclass(frozen=True)
class DecodeResult:
    plaintext: str
    checksum_verified: bool
    format_version: str
    checksum_expected: Optional[int] = None
    checksum_actual: Optional[int] = None


@dataclass(frozen=True)
class FormatInfo:
    version: str
    has_crc: bool
    is_valid: bool
    main_cipher_length: int = 0
    crc_length: int = 0


@dataclass(frozen=True)
class EncodingStats:
    original_length: int
    original_bytes: int
    cipher_length: int
    compression_ratio: Optional[float]
    bytes_ratio: Optional[float]
    format_version: str
    has_crc: bool
    checksum_symbols: Optional[str]
    checksum: Optional[int]
    distribution: SymbolDistribution


# ==========================================
#  TRANSFORMS: text <-> bytes <-> bits <-> symbols
# ==========================================

def text_to_bytes(text: str) -> bytes:
    return text.encode('utf-8')


def bytes_to_bits(data: bytes) -> str:
    """Render each byte as 8 bits, most significant first."""
    return "".join(f"{b:08b}" for b in data)


def bits_to_groups(bits: str) -> List[str]:
    """Split a bit string into 2-bit groups, right-padding with 0 if odd."""
    if len(bits) % 2:
        bits += '0'
    return [bits[i:i + 2] for i in range(0, len(bits), 2)]


def groups_to_symbols(groups: List[str]) -> str:
    return "".join(BINARY_TO_SYMBOL[group] for group in groups)


def bytes_to_symbols(data: bytes) -> str:
    return groups_to_symbols(bits_to_groups(bytes_to_bits(data)))


def symbols_to_bits(symbols: str) -> str:
    bits = []
    for position, char in enumerate(symbols, start=1):
        pair = SYMBOL_TO_BINARY.get(char)
        if pair is None:
            raise ValidationError(
                f"invalid character '{char}' (position: {position})",
                character=char,
                position=position,
            )
        bits.append(pair)
    return "".join(bits)


def bits_to_bytes(bits: str) -> bytes:
    """
    Reassemble 8-bit chunks into bytes.

    An incomplete trailing chunk is dropped without complaint; older
    ciphertexts rely on that leniency.
    """
    usable = len(bits) - len(bits) % 8
    return bytes(int(bits[i:i + 8], 2) for i in range(0, usable, 8))


def symbols_to_bytes(symbols: str) -> bytes:
    return bits_to_bytes(symbols_to_bits(symbols))


def bytes_to_text(data: bytes) -> str:
    """
    Strict UTF-8 decode.

    Raises:
        DecodingError: listing every byte as decimal(0xhex)
    """
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        byte_info = ", ".join(f"{b}(0x{b:x})" for b in data)
        raise DecodingError(
            f"UTF-8 decoding failed, the byte sequence may be invalid: [{byte_info}]. "
            f"Original error: {e}",
            raw_bytes=data,
        ) from e


# ==========================================
#  FRAMEWORK: Wire Formats & Registry
# ==========================================

class WireFormat(ABC):
    """Base class for a ciphertext layout."""

    name = ""
    description = ""
    checksum_length = 0

    def __init__(self, checksum: CRC32):
        self.checksum = checksum

    @classmethod
    @abstractmethod
    def matches(cls, length: int) -> bool:
        """Whether a ciphertext of this length can be in this format."""

    @abstractmethod
    def decode(self, ciphertext: str) -> DecodeResult:
        pass

    def encode(self, data: bytes) -> str:
        raise NotImplementedError(f"Format '{self.name}' is decode-only")

    @classmethod
    def info(cls, length: int) -> FormatInfo:
        return FormatInfo(
            version=cls.name,
            has_crc=cls.checksum_length > 0,
            is_valid=True,
            main_cipher_length=length - cls.checksum_length,
            crc_length=cls.checksum_length,
        )


FORMAT_REGISTRY: Dict[str, Type[WireFormat]] = {}


def register_format(cls):
    """Decorator to register wire formats. Registration order is detection precedence."""
    FORMAT_REGISTRY[cls.name] = cls
    return cls


@register_format
class CheckedFormat(WireFormat):
    name = "v2"
    description = "Main cipher followed by a 16-symbol CRC-32 of the plaintext bytes."
    checksum_length = CHECKSUM_SYMBOLS

    @classmethod
    def matches(cls, length: int) -> bool:
        return length > CHECKSUM_SYMBOLS and (length - CHECKSUM_SYMBOLS) % SYMBOLS_PER_BYTE == 0

    def encode(self, data: bytes) -> str:
        crc = self.checksum.calculate(data)
        return bytes_to_symbols(data) + self.checksum.to_symbols(crc)

    def decode(self, ciphertext: str) -> DecodeResult:
        main_cipher = ciphertext[:-CHECKSUM_SYMBOLS]
        expected = self.checksum.from_symbols(ciphertext[-CHECKSUM_SYMBOLS:])

        # CRC is checked before UTF-8 decoding so any corruption is an IntegrityError;
        # the recovered bytes are exactly the plaintext's UTF-8 bytes
        data = symbols_to_bytes(main_cipher)
        actual = self.checksum.calculate(data)
        if actual != expected:
            logger.debug("CRC32 mismatch: expected 0x%08X, got 0x%08X", expected, actual)
            raise IntegrityError(expected, actual)

        return DecodeResult(
            plaintext=bytes_to_text(data),
            checksum_verified=True,
            format_version=self.name,
            checksum_expected=expected,
            checksum_actual=actual,
        )


@register_format
class LegacyFormat(WireFormat):
    name = "v1"
    description = "Bare symbol sequence without integrity protection (decode only)."

    @classmethod
    def matches(cls, length: int) -> bool:
        return length > 0 and length % SYMBOLS_PER_BYTE == 0

    def decode(self, ciphertext: str) -> DecodeResult:
        return DecodeResult(
            plaintext=bytes_to_text(symbols_to_bytes(ciphertext)),
            checksum_verified=False,
            format_version=self.name,
        )


def detect_format(ciphertext) -> FormatInfo:
    """Infer the wire format from the ciphertext length. Never raises."""
    if not isinstance(ciphertext, str) or not ciphertext:
        return FormatInfo(version="unknown", has_crc=False, is_valid=False)

    length = len(ciphertext)
    for fmt in FORMAT_REGISTRY.values():
        if fmt.matches(length):
            return fmt.info(length)

    return FormatInfo(version="unknown", has_crc=False, is_valid=False)


# ==========================================
#  CODEC: public entry point
# ==========================================

class OI1Codec:
    """
    Encoder/decoder for O0Il ciphertext.

    Holds no state besides its CRC32 engine, whose table is immutable; one
    instance may be shared freely between callers and threads.

    Example:
        codec = OI1Codec()
        cipher = codec.encode("Hi")
        codec.decode(cipher).plaintext  # "Hi"
    """

    def __init__(self, checksum: Optional[CRC32] = None):
        self.checksum = checksum if checksum is not None else CRC32()
        self.formats: Dict[str, WireFormat] = {
            name: fmt(self.checksum) for name, fmt in FORMAT_REGISTRY.items()
        }

    def encode(self, plaintext: str) -> str:
        """
        Encode text as a v2 ciphertext.

        Raises:
            EncodingError: input is not a string or has no UTF-8 form
        """
        if not isinstance(plaintext, str):
            raise EncodingError(f"Input must be a string, got {type(plaintext).__name__}")

        if not plaintext:
            return ""

        try:
            data = text_to_bytes(plaintext)
            return self.formats[CURRENT_FORMAT].encode(data)
        except UnicodeEncodeError as e:
            raise EncodingError(f"Error while encoding: {e}") from e

    def decode(self, ciphertext: str) -> DecodeResult:
        """
        Decode a v1 or v2 ciphertext.

        Raises:
            TypeError: input is not a string
            FormatError: length fits neither format
            ValidationError: character outside O0Il
            IntegrityError: v2 checksum mismatch
            DecodingError: recovered bytes are not valid UTF-8
        """
        if not isinstance(ciphertext, str):
            raise TypeError(f"Ciphertext must be a string, got {type(ciphertext).__name__}")

        if not ciphertext:
            return DecodeResult(plaintext="", checksum_verified=False, format_version="empty")

        info = self.detect_format(ciphertext)
        if not info.is_valid:
            raise FormatError(
                f"Unrecognised ciphertext format (length {len(ciphertext)} fits neither v1 nor v2)",
                length=len(ciphertext),
            )

        invalid = find_invalid_symbol(ciphertext)
        if invalid is not None:
            position, char = invalid
            raise ValidationError(
                f"Malformed ciphertext: invalid character '{char}' (position: {position})",
                character=char,
                position=position,
            )

        logger.debug("Decoding %d symbols as %s", len(ciphertext), info.version)
        result = self.formats[info.version].decode(ciphertext)
        logger.debug("Decoded %d characters (checksum verified: %s)",
                     len(result.plaintext), result.checksum_verified)
        return result

    def detect_format(self, ciphertext) -> FormatInfo:
        return detect_format(ciphertext)

    def validate_ciphertext(self, ciphertext) -> ValidationResult:
        return validate_alphabet(ciphertext)

    def assess_quality(self, ciphertext) -> QualityReport:
        return assess_quality(ciphertext)

    def get_encoding_stats(self, plaintext: str, ciphertext: str) -> EncodingStats:
        """Summarise lengths, ratios, checksum and symbol spread. Never raises."""
        if not isinstance(plaintext, str):
            logger.warning("Stats requested for non-string plaintext; treating it as empty")
            plaintext = ""
        if not isinstance(ciphertext, str):
            logger.warning("Stats requested for non-string ciphertext; treating it as empty")
            ciphertext = ""

        # surrogatepass keeps byte counts defined for lone surrogates
        original_bytes = len(plaintext.encode('utf-8', 'surrogatepass'))
        info = self.detect_format(ciphertext)

        checksum_symbols = None
        checksum = None
        if info.has_crc:
            checksum_symbols = ciphertext[-CHECKSUM_SYMBOLS:]
            try:
                checksum = self.checksum.from_symbols(checksum_symbols)
            except ValidationError as e:
                logger.debug("Checksum block not parseable: %s", e)

        return EncodingStats(
            original_length=len(plaintext),
            original_bytes=original_bytes,
            cipher_length=len(ciphertext),
            compression_ratio=len(ciphertext) / len(plaintext) if plaintext else None,
            bytes_ratio=len(ciphertext) / original_bytes if original_bytes else None,
            format_version=info.version,
            has_crc=info.has_crc,
            checksum_symbols=checksum_symbols,
            checksum=checksum,
            distribution=symbol_distribution(ciphertext),
        )

    def generate_encoding_trace(self, plaintext):
        from .trace import generate_encoding_trace
        return generate_encoding_trace(plaintext, codec=self)

    def generate_decoding_trace(self, ciphertext):
        from .trace import generate_decoding_trace
        return generate_decoding_trace(ciphertext, codec=self)
