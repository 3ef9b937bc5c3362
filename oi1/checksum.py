"""
CRC-32 checksum engine for the v2 wire format.

Standard IEEE 802.3 CRC-32 (reflected polynomial 0xEDB88320, initial value
0xFFFFFFFF, final complement), so values agree with zlib.crc32 and every
other conventional CRC-32 tool.

On the wire a checksum is 16 symbols: the four big-endian bytes, each split
into four 2-bit groups, most significant group first.
"""

import logging
from typing import Iterable, Optional, Tuple

from .alphabet import BINARY_TO_SYMBOL, SYMBOL_TO_BINARY
from .errors import LengthError, ValidationError

logger = logging.getLogger(__name__)

CRC32_POLYNOMIAL = 0xEDB88320
CRC32_INITIAL = 0xFFFFFFFF
CHECKSUM_SYMBOLS = 16


def build_table(polynomial: int = CRC32_POLYNOMIAL) -> Tuple[int, ...]:
    """
    Precompute the 256-entry lookup table for a reflected CRC-32.

    Returns:
        Immutable tuple; safe to share between threads and codecs.
    """
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ polynomial
            else:
                crc >>= 1
        table.append(crc & 0xFFFFFFFF)
    return tuple(table)


class CRC32:
    """
    Table-driven CRC-32 calculator.

    The table is built once per engine (or passed in) and never mutated, so
    one engine can back any number of codecs and concurrent callers.
    """

    def __init__(self, table: Optional[Tuple[int, ...]] = None):
        if table is None:
            table = build_table()
        if len(table) != 256:
            raise ValueError(f"CRC32 table must have 256 entries, got {len(table)}")
        self.table = tuple(table)

    def calculate(self, data: Iterable[int]) -> int:
        """Return the unsigned 32-bit CRC of a byte sequence."""
        crc = CRC32_INITIAL
        table = self.table
        for byte in data:
            crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
        return (crc ^ 0xFFFFFFFF) & 0xFFFFFFFF

    def to_symbols(self, value: int) -> str:
        """Render a checksum as its 16-symbol wire form."""
        bits = f"{value & 0xFFFFFFFF:032b}"
        return "".join(BINARY_TO_SYMBOL[bits[i:i + 2]] for i in range(0, 32, 2))

    def from_symbols(self, symbols: str) -> int:
        """
        Parse a 16-symbol checksum block.

        Raises:
            LengthError: block is not exactly 16 symbols
            ValidationError: block contains a character outside O0Il
        """
        if len(symbols) != CHECKSUM_SYMBOLS:
            raise LengthError(
                f"CRC32 block must be {CHECKSUM_SYMBOLS} symbols long, got {len(symbols)}",
                length=len(symbols),
            )

        bits = []
        for position, char in enumerate(symbols, start=1):
            pair = SYMBOL_TO_BINARY.get(char)
            if pair is None:
                raise ValidationError(
                    f"invalid O0Il character '{char}' in CRC32 block (position: {position})",
                    character=char,
                    position=position,
                )
            bits.append(pair)

        value = int("".join(bits), 2)
        logger.debug("Parsed CRC32 block %s -> 0x%08X", symbols, value)
        return value
