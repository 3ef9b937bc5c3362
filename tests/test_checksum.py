import zlib

import pytest

from oi1.checksum import CHECKSUM_SYMBOLS, CRC32, CRC32_POLYNOMIAL, build_table
from oi1.errors import LengthError, ValidationError


@pytest.mark.unit
def test_build_table_shape_and_known_entries(crc_table):
    assert len(crc_table) == 256
    assert isinstance(crc_table, tuple)
    assert crc_table[0] == 0
    assert crc_table[1] == 0x77073096
    assert crc_table[128] == CRC32_POLYNOMIAL
    assert crc_table[255] == 0x2D02EF8D
    assert all(0 <= entry <= 0xFFFFFFFF for entry in crc_table)


@pytest.mark.unit
def test_build_table_is_deterministic():
    assert build_table() == build_table()


@pytest.mark.unit
def test_calculate_check_value(crc):
    # Standard CRC-32 check value
    assert crc.calculate(b"123456789") == 0xCBF43926
    assert crc.calculate(b"") == 0


@pytest.mark.unit
@pytest.mark.parametrize(
    "data",
    [
        b"Hi",
        b"\x00",
        b"\xff\xff\xff\xff",
        "你好，世界".encode("utf-8"),
        bytes(range(256)),
    ],
)
def test_calculate_matches_zlib(crc, data):
    assert crc.calculate(data) == zlib.crc32(data) & 0xFFFFFFFF


@pytest.mark.unit
def test_to_symbols_layout(crc):
    # CB F4 39 26 -> 11001011 11110100 00111001 00100110
    assert crc.to_symbols(0xCBF43926) == "lOIlll0OOlI0OI0I"
    assert crc.to_symbols(0) == "O" * CHECKSUM_SYMBOLS
    assert crc.to_symbols(0xFFFFFFFF) == "l" * CHECKSUM_SYMBOLS


@pytest.mark.unit
@pytest.mark.parametrize("value", [0, 1, 0xCBF43926, 0x80000000, 0xFFFFFFFF])
def test_from_symbols_inverts_to_symbols(crc, value):
    assert crc.from_symbols(crc.to_symbols(value)) == value


@pytest.mark.unit
@pytest.mark.parametrize("block", ["", "O" * 15, "O" * 17])
def test_from_symbols_rejects_wrong_length(crc, block):
    with pytest.raises(LengthError) as excinfo:
        crc.from_symbols(block)
    assert excinfo.value.length == len(block)


@pytest.mark.unit
def test_from_symbols_rejects_foreign_character(crc):
    block = "OOOOOOOOOOOOOOXO"
    with pytest.raises(ValidationError) as excinfo:
        crc.from_symbols(block)
    assert excinfo.value.character == "X"
    assert excinfo.value.position == 15


@pytest.mark.unit
def test_engine_rejects_truncated_table():
    with pytest.raises(ValueError):
        CRC32(tuple(range(10)))
