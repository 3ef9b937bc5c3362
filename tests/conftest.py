"""
Shared pytest fixtures for the oi1 test suite.
"""

import pytest

from oi1.checksum import CRC32, build_table
from oi1.codec import OI1Codec


@pytest.fixture(scope="session")
def crc_table():
    """
    One CRC table for the whole run; it is immutable so sharing is safe.
    """
    return build_table()


@pytest.fixture
def crc(crc_table) -> CRC32:
    return CRC32(crc_table)


@pytest.fixture
def codec(crc) -> OI1Codec:
    return OI1Codec(crc)


@pytest.fixture
def sample_texts():
    """
    Plaintexts covering ASCII, CJK, astral-plane emoji and mixed content.
    """
    return [
        "H",
        "Hi",
        "Hello, world!",
        "你好，世界",
        "😀🎉",
        "mixed 中文 and emoji 🚀 text\nwith a newline\tand tab",
        "é́ combining",
        "a" * 300,
    ]
