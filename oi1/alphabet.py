"""The O0Il symbol alphabet: each symbol stands for one 2-bit group."""

from typing import Dict, FrozenSet

BINARY_TO_SYMBOL: Dict[str, str] = {
    '00': 'O',  # capital O
    '01': '0',  # digit zero
    '10': 'I',  # capital I
    '11': 'l',  # lowercase L
}

SYMBOL_TO_BINARY: Dict[str, str] = {sym: bits for bits, sym in BINARY_TO_SYMBOL.items()}

VALID_SYMBOLS: FrozenSet[str] = frozenset(SYMBOL_TO_BINARY)

# Display order used for distributions and reports
SYMBOL_ORDER = ('O', '0', 'I', 'l')

SYMBOLS_PER_BYTE = 4
