"""
Ciphertext sanity checks and advisory quality scoring.

Nothing in here blocks encoding or decoding; the codec only uses the
alphabet check as a gate before it decodes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .alphabet import SYMBOL_ORDER, VALID_SYMBOLS

# Quality heuristics
BASE_QUALITY = 100
VARIANCE_THRESHOLD = 300
VARIANCE_PENALTY = 20
MIN_COMFORTABLE_LENGTH = 8
SHORT_LENGTH_PENALTY = 10
PATTERN_PENALTY = 15
REPEAT_RUN = 4
ALTERNATING_RATIO = 0.3


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SymbolDistribution:
    counts: Dict[str, int]
    percentages: Dict[str, float]
    total: int


@dataclass(frozen=True)
class QualityReport:
    quality: int
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    distribution: Optional[SymbolDistribution] = None


def find_invalid_symbol(text: str) -> Optional[Tuple[int, str]]:
    """Return (1-based position, character) of the first non-O0Il character."""
    for position, char in enumerate(text, start=1):
        if char not in VALID_SYMBOLS:
            return position, char
    return None


def validate_alphabet(ciphertext) -> ValidationResult:
    """
    Check that every character belongs to the O0Il alphabet.

    Only the first offending character is reported, with its 1-based
    position. Never raises.
    """
    if not isinstance(ciphertext, str):
        return ValidationResult(False, "ciphertext must be a string")
    if not ciphertext:
        return ValidationResult(False, "ciphertext must not be empty")

    invalid = find_invalid_symbol(ciphertext)
    if invalid is not None:
        position, char = invalid
        return ValidationResult(False, f"invalid character '{char}' (position: {position})")

    return ValidationResult(True)


def symbol_distribution(text: str) -> SymbolDistribution:
    """Count each O0Il symbol; characters outside the alphabet are ignored."""
    counts = {sym: 0 for sym in SYMBOL_ORDER}
    for char in text:
        if char in counts:
            counts[char] += 1

    total = len(text)
    percentages = {
        sym: (round(count / total * 100, 1) if total > 0 else 0.0)
        for sym, count in counts.items()
    }
    return SymbolDistribution(counts=counts, percentages=percentages, total=total)


def _variance(numbers: List[float]) -> float:
    mean = sum(numbers) / len(numbers)
    return sum((n - mean) ** 2 for n in numbers) / len(numbers)


def has_obvious_patterns(text: str) -> bool:
    """
    True for a run of four identical symbols, or when alternating pairs
    (x y x) cover more than 30% of the string. The last position is never
    an alternation candidate.
    """
    for i in range(len(text) - REPEAT_RUN + 1):
        if len(set(text[i:i + REPEAT_RUN])) == 1:
            return True

    alternating = 0
    for i in range(2, len(text) - 1):
        if text[i] == text[i - 2] and text[i] != text[i - 1]:
            alternating += 1

    return alternating > len(text) * ALTERNATING_RATIO


def assess_quality(ciphertext) -> QualityReport:
    """
    Score how "noisy" a ciphertext looks on a 0-100 scale.

    Deductions:
        -20 symbol percentages have variance above 300
        -10 fewer than 8 symbols
        -15 obvious repetition or alternation

    Advisory only. Never raises.
    """
    validation = validate_alphabet(ciphertext)
    if not validation.is_valid:
        return QualityReport(
            quality=0,
            issues=[validation.error],
            recommendations=["Check the ciphertext format"],
        )

    distribution = symbol_distribution(ciphertext)
    issues = []
    recommendations = []
    quality = BASE_QUALITY

    variance = _variance([distribution.percentages[sym] for sym in SYMBOL_ORDER])
    if variance > VARIANCE_THRESHOLD:
        quality -= VARIANCE_PENALTY
        issues.append("Uneven symbol distribution")
        recommendations.append("Mixed plaintext content spreads symbols more evenly")

    if len(ciphertext) < MIN_COMFORTABLE_LENGTH:
        quality -= SHORT_LENGTH_PENALTY
        issues.append("Ciphertext is short")

    if has_obvious_patterns(ciphertext):
        quality -= PATTERN_PENALTY
        issues.append("Obvious repeating pattern")
        recommendations.append("The plaintext may contain repeated content")

    return QualityReport(
        quality=max(0, quality),
        issues=issues,
        recommendations=recommendations,
        distribution=distribution,
    )
