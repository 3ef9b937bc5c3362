import re

import pytest

from oi1.validator import (
    assess_quality,
    find_invalid_symbol,
    has_obvious_patterns,
    symbol_distribution,
    validate_alphabet,
)


@pytest.mark.unit
def test_validate_alphabet_accepts_symbols():
    result = validate_alphabet("O0Il")
    assert result.is_valid is True
    assert result.error is None


@pytest.mark.unit
def test_validate_alphabet_reports_first_offender():
    result = validate_alphabet("0OIOX")
    assert result.is_valid is False
    assert re.search(r"X.*position: 5", result.error)

    result = validate_alphabet("o0Il1")
    assert "'o'" in result.error
    assert "position: 1" in result.error


@pytest.mark.unit
def test_validate_alphabet_empty_and_non_string():
    assert validate_alphabet("").error == "ciphertext must not be empty"
    assert validate_alphabet(None).is_valid is False
    assert validate_alphabet(123).error == "ciphertext must be a string"


@pytest.mark.unit
def test_find_invalid_symbol():
    assert find_invalid_symbol("O0Il") is None
    assert find_invalid_symbol("O0 Il") == (3, " ")


@pytest.mark.unit
def test_symbol_distribution_rounds_to_one_decimal():
    dist = symbol_distribution("OOI")
    assert dist.counts == {"O": 2, "0": 0, "I": 1, "l": 0}
    assert dist.percentages["O"] == 66.7
    assert dist.percentages["I"] == 33.3
    assert dist.total == 3


@pytest.mark.unit
def test_symbol_distribution_empty():
    dist = symbol_distribution("")
    assert dist.total == 0
    assert set(dist.percentages.values()) == {0.0}


@pytest.mark.unit
@pytest.mark.parametrize(
    "text,expected",
    [
        ("OOOO", True),
        ("O0IlO0Il", False),
        ("O0O0O0O0", True),
        ("O0Il0OlI", False),
        ("", False),
    ],
)
def test_has_obvious_patterns(text, expected):
    assert has_obvious_patterns(text) is expected


@pytest.mark.unit
def test_alternation_does_not_wrap_around():
    # Positions 2..len-2 are compared with i - 2
    assert has_obvious_patterns("IOI") is False
    assert has_obvious_patterns("O0IlIO") is False


@pytest.mark.unit
def test_alternation_skips_last_symbol():
    # "OIOI" alternates at 2 only, 1 > 1.2 fails; "IOIOI" at 2 and 3
    assert has_obvious_patterns("OIOI") is False
    assert has_obvious_patterns("IOIOI") is True


@pytest.mark.unit
def test_quality_short_alternation_not_penalised_as_pattern():
    report = assess_quality("OIOI")
    assert report.quality == 70
    assert "Obvious repeating pattern" not in report.issues


@pytest.mark.unit
def test_quality_balanced_ciphertext_scores_full():
    report = assess_quality("O0IlO0Il")
    assert report.quality == 100
    assert report.issues == []
    assert report.distribution.total == 8


@pytest.mark.unit
def test_quality_all_deductions():
    # variance 1875, length 4, run of four
    report = assess_quality("OOOO")
    assert report.quality == 55
    assert len(report.issues) == 3


@pytest.mark.unit
def test_quality_alternating_pattern():
    # variance 625 (-20) and alternation (-15)
    report = assess_quality("O0O0O0O0")
    assert report.quality == 65
    assert "Obvious repeating pattern" in report.issues


@pytest.mark.unit
def test_quality_invalid_input():
    report = assess_quality("0OIOX")
    assert report.quality == 0
    assert len(report.issues) == 1
    assert "position: 5" in report.issues[0]
    assert report.recommendations
