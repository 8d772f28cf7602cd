import pytest

from codedict.registry.codes import normalize_code


@pytest.mark.parametrize(
    "value,expected",
    [
        (100, "100"),
        ("100", "100"),
        (" 100 ", "100"),
        ("100.0", "100"),
        (None, ""),
        ("", ""),
        ("  ", ""),
        ("100.5", "100.5"),
        ("abc", "abc"),
        ("nan", "nan"),
        ("007", "7"),
        ("0.00", "0"),
        ("1e3", "1e3"),
        ("1e5000", "1e5000"),
        ("1e999999999", "1e999999999"),
        ("-5", "-5"),
    ],
)
def test_normalize_code(value, expected):
    assert normalize_code(value) == expected


def test_long_digit_runs_are_not_converted_to_int():
    digits = "9" * 5000
    assert normalize_code(digits + ".0") == digits
