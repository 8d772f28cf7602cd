from __future__ import annotations

import re

_INTEGRAL = re.compile(r"([0-9]+)(?:\.0*)?")


def normalize_code(value: object) -> str:
    """Canonical string form of an identifier cell.

    Integers and integral decimals collapse to plain digits (``100``,
    ``"100"``, ``" 100 "`` and ``"100.0"`` all become ``"100"``), so a code
    stored by a spreadsheet round-trip still matches the provider's integer.
    Anything else, exponent notation included, is returned stripped.
    ``None`` becomes ``""``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    match = _INTEGRAL.fullmatch(text)
    if match is None:
        return text
    return match.group(1).lstrip("0") or "0"


__all__ = ["normalize_code"]
