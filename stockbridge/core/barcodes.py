"""Barcode shape helpers.

The scanner hands us a decoded string; we never see the symbology it came
from. These helpers only clean the value, reject strings no supported
symbology (EAN-13, EAN-8, UPC-A, UPC-E, Code-128) could have produced, and
offer an informational guess of the shape for display.
"""

from __future__ import annotations

from typing import Optional

from stockbridge.core.errors import InvalidInput

__all__ = ["clean_barcode", "validate_barcode", "symbology", "is_gtin", "gtin_check_digit_ok"]

_NUMERIC_SHAPES = {
    6: "UPC-E",
    8: "EAN-8",
    12: "UPC-A",
    13: "EAN-13",
}


def clean_barcode(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _is_printable_ascii(value: str) -> bool:
    return all(32 <= ord(ch) < 127 for ch in value)


def validate_barcode(value: Optional[str]) -> str:
    """Return the cleaned barcode or raise InvalidInput."""
    cleaned = clean_barcode(value)
    if not cleaned:
        raise InvalidInput("Barcode is empty")
    # Code-128 is the widest symbology we accept and it only encodes ASCII
    if not _is_printable_ascii(cleaned):
        raise InvalidInput(f"Barcode contains unsupported characters: {cleaned!r}")
    return cleaned


def symbology(value: str) -> Optional[str]:
    cleaned = clean_barcode(value)
    if not cleaned or not _is_printable_ascii(cleaned):
        return None
    if cleaned.isdigit() and len(cleaned) in _NUMERIC_SHAPES:
        return _NUMERIC_SHAPES[len(cleaned)]
    return "CODE-128"


def is_gtin(value: str) -> bool:
    digits = clean_barcode(value)
    return digits.isdigit() and len(digits) in (8, 12, 13, 14)


def gtin_check_digit_ok(value: str) -> bool:
    """GS1 mod-10 check for GTIN-8/12/13/14 strings."""
    if not is_gtin(value):
        return False
    digits = clean_barcode(value)

    body, check = digits[:-1], int(digits[-1])
    total = 0
    # weights alternate 3,1,... starting from the digit next to the check digit
    for i, ch in enumerate(reversed(body)):
        total += int(ch) * (3 if i % 2 == 0 else 1)
    return (10 - total % 10) % 10 == check
