"""
Text utilities for operator-typed numbers.

Used to turn raw form input into quantities and to render quantities
back into label text.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Optional


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a loosely typed number.

    - 12, 12.5, "12.5", " 7 ", Decimal("3") → Decimal
    - None, "", "abc", "NaN", True → None

    Args:
        value: Raw value from JSON, a form or a stored snapshot

    Returns:
        Decimal, or None when the value is unset or not a finite number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            number = Decimal(value)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def parse_whole_number(value: Any) -> Optional[int]:
    """
    Parse a loosely typed whole number.

    "12" and 12.0 parse; 12.5 and "abc" do not.

    Returns:
        int, or None when unset, not a number, or fractional
    """
    number = parse_decimal(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def truncate_decimal(value: Decimal, places: int) -> Decimal:
    """
    Cut (not round) a decimal to the given number of places.

    Raises:
        ValueError: The result needs more digits than the decimal context holds
    """
    try:
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)
    except InvalidOperation as e:
        raise ValueError(f"{value} has too many digits") from e


def sanitize_quantity_input(raw: Any, places: int = 1) -> Optional[Decimal]:
    """
    Clean a bucket quantity typed by the operator.

    Keeps digits and the first decimal point, drops everything else and
    truncates to `places` fractional digits:
    - "12.34" → 12.3
    - "1a2" → 12
    - "1.2.3" → 1.2
    - "", "." → None (unset)

    Args:
        raw: Raw input (string or number)
        places: Allowed fractional digits

    Returns:
        Non-negative Decimal, or None when nothing numeric remains
    """
    if raw is None:
        return None

    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        number = parse_decimal(raw)
        if number is None:
            return None
        raw = format(abs(number), "f")

    text = re.sub(r"[^0-9.]", "", str(raw))
    parts = text.split(".")
    if len(parts) > 2:
        text = parts[0] + "." + parts[1]

    if not re.search(r"\d", text):
        return None

    if text.startswith("."):
        text = "0" + text

    number = Decimal(text.rstrip(".") or "0")
    return truncate_decimal(number, places)


def sanitize_count_input(raw: Any) -> Optional[int]:
    """
    Clean a whole-number count typed by the operator.

    Digits only: "12 cases" → 12, "-3" → 3, "" → None.
    """
    if raw is None:
        return None

    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        number = parse_decimal(raw)
        if number is None:
            return None
        raw = format(abs(number).to_integral_value(rounding=ROUND_DOWN), "f")

    digits = re.sub(r"[^0-9]", "", str(raw))
    if not digits:
        return None
    return int(digits)


def format_quantity(value: Any) -> str:
    """
    Render a quantity without trailing zeros.

    - Decimal("15.0") → "15"
    - Decimal("10.5") → "10.5"
    - 96 → "96"
    """
    number = parse_decimal(value)
    if number is None:
        return ""

    if number == number.to_integral_value():
        return str(int(number))

    return format(number.normalize(), "f")
