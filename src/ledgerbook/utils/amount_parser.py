"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

_CURRENCY = re.compile(r"(?i)\b(?:rp|idr|usd|eur)\.?|[$€£¥\s]")
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")
_DOT_GROUPS = re.compile(r"^[1-9]\d{0,2}(?:\.\d{3})+$")


def _normalize_separators(amount_str: str) -> str:
    """Turn grouping/decimal separators into plain ``1234.56`` form.

    When both separators appear the last one is the decimal mark, so
    "1.500.000,50" and "1,500,000.50" both read as 1500000.50. A lone comma
    followed by one or two digits is a decimal comma. Dots that split the
    digits into groups of three ("50.000") are thousands separators.
    """
    has_comma = "," in amount_str
    has_dot = "." in amount_str
    if has_comma and has_dot:
        if amount_str.rfind(",") > amount_str.rfind("."):
            return amount_str.replace(".", "").replace(",", ".")
        return amount_str.replace(",", "")
    if has_comma:
        if _DECIMAL_COMMA.match(amount_str):
            return amount_str.replace(",", ".")
        return amount_str.replace(",", "")
    if amount_str.count(".") > 1 or _DOT_GROUPS.match(amount_str):
        return amount_str.replace(".", "")
    return amount_str


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45", "(123.45)" (negative in parentheses)
    - "$1,234.56", "Rp 1.500.000", "1.500.000,00"

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    original = str(amount_str).strip()
    amount_str = original

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = _CURRENCY.sub("", amount_str)
    if amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:]
    amount_str = _normalize_separators(amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{original}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{original}'")
    return -amount if is_negative else amount


def parse_positive_amount(amount_str: str) -> Decimal:
    """Parse an amount that must be greater than zero.

    Raises:
        ValueError: If unparsable, zero or negative
    """
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got '{amount_str}'")
    return amount
