"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

ORE = Decimal("0.01")
KRONA = Decimal("1")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles Swedish and plain formats:
    - "1234.56"
    - "1234,56"
    - "1 234,56 kr"
    - "-1 234,56"
    - "1.234,56" / "1,234.56" (the last separator is the decimal one)
    - "(123,45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    # Currency markers and thousands spacing (including non-breaking spaces)
    text = re.sub(r"(?i)kr\.?|sek|:-", "", text)
    text = re.sub(r"[\s ]", "", text)

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    else:
        text = text.replace(",", ".")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def round_krona(value: Decimal) -> Decimal:
    """Round to whole kronor, half-up."""
    return Decimal(value).quantize(KRONA, rounding=ROUND_HALF_UP)


def round_ore(value: Decimal) -> Decimal:
    """Round to öre (two decimals), half-up."""
    return Decimal(value).quantize(ORE, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal, decimals: int = 2) -> str:
    """Format an amount the Swedish way, e.g. ``1 234,56``."""
    text = f"{value:,.{decimals}f}"
    return text.replace(",", " ").replace(".", ",")
