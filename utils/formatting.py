"""
Formatting utilities.

All display formatting for composed documents goes through this module so
both the FAAS sheet and the Tax Declaration round and print values the
same way. Aggregation keeps full precision; rounding happens here only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[int, float]

CURRENCY_SYMBOLS = {
    "PHP": "₱",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}

_ONES = (
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
)
_TENS = (
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
)
_SCALES = ("", "Thousand", "Million", "Billion", "Trillion", "Quadrillion", "Quintillion")

_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%m/%d/%Y")


def _quantize(value: Number, decimals: int) -> Decimal:
    """Round half-up on the decimal representation, not the binary one."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = Decimal(0)
    if not amount.is_finite():
        amount = Decimal(0)
    exponent = Decimal(1).scaleb(-decimals)
    return amount.quantize(exponent, rounding=ROUND_HALF_UP)


def format_amount(value: Number, decimals: int = 2, blank_zero: bool = True) -> str:
    """
    Format a monetary amount with thousands separators.

    Args:
        value: The amount.
        decimals: Number of decimal places.
        blank_zero: Render zero (the default for absent values) as an empty cell.

    Returns:
        Formatted amount, e.g. "1,234.50".
    """
    rounded = _quantize(value, decimals)
    if blank_zero and rounded == 0:
        return ""
    return f"{rounded:,.{decimals}f}"


def format_currency(amount: Number, currency: str = "PHP", decimals: int = 2) -> str:
    """
    Format an amount as currency.

    Args:
        amount: The amount in whole units (pesos, not centavos).
        currency: Currency code (default PHP).
        decimals: Number of decimal places.

    Returns:
        Formatted currency string.
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    return f"{symbol}{format_amount(amount, decimals, blank_zero=False)}"


def format_percent(value: Number, decimals: int = 2, blank_zero: bool = False) -> str:
    """
    Format a number as a percentage, dropping trailing zeros.

    Args:
        value: The percentage value (20 means 20%).
        decimals: Maximum number of decimal places.
        blank_zero: Render zero as an empty string.

    Returns:
        Formatted percentage string, e.g. "20%" or "12.5%".
    """
    rounded = _quantize(value, decimals)
    if blank_zero and rounded == 0:
        return ""
    text = f"{rounded:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


def format_quantity(value: Number, blank_zero: bool = True) -> str:
    """Format a count or area, without decimals when the value is whole."""
    rounded = _quantize(value, 4)
    if blank_zero and rounded == 0:
        return ""
    if rounded == rounded.to_integral_value():
        return f"{int(rounded):,}"
    text = f"{rounded:,.4f}".rstrip("0").rstrip(".")
    return text


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO-like date string. Returns None when it cannot be parsed."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Union[str, date, None], date_format: str = "") -> str:
    """
    Format a date for the form.

    Empty input yields "". Unparsable input is returned unchanged so the
    assessor still sees what the record holds.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    if date_format:
        return parsed.strftime(date_format)
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def effectivity_quarter(value: Union[str, date, None]) -> str:
    """Calendar quarter (1-4) of an effectivity date, or "" when unknown."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return str((parsed.month - 1) // 3 + 1)


def effectivity_year(value: Union[str, date, None]) -> str:
    """Year of an effectivity date, or "" when unknown."""
    parsed = parse_date(value)
    if parsed is None:
        return ""
    return str(parsed.year)


def _words_below_thousand(number: int) -> str:
    hundreds, rest = divmod(number, 100)
    parts = []
    if hundreds:
        parts.append(f"{_ONES[hundreds]} Hundred")
    if rest:
        if rest < 20:
            parts.append(_ONES[rest])
        else:
            tens, ones = divmod(rest, 10)
            parts.append(_TENS[tens] + (f"-{_ONES[ones]}" if ones else ""))
    return " ".join(parts)


def number_to_words(number: int) -> str:
    """
    Spell out a non-negative whole number using the short scale.

    Numbers past the largest named scale come back as plain digits.
    """
    if number <= 0:
        return "Zero"
    if number >= 1000 ** len(_SCALES):
        return str(number)
    groups = []
    scale = 0
    while number:
        number, chunk = divmod(number, 1000)
        if chunk:
            words = _words_below_thousand(chunk)
            groups.append(f"{words} {_SCALES[scale]}".strip())
        scale += 1
    return " ".join(reversed(groups))


def amount_in_words(value: Number, unit: str = "Pesos", blank_zero: bool = True) -> str:
    """
    Spell out an amount for the "Total Assessed Value (Amount in Words)" line.

    Centavos are written as a fraction of 100, e.g.
    1234.5 -> "One Thousand Two Hundred Thirty-Four Pesos and 50/100".
    """
    rounded = _quantize(abs(value), 2)
    if blank_zero and rounded == 0:
        return ""
    whole = int(rounded)
    cents = int((rounded - whole) * 100)
    text = f"{number_to_words(whole)} {unit}"
    if cents:
        text += f" and {cents:02d}/100"
    return text


@dataclass(frozen=True)
class Formatter:
    """
    Stateless formatter injected into document composition.

    Bundles the module functions with the currency and date format taken
    from configuration, so every template formats values identically.
    """

    currency: str = "PHP"
    date_format: str = ""

    def amount(self, value: Number) -> str:
        return format_amount(value)

    def currency_amount(self, value: Number) -> str:
        return format_currency(value, self.currency)

    def percent(self, value: Number) -> str:
        return format_percent(value, blank_zero=True)

    def quantity(self, value: Number) -> str:
        return format_quantity(value)

    def date(self, value: Union[str, date, None]) -> str:
        return format_date(value, self.date_format)

    def quarter(self, value: Union[str, date, None]) -> str:
        return effectivity_quarter(value)

    def year(self, value: Union[str, date, None]) -> str:
        return effectivity_year(value)

    def words(self, value: Number) -> str:
        return amount_in_words(value)
