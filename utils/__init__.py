"""
Utility modules for the document engine.
"""

from .formatting import (
    Formatter,
    amount_in_words,
    format_amount,
    format_currency,
    format_date,
    format_percent,
    format_quantity,
)
from .config import Config

__all__ = [
    "Formatter",
    "amount_in_words",
    "format_amount",
    "format_currency",
    "format_date",
    "format_percent",
    "format_quantity",
    "Config",
]
