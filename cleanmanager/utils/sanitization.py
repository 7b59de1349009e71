import html
import re
from typing import Any, Optional

CURRENCY_SYMBOLS = {"GBP": "£", "EUR": "€", "USD": "$"}


def escape_text(value: Any) -> str:
    """
    Escape HTML special characters so customer-supplied values can be
    interpolated into email markup. None becomes an empty string.
    """
    if value is None:
        return ""
    cleaned = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", str(value))
    return html.escape(cleaned, quote=True)


def format_money(amount: Optional[float], currency: Optional[str] = "GBP") -> str:
    """£1,234.50 style amounts; unknown currencies get their code as prefix"""
    code = (currency or "GBP").upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{symbol}{float(amount or 0):,.2f}"
