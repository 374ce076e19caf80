"""Supported display currencies and price formatting."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


CURRENCIES = [
    Currency("USD", "$", "US Dollar"),
    Currency("NGN", "₦", "Nigerian Naira"),
    Currency("EUR", "€", "Euro"),
    Currency("GBP", "£", "British Pound"),
    Currency("CAD", "C$", "Canadian Dollar"),
    Currency("AUD", "A$", "Australian Dollar"),
    Currency("ZAR", "R", "South African Rand"),
    Currency("KES", "KSh", "Kenyan Shilling"),
    Currency("GHS", "₵", "Ghanaian Cedi"),
]

DEFAULT_CURRENCY = CURRENCIES[0]


def find_currency(code):
    """Look up a currency by ISO code (case-insensitive), or None."""
    code = (code or "").upper()
    for c in CURRENCIES:
        if c.code == code:
            return c
    return None


def format_price(amount, symbol="$"):
    """'$3.50' style: symbol followed by the amount with two decimals."""
    return f"{symbol}{amount:.2f}"
