from decimal import Decimal
from enum import Enum


class Currency(str, Enum):
    RUB = "RUB"
    USD = "USD"
    EUR = "EUR"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


_SYMBOLS = {
    Currency.RUB: "₽",
    Currency.USD: "$",
    Currency.EUR: "€",
}

_FULL_NAMES = {
    Currency.RUB: "Russian ruble ₽",
    Currency.USD: "US dollar $",
    Currency.EUR: "Euro €",
}


def symbol_for(code: str) -> str:
    """Return the display symbol for an ISO code, '' for unknown codes."""
    try:
        return Currency(code).symbol
    except ValueError:
        return ""


def format_currency(amount: Decimal, symbol: str = "") -> str:
    """Format a Decimal as currency string, e.g. '1,234.56 ₽'."""
    text = f"{amount:,.2f}"
    return f"{text} {symbol}" if symbol else text



def decimal_to_wire(amount: Decimal) -> str:
    """Plain decimal string for the API, never exponent notation."""
    return format(amount, "f")
