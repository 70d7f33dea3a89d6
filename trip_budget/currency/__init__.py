"""Currency directory, rate sources and conversion."""

from .directory import (
    CURRENCIES,
    Currency,
    currency_name,
    currency_symbol,
    find_currency,
    format_amount,
    format_number,
    list_currencies,
    popular_currencies,
    search_currencies,
)
from .rates import FALLBACK_RATES, ExchangeRateTable, RateProvider, fallback_table

__all__ = [
    "CURRENCIES",
    "Currency",
    "currency_name",
    "currency_symbol",
    "find_currency",
    "format_amount",
    "format_number",
    "list_currencies",
    "popular_currencies",
    "search_currencies",
    "FALLBACK_RATES",
    "ExchangeRateTable",
    "RateProvider",
    "fallback_table",
]
