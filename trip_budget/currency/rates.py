"""Exchange rate table and conversion service."""
from __future__ import annotations

import asyncio
import warnings
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from trip_budget.currency.sources.base import BaseRateSource
from trip_budget.observable import Observer, StateCell, Subscription
from trip_budget.utils.errors import ConversionDegraded
from trip_budget.utils.logging import get_logger
from trip_budget.utils.money import Number, round_money, to_decimal
from trip_budget.utils.validation import validate_currency_code

logger = get_logger(__name__)

# Units per 1 USD, used until a live table arrives and for codes the live table lacks
FALLBACK_RATES: Mapping[str, Decimal] = MappingProxyType({
    code: Decimal(value) for code, value in {
        "SAR": "3.75", "AED": "3.67", "EUR": "0.85", "GBP": "0.73", "JPY": "110",
        "CAD": "1.25", "AUD": "1.35", "CHF": "0.92", "CNY": "6.45", "INR": "74.5",
        "KWD": "0.30", "QAR": "3.64", "OMR": "0.38", "BHD": "0.38", "JOD": "0.71",
        "EGP": "30.9", "LBP": "1507", "SEK": "8.5", "NOK": "8.2", "DKK": "6.3",
        "PLN": "3.9", "CZK": "21.5", "HUF": "295", "RUB": "74", "TRY": "8.5",
        "ZAR": "14.8", "BRL": "5.2", "MXN": "17.1", "NZD": "1.4", "SGD": "1.35",
        "HKD": "7.8", "THB": "31.2", "MYR": "4.15", "KRW": "1180",
    }.items()
})

FALLBACK_BASE = "USD"


@dataclass(frozen=True)
class ExchangeRateTable:
    """Immutable rate table; a refresh replaces the whole object."""

    base: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)
    last_updated: Optional[datetime] = None
    source: str = "fallback"  # "live" | "fallback"

    def __post_init__(self):
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_for(self, code: str) -> Optional[Decimal]:
        if code == self.base:
            return Decimal(1)
        return self.rates.get(code)


def fallback_table(base: str = FALLBACK_BASE) -> ExchangeRateTable:
    return ExchangeRateTable(base=base, rates=FALLBACK_RATES, last_updated=None, source="fallback")


class RateProvider:
    """Holds the current rate table and converts amounts through the base currency.

    The table starts as the bundled fallback so conversion never blocks on
    the network. ``load`` and ``refresh`` swap in a live table on success.
    """

    def __init__(self, source: Optional[BaseRateSource] = None, base_currency: str = FALLBACK_BASE):
        self.source = source
        self.base_currency = validate_currency_code(base_currency)
        self._cell: StateCell[ExchangeRateTable] = StateCell(fallback_table(self.base_currency), name="rates")
        self._inflight: Optional[asyncio.Task] = None
        self._degraded_codes: set = set()

    @property
    def table(self) -> ExchangeRateTable:
        return self._cell.value

    @property
    def last_updated(self) -> Optional[datetime]:
        return self.table.last_updated

    def current_rates(self) -> Dict[str, Decimal]:
        return dict(self.table.rates)

    def subscribe(self, observer: Observer, emit_current: bool = False) -> Subscription:
        return self._cell.subscribe(observer, emit_current=emit_current)

    def set_table(self, table: ExchangeRateTable) -> None:
        """Install a table wholesale and notify observers."""
        self._degraded_codes.clear()
        self._cell.set(table)

    async def load(self) -> bool:
        """Initial load. On failure the fallback table stays active without raising."""
        ok = await self.refresh()
        if not ok:
            logger.warning("Initial rate load failed; using bundled fallback rates")
        return ok

    async def refresh(self) -> bool:
        """Fetch a fresh table. Returns False and keeps the current table on any failure.

        Concurrent callers share one in-flight fetch.
        """
        if self.source is None:
            logger.warning("No rate source configured; keeping current table")
            return False
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._fetch_and_apply())
        return await asyncio.shield(self._inflight)

    async def _fetch_and_apply(self) -> bool:
        started_with = self.table
        try:
            snapshot = await self.source.fetch_latest(self.base_currency)
        except Exception as e:
            logger.warning(
                f"Rate refresh failed, keeping previous table: {e}",
                extra={"source": getattr(self.source, "NAME", "unknown"), "error": str(e)},
            )
            return False

        if self.table is not started_with:
            logger.info("Rate table changed while fetching; discarding fetched result")
            return False

        self.set_table(ExchangeRateTable(
            base=snapshot.base,
            rates=snapshot.rates,
            last_updated=snapshot.date,
            source="live",
        ))
        logger.info(
            f"Rate table updated with {len(snapshot.rates)} rates",
            extra={"source": getattr(self.source, "NAME", "unknown")},
        )
        return True

    def rate(self, code: str) -> Decimal:
        """Units of ``code`` per 1 base; live, then fallback, then 1 (degraded)."""
        code = code.upper()
        table = self.table
        value = table.rate_for(code)
        if value is None and table.base == FALLBACK_BASE:
            value = FALLBACK_RATES.get(code)
        if value is None or value <= 0:
            self._warn_degraded(code)
            return Decimal(1)
        return value

    def convert(self, amount: Number, from_code: str, to_code: str) -> Decimal:
        """Convert ``amount`` via the base currency.

        Same currency or a zero amount returns the amount unchanged, without
        rounding. Anything else is rounded to 2 places, half up.
        """
        value = to_decimal(amount)
        from_code, to_code = from_code.upper(), to_code.upper()
        if from_code == to_code or value == 0:
            return value

        converted = value
        if from_code != self.table.base:
            converted = converted / self.rate(from_code)
        if to_code != self.table.base:
            converted = converted * self.rate(to_code)
        return round_money(converted)

    def exchange_rate(self, from_code: str, to_code: str) -> Decimal:
        return self.convert(1, from_code, to_code)

    def _warn_degraded(self, code: str) -> None:
        if code in self._degraded_codes:
            return
        self._degraded_codes.add(code)
        message = f"No exchange rate for {code}; converting with rate 1"
        logger.warning(message, extra={"currency": code})
        warnings.warn(message, ConversionDegraded, stacklevel=3)
