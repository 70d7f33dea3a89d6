"""Rate source base class and data contract."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict

from trip_budget.utils.errors import RateFetchFailed


@dataclass
class RateSnapshot:
    """Full rate table as returned by a source.

    ``rates`` maps currency code to units of that currency per 1 ``base``.
    """

    base: str
    rates: Dict[str, Decimal]
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> None:
        if not self.rates:
            raise RateFetchFailed("Rate table is empty")
        for code, rate in self.rates.items():
            if not isinstance(code, str) or len(code) != 3:
                raise RateFetchFailed(f"Invalid currency code in rate table: {code!r}")
            if not rate.is_finite() or rate <= 0:
                raise RateFetchFailed(f"Invalid rate for {code}: {rate}")


class BaseRateSource(ABC):
    """Abstract base class for exchange rate sources."""

    NAME: str = "base"

    @abstractmethod
    async def fetch_latest(self, base: str) -> RateSnapshot:
        """Fetch the latest table quoted against ``base``.

        Raises:
            RateFetchFailed: on any transport or parse failure
        """
