"""ExchangeRate-API (v4 "latest" endpoint) source."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import httpx

from trip_budget.currency.sources.base import BaseRateSource, RateSnapshot
from trip_budget.utils.decorators import log_execution, retry
from trip_budget.utils.errors import RateFetchFailed
from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_URL = "https://api.exchangerate-api.com/v4/latest"


class ExchangeRateApiSource(BaseRateSource):
    """GET ``{base_url}/{base}`` returning ``{"rates": {...}, "date": "YYYY-MM-DD"}``."""

    NAME = "exchangerate_api"

    def __init__(self, base_url: str = DEFAULT_URL, timeout: float = 10.0, max_attempts: int = 2) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)
        self.max_attempts = max(1, int(max_attempts))

    async def fetch_latest(self, base: str) -> RateSnapshot:
        fetch = retry(max_attempts=self.max_attempts, exceptions=(httpx.HTTPError,))(self._get)
        try:
            data = await fetch(base)
        except httpx.HTTPError as e:
            raise RateFetchFailed(f"Rate request failed: {e}")
        return self._parse(base, data)

    @log_execution
    async def _get(self, base: str) -> dict:
        url = f"{self.base_url}/{base}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError as e:
                raise RateFetchFailed(f"Rate response is not JSON: {e}")

    def _parse(self, base: str, data) -> RateSnapshot:
        if not isinstance(data, dict):
            raise RateFetchFailed("Rate response is not an object")

        raw_rates = data.get("rates")
        if not isinstance(raw_rates, dict):
            raise RateFetchFailed("Rate response has no 'rates' mapping")

        rates = {}
        for code, value in raw_rates.items():
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                raise RateFetchFailed(f"Non-numeric rate for {code}: {value!r}")
            try:
                rates[str(code).upper()] = Decimal(str(value))
            except InvalidOperation:
                raise RateFetchFailed(f"Non-numeric rate for {code}: {value!r}")

        snapshot = RateSnapshot(base=base, rates=rates, date=self._parse_date(data.get("date")))
        snapshot.validate()
        logger.info(f"Fetched {len(rates)} rates against {base}", extra={"source": self.NAME})
        return snapshot

    @staticmethod
    def _parse_date(value) -> datetime:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, timezone.utc)
        if isinstance(value, str) and value:
            try:
                parsed = datetime.fromisoformat(value)
            except ValueError:
                logger.warning(f"Unparseable rate date {value!r}; using current time")
                return datetime.now(timezone.utc)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc)
