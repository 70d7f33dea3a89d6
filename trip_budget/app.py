"""Application root: builds and owns one instance of each component."""
from __future__ import annotations

from typing import Optional

from trip_budget.budget.planner import BudgetPlanner
from trip_budget.config import Config
from trip_budget.currency.rates import RateProvider
from trip_budget.currency.sources.base import BaseRateSource
from trip_budget.currency.sources.exchangerate_api import ExchangeRateApiSource
from trip_budget.ledger.ledger import ExpenseLedger
from trip_budget.preferences import LanguagePreference
from trip_budget.storage.store import BaseStore, MemoryStore, create_store
from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)


class TripBudgetApp:
    """Wires store, rate provider, ledger, planner and preferences together.

    Consumers get the components from this object instead of importing
    module-level instances.
    """

    def __init__(
        self,
        store: Optional[BaseStore] = None,
        rate_source: Optional[BaseRateSource] = None,
        base_currency: str = "USD",
        default_target_currency: str = "SAR",
    ):
        self.store = store if store is not None else MemoryStore()
        self.rates = RateProvider(rate_source, base_currency=base_currency)
        self.ledger = ExpenseLedger(self.rates, self.store)
        self.planner = BudgetPlanner(self.ledger, self.store)
        self.preferences = LanguagePreference(self.store)
        self.default_target_currency = default_target_currency

    @classmethod
    def from_config(cls, config: Config) -> "TripBudgetApp":
        source = ExchangeRateApiSource(
            base_url=config.rates_url,
            timeout=config.rates_timeout,
            max_attempts=config.rates_max_attempts,
        )
        return cls(
            store=create_store(config.storage_url),
            rate_source=source,
            base_currency=config.base_currency,
            default_target_currency=config.default_target_currency,
        )

    async def start(self) -> bool:
        """Initial rate load; the fallback table stays active if it fails."""
        ok = await self.rates.load()
        logger.info(f"Trip budget app started (live rates: {ok})")
        return ok

    def close(self) -> None:
        self.planner.close()
        close_store = getattr(self.store, "close", None)
        if close_store is not None:
            close_store()
