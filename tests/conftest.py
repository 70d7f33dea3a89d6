"""Pytest configuration and fixtures."""
import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from trip_budget.budget.planner import BudgetPlanner
from trip_budget.currency.rates import RateProvider
from trip_budget.currency.sources.base import BaseRateSource, RateSnapshot
from trip_budget.ledger.ledger import ExpenseLedger
from trip_budget.storage.store import MemoryStore
from trip_budget.utils.errors import RateFetchFailed


class StaticRateSource(BaseRateSource):
    """Rate source double returning a fixed table, or failing on demand."""

    NAME = "static"

    def __init__(self, rates=None, date=None, fail: bool = False):
        self.rates = {k: Decimal(str(v)) for k, v in (rates or {"SAR": "3.75", "EUR": "0.9"}).items()}
        self.date = date or datetime(2026, 10, 1, tzinfo=timezone.utc)
        self.fail = fail
        self.calls = 0

    async def fetch_latest(self, base: str) -> RateSnapshot:
        self.calls += 1
        if self.fail:
            raise RateFetchFailed("network down")
        return RateSnapshot(base=base, rates=dict(self.rates), date=self.date)


@pytest.fixture
def temp_config_file():
    """Create a temporary config file for testing."""
    config_data = {
        'app': {
            'name': 'Test App',
            'version': '0.1.0',
            'debug': True
        },
        'rates': {
            'base_currency': 'USD',
            'url': 'https://rates.test/v4/latest',
            'timeout': 5,
        },
        'storage': {
            'url': 'memory'
        },
        'budget': {
            'default_target_currency': 'SAR'
        },
        'logging': {
            'level': 'DEBUG',
            'format': 'text'
        }
    }

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config_data, f)
        config_path = f.name

    yield config_path

    Path(config_path).unlink()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def rates():
    """Provider on the bundled fallback table (USD base, SAR 3.75, EUR 0.85)."""
    return RateProvider(source=None, base_currency="USD")


@pytest.fixture
def ledger(rates, store):
    return ExpenseLedger(rates, store)


@pytest.fixture
def planner(ledger, store):
    p = BudgetPlanner(ledger, store)
    yield p
    p.close()


@pytest.fixture
def static_source():
    """Factory for ``StaticRateSource`` doubles."""
    return StaticRateSource
