"""Rate source factory and exports."""

from .base import BaseRateSource, RateSnapshot
from .exchangerate_api import ExchangeRateApiSource


def get_source(name: str, **kwargs) -> BaseRateSource:
    """Get a rate source by canonical name ("exchangerate_api")."""
    if name == ExchangeRateApiSource.NAME:
        return ExchangeRateApiSource(**kwargs)
    raise ValueError(f"Unknown rate source: {name}")


__all__ = [
    "BaseRateSource",
    "RateSnapshot",
    "ExchangeRateApiSource",
    "get_source",
]
