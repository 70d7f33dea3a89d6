"""Durable key-value storage."""

from .store import (
    BUDGET_PLAN_KEY,
    EXPENSES_KEY,
    LANGUAGE_KEY,
    TRIP_BUDGET_KEY,
    BaseStore,
    MemoryStore,
    SqlStore,
    create_store,
)

__all__ = [
    "BaseStore",
    "MemoryStore",
    "SqlStore",
    "create_store",
    "EXPENSES_KEY",
    "BUDGET_PLAN_KEY",
    "TRIP_BUDGET_KEY",
    "LANGUAGE_KEY",
]
