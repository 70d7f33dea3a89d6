"""Expense records and the ledger that owns them."""

from .ledger import ExpenseLedger
from .models import (
    EXPENSE_CATEGORIES,
    CategoryInfo,
    Expense,
    ExpenseCategory,
    ExpenseStatistics,
    category_info,
)

__all__ = [
    "ExpenseLedger",
    "EXPENSE_CATEGORIES",
    "CategoryInfo",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatistics",
    "category_info",
]
