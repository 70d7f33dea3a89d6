"""Expense data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from trip_budget.utils.errors import ValidationError
from trip_budget.utils.money import to_decimal


class ExpenseCategory(str, Enum):
    FLIGHTS = "flights"
    ACCOMMODATION = "accommodation"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "ExpenseCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = [c.value for c in cls]
            raise ValidationError(f"Invalid category: {value!r}. Must be one of {valid}")


@dataclass(frozen=True)
class CategoryInfo:
    key: ExpenseCategory
    name_en: str
    name_ar: str
    icon: str
    color: str


EXPENSE_CATEGORIES: List[CategoryInfo] = [
    CategoryInfo(ExpenseCategory.FLIGHTS, "Flights", "طيران", "✈️", "#3B82F6"),
    CategoryInfo(ExpenseCategory.ACCOMMODATION, "Accommodation", "إقامة", "🏨", "#8B5CF6"),
    CategoryInfo(ExpenseCategory.FOOD, "Food & Dining", "طعام وشراب", "🍽️", "#EF4444"),
    CategoryInfo(ExpenseCategory.TRANSPORTATION, "Transportation", "مواصلات", "🚗", "#10B981"),
    CategoryInfo(ExpenseCategory.ENTERTAINMENT, "Entertainment", "ترفيه", "🎭", "#F59E0B"),
    CategoryInfo(ExpenseCategory.SHOPPING, "Shopping", "تسوق", "🛍️", "#EC4899"),
    CategoryInfo(ExpenseCategory.OTHER, "Other", "أخرى", "📋", "#6B7280"),
]


def category_info(category) -> Optional[CategoryInfo]:
    key = ExpenseCategory.parse(category)
    return next((info for info in EXPENSE_CATEGORIES if info.key == key), None)


def parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        # Accept the trailing "Z" JavaScript clients write
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"Invalid timestamp: {value!r}")


@dataclass(frozen=True)
class Expense:
    """A single expected trip expense.

    ``id`` and ``created_at`` never change after creation; updates produce a
    new ``Expense`` with the same identity.
    """

    id: str
    name: str
    amount: Decimal
    currency: str
    category: ExpenseCategory
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "currency": self.currency,
            "category": self.category.value,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Build from a stored record. Raises ``ValueError``/``KeyError``/``ValidationError`` on bad input."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            amount=to_decimal(data["amount"]),
            currency=str(data["currency"]).upper(),
            category=ExpenseCategory.parse(data["category"]),
            created_at=parse_timestamp(data["createdAt"]),
        )


@dataclass
class ExpenseStatistics:
    total_expenses: Decimal = Decimal("0")
    average_expense: Decimal = Decimal("0")
    count: int = 0
    top_category: str = ""  # most frequent category, "" when empty
    most_used_currency: str = ""
