"""Expense ledger: the set of expense records and their aggregates."""
from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from trip_budget.currency.rates import RateProvider
from trip_budget.ledger.models import Expense, ExpenseCategory, ExpenseStatistics, parse_timestamp
from trip_budget.observable import Observer, StateCell, Subscription
from trip_budget.storage.store import EXPENSES_KEY, BaseStore
from trip_budget.utils.errors import NotFoundError, PersistenceWriteFailed, ValidationError
from trip_budget.utils.logging import get_logger
from trip_budget.utils.money import ZERO, Number, round_money, to_decimal
from trip_budget.utils.validation import (
    validate_amount,
    validate_currency_code,
    validate_expense_name,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "amount", "currency", "category")


def _most_frequent(values: Iterable[str]) -> str:
    """Most frequent value; ties go to the first one encountered."""
    counts = Counter(values)
    if not counts:
        return ""
    # Counter keeps first-seen order and sorted() is stable
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[0][0]


class ExpenseLedger:
    """Owns every ``Expense`` and derives totals and statistics on read.

    Aggregates are never cached, so a query right after a mutation always
    reflects it. Each mutation writes the store, then broadcasts the new
    expense tuple to subscribers before returning.
    """

    def __init__(self, rates: RateProvider, store: BaseStore):
        self.rates = rates
        self.store = store
        self._cell: StateCell[Tuple[Expense, ...]] = StateCell(self._load(), name="expenses")
        self.pending_write = False

    # -- persistence -------------------------------------------------------

    def _load(self) -> Tuple[Expense, ...]:
        raw = self.store.get(EXPENSES_KEY)
        if raw is None:
            return ()
        if not isinstance(raw, list):
            logger.warning("Stored expenses are not a list; starting empty", extra={"store_key": EXPENSES_KEY})
            return ()

        expenses = []
        for record in raw:
            try:
                expenses.append(Expense.from_dict(record))
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                logger.warning(f"Skipping malformed stored expense: {e}", extra={"store_key": EXPENSES_KEY})
        logger.info(f"Loaded {len(expenses)} expenses")
        return tuple(expenses)

    def _persist(self, expenses: Tuple[Expense, ...]) -> None:
        try:
            self.store.set(EXPENSES_KEY, [e.to_dict() for e in expenses])
            self.pending_write = False
        except PersistenceWriteFailed as e:
            # Kept in memory; the next mutation rewrites the full list
            self.pending_write = True
            logger.warning(str(e), extra={"store_key": EXPENSES_KEY, "error": e.reason})

    def _commit(self, expenses: Tuple[Expense, ...]) -> None:
        self._persist(expenses)
        self._cell.set(expenses)

    # -- observation -------------------------------------------------------

    def subscribe(self, observer: Observer, emit_current: bool = False) -> Subscription:
        return self._cell.subscribe(observer, emit_current=emit_current)

    # -- mutation ----------------------------------------------------------

    def add(self, name: str, amount: Number, currency: str, category) -> Expense:
        """Create an expense with a fresh id and timestamp.

        Raises:
            ValidationError: for an empty/short/long name, a non-positive or
                too large amount, an unknown category or a malformed code
        """
        expense = Expense(
            id=uuid4().hex,
            name=validate_expense_name(name),
            amount=validate_amount(amount),
            currency=validate_currency_code(currency),
            category=ExpenseCategory.parse(category),
            created_at=datetime.now(timezone.utc),
        )
        self._commit(self._cell.value + (expense,))
        logger.debug(f"Added expense {expense.name}", extra={"expense_id": expense.id})
        return expense

    def update(self, expense_id: str, **fields: Any) -> Expense:
        """Merge ``fields`` into an existing expense.

        Raises:
            NotFoundError: if ``expense_id`` is unknown
            ValidationError: for unknown fields or invalid values
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {sorted(unknown)}")

        expenses = list(self._cell.value)
        index = next((i for i, e in enumerate(expenses) if e.id == expense_id), None)
        if index is None:
            raise NotFoundError(expense_id)

        changes: Dict[str, Any] = {}
        if "name" in fields:
            changes["name"] = validate_expense_name(fields["name"])
        if "amount" in fields:
            changes["amount"] = validate_amount(fields["amount"])
        if "currency" in fields:
            changes["currency"] = validate_currency_code(fields["currency"])
        if "category" in fields:
            changes["category"] = ExpenseCategory.parse(fields["category"])

        updated = replace(expenses[index], **changes)
        expenses[index] = updated
        self._commit(tuple(expenses))
        logger.debug("Updated expense", extra={"expense_id": expense_id})
        return updated

    def remove(self, expense_id: str) -> bool:
        """Delete an expense; False (and no change) if the id is unknown."""
        current = self._cell.value
        remaining = tuple(e for e in current if e.id != expense_id)
        if len(remaining) == len(current):
            return False
        self._commit(remaining)
        logger.debug("Removed expense", extra={"expense_id": expense_id})
        return True

    def clear(self) -> None:
        self._commit(())
        logger.info("Cleared all expenses")

    def bulk_import(self, records: Iterable[Dict[str, Any]]) -> bool:
        """Replace the ledger with ``records``.

        Missing ids and timestamps are assigned. Amounts are trusted, not
        range-checked. A record that cannot be read at all aborts the import
        and leaves the ledger unchanged.
        """
        imported = []
        try:
            for record in records:
                imported.append(Expense(
                    id=str(record.get("id") or uuid4().hex),
                    name=str(record["name"]),
                    amount=to_decimal(record["amount"]),
                    currency=str(record["currency"]).upper(),
                    category=ExpenseCategory.parse(record["category"]),
                    created_at=(
                        parse_timestamp(record["createdAt"])
                        if record.get("createdAt") else datetime.now(timezone.utc)
                    ),
                ))
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Error importing expenses: {e}")
            return False

        self._commit(tuple(imported))
        logger.info(f"Imported {len(imported)} expenses")
        return True

    def export(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._cell.value]

    # -- queries -----------------------------------------------------------

    def list(self) -> List[Expense]:
        """Expenses in insertion order."""
        return list(self._cell.value)

    def __len__(self) -> int:
        return len(self._cell.value)

    def get(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self._cell.value if e.id == expense_id), None)

    def by_category(self, category) -> List[Expense]:
        key = ExpenseCategory.parse(category)
        return [e for e in self._cell.value if e.category == key]

    def total_in(self, target_currency: Optional[str] = None) -> Decimal:
        """Sum of all expenses.

        With a target currency each expense is converted first and the sum is
        rounded to 2 places. Without one, face values of different currencies
        are added as-is, which is only an approximate figure.
        """
        if not target_currency:
            return sum((e.amount for e in self._cell.value), ZERO)
        total = sum(
            (self.rates.convert(e.amount, e.currency, target_currency) for e in self._cell.value),
            ZERO,
        )
        return round_money(total)

    def converted(self, target_currency: str) -> List[Tuple[Expense, Decimal]]:
        """Each expense paired with its amount in ``target_currency``."""
        return [
            (e, self.rates.convert(e.amount, e.currency, target_currency))
            for e in self._cell.value
        ]

    def distribution_by_category(self) -> Dict[str, Decimal]:
        """Raw (unconverted) sums per category."""
        result: Dict[str, Decimal] = {}
        for e in self._cell.value:
            result[e.category.value] = result.get(e.category.value, ZERO) + e.amount
        return result

    def distribution_by_currency(self) -> Dict[str, Decimal]:
        result: Dict[str, Decimal] = {}
        for e in self._cell.value:
            result[e.currency] = result.get(e.currency, ZERO) + e.amount
        return result

    def statistics(self) -> ExpenseStatistics:
        expenses = self._cell.value
        if not expenses:
            return ExpenseStatistics()

        total = sum((e.amount for e in expenses), ZERO)
        return ExpenseStatistics(
            total_expenses=round_money(total),
            average_expense=round_money(total / len(expenses)),
            count=len(expenses),
            top_category=_most_frequent(e.category.value for e in expenses),
            most_used_currency=_most_frequent(e.currency for e in expenses),
        )
