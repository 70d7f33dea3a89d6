"""Budget planner: the single active savings plan and trip record."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from trip_budget.budget.calculations import budget_status, project_savings
from trip_budget.budget.models import (
    BudgetPlan,
    BudgetStatus,
    BudgetSummary,
    SavingsCalculation,
    TripBudget,
    parse_departure_date,
)
from trip_budget.budget.recommendations import build_recommendations
from trip_budget.ledger.ledger import ExpenseLedger
from trip_budget.ledger.models import ExpenseStatistics
from trip_budget.observable import Observer, StateCell, Subscription
from trip_budget.storage.store import BUDGET_PLAN_KEY, TRIP_BUDGET_KEY, BaseStore
from trip_budget.utils.errors import PersistenceWriteFailed, ValidationError
from trip_budget.utils.logging import get_logger
from trip_budget.utils.money import ZERO, Number, round_money
from trip_budget.utils.validation import validate_currency_code, validate_months, validate_non_negative

logger = get_logger(__name__)

PLAN_FIELDS = ("current_savings", "monthly_income", "months_until_travel", "target_currency")
TRIP_FIELDS = ("destination", "target_currency", "departure_date")


def _validated_inputs(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "current_savings": validate_non_negative(fields["current_savings"], "Current savings"),
        "monthly_income": validate_non_negative(fields["monthly_income"], "Monthly income"),
        "months_until_travel": validate_months(fields["months_until_travel"]),
        "target_currency": validate_currency_code(fields["target_currency"]),
    }


class BudgetPlanner:
    """Computes and keeps the budget plan in step with the ledger.

    The plan is never patched: every input change, ledger mutation or rate
    table swap recomputes it wholesale from ``ledger.total_in``.
    """

    def __init__(self, ledger: ExpenseLedger, store: BaseStore):
        self.ledger = ledger
        self.store = store
        self._plan: StateCell[Optional[BudgetPlan]] = StateCell(self._load_plan(), name="budget-plan")
        self._trip: StateCell[Optional[TripBudget]] = StateCell(self._load_trip(), name="trip-budget")
        self._subscriptions = [
            ledger.subscribe(self._on_inputs_changed),
            ledger.rates.subscribe(self._on_inputs_changed),
        ]
        self._on_inputs_changed(None)

    # -- persistence -------------------------------------------------------

    def _load_plan(self) -> Optional[BudgetPlan]:
        raw = self.store.get(BUDGET_PLAN_KEY)
        if raw is None:
            return None
        try:
            return BudgetPlan.from_dict(raw)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring malformed stored budget plan: {e}", extra={"store_key": BUDGET_PLAN_KEY})
            return None

    def _load_trip(self) -> Optional[TripBudget]:
        raw = self.store.get(TRIP_BUDGET_KEY)
        if raw is None:
            return None
        try:
            return TripBudget.from_dict(raw)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring malformed stored trip: {e}", extra={"store_key": TRIP_BUDGET_KEY})
            return None

    def _write(self, key: str, value: Optional[Dict[str, Any]]) -> None:
        try:
            if value is None:
                self.store.delete(key)
            else:
                self.store.set(key, value)
        except PersistenceWriteFailed as e:
            logger.warning(str(e), extra={"store_key": key, "error": e.reason})

    def _commit_plan(self, plan: Optional[BudgetPlan]) -> None:
        self._write(BUDGET_PLAN_KEY, plan.to_dict() if plan else None)
        self._plan.set(plan)

    def _commit_trip(self, trip: Optional[TripBudget]) -> None:
        self._write(TRIP_BUDGET_KEY, trip.to_dict() if trip else None)
        self._trip.set(trip)

    # -- observation -------------------------------------------------------

    @property
    def plan(self) -> Optional[BudgetPlan]:
        return self._plan.value

    @property
    def trip(self) -> Optional[TripBudget]:
        return self._trip.value

    def subscribe(self, observer: Observer, emit_current: bool = False) -> Subscription:
        """Observe the active plan (``None`` after a reset)."""
        return self._plan.subscribe(observer, emit_current=emit_current)

    def subscribe_trip(self, observer: Observer, emit_current: bool = False) -> Subscription:
        return self._trip.subscribe(observer, emit_current=emit_current)

    def close(self) -> None:
        """Stop following the ledger and rate table."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    def _on_inputs_changed(self, _value) -> None:
        plan = self._plan.value
        if plan is None:
            return
        recomputed = self._calculate(
            current_savings=plan.current_savings,
            monthly_income=plan.monthly_income,
            months_until_travel=plan.months_until_travel,
            target_currency=plan.target_currency,
        )
        if recomputed != plan:
            self._commit_plan(recomputed)
            logger.debug("Budget plan recomputed", extra={"target_currency": plan.target_currency})

    # -- plan --------------------------------------------------------------

    def _calculate(self, **inputs: Any) -> BudgetPlan:
        total = self.ledger.total_in(inputs["target_currency"])
        return BudgetPlan.calculate(total_expenses=total, **inputs)

    def create(
        self,
        current_savings: Number,
        monthly_income: Number,
        months_until_travel: int,
        target_currency: str = "SAR",
    ) -> BudgetPlan:
        """Replace any existing plan with one computed from the ledger total.

        Raises:
            ValidationError: for negative amounts or months, or a bad currency code
        """
        inputs = _validated_inputs({
            "current_savings": current_savings,
            "monthly_income": monthly_income,
            "months_until_travel": months_until_travel,
            "target_currency": target_currency,
        })
        plan = self._calculate(**inputs)
        self._commit_plan(plan)
        logger.info(
            f"Budget plan created: affordable={plan.is_affordable}",
            extra={"target_currency": plan.target_currency},
        )
        return plan

    def update(self, **fields: Any) -> Optional[BudgetPlan]:
        """Merge input fields into the active plan and recompute it.

        Returns ``None`` without side effects when no plan exists.
        """
        unknown = set(fields) - set(PLAN_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update plan fields: {sorted(unknown)}")

        current = self._plan.value
        if current is None:
            return None

        merged = {name: getattr(current, name) for name in PLAN_FIELDS}
        merged.update(fields)
        plan = self._calculate(**_validated_inputs(merged))
        self._commit_plan(plan)
        return plan

    def reset(self) -> None:
        """Drop the plan and the trip record, in memory and in the store."""
        self._commit_plan(None)
        self._commit_trip(None)
        logger.info("Budget data cleared")

    def status(self, plan: Optional[BudgetPlan] = None) -> BudgetStatus:
        """Status of ``plan`` (default: the active plan); INSUFFICIENT without one."""
        plan = plan if plan is not None else self._plan.value
        if plan is None:
            return BudgetStatus.INSUFFICIENT
        return budget_status(plan)

    def project_savings(self, target_amount: Number, current_amount: Number, months_remaining: int) -> SavingsCalculation:
        plan = self._plan.value
        return project_savings(
            target_amount,
            current_amount,
            months_remaining,
            monthly_income=plan.monthly_income if plan else None,
        )

    def summary(self) -> BudgetSummary:
        stats = self.ledger.statistics()
        return BudgetSummary(
            total_expenses=self.ledger.total_in(),
            expenses_by_category=self.ledger.distribution_by_category(),
            currency_breakdown=self.ledger.distribution_by_currency(),
            average_expense=stats.average_expense,
            top_category=stats.top_category,
            status=self.status(),
        )

    def recommendations(
        self,
        plan: Optional[BudgetPlan] = None,
        stats: Optional[ExpenseStatistics] = None,
        summary: Optional[BudgetSummary] = None,
        language: str = "en",
    ) -> List[str]:
        """Advice for the given (default: current) plan, statistics and summary."""
        return build_recommendations(
            plan if plan is not None else self._plan.value,
            stats if stats is not None else self.ledger.statistics(),
            summary if summary is not None else self.summary(),
            language=language,
        )

    def savings_progress(self) -> Decimal:
        """Current savings as a percentage (0-100) of the trip total."""
        plan = self._plan.value
        if plan is None or plan.savings_goal == 0:
            return ZERO
        progress = plan.current_savings / plan.total_expenses * 100
        return round_money(min(Decimal(100), max(ZERO, progress)))

    # -- trip --------------------------------------------------------------

    def create_trip(self, destination: str, target_currency: str, departure_date: date) -> TripBudget:
        destination = (destination or "").strip()
        if not destination:
            raise ValidationError("Destination is required")
        trip = TripBudget(
            id=uuid4().hex,
            destination=destination,
            target_currency=validate_currency_code(target_currency),
            departure_date=parse_departure_date(departure_date),
            expense_ids=[e.id for e in self.ledger.list()],
            budget_plan=self._plan.value,
        )
        self._commit_trip(trip)
        return trip

    def update_trip(self, **fields: Any) -> Optional[TripBudget]:
        unknown = set(fields) - set(TRIP_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update trip fields: {sorted(unknown)}")
        current = self._trip.value
        if current is None:
            return None
        if "target_currency" in fields:
            fields["target_currency"] = validate_currency_code(fields["target_currency"])
        if "destination" in fields:
            fields["destination"] = str(fields["destination"] or "").strip()
            if not fields["destination"]:
                raise ValidationError("Destination is required")
        if "departure_date" in fields:
            fields["departure_date"] = parse_departure_date(fields["departure_date"])
        trip = replace(current, updated_at=datetime.now(timezone.utc), **fields)
        self._commit_trip(trip)
        return trip

    def days_until_travel(self, today: Optional[date] = None) -> int:
        trip = self._trip.value
        if trip is None:
            return 0
        today = parse_departure_date(today) if today is not None else date.today()
        return max(0, (trip.departure_date - today).days)

    # -- export / import ---------------------------------------------------

    def export_data(self) -> Dict[str, Any]:
        plan, trip = self._plan.value, self._trip.value
        return {
            "budgetPlan": plan.to_dict() if plan else None,
            "tripBudget": trip.to_dict() if trip else None,
        }

    def import_data(self, data: Dict[str, Any]) -> bool:
        """Load a previously exported plan and/or trip. Nothing changes on malformed input."""
        try:
            plan = BudgetPlan.from_dict(data["budgetPlan"]) if data.get("budgetPlan") else None
            trip = TripBudget.from_dict(data["tripBudget"]) if data.get("tripBudget") else None
        except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Error importing budget data: {e}")
            return False

        if plan is not None:
            self._commit_plan(plan)
            # Bring the imported plan in line with the current ledger
            self._on_inputs_changed(None)
        if trip is not None:
            self._commit_trip(trip)
        return True
