"""Budget plan, trip and projection models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from trip_budget.ledger.models import parse_timestamp
from trip_budget.utils.errors import ValidationError
from trip_budget.utils.money import ZERO, Number, round_money, to_decimal

# Share of monthly income a plan may claim and still count as affordable
AFFORDABLE_INCOME_SHARE = Decimal("0.3")


class BudgetStatus(str, Enum):
    INSUFFICIENT = "insufficient"
    ADEQUATE = "adequate"
    COMFORTABLE = "comfortable"
    OVER_BUDGET = "over_budget"


@dataclass(frozen=True)
class BudgetPlan:
    """Savings plan for the trip. Derived fields come from ``calculate`` only."""

    current_savings: Decimal
    monthly_income: Decimal
    months_until_travel: int
    total_expenses: Decimal
    target_currency: str
    required_monthly_savings: Decimal
    is_affordable: bool
    surplus: Decimal
    savings_goal: Decimal

    @classmethod
    def calculate(
        cls,
        current_savings: Number,
        monthly_income: Number,
        months_until_travel: int,
        total_expenses: Number,
        target_currency: str,
    ) -> "BudgetPlan":
        """Compute a complete plan from its inputs.

        savings_goal = max(0, total - savings)
        required     = goal / months, or goal when months is 0 (never below 0)
        surplus      = savings - total
        affordable   = savings + required * months >= total
                       and required <= 30% of monthly income

        The projected savings are rounded to cents before the comparison so
        that a goal split into repeating fractions (e.g. 5000 / 3) still
        covers the total.
        """
        savings = to_decimal(current_savings)
        income = to_decimal(monthly_income)
        total = to_decimal(total_expenses)
        months = int(months_until_travel)

        savings_goal = max(ZERO, total - savings)
        required = savings_goal / months if months > 0 else savings_goal
        required = max(ZERO, required)

        projected = round_money(savings + required * months)
        is_affordable = projected >= total and required <= income * AFFORDABLE_INCOME_SHARE

        return cls(
            current_savings=savings,
            monthly_income=income,
            months_until_travel=months,
            total_expenses=total,
            target_currency=target_currency,
            required_monthly_savings=required,
            is_affordable=is_affordable,
            surplus=savings - total,
            savings_goal=savings_goal,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentSavings": str(self.current_savings),
            "monthlyIncome": str(self.monthly_income),
            "monthsUntilTravel": self.months_until_travel,
            "totalExpenses": str(self.total_expenses),
            "targetCurrency": self.target_currency,
            "requiredMonthlySavings": str(self.required_monthly_savings),
            "isAffordable": self.is_affordable,
            "surplus": str(self.surplus),
            "savingsGoal": str(self.savings_goal),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BudgetPlan":
        """Rebuild from stored inputs; derived fields are recomputed, not trusted."""
        return cls.calculate(
            current_savings=data["currentSavings"],
            monthly_income=data["monthlyIncome"],
            months_until_travel=int(data["monthsUntilTravel"]),
            total_expenses=data["totalExpenses"],
            target_currency=str(data["targetCurrency"]),
        )


@dataclass(frozen=True)
class SavingsCalculation:
    current_amount: Decimal
    target_amount: Decimal
    months_remaining: int
    monthly_requirement: Decimal
    is_achievable: bool
    recommended_monthly_savings: Decimal  # requirement plus a 10% safety margin
    projected_total: Decimal


@dataclass
class BudgetSummary:
    """Snapshot of ledger aggregates plus the plan status.

    Totals and distributions are raw face-value sums, so category shares
    compare like with like.
    """

    total_expenses: Decimal = ZERO
    expenses_by_category: Dict[str, Decimal] = field(default_factory=dict)
    currency_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    average_expense: Decimal = ZERO
    top_category: str = ""
    status: BudgetStatus = BudgetStatus.INSUFFICIENT


def parse_departure_date(value) -> date:
    """Coerce a date, datetime or ISO string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValidationError(f"Invalid departure date: {value!r}")
    raise ValidationError(f"Invalid departure date: {value!r}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TripBudget:
    id: str
    destination: str
    target_currency: str
    departure_date: date
    expense_ids: List[str] = field(default_factory=list)
    budget_plan: Optional[BudgetPlan] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "destination": self.destination,
            "targetCurrency": self.target_currency,
            "departureDate": self.departure_date.isoformat(),
            "expenseIds": list(self.expense_ids),
            "budgetPlan": self.budget_plan.to_dict() if self.budget_plan else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TripBudget":
        plan = data.get("budgetPlan")
        return cls(
            id=str(data["id"]),
            destination=str(data["destination"]),
            target_currency=str(data["targetCurrency"]).upper(),
            departure_date=parse_departure_date(data["departureDate"]),
            expense_ids=[str(i) for i in data.get("expenseIds") or []],
            budget_plan=BudgetPlan.from_dict(plan) if plan else None,
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )
