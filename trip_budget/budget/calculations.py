"""Pure budget computations: status ladder and savings projection."""
from decimal import Decimal
from typing import Optional

from trip_budget.budget.models import BudgetPlan, BudgetStatus, SavingsCalculation
from trip_budget.utils.money import ZERO, Number, round_money, to_decimal
from trip_budget.utils.validation import validate_months

COMFORTABLE_RATIO = Decimal("0.3")
ADEQUATE_RATIO = Decimal("0.5")
STRETCHED_RATIO = Decimal("0.7")

SAFETY_MARGIN = Decimal("1.1")
ACHIEVABLE_INCOME_SHARE = Decimal("0.4")


def budget_status(plan: BudgetPlan) -> BudgetStatus:
    """Map a plan onto a status.

    Unaffordable plans are INSUFFICIENT. Otherwise the share of monthly income
    the plan needs decides: <=30% COMFORTABLE, <=50% ADEQUATE, <=70%
    INSUFFICIENT, above that OVER_BUDGET. INSUFFICIENT is reachable from two
    places and OVER_BUDGET sits above it; the ladder is kept as product
    defined it.
    """
    if not plan.is_affordable:
        return BudgetStatus.INSUFFICIENT

    required = plan.required_monthly_savings
    if plan.monthly_income > 0:
        ratio = required / plan.monthly_income
    else:
        # An affordable plan with no income needs nothing per month
        ratio = ZERO if required <= 0 else None

    if ratio is None:
        return BudgetStatus.OVER_BUDGET
    if ratio <= COMFORTABLE_RATIO:
        return BudgetStatus.COMFORTABLE
    if ratio <= ADEQUATE_RATIO:
        return BudgetStatus.ADEQUATE
    if ratio <= STRETCHED_RATIO:
        return BudgetStatus.INSUFFICIENT
    return BudgetStatus.OVER_BUDGET


def project_savings(
    target_amount: Number,
    current_amount: Number,
    months_remaining: int,
    monthly_income: Optional[Number] = None,
) -> SavingsCalculation:
    """Monthly requirement to go from ``current_amount`` to ``target_amount``.

    The recommendation adds a 10% safety margin. Without a monthly income
    (no active plan) any requirement counts as achievable; with one, the
    requirement must stay within 40% of it.
    """
    target = to_decimal(target_amount)
    current = to_decimal(current_amount)
    months = validate_months(months_remaining)

    remaining = max(ZERO, target - current)
    monthly_requirement = remaining / months if months > 0 else remaining
    recommended = monthly_requirement * SAFETY_MARGIN
    projected_total = current + recommended * months

    if monthly_income is None:
        is_achievable = True
    else:
        is_achievable = monthly_requirement <= to_decimal(monthly_income) * ACHIEVABLE_INCOME_SHARE

    return SavingsCalculation(
        current_amount=current,
        target_amount=target,
        months_remaining=months,
        monthly_requirement=round_money(monthly_requirement),
        is_achievable=is_achievable,
        recommended_monthly_savings=round_money(recommended),
        projected_total=round_money(projected_total),
    )
