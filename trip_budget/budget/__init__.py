"""Budget planning: plan model, status ladder, projections and advice."""

from .calculations import budget_status, project_savings
from .models import BudgetPlan, BudgetStatus, BudgetSummary, SavingsCalculation, TripBudget
from .planner import BudgetPlanner
from .recommendations import build_recommendations

__all__ = [
    "BudgetPlan",
    "BudgetPlanner",
    "BudgetStatus",
    "BudgetSummary",
    "SavingsCalculation",
    "TripBudget",
    "budget_status",
    "build_recommendations",
    "project_savings",
]
