"""Advisory messages derived from the current plan and ledger aggregates."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from trip_budget.budget.models import BudgetPlan, BudgetStatus, BudgetSummary
from trip_budget.ledger.models import ExpenseCategory, ExpenseStatistics
from trip_budget.utils.money import ZERO

FLIGHTS_SHARE_LIMIT = Decimal("0.5")
ACCOMMODATION_SHARE_LIMIT = Decimal("0.4")
MIN_EXPENSE_COUNT = 3
LONG_LEAD_MONTHS = 6
SHORT_LEAD_MONTHS = 3

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "no_plan": "Set up a budget plan for your trip first",
        "insufficient": "⚠️ The available budget is not enough - consider cutting expenses or postponing the trip",
        "save_monthly": "💡 Try to save {amount} per month",
        "adequate": "✅ The budget is enough, but the margin is thin",
        "emergency_buffer": "💡 Keep an extra 10-15% for emergencies",
        "comfortable": "🎉 The budget is comfortable",
        "extra_activities": "💡 You can afford some extra activities",
        "flights_high": "✈️ Flights take most of the budget - look for deals or other dates",
        "accommodation_high": "🏨 Consider cheaper stays such as furnished apartments",
        "few_expenses": "📝 Add more expected expenses for a more accurate plan",
        "long_lead": "⏰ You have plenty of time - you can save less each month",
        "short_lead": "⚡ Time is short - you may need to save more each month",
    },
    "ar": {
        "no_plan": "قم بإعداد خطة ميزانية لرحلتك أولاً",
        "insufficient": "⚠️ الميزانية المتاحة غير كافية - فكر في تقليل المصاريف أو تأجيل الرحلة",
        "save_monthly": "💡 حاول توفير {amount} شهرياً",
        "adequate": "✅ الميزانية كافية لكن بهامش ضيق",
        "emergency_buffer": "💡 احتفظ بمبلغ إضافي 10-15% للطوارئ",
        "comfortable": "🎉 الميزانية مريحة ومناسبة",
        "extra_activities": "💡 يمكنك إضافة أنشطة ترفيهية إضافية",
        "flights_high": "✈️ مصاريف الطيران مرتفعة - ابحث عن عروض أو مواعيد أخرى",
        "accommodation_high": "🏨 فكر في خيارات إقامة أوفر مثل الشقق المفروشة",
        "few_expenses": "📝 أضف المزيد من المصاريف المتوقعة للحصول على تخطيط أدق",
        "long_lead": "⏰ لديك وقت كافي - يمكنك توفير مبلغ أقل شهرياً",
        "short_lead": "⚡ الوقت قصير - قد تحتاج لتوفير مبلغ أكبر شهرياً",
    },
}


def build_recommendations(
    plan: Optional[BudgetPlan],
    stats: ExpenseStatistics,
    summary: BudgetSummary,
    language: str = "en",
) -> List[str]:
    """Ordered advice for the current state. Pure: same inputs, same list.

    Rule order: plan status, flight share, accommodation share, expense
    count, time until travel.
    """
    text = MESSAGES.get(language, MESSAGES["en"])

    if plan is None:
        return [text["no_plan"]]

    advice: List[str] = []

    if summary.status == BudgetStatus.INSUFFICIENT:
        monthly = plan.required_monthly_savings.quantize(Decimal(1), rounding=ROUND_HALF_UP)
        advice.append(text["insufficient"])
        advice.append(text["save_monthly"].format(amount=monthly))
    elif summary.status == BudgetStatus.ADEQUATE:
        advice.append(text["adequate"])
        advice.append(text["emergency_buffer"])
    elif summary.status == BudgetStatus.COMFORTABLE:
        advice.append(text["comfortable"])
        advice.append(text["extra_activities"])

    by_category = summary.expenses_by_category
    flights = by_category.get(ExpenseCategory.FLIGHTS.value, ZERO)
    accommodation = by_category.get(ExpenseCategory.ACCOMMODATION.value, ZERO)
    if flights > summary.total_expenses * FLIGHTS_SHARE_LIMIT:
        advice.append(text["flights_high"])
    if accommodation > summary.total_expenses * ACCOMMODATION_SHARE_LIMIT:
        advice.append(text["accommodation_high"])

    if stats.count < MIN_EXPENSE_COUNT:
        advice.append(text["few_expenses"])

    if plan.months_until_travel > LONG_LEAD_MONTHS:
        advice.append(text["long_lead"])
    elif plan.months_until_travel < SHORT_LEAD_MONTHS:
        advice.append(text["short_lead"])

    return advice
