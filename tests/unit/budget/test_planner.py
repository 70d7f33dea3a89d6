"""Tests for the budget planner."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from trip_budget.budget.models import BudgetStatus
from trip_budget.budget.planner import BudgetPlanner
from trip_budget.currency.rates import ExchangeRateTable
from trip_budget.storage.store import BUDGET_PLAN_KEY, TRIP_BUDGET_KEY
from trip_budget.utils.errors import ValidationError


@pytest.fixture
def trip_ledger(ledger):
    ledger.add("Flight", 4000, "SAR", "flights")
    ledger.add("Hotel", 2000, "SAR", "accommodation")
    return ledger


def test_create_reads_ledger_total(planner, trip_ledger):
    plan = planner.create(1000, 5000, 4, "SAR")

    assert plan.total_expenses == Decimal("6000.00")
    assert plan.required_monthly_savings == Decimal("1250")
    assert plan.is_affordable is True
    assert planner.plan == plan
    assert planner.status() is BudgetStatus.COMFORTABLE


@pytest.mark.parametrize("kwargs", [
    {"current_savings": -1},
    {"monthly_income": "abc"},
    {"months_until_travel": -2},
    {"months_until_travel": 2.5},
    {"target_currency": "RIYAL"},
])
def test_create_rejects_invalid_inputs(planner, kwargs):
    inputs = {"current_savings": 0, "monthly_income": 1000, "months_until_travel": 3, "target_currency": "SAR"}
    inputs.update(kwargs)
    with pytest.raises(ValidationError):
        planner.create(**inputs)
    assert planner.plan is None


def test_plan_follows_ledger_mutations(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    taxi = trip_ledger.add("Taxi", 400, "SAR", "transportation")
    assert planner.plan.total_expenses == Decimal("6400.00")

    trip_ledger.remove(taxi.id)
    assert planner.plan.total_expenses == Decimal("6000.00")


def test_plan_follows_rate_table(planner, ledger):
    ledger.add("Flight", 100, "USD", "flights")
    planner.create(0, 10000, 2, "SAR")
    assert planner.plan.total_expenses == Decimal("375.00")

    ledger.rates.set_table(ExchangeRateTable(base="USD", rates={"SAR": Decimal("4")}, source="live"))
    assert planner.plan.total_expenses == Decimal("400.00")


def test_plan_observers_only_notified_on_change(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    seen = []
    planner.subscribe(seen.append)

    trip_ledger.rates.set_table(trip_ledger.rates.table)  # SAR-only ledger: total unchanged
    assert seen == []

    trip_ledger.add("Taxi", 400, "SAR", "transportation")
    assert len(seen) == 1
    assert seen[0].total_expenses == Decimal("6400.00")


def test_closed_planner_stops_following(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    planner.close()
    trip_ledger.add("Taxi", 400, "SAR", "transportation")
    assert planner.plan.total_expenses == Decimal("6000.00")


def test_update_merges_and_recomputes(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    plan = planner.update(months_until_travel=2)

    assert plan.months_until_travel == 2
    assert plan.current_savings == Decimal("1000")
    assert plan.required_monthly_savings == Decimal("2500")
    assert plan.is_affordable is False


def test_update_without_plan_is_noop(planner, store):
    assert planner.update(monthly_income=100) is None
    assert store.get(BUDGET_PLAN_KEY) is None


def test_update_rejects_unknown_fields(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    with pytest.raises(ValidationError):
        planner.update(total_expenses=1)


def test_plan_persists_and_reloads(planner, trip_ledger, store):
    plan = planner.create(1000, 5000, 4, "SAR")

    reloaded = BudgetPlanner(trip_ledger, store)
    try:
        assert reloaded.plan == plan
    finally:
        reloaded.close()


def test_malformed_stored_plan_is_ignored(ledger, store):
    store.set(BUDGET_PLAN_KEY, {"currentSavings": "lots"})
    planner = BudgetPlanner(ledger, store)
    try:
        assert planner.plan is None
    finally:
        planner.close()


def test_reset_clears_plan_and_trip(planner, trip_ledger, store):
    planner.create(1000, 5000, 4, "SAR")
    planner.create_trip("Paris", "EUR", date(2026, 12, 1))
    planner.reset()

    assert planner.plan is None
    assert planner.trip is None
    assert store.get(BUDGET_PLAN_KEY) is None
    assert store.get(TRIP_BUDGET_KEY) is None


def test_status_without_plan(planner):
    assert planner.status() is BudgetStatus.INSUFFICIENT


def test_project_savings_uses_active_plan_income(planner, trip_ledger):
    assert planner.project_savings(6000, 1000, 4).is_achievable is True
    planner.create(1000, 3000, 4, "SAR")
    assert planner.project_savings(6000, 1000, 4).is_achievable is False


def test_summary(planner, trip_ledger):
    trip_ledger.add("Dinner", 100, "EUR", "food")
    summary = planner.summary()

    assert summary.total_expenses == Decimal("6100")
    assert summary.expenses_by_category["flights"] == Decimal("4000")
    assert summary.currency_breakdown == {"SAR": Decimal("6000"), "EUR": Decimal("100")}
    assert summary.top_category == "flights"
    assert summary.status is BudgetStatus.INSUFFICIENT


def test_recommendations_for_current_state(planner, trip_ledger):
    assert planner.recommendations() == ["Set up a budget plan for your trip first"]

    planner.create(1000, 5000, 4, "SAR")
    advice = planner.recommendations()
    assert advice[0].startswith("🎉")
    assert "📝 Add more expected expenses for a more accurate plan" in advice


def test_savings_progress(planner, trip_ledger):
    assert planner.savings_progress() == 0
    planner.create(1000, 5000, 4, "SAR")
    assert planner.savings_progress() == Decimal("16.67")
    planner.update(current_savings=9000)
    assert planner.savings_progress() == 0


def test_trip_lifecycle(planner, trip_ledger, store):
    planner.create(1000, 5000, 4, "SAR")
    trip = planner.create_trip("Paris", "eur", date(2026, 12, 1))

    assert trip.target_currency == "EUR"
    assert len(trip.expense_ids) == 2
    assert trip.budget_plan == planner.plan
    assert store.get(TRIP_BUDGET_KEY)["destination"] == "Paris"
    assert planner.days_until_travel(today=date(2026, 10, 19)) == 43
    assert planner.days_until_travel(today=date(2027, 1, 1)) == 0

    moved = planner.update_trip(departure_date=date(2026, 11, 1))
    assert moved.id == trip.id
    assert planner.days_until_travel(today=date(2026, 10, 19)) == 13


def test_trip_validation(planner):
    assert planner.update_trip(destination="Rome") is None
    assert planner.days_until_travel() == 0
    with pytest.raises(ValidationError):
        planner.create_trip("  ", "EUR", date(2026, 12, 1))


def test_export_import(planner, trip_ledger, store):
    planner.create(1000, 5000, 4, "SAR")
    planner.create_trip("Paris", "EUR", date(2026, 12, 1))
    exported = planner.export_data()
    planner.reset()

    assert planner.import_data(exported) is True
    assert planner.plan.total_expenses == Decimal("6000.00")
    assert planner.trip.destination == "Paris"


def test_import_recomputes_against_ledger(planner, trip_ledger):
    planner.create(1000, 5000, 4, "SAR")
    exported = planner.export_data()
    trip_ledger.add("Taxi", 400, "SAR", "transportation")
    planner.reset()

    planner.import_data(exported)
    assert planner.plan.total_expenses == Decimal("6400.00")


def test_import_malformed_changes_nothing(planner, trip_ledger):
    plan = planner.create(1000, 5000, 4, "SAR")
    assert planner.import_data({"budgetPlan": {"currentSavings": "1"}}) is False
    assert planner.import_data("garbage") is False
    assert planner.plan == plan


def test_trip_departure_accepts_datetime(planner):
    trip = planner.create_trip("Paris", "EUR", datetime(2030, 1, 1, 9, 30, tzinfo=timezone.utc))

    assert trip.departure_date == date(2030, 1, 1)
    assert planner.days_until_travel(today=date(2029, 12, 1)) == 31
    assert planner.days_until_travel(today=datetime(2029, 12, 31, 23, 0)) == 1


def test_update_trip_accepts_iso_string(planner, store):
    planner.create_trip("Paris", "EUR", date(2030, 1, 1))
    trip = planner.update_trip(departure_date="2030-02-01")

    assert trip.departure_date == date(2030, 2, 1)
    assert store.get(TRIP_BUDGET_KEY)["departureDate"] == "2030-02-01"
    assert planner.days_until_travel(today=date(2030, 1, 1)) == 31


@pytest.mark.parametrize("value", ["next week", 20300101, None])
def test_trip_rejects_invalid_departure(planner, value):
    with pytest.raises(ValidationError):
        planner.create_trip("Paris", "EUR", value)
    assert planner.trip is None


def test_update_trip_strips_destination(planner):
    planner.create_trip("Paris", "EUR", date(2030, 1, 1))
    assert planner.update_trip(destination="  Rome ").destination == "Rome"
    with pytest.raises(ValidationError):
        planner.update_trip(destination="   ")
    assert planner.trip.destination == "Rome"
