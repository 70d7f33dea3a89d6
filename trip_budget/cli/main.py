from __future__ import annotations

import asyncio
from typing import Optional

import typer

from trip_budget.app import TripBudgetApp
from trip_budget.cli.display import DisplayManager
from trip_budget.config import load_config
from trip_budget.currency.directory import list_currencies, search_currencies
from trip_budget.utils.errors import TripBudgetError


app = typer.Typer(add_completion=False, help="Trip budget planner")

_state = {"config_path": "config.yaml"}


@app.callback()
def main(config: str = typer.Option("config.yaml", "--config", "-c", help="Path to config.yaml")):
    _state["config_path"] = config


def _build(live_rates: bool = False) -> TripBudgetApp:
    try:
        budget_app = TripBudgetApp.from_config(load_config(_state["config_path"]))
    except TripBudgetError as e:
        typer.secho(f"Failed to start: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if live_rates and not asyncio.run(budget_app.start()):
        typer.secho("Live rates unavailable; using bundled rates", fg=typer.colors.YELLOW)
    return budget_app


def _display(budget_app: TripBudgetApp) -> DisplayManager:
    return DisplayManager(arabic=budget_app.preferences.is_arabic)


@app.command("currencies")
def currencies(query: Optional[str] = typer.Argument(None, help="Filter by code, name or symbol")):
    """List supported currencies."""
    budget_app = _build()
    display = _display(budget_app)
    display.show_currencies(search_currencies(query, display.arabic) if query else list_currencies())


@app.command("add")
def add(
    name: str = typer.Argument(..., help="Expense name"),
    amount: str = typer.Argument(..., help="Amount, e.g. 1250.50"),
    currency: str = typer.Option("SAR", "--currency", "-C", help="Currency code"),
    category: str = typer.Option("other", "--category", "-k", help="flights, accommodation, food, ..."),
):
    """Record an expected expense."""
    budget_app = _build()
    display = _display(budget_app)
    try:
        expense = budget_app.ledger.add(name, amount, currency, category)
    except TripBudgetError as e:
        display.error(str(e))
        raise typer.Exit(code=1)
    display.success(f"Added {expense.name} ({display.money(expense.amount, expense.currency)}) id={expense.id}")


@app.command("list")
def list_expenses(target: Optional[str] = typer.Option(None, "--target", "-t", help="Target currency")):
    """Show expenses with their converted amounts."""
    budget_app = _build(live_rates=True)
    target = (target or budget_app.default_target_currency).upper()
    _display(budget_app).show_expenses(budget_app.ledger.converted(target), target)


@app.command("remove")
def remove(expense_id: str = typer.Argument(..., help="Expense id")):
    """Delete an expense."""
    budget_app = _build()
    display = _display(budget_app)
    if budget_app.ledger.remove(expense_id):
        display.success("Expense removed")
    else:
        display.error(f"Expense not found: {expense_id}")
        raise typer.Exit(code=1)


@app.command("total")
def total(target: Optional[str] = typer.Option(None, "--target", "-t", help="Target currency")):
    """Total of all expenses in one currency."""
    budget_app = _build(live_rates=True)
    target = (target or budget_app.default_target_currency).upper()
    display = _display(budget_app)
    display.console.print(f"Total: [bold]{display.money(budget_app.ledger.total_in(target), target)}[/bold]")


@app.command("plan")
def plan(
    savings: str = typer.Option(..., "--savings", "-s", help="Current savings"),
    income: str = typer.Option(..., "--income", "-i", help="Monthly income"),
    months: int = typer.Option(..., "--months", "-m", help="Months until travel"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Target currency"),
):
    """Create (or replace) the budget plan."""
    budget_app = _build(live_rates=True)
    display = _display(budget_app)
    try:
        created = budget_app.planner.create(savings, income, months, target or budget_app.default_target_currency)
    except TripBudgetError as e:
        display.error(str(e))
        raise typer.Exit(code=1)
    display.show_plan(created, budget_app.planner.status(created))


@app.command("status")
def status():
    """Show the current plan and its status."""
    budget_app = _build(live_rates=True)
    display = _display(budget_app)
    current = budget_app.planner.plan
    if current is None:
        display.warn("No budget plan yet. Run `trip-budget plan` first.")
        raise typer.Exit(code=1)
    display.show_plan(current, budget_app.planner.status(current))


@app.command("recommend")
def recommend():
    """Advice based on the plan and recorded expenses."""
    budget_app = _build(live_rates=True)
    _display(budget_app).show_recommendations(
        budget_app.planner.recommendations(language=budget_app.preferences.language)
    )


@app.command("refresh-rates")
def refresh_rates():
    """Fetch the latest exchange rates."""
    budget_app = _build()
    display = _display(budget_app)
    if asyncio.run(budget_app.rates.refresh()):
        display.success(f"Rates updated ({budget_app.rates.last_updated:%Y-%m-%d})")
    else:
        display.error("Failed to update exchange rates")
        raise typer.Exit(code=1)


@app.command("language")
def language(value: Optional[str] = typer.Argument(None, help="ar or en; toggles when omitted")):
    """Show or change the preferred language."""
    budget_app = _build()
    try:
        if value:
            budget_app.preferences.set(value)
        else:
            budget_app.preferences.toggle()
    except TripBudgetError as e:
        _display(budget_app).error(str(e))
        raise typer.Exit(code=1)
    typer.echo(f"Language: {budget_app.preferences.language}")


if __name__ == "__main__":
    app()
