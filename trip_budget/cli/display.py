"""Rich rendering for the trip budget CLI."""
from typing import Iterable, List, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trip_budget.budget.models import BudgetPlan, BudgetStatus
from trip_budget.currency.directory import Currency, format_amount
from trip_budget.ledger.models import Expense, category_info

STATUS_COLORS = {
    BudgetStatus.COMFORTABLE: "green",
    BudgetStatus.ADEQUATE: "yellow",
    BudgetStatus.INSUFFICIENT: "red",
    BudgetStatus.OVER_BUDGET: "magenta",
}


class DisplayManager:
    """All CLI output goes through here."""

    def __init__(self, arabic: bool = False):
        self.console = Console(width=100)
        self.arabic = arabic

    def money(self, amount, code: str) -> str:
        return format_amount(amount, code, self.arabic)

    def show_currencies(self, currencies: Iterable[Currency]) -> None:
        table = Table(title="Currencies", box=box.SIMPLE)
        table.add_column("Code", style="bold")
        table.add_column("Name")
        table.add_column("Symbol")
        for c in currencies:
            table.add_row(c.code, c.display_name(self.arabic), c.symbol)
        self.console.print(table)

    def show_expenses(self, rows: List[Tuple[Expense, object]], target_currency: str) -> None:
        if not rows:
            self.console.print("[dim]No expenses recorded yet[/dim]")
            return
        table = Table(title="Expenses", box=box.SIMPLE)
        table.add_column("ID", style="dim")
        table.add_column("Name")
        table.add_column("Category")
        table.add_column("Amount", justify="right")
        table.add_column(f"In {target_currency}", justify="right")
        for expense, converted in rows:
            info = category_info(expense.category)
            label = (info.name_ar if self.arabic else info.name_en) if info else expense.category.value
            table.add_row(
                expense.id[:8],
                expense.name,
                f"{info.icon if info else ''} {label}",
                self.money(expense.amount, expense.currency),
                self.money(converted, target_currency),
            )
        self.console.print(table)

    def show_plan(self, plan: BudgetPlan, status: BudgetStatus) -> None:
        code = plan.target_currency
        color = STATUS_COLORS.get(status, "white")
        lines = [
            f"[bold]Total expenses:[/bold]   {self.money(plan.total_expenses, code)}",
            f"[bold]Current savings:[/bold]  {self.money(plan.current_savings, code)}",
            f"[bold]Savings goal:[/bold]     {self.money(plan.savings_goal, code)}",
            f"[bold]Monthly required:[/bold] {self.money(plan.required_monthly_savings, code)}",
            f"[bold]Surplus:[/bold]          {self.money(plan.surplus, code)}",
            f"[bold]Affordable:[/bold]       {'yes' if plan.is_affordable else 'no'}",
            f"[bold]Status:[/bold]           [{color}]{status.value.replace('_', ' ').title()}[/{color}]",
        ]
        self.console.print(Panel("\n".join(lines), title="Budget Plan", border_style=color))

    def show_recommendations(self, items: Iterable[str]) -> None:
        for item in items:
            self.console.print(f"• {item}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]{message}[/green]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]{message}[/red]")
