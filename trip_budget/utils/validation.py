"""Input validation utilities."""
from decimal import Decimal

from trip_budget.utils.errors import ValidationError
from trip_budget.utils.money import Number, to_decimal

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
MAX_EXPENSE_AMOUNT = Decimal("999999")


def validate_currency_code(code: str) -> str:
    """
    Validate and normalize a 3-letter currency code.

    Args:
        code: Currency code (e.g., "sar", "USD")

    Returns:
        Uppercase code

    Raises:
        ValidationError: If the code is not three letters
    """
    if not isinstance(code, str):
        raise ValidationError(f"Invalid currency code: {code!r}")
    code = code.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(f"Invalid currency code: {code}. Expect a 3-letter code.")
    return code


def validate_expense_name(name: str) -> str:
    """Validate an expense name: 2 to 100 characters once stripped."""
    if not isinstance(name, str):
        raise ValidationError("Expense name must be a string")
    name = name.strip()
    if not name:
        raise ValidationError("Expense name is required")
    if len(name) < NAME_MIN_LENGTH or len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"Expense name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters, got {len(name)}"
        )
    return name


def validate_amount(amount: Number) -> Decimal:
    """
    Validate an expense amount.

    Returns:
        The amount as ``Decimal``

    Raises:
        ValidationError: If the amount is not positive or exceeds 999,999
    """
    value = to_decimal(amount)
    if value <= 0:
        raise ValidationError(f"Amount must be positive, got: {amount}")
    if value > MAX_EXPENSE_AMOUNT:
        raise ValidationError(f"Amount too large: {amount} (max {MAX_EXPENSE_AMOUNT})")
    return value


def validate_non_negative(value: Number, field: str) -> Decimal:
    """Validate a plan input that may be zero but not negative."""
    result = to_decimal(value)
    if result < 0:
        raise ValidationError(f"{field} cannot be negative, got: {value}")
    return result


def validate_months(months: int) -> int:
    """Validate months until travel as a non-negative whole number."""
    if isinstance(months, bool) or not isinstance(months, int):
        try:
            as_decimal = to_decimal(months)
        except ValidationError:
            raise ValidationError(f"Months until travel must be a whole number, got: {months!r}")
        if as_decimal != as_decimal.to_integral_value():
            raise ValidationError(f"Months until travel must be a whole number, got: {months!r}")
        months = int(as_decimal)
    if months < 0:
        raise ValidationError(f"Months until travel cannot be negative, got: {months}")
    return months
