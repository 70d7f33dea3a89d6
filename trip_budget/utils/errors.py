"""Custom exception classes for the trip budget engine."""


class TripBudgetError(Exception):
    """Base exception for all trip budget errors."""
    pass


class ConfigurationError(TripBudgetError):
    """Raised when there's a configuration error."""
    pass


class ValidationError(TripBudgetError):
    """Raised when expense or plan input is malformed."""
    pass


class NotFoundError(TripBudgetError):
    """Raised when an operation references an unknown expense id."""

    def __init__(self, expense_id: str):
        super().__init__(f"Expense not found: {expense_id}")
        self.expense_id = expense_id


class DataProviderError(TripBudgetError):
    """Base exception for exchange rate source errors."""
    pass


class RateFetchFailed(DataProviderError):
    """Raised when a rate table cannot be fetched or parsed."""
    pass


class StorageError(TripBudgetError):
    """Base exception for durable store errors."""
    pass


class PersistenceWriteFailed(StorageError):
    """Raised when a store write fails. The in-memory change stays valid."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to persist '{key}': {reason}")
        self.key = key
        self.reason = reason


class ConversionDegraded(TripBudgetError, UserWarning):
    """Warning category for conversions that fell back to a rate of 1."""
    pass
