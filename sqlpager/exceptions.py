"""Custom exceptions for sqlpager."""


class PaginationError(Exception):
    """Base exception for all pagination errors."""


class InvalidFilterError(PaginationError, ValueError):
    """Raised when a filter condition has an unusable shape (strict mode only)."""

    def __init__(self, key: str, operator: str, value: object):
        self.key = key
        self.operator = operator
        self.value = value
        super().__init__(
            f"Filter '{key}' with operator '{operator}' requires a [start, end] pair, "
            f"got {value!r}"
        )
