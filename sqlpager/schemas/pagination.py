"""Pagination request schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CursorDirection(str, Enum):
    NEXT = "next"
    PREV = "prev"


class FilterCondition(BaseModel):
    """Structured filter: ``{"value": ..., "operator": "gte"}``."""

    model_config = ConfigDict(extra="forbid")

    value: Any = None
    operator: str | None = None


# Structured conditions are tried first so that {"value": ...} objects are
# never coerced into a scalar. Mappings with any other keys are rejected.
FilterValue = Union[FilterCondition, bool, int, float, str, list[Any], None]


class _PaginationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    limit: int | None = None
    filters: dict[str, FilterValue] = Field(default_factory=dict)
    order: dict[str, Any] = Field(default_factory=dict)

    @field_validator("limit", mode="before")
    @classmethod
    def _parse_limit(cls, value: Any) -> int | None:
        # Unparsable limits fall back to the configured default.
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return None


class OffsetRequest(_PaginationRequest):
    """Page/limit request.

    Pages below 1 or unparsable become 1. Out-of-range limits fall back to
    the default.
    """

    page: int = 1

    @field_validator("page", mode="before")
    @classmethod
    def _parse_page(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 1
        try:
            return max(int(value), 1)
        except (TypeError, ValueError, OverflowError):
            return 1


class CursorRequest(_PaginationRequest):
    """Cursor request.

    ``direction`` is optional: when omitted, a ``prev_cursor`` means the
    caller is walking backwards, otherwise the walk is forwards.
    """

    cursor: Any = None
    prev_cursor: Any = Field(None, alias="prevCursor")
    direction: CursorDirection | None = None

    def resolve_direction(self) -> CursorDirection:
        if self.direction is not None:
            return self.direction
        if self.prev_cursor is not None:
            return CursorDirection.PREV
        return CursorDirection.NEXT

    def boundary(self, direction: CursorDirection) -> Any:
        """Primary-key value the page must start after (next) or before (prev)."""
        if direction is CursorDirection.PREV and self.prev_cursor is not None:
            return self.prev_cursor
        return self.cursor
