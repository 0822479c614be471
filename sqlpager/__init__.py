"""sqlpager — declarative offset and cursor pagination for SQLAlchemy."""

from sqlpager.core.config import PAGE_SIZE_DEFAULT, PAGE_SIZE_MAX, PaginationConfig
from sqlpager.dao.operators import Operator, parse_operator
from sqlpager.dao.paginator import CursorPage, OffsetPage, Paginator
from sqlpager.exceptions import InvalidFilterError, PaginationError
from sqlpager.schemas.pagination import (
    CursorDirection,
    CursorRequest,
    FilterCondition,
    OffsetRequest,
)

__all__ = [
    "PAGE_SIZE_DEFAULT",
    "PAGE_SIZE_MAX",
    "PaginationConfig",
    "Paginator",
    "OffsetPage",
    "CursorPage",
    "Operator",
    "parse_operator",
    "OffsetRequest",
    "CursorRequest",
    "CursorDirection",
    "FilterCondition",
    "PaginationError",
    "InvalidFilterError",
]
