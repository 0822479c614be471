"""Paginator — offset and cursor pagination over any mapped entity."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sqlpager.core.config import PaginationConfig
from sqlpager.dao.filters import EntityTarget, apply_filters, apply_order
from sqlpager.dao.operators import bind_param
from sqlpager.schemas.pagination import CursorDirection, CursorRequest, OffsetRequest

log = structlog.get_logger("sqlpager")

ModelT = TypeVar("ModelT")


@dataclass
class OffsetPage(Generic[ModelT]):
    """One page of an offset-paginated result set."""

    data: list[ModelT]
    total: int
    page: int
    limit: int
    total_page: int
    result_key: str = "data"

    def to_dict(self) -> dict[str, Any]:
        return {
            self.result_key: self.data,
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_page": self.total_page,
        }


@dataclass
class CursorPage(Generic[ModelT]):
    """One page of a cursor-paginated result set.

    ``next_cursor`` / ``prev_cursor`` are the last / first *rows* of the
    page; ``next_key`` / ``prev_key`` give their primary-key values.
    """

    data: list[ModelT]
    next_cursor: ModelT | None
    prev_cursor: ModelT | None
    direction: CursorDirection
    result_key: str = "data"
    primary_key: str = field(default="id", repr=False)

    @property
    def next_key(self) -> Any:
        if self.next_cursor is None:
            return None
        return getattr(self.next_cursor, self.primary_key)

    @property
    def prev_key(self) -> Any:
        if self.prev_cursor is None:
            return None
        return getattr(self.prev_cursor, self.primary_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            self.result_key: self.data,
            "nextCursor": self.next_cursor,
            "prevCursor": self.prev_cursor,
            "direction": self.direction.value,
        }


def _total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


class Paginator:
    """Stateless pagination over SQLAlchemy ORM models.

    Holds only an immutable :class:`PaginationConfig`, so one instance can
    serve concurrent requests. Database errors propagate unmodified.
    """

    def __init__(self, config: PaginationConfig | None = None) -> None:
        self._config = config or PaginationConfig()

    @property
    def config(self) -> PaginationConfig:
        return self._config

    def _limit(self, requested: int | None) -> int:
        limit = self._config.resolve_limit(requested)
        if requested is not None and limit != requested:
            log.debug("pagination.limit_fallback", requested=requested, limit=limit)
        return limit

    def _filtered(
        self,
        model: type,
        filters: Mapping[str, Any] | None,
        taken: set[str] | None = None,
    ) -> tuple[Select, EntityTarget]:
        target = EntityTarget.for_model(model, self._config)
        stmt = apply_filters(select(target.entity), target, filters, self._config, taken)
        return stmt, target

    # ── statements ───────────────────────────────────────────────────────

    def offset_statement(
        self, model: type, request: OffsetRequest | Mapping[str, Any]
    ) -> Select:
        """Return the windowed offset query for *request* without running it."""
        request = _as_offset(request)
        stmt, target = self._filtered(model, request.filters)
        return self._window(stmt, target, request, self._limit(request.limit))

    def _window(
        self, stmt: Select, target: EntityTarget, request: OffsetRequest, limit: int
    ) -> Select:
        stmt = apply_order(stmt, target, request.order, self._config)
        return stmt.offset((request.page - 1) * limit).limit(limit)

    def cursor_statement(
        self, model: type, request: CursorRequest | Mapping[str, Any]
    ) -> tuple[Select, CursorDirection]:
        """Return ``(query, direction)`` for a cursor request without running it.

        The primary key is the leading sort key, ascending for ``next`` and
        descending for ``prev``, so the boundary predicate matches the row
        order. Caller ordering follows as secondary keys.
        """
        request = _as_cursor(request)
        direction = request.resolve_direction()
        taken: set[str] = set()
        stmt, target = self._filtered(model, request.filters, taken)
        pk = target.column(self._config.primary_key)

        boundary = request.boundary(direction)
        if boundary is not None:
            param = bind_param("cursor", boundary, taken)
            stmt = stmt.where(pk > param if direction is CursorDirection.NEXT else pk < param)

        stmt = stmt.order_by(pk.asc() if direction is CursorDirection.NEXT else pk.desc())
        stmt = apply_order(stmt, target, request.order, self._config)
        return stmt.limit(self._limit(request.limit)), direction

    # ── execution ────────────────────────────────────────────────────────

    async def offset(
        self,
        session: AsyncSession,
        model: type[ModelT],
        request: OffsetRequest | Mapping[str, Any],
    ) -> OffsetPage[ModelT]:
        """Page/limit pagination with a total count of matching rows."""
        request = _as_offset(request)
        limit = self._limit(request.limit)

        filtered, target = self._filtered(model, request.filters)
        total = await _count(session, filtered)

        result = await session.execute(self._window(filtered, target, request, limit))
        rows = list(result.scalars().all())

        log.debug(
            "pagination.offset",
            entity=model.__name__,
            page=request.page,
            limit=limit,
            total=total,
            returned=len(rows),
        )
        return OffsetPage(
            data=rows,
            total=total,
            page=request.page,
            limit=limit,
            total_page=_total_pages(total, limit),
            result_key=self._config.result_key,
        )

    async def cursor(
        self,
        session: AsyncSession,
        model: type[ModelT],
        request: CursorRequest | Mapping[str, Any],
    ) -> CursorPage[ModelT]:
        """Keyset pagination on the primary key. Runs no count query."""
        stmt, direction = self.cursor_statement(model, request)
        result = await session.execute(stmt)
        rows = list(result.scalars().all())

        log.debug(
            "pagination.cursor",
            entity=model.__name__,
            direction=direction.value,
            returned=len(rows),
        )
        return CursorPage(
            data=rows,
            next_cursor=rows[-1] if rows else None,
            prev_cursor=rows[0] if rows else None,
            direction=direction,
            result_key=self._config.result_key,
            primary_key=self._config.primary_key,
        )

    async def get_cursor_total(
        self,
        session: AsyncSession,
        model: type,
        request: CursorRequest | Mapping[str, Any],
    ) -> int:
        """Count rows matching the request's filters (no cursor, no window)."""
        request = _as_cursor(request)
        filtered, _ = self._filtered(model, request.filters)
        return await _count(session, filtered)


async def _count(session: AsyncSession, query: Select) -> int:
    result = await session.execute(select(func.count()).select_from(query.subquery()))
    return result.scalar_one()


def _as_offset(request: OffsetRequest | Mapping[str, Any]) -> OffsetRequest:
    if isinstance(request, OffsetRequest):
        return request
    return OffsetRequest.model_validate(request)


def _as_cursor(request: CursorRequest | Mapping[str, Any]) -> CursorRequest:
    if isinstance(request, CursorRequest):
        return request
    return CursorRequest.model_validate(request)
