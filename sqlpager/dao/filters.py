"""Filter and order compilers — declarative maps → WHERE / ORDER BY clauses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, inspect, literal_column
from sqlalchemy.orm import QueryableAttribute, aliased

from sqlpager.core.config import PaginationConfig
from sqlpager.dao.operators import (
    RANGE_OPERATORS,
    Operator,
    build_predicate,
    is_range_pair,
    parse_operator,
)
from sqlpager.exceptions import InvalidFilterError
from sqlpager.schemas.pagination import FilterCondition


@dataclass(frozen=True)
class EntityTarget:
    """An aliased ORM entity plus the name used to qualify its columns."""

    entity: Any
    name: str

    @classmethod
    def for_model(cls, model: type, config: PaginationConfig) -> EntityTarget:
        """Alias *model* as ``config.entity_name`` or its table name."""
        name = config.entity_name or model.__tablename__
        return cls(entity=aliased(model, name=name), name=name)

    def column(self, ref: str) -> Any:
        """Resolve a physical column reference against the aliased entity.

        Accepts ``column`` or ``<entity>.column``; looks the name up as a
        mapped attribute, then as a database column name. Anything else
        becomes a literal reference, so a nonexistent column fails when
        the statement executes rather than here.
        """
        name = ref
        prefix = f"{self.name}."
        if name.startswith(prefix):
            name = name[len(prefix):]
        elif "." in name:
            return literal_column(name)

        attr = getattr(self.entity, name, None)
        if isinstance(attr, QueryableAttribute):
            return attr

        for prop in inspect(self.entity).mapper.column_attrs:
            if any(getattr(col, "name", None) == name for col in prop.columns):
                return getattr(self.entity, prop.key)

        return literal_column(f"{self.name}.{name}")


def _split_condition(condition: Any) -> tuple[Any, str | None] | None:
    """Return ``(value, operator)`` for structured conditions, None for scalars."""
    if isinstance(condition, FilterCondition):
        return condition.value, condition.operator
    if isinstance(condition, Mapping):
        return condition.get("value"), condition.get("operator")
    return None


def apply_filters(
    stmt: Select,
    target: EntityTarget,
    filters: Mapping[str, Any] | None,
    config: PaginationConfig,
    taken: set[str] | None = None,
) -> Select:
    """AND one predicate per filter key onto *stmt*.

    Existing WHERE criteria are kept. Bind parameter names used so far are
    collected in *taken*, so later parameters never share a name with an
    earlier one. Raises :class:`InvalidFilterError` only when
    ``config.strict_ranges`` is set and a ``bw``/``nbw`` value is not a
    ``[start, end]`` pair.
    """
    if not filters:
        return stmt
    if taken is None:
        taken = set()

    for key, condition in filters.items():
        column = target.column(config.resolve_field(key))
        structured = _split_condition(condition)
        if structured is None:
            stmt = stmt.where(build_predicate(Operator.EQ, column, key, condition, taken))
            continue

        value, token = structured
        op = parse_operator(token)
        if op in RANGE_OPERATORS and config.strict_ranges and not is_range_pair(value):
            raise InvalidFilterError(key, op.value, value)
        stmt = stmt.where(build_predicate(op, column, key, value, taken))

    return stmt


def apply_order(
    stmt: Select,
    target: EntityTarget,
    order: Mapping[str, Any] | None,
    config: PaginationConfig,
) -> Select:
    """Append ORDER BY clauses in map order: ``1`` → ASC, anything else → DESC."""
    if not order:
        return stmt

    clauses = []
    for key, direction in order.items():
        column = target.column(config.resolve_field(key))
        clauses.append(column.asc() if _is_ascending(direction) else column.desc())
    return stmt.order_by(*clauses)


def _is_ascending(direction: Any) -> bool:
    try:
        return int(direction) == 1
    except (TypeError, ValueError):
        return False
