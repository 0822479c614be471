"""Operator table — filter operator tokens → SQLAlchemy predicates."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog
from sqlalchemy import ColumnElement, bindparam

log = structlog.get_logger("sqlpager")


class Operator(str, Enum):
    """Recognized comparison operators (canonical tokens)."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    NLIKE = "nlike"
    NILIKE = "nilike"
    IS = "is"
    ISNOT = "isnot"
    IN = "in"
    NIN = "nin"
    BW = "bw"
    NBW = "nbw"


_SYMBOLS: dict[str, Operator] = {
    "=": Operator.EQ,
    "!=": Operator.NEQ,
    ">": Operator.GT,
    "<": Operator.LT,
    ">=": Operator.GTE,
    "<=": Operator.LTE,
}

RANGE_OPERATORS = frozenset({Operator.BW, Operator.NBW})
SET_OPERATORS = frozenset({Operator.IN, Operator.NIN})

# Predicate builders for operators bound to a single named parameter.
_SINGLE: dict[Operator, Callable[[Any, Any], ColumnElement[bool]]] = {
    Operator.EQ: lambda col, p: col == p,
    Operator.NEQ: lambda col, p: col != p,
    Operator.GT: lambda col, p: col > p,
    Operator.LT: lambda col, p: col < p,
    Operator.GTE: lambda col, p: col >= p,
    Operator.LTE: lambda col, p: col <= p,
    Operator.LIKE: lambda col, p: col.like(p),
    Operator.ILIKE: lambda col, p: col.ilike(p),
    Operator.NLIKE: lambda col, p: col.not_like(p),
    Operator.NILIKE: lambda col, p: col.not_ilike(p),
    Operator.IS: lambda col, p: col.is_(p),
    Operator.ISNOT: lambda col, p: col.is_not(p),
}


def parse_operator(token: str | None) -> Operator:
    """Map a raw operator token to an :class:`Operator`.

    Matching is case-insensitive. Missing or unknown tokens map to ``EQ``.
    """
    if not token:
        return Operator.EQ
    lowered = str(token).lower()
    if lowered in _SYMBOLS:
        return _SYMBOLS[lowered]
    try:
        return Operator(lowered)
    except ValueError:
        log.debug("pagination.unknown_operator", operator=token)
        return Operator.EQ


def is_range_pair(value: Any) -> bool:
    """True if *value* is a two-element list/tuple usable by BETWEEN."""
    return isinstance(value, (list, tuple)) and len(value) == 2


def _single_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)) and len(value) == 1:
        return value[0]
    return value


def bind_param(name: str, value: Any, taken: set[str] | None = None, **kw: Any) -> Any:
    """Named bind parameter that never shares a name with another in *taken*.

    SQLAlchemy merges bind parameters of the same name, so a name already in
    *taken* gets a uniquified parameter instead. *taken* is updated in place.
    """
    if taken is not None:
        if name in taken:
            return bindparam(name, value, unique=True, **kw)
        taken.add(name)
    return bindparam(name, value, **kw)


def build_predicate(
    op: Operator,
    column: Any,
    key: str,
    value: Any,
    taken: set[str] | None = None,
) -> ColumnElement[bool]:
    """Build the predicate for ``column <op> value`` with named parameters.

    Parameters are named after *key*; range operators bind ``<key>Start``
    and ``<key>End``. A ``bw``/``nbw`` value that is not a pair degrades to
    ``eq``/``neq`` on the whole value. Names already in *taken* are not
    reused (see :func:`bind_param`).
    """
    if op in RANGE_OPERATORS:
        if is_range_pair(value):
            start, end = value
            between = column.between(
                bind_param(f"{key}Start", start, taken),
                bind_param(f"{key}End", end, taken),
            )
            return between if op is Operator.BW else ~between
        log.debug("pagination.range_degraded", field=key, operator=op.value)
        op = Operator.EQ if op is Operator.BW else Operator.NEQ
        return _SINGLE[op](column, bind_param(key, value, taken))

    if op in SET_OPERATORS:
        values = list(value) if isinstance(value, (list, tuple, set, frozenset)) else [value]
        param = bind_param(key, values, taken, expanding=True)
        return column.in_(param) if op is Operator.IN else column.not_in(param)

    value = _single_value(value)
    if op in (Operator.IS, Operator.ISNOT) and value is None:
        return column.is_(None) if op is Operator.IS else column.is_not(None)
    return _SINGLE[op](column, bind_param(key, value, taken))
