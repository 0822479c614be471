"""Pagination configuration — immutable value with builder-style overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

PAGE_SIZE_DEFAULT = 20
PAGE_SIZE_MAX = 100

_TRUTHY = {"1", "true", "yes", "on"}


def _frozen(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class PaginationConfig:
    """Per-use pagination overrides.

    Instances are never mutated. Every ``with_*`` method returns a new
    config, or ``self`` when the argument is rejected (non-positive limit,
    empty name), so a single config can be shared between concurrent
    requests.
    """

    field_mapping: Mapping[str, str] = field(
        default_factory=lambda: _frozen(None), hash=False
    )
    default_limit: int = PAGE_SIZE_DEFAULT
    max_limit: int = PAGE_SIZE_MAX
    entity_name: str | None = None
    result_key: str = "data"
    primary_key: str = "id"
    strict_ranges: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.field_mapping, MappingProxyType):
            object.__setattr__(self, "field_mapping", _frozen(self.field_mapping))

    # ── builders ─────────────────────────────────────────────────────────

    def with_field_mapping(self, mapping: Mapping[str, str]) -> PaginationConfig:
        """Replace the logical → physical field-name table."""
        return replace(self, field_mapping=_frozen(mapping))

    def with_default_limit(self, limit: int) -> PaginationConfig:
        if limit <= 0:
            return self
        return replace(self, default_limit=limit)

    def with_max_limit(self, limit: int) -> PaginationConfig:
        if limit <= 0:
            return self
        return replace(self, max_limit=limit)

    def with_entity_name(self, name: str | None) -> PaginationConfig:
        if not name:
            return self
        return replace(self, entity_name=name)

    def with_result_key(self, key: str | None) -> PaginationConfig:
        if not key:
            return self
        return replace(self, result_key=key)

    def with_primary_key(self, key: str | None) -> PaginationConfig:
        if not key:
            return self
        return replace(self, primary_key=key)

    def with_strict_ranges(self, strict: bool = True) -> PaginationConfig:
        return replace(self, strict_ranges=strict)

    # ── resolution ───────────────────────────────────────────────────────

    def resolve_field(self, key: str) -> str:
        """Return the physical column reference for a logical field name."""
        return self.field_mapping.get(key) or key

    def resolve_limit(self, limit: int | None) -> int:
        """Return *limit* if it lies in ``(0, max_limit]``, else the default."""
        if limit and 0 < limit <= self.max_limit:
            return limit
        return self.default_limit

    @classmethod
    def from_env(cls) -> PaginationConfig:
        """Build a config from ``SQLPAGER_*`` environment variables.

        Reads:
            SQLPAGER_DEFAULT_LIMIT  — default page size (default: 20)
            SQLPAGER_MAX_LIMIT      — largest accepted page size (default: 100)
            SQLPAGER_RESULT_KEY     — key of the row array in ``to_dict()`` (default: data)
            SQLPAGER_PRIMARY_KEY    — cursor column (default: id)
            SQLPAGER_STRICT_RANGES  — reject malformed bw/nbw filters (default: false)
        """
        config = cls()
        config = config.with_default_limit(
            int(os.environ.get("SQLPAGER_DEFAULT_LIMIT", str(PAGE_SIZE_DEFAULT)))
        )
        config = config.with_max_limit(
            int(os.environ.get("SQLPAGER_MAX_LIMIT", str(PAGE_SIZE_MAX)))
        )
        config = config.with_result_key(os.environ.get("SQLPAGER_RESULT_KEY"))
        config = config.with_primary_key(os.environ.get("SQLPAGER_PRIMARY_KEY"))
        strict = os.environ.get("SQLPAGER_STRICT_RANGES", "false").strip().lower()
        return config.with_strict_ranges(strict in _TRUTHY)
