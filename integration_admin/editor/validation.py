"""Per-tier invariants checked before anything is persisted."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..errors import (
    DuplicateFieldMappingError,
    DuplicateObjectRuleError,
    InvalidSystemConfigError,
)
from .resolver import FieldContext


def validate_systems(rows: Iterable[Mapping[str, Any]]) -> None:
    seen: set[str] = set()
    for row in rows:
        name = row.get("developer_name") or ""
        if not name:
            raise InvalidSystemConfigError("Every system needs a developer name.")
        if name in seen:
            raise InvalidSystemConfigError(f"Duplicate system developer name {name!r}.")
        seen.add(name)
        retries = row.get("max_retries")
        if retries is not None and retries < 0:
            raise InvalidSystemConfigError(f"{name}: max retries cannot be negative.")


def is_complete_rule(row: Mapping[str, Any]) -> bool:
    return bool(row.get("sobject_name") and row.get("system_api_name"))


def is_complete_mapping(row: Mapping[str, Any]) -> bool:
    return bool(row.get("source_field_api"))


def validate_object_rules(rows: Iterable[Mapping[str, Any]]) -> None:
    """One rule per (object, system); rows missing either half are incomplete, not duplicates."""
    seen: set[tuple[str, str]] = set()
    for row in rows:
        if not is_complete_rule(row):
            continue
        sobject_name = row["sobject_name"]
        system_api_name = row["system_api_name"]
        key = (sobject_name, system_api_name)
        if key in seen:
            raise DuplicateObjectRuleError(
                sobject_name, system_api_name, developer_name=row.get("developer_name") or ""
            )
        seen.add(key)


def rows_in_context(
    rows: Iterable[Mapping[str, Any]], context: FieldContext
) -> list[Mapping[str, Any]]:
    return [row for row in rows if context.contains(row)]


def validate_field_mappings(rows: Iterable[Mapping[str, Any]], context: FieldContext) -> None:
    """A source field may be mapped once per context; blank source fields are skipped."""
    seen: set[str] = set()
    for row in rows_in_context(rows, context):
        if not is_complete_mapping(row):
            continue
        field = row["source_field_api"]
        if field in seen:
            raise DuplicateFieldMappingError(field)
        seen.add(field)
