"""Session-local draft collections for the three configuration tiers.

Each tier is held as an immutable tuple of row dicts. Edits never touch the
current tuple or row: they build a new tuple holding a new row and bump the
tier's version, so anything holding the previous snapshot keeps seeing it.
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..errors import (
    FieldValueError,
    ReadOnlyFieldError,
    RowNotFoundError,
    UnknownFieldError,
)

ROW_ID = "row_id"


class Tier(str, Enum):
    SYSTEMS = "systems"
    OBJECT_RULES = "object_rules"
    FIELD_MAPPINGS = "field_mappings"


class ValueKind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    TEXT = "text"


@dataclass(frozen=True)
class FieldSpec:
    kind: ValueKind = ValueKind.TEXT
    editable: bool = True
    # Editable only on rows added during this session (immutable natural keys).
    new_rows_only: bool = False


TEXT = FieldSpec()
BOOLEAN = FieldSpec(ValueKind.BOOLEAN)
CONTEXT = FieldSpec(editable=False)

FIELDS: dict[Tier, dict[str, FieldSpec]] = {
    Tier.SYSTEMS: {
        "developer_name": FieldSpec(new_rows_only=True),
        "label": TEXT,
        "is_active": BOOLEAN,
        "max_retries": FieldSpec(ValueKind.INTEGER),
    },
    Tier.OBJECT_RULES: {
        "developer_name": TEXT,
        "sobject_name": TEXT,
        "system_api_name": TEXT,
        "trigger_reason": TEXT,
        "is_active": BOOLEAN,
    },
    Tier.FIELD_MAPPINGS: {
        "developer_name": TEXT,
        "sobject_name": CONTEXT,
        "system_api_name": CONTEXT,
        "source_field_api": TEXT,
        "target_field_name": TEXT,
        "is_required": BOOLEAN,
        "data_type": TEXT,
    },
}

BLANK_ROWS: dict[Tier, dict[str, Any]] = {
    Tier.SYSTEMS: {"developer_name": "", "label": "", "is_active": True, "max_retries": None},
    Tier.OBJECT_RULES: {
        "developer_name": "",
        "sobject_name": "",
        "system_api_name": "",
        "trigger_reason": "",
        "is_active": True,
    },
    Tier.FIELD_MAPPINGS: {
        "developer_name": "",
        "sobject_name": "",
        "system_api_name": "",
        "source_field_api": "",
        "target_field_name": "",
        "is_required": False,
        "data_type": "String",
    },
}

_ROW_PREFIX = {Tier.SYSTEMS: "sys", Tier.OBJECT_RULES: "obj", Tier.FIELD_MAPPINGS: "fm"}

_TRUE = {"true", "1", "yes", "on", "checked"}
_FALSE = {"false", "0", "no", "off", "unchecked", ""}


def coerce_bool(raw: Any) -> bool:
    """Checkbox and toggle controls both report ``checked``; text forms are accepted too."""
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    if isinstance(raw, int):
        return raw != 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise FieldValueError(f"Expected a true/false value, got {raw!r}.")


def coerce_int(raw: Any) -> int | None:
    """Blank input clears the value; anything else must be a non-negative whole number."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise FieldValueError(f"Expected a number, got {raw!r}.")
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise FieldValueError(f"Expected a number, got {raw!r}.") from None
    if not number.is_integer():
        raise FieldValueError(f"Expected a whole number, got {raw!r}.")
    if number < 0:
        raise FieldValueError(f"Expected a non-negative number, got {raw!r}.")
    return int(number)


def coerce_text(raw: Any) -> str:
    return "" if raw is None else str(raw)


_COERCERS = {
    ValueKind.BOOLEAN: coerce_bool,
    ValueKind.INTEGER: coerce_int,
    ValueKind.TEXT: coerce_text,
}


def coerce(tier: Tier, field_name: str, raw: Any) -> Any:
    spec = FIELDS[tier].get(field_name)
    if spec is None:
        raise UnknownFieldError(f"{tier.value} has no field {field_name!r}.")
    try:
        return _COERCERS[spec.kind](raw)
    except FieldValueError as e:
        raise FieldValueError(f"{field_name}: {e.message}") from None


class DraftStore:
    """Holds the Systems, Object Rules and Field Mappings drafts.

    Rows are keyed by a session-local ``row_id``. Loaded rows reuse their
    developer name when it is present and unique in the batch; every other row
    gets a synthetic id from a per-store counter, so two rows created in the
    same instant still get distinct ids. Row ids never leave the store via
    ``payload`` and are never used for uniqueness checks.
    """

    def __init__(self) -> None:
        self._rows: dict[Tier, tuple[dict[str, Any], ...]] = {tier: () for tier in Tier}
        self._versions: dict[Tier, int] = {tier: 0 for tier in Tier}
        self._new_rows: dict[Tier, frozenset[str]] = {tier: frozenset() for tier in Tier}
        self._counter = itertools.count(1)

    # -- internals ---------------------------------------------------------

    def _next_id(self, tier: Tier, taken: set[str], *, new: bool = False) -> str:
        prefix = f"{_ROW_PREFIX[tier]}-new" if new else _ROW_PREFIX[tier]
        while True:
            row_id = f"{prefix}-{next(self._counter)}"
            if row_id not in taken:
                return row_id

    def _normalize(self, tier: Tier, record: Any) -> dict[str, Any]:
        if isinstance(record, BaseModel):
            data = record.model_dump()
        elif isinstance(record, Mapping):
            data = copy.deepcopy(dict(record))
        else:
            raise TypeError(f"Cannot load {type(record).__name__} into {tier.value}")
        row = dict(BLANK_ROWS[tier])
        row.update({k: v for k, v in data.items() if k in FIELDS[tier]})
        return row

    def _replace(self, tier: Tier, rows: tuple[dict[str, Any], ...]) -> None:
        self._rows[tier] = rows
        self._versions[tier] += 1

    def _index_of(self, tier: Tier, row_id: str) -> int:
        for index, row in enumerate(self._rows[tier]):
            if row[ROW_ID] == row_id:
                return index
        raise RowNotFoundError(f"No {tier.value} row with id {row_id!r}.")

    # -- public API --------------------------------------------------------

    def load(self, tier: Tier, records: Iterable[Any]) -> None:
        """Replace a tier wholesale with copies of ``records``."""
        rows: list[dict[str, Any]] = []
        taken: set[str] = set()
        for record in records:
            row = self._normalize(tier, record)
            key = row.get("developer_name") or ""
            row_id = key if key and key not in taken else self._next_id(tier, taken)
            taken.add(row_id)
            row[ROW_ID] = row_id
            rows.append(row)
        self._replace(tier, tuple(rows))
        self._new_rows[tier] = frozenset()

    def update_field(
        self,
        tier: Tier,
        row_id: str,
        field_name: str,
        raw_value: Any,
        derived: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Apply one edit (plus any derived companion values) as a new version.

        Returns a copy of the updated row.
        """
        spec = FIELDS[tier].get(field_name)
        if spec is None:
            raise UnknownFieldError(f"{tier.value} has no field {field_name!r}.")
        index = self._index_of(tier, row_id)
        if not spec.editable or (spec.new_rows_only and row_id not in self._new_rows[tier]):
            raise ReadOnlyFieldError(f"{field_name} cannot be changed on this row.")

        changes = {field_name: coerce(tier, field_name, raw_value)}
        for name, value in (derived or {}).items():
            changes[name] = coerce(tier, name, value)

        rows = self._rows[tier]
        row = {**rows[index], **changes}
        self._replace(tier, rows[:index] + (row,) + rows[index + 1:])
        return dict(row)

    def add_row(self, tier: Tier, defaults: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Append a blank row pre-filled with ``defaults``; returns a copy of it."""
        row = dict(BLANK_ROWS[tier])
        for name, value in (defaults or {}).items():
            row[name] = coerce(tier, name, value)
        taken = {r[ROW_ID] for r in self._rows[tier]}
        row[ROW_ID] = self._next_id(tier, taken, new=True)
        self._new_rows[tier] = self._new_rows[tier] | {row[ROW_ID]}
        self._replace(tier, self._rows[tier] + (row,))
        return dict(row)

    def restore(self, tier: Tier, rows: Iterable[Mapping[str, Any]]) -> list[str]:
        """Append copies of rows that were never persisted, e.g. after a reload.

        Restored rows keep their row id unless the reloaded tier now uses it,
        and count as added in this session.
        """
        taken = set(self.row_ids(tier))
        restored: list[dict[str, Any]] = []
        for record in rows:
            row = self._normalize(tier, record)
            row_id = record.get(ROW_ID)
            if not row_id or row_id in taken:
                row_id = self._next_id(tier, taken, new=True)
            taken.add(row_id)
            row[ROW_ID] = row_id
            restored.append(row)
        if restored:
            self._new_rows[tier] = self._new_rows[tier] | {row[ROW_ID] for row in restored}
            self._replace(tier, self._rows[tier] + tuple(restored))
        return [row[ROW_ID] for row in restored]

    def snapshot(self, tier: Tier) -> list[dict[str, Any]]:
        """Deep copy of the tier's current rows."""
        return copy.deepcopy(list(self._rows[tier]))

    def get_row(self, tier: Tier, row_id: str) -> dict[str, Any]:
        return copy.deepcopy(self._rows[tier][self._index_of(tier, row_id)])

    def row_ids(self, tier: Tier) -> list[str]:
        return [row[ROW_ID] for row in self._rows[tier]]

    def version(self, tier: Tier) -> int:
        return self._versions[tier]

    def is_new(self, tier: Tier, row_id: str) -> bool:
        return row_id in self._new_rows[tier]

    def payload(
        self, tier: Tier, rows: Iterable[Mapping[str, Any]] | None = None
    ) -> list[dict[str, Any]]:
        """Rows stripped of UI-only fields, ready for the persistence boundary."""
        source = self._rows[tier] if rows is None else rows
        return [{k: copy.deepcopy(v) for k, v in row.items() if k != ROW_ID} for row in source]
