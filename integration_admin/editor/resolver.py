"""Cascading context resolution: tier-2 selection -> tier-3 draft rows."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .options import record_value

if TYPE_CHECKING:
    from ..gateway import AdminGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldContext:
    """The (object, system) pair scoping the field-mapping tier."""

    sobject_name: str
    system_api_name: str

    @property
    def is_complete(self) -> bool:
        return bool(self.sobject_name and self.system_api_name)

    def contains(self, row: Mapping[str, Any]) -> bool:
        return (
            row.get("sobject_name") == self.sobject_name
            and row.get("system_api_name") == self.system_api_name
        )


@dataclass(frozen=True)
class ContextResolution:
    context: FieldContext
    fields: tuple[Any, ...]
    mappings: tuple[dict[str, Any], ...]
    generation: int


def reconcile_data_types(
    mappings: Iterable[Any], field_types: Mapping[str, str]
) -> list[dict[str, Any]]:
    """Overwrite each mapping's data type from the fresh describe result.

    The stored value survives only when the source field is no longer
    described (e.g. it was dropped from the object's schema).
    """
    reconciled = []
    for mapping in mappings:
        row = mapping.model_dump() if isinstance(mapping, BaseModel) else dict(mapping)
        described = field_types.get(row.get("source_field_api") or "")
        if described:
            row["data_type"] = described
        reconciled.append(row)
    return reconciled


class ContextResolver:
    """Fetches describe + stored mappings for a context and joins them.

    Each call is tagged with a generation number. When a newer call has
    started by the time an older one settles, the older result (or failure)
    is discarded and ``resolve`` returns ``None``.
    """

    def __init__(self, gateway: AdminGateway):
        self._gateway = gateway
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def resolve(self, sobject_name: str, system_api_name: str) -> ContextResolution | None:
        self._generation += 1
        generation = self._generation
        context = FieldContext(sobject_name, system_api_name)

        # Both lookups run concurrently and are always awaited to settlement.
        fields, mappings = await asyncio.gather(
            self._gateway.fetch_describable_fields(sobject_name),
            self._gateway.fetch_field_mappings(sobject_name, system_api_name),
            return_exceptions=True,
        )

        if generation != self._generation:
            logger.debug(
                "Discarding stale resolution %d for %s / %s (current is %d)",
                generation, sobject_name, system_api_name, self._generation,
            )
            return None

        for outcome in (fields, mappings):
            if isinstance(outcome, BaseException):
                raise outcome

        field_types = {
            record_value(f, "api_name"): record_value(f, "data_type")
            for f in fields
            if record_value(f, "data_type", None)
        }
        reconciled = reconcile_data_types(mappings or [], field_types)
        return ContextResolution(
            context=context,
            fields=tuple(fields),
            mappings=tuple(reconciled),
            generation=generation,
        )
