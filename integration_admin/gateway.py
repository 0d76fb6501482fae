"""Boundary between the editor and whatever stores and describes configuration."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .schemas.admin import (
    DescribedField,
    FieldMapping,
    IntegratableObjectInfo,
    ObjectRule,
    SystemConfig,
)
from .services import describe_svc, field_map_svc, object_rule_svc, system_svc


class AdminGateway(Protocol):
    """Request/response contract consumed by the editor.

    Every call may raise; the editor normalizes whatever comes back.
    """

    async def fetch_systems(self) -> list[SystemConfig]: ...

    async def persist_systems(self, systems: Sequence[SystemConfig]) -> None: ...

    async def fetch_object_rules(self) -> list[ObjectRule]: ...

    async def persist_object_rules(self, rules: Sequence[ObjectRule]) -> None: ...

    async def fetch_field_mappings(
        self, sobject_name: str, system_api_name: str
    ) -> list[FieldMapping]: ...

    async def persist_field_mappings(
        self, sobject_name: str, system_api_name: str, mappings: Sequence[FieldMapping]
    ) -> None: ...

    async def fetch_describable_fields(self, sobject_name: str) -> list[DescribedField]: ...

    async def fetch_integratable_objects(self) -> list[IntegratableObjectInfo]: ...


class DatabaseGateway:
    """In-process gateway backed by the reference SQLAlchemy services."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_systems(self) -> list[SystemConfig]:
        async with self._session_factory() as db:
            return [SystemConfig.model_validate(s) for s in await system_svc.list_systems(db)]

    async def persist_systems(self, systems: Sequence[SystemConfig]) -> None:
        async with self._session_factory() as db:
            await system_svc.upsert_systems(db, systems)

    async def fetch_object_rules(self) -> list[ObjectRule]:
        async with self._session_factory() as db:
            return [ObjectRule.model_validate(r) for r in await object_rule_svc.list_rules(db)]

    async def persist_object_rules(self, rules: Sequence[ObjectRule]) -> None:
        async with self._session_factory() as db:
            await object_rule_svc.upsert_rules(db, rules)

    async def fetch_field_mappings(
        self, sobject_name: str, system_api_name: str
    ) -> list[FieldMapping]:
        async with self._session_factory() as db:
            rows = await field_map_svc.list_mappings(db, sobject_name, system_api_name)
            return [FieldMapping.model_validate(m) for m in rows]

    async def persist_field_mappings(
        self, sobject_name: str, system_api_name: str, mappings: Sequence[FieldMapping]
    ) -> None:
        async with self._session_factory() as db:
            await field_map_svc.upsert_mappings(db, sobject_name, system_api_name, mappings)

    async def fetch_describable_fields(self, sobject_name: str) -> list[DescribedField]:
        async with self._session_factory() as db:
            return await describe_svc.describe_fields(db, sobject_name)

    async def fetch_integratable_objects(self) -> list[IntegratableObjectInfo]:
        async with self._session_factory() as db:
            objects = await describe_svc.list_objects(db)
            return [IntegratableObjectInfo.model_validate(o) for o in objects]
