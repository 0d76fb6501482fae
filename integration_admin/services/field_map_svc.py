"""Field mapping service (upsert keyed by object + system + source field)."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import DuplicateFieldMappingError
from ..models.field_map import IntegrationFieldMapConfig
from ..schemas.admin import FieldMapping


async def list_mappings(
    db: AsyncSession, sobject_name: str, system_api_name: str
) -> list[IntegrationFieldMapConfig]:
    stmt = (
        select(IntegrationFieldMapConfig)
        .where(
            IntegrationFieldMapConfig.sobject_name == sobject_name,
            IntegrationFieldMapConfig.system_api_name == system_api_name,
        )
        .order_by(IntegrationFieldMapConfig.source_field_api)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def upsert_mappings(
    db: AsyncSession,
    sobject_name: str,
    system_api_name: str,
    mappings: Sequence[FieldMapping],
) -> int:
    """Insert or update the mappings of one object + system context.

    Every row is written into the given context regardless of the context
    fields it carries. Rows without a source field are skipped.
    """
    complete = [m for m in mappings if m.source_field_api]
    seen: set[str] = set()
    for mapping in complete:
        if mapping.source_field_api in seen:
            raise DuplicateFieldMappingError(mapping.source_field_api)
        seen.add(mapping.source_field_api)

    existing = {
        m.source_field_api: m for m in await list_mappings(db, sobject_name, system_api_name)
    }

    for dto in complete:
        row = existing.get(dto.source_field_api)
        if row is None:
            row = IntegrationFieldMapConfig(
                sobject_name=sobject_name,
                system_api_name=system_api_name,
                source_field_api=dto.source_field_api,
            )
            db.add(row)
        row.developer_name = dto.developer_name or row.developer_name or (
            f"{sobject_name}_{system_api_name}_{dto.source_field_api}"
        )
        row.target_field_name = dto.target_field_name
        row.is_required = dto.is_required
        row.data_type = dto.data_type

    await db.commit()
    return len(complete)
