"""System configuration service (upsert keyed by developer name)."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import InvalidSystemConfigError
from ..models.system import IntegrationSystemConfig
from ..schemas.admin import SystemConfig


async def list_systems(db: AsyncSession) -> list[IntegrationSystemConfig]:
    stmt = select(IntegrationSystemConfig).order_by(IntegrationSystemConfig.developer_name)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def upsert_systems(db: AsyncSession, systems: Sequence[SystemConfig]) -> int:
    """Insert or update systems by developer name. Returns rows written."""
    names = [s.developer_name for s in systems]
    if any(not name for name in names):
        raise InvalidSystemConfigError("Every system needs a developer name.")
    if len(set(names)) != len(names):
        raise InvalidSystemConfigError("Duplicate system developer names in save batch.")

    stmt = select(IntegrationSystemConfig).where(IntegrationSystemConfig.developer_name.in_(names))
    existing = {s.developer_name: s for s in (await db.execute(stmt)).scalars().all()}

    for dto in systems:
        row = existing.get(dto.developer_name)
        if row is None:
            row = IntegrationSystemConfig(developer_name=dto.developer_name)
            db.add(row)
        row.label = dto.label
        row.is_active = dto.is_active
        row.max_retries = dto.max_retries

    await db.commit()
    return len(systems)
