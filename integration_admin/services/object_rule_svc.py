"""Object rule service (upsert keyed by object + system)."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import DuplicateObjectRuleError
from ..models.object_rule import IntegrationObjectRule
from ..schemas.admin import ObjectRule


def default_developer_name(sobject_name: str, system_api_name: str) -> str:
    return f"{sobject_name}_{system_api_name}"


async def list_rules(db: AsyncSession) -> list[IntegrationObjectRule]:
    stmt = select(IntegrationObjectRule).order_by(
        IntegrationObjectRule.sobject_name, IntegrationObjectRule.system_api_name
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def upsert_rules(db: AsyncSession, rules: Sequence[ObjectRule]) -> int:
    """Insert or update rules by (object, system).

    Incomplete rows (no object or no system) are skipped. Blank developer
    names are filled in as ``<object>_<system>``.
    """
    complete = [r for r in rules if r.sobject_name and r.system_api_name]
    seen: set[tuple[str, str]] = set()
    for rule in complete:
        key = (rule.sobject_name, rule.system_api_name)
        if key in seen:
            raise DuplicateObjectRuleError(*key, developer_name=rule.developer_name)
        seen.add(key)

    existing = {(r.sobject_name, r.system_api_name): r for r in await list_rules(db)}

    for dto in complete:
        row = existing.get((dto.sobject_name, dto.system_api_name))
        if row is None:
            row = IntegrationObjectRule(
                sobject_name=dto.sobject_name,
                system_api_name=dto.system_api_name,
            )
            db.add(row)
        row.developer_name = dto.developer_name or row.developer_name or default_developer_name(
            dto.sobject_name, dto.system_api_name
        )
        row.trigger_reason = dto.trigger_reason
        row.is_active = dto.is_active

    await db.commit()
    return len(complete)
