"""Liveness and readiness probes for the admin API."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models import Base

router = APIRouter()

SERVICE = "integration-admin"


async def missing_admin_tables(db: AsyncSession) -> list[str]:
    """Admin tables declared by the models but absent from the database."""
    conn = await db.connection()
    existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    return sorted(set(Base.metadata.tables) - existing)


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "service": SERVICE}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready once the three tiers and the object registry can be served."""
    missing = await missing_admin_tables(db)
    if missing:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "service": SERVICE, "missing_tables": missing},
        )
    return {"status": "ready", "service": SERVICE, "tables": len(Base.metadata.tables)}
