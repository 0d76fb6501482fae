"""FastAPI application for the integration admin API."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev)
    if "sqlite" in settings.database_url:
        from .database import create_tables

        await create_tables()
    yield


app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
)

from .routers import admin, health  # noqa: E402

app.include_router(admin.router)
app.include_router(health.router)
