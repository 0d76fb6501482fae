"""Integration system configuration (tier 1)."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class IntegrationSystemConfig(UUIDMixin, TimestampMixin, Base):
    """An external system that object rules can forward events to."""

    __tablename__ = "integration_system_config"

    developer_name: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    label: Mapped[str] = mapped_column(String(200), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    max_retries: Mapped[int | None] = mapped_column(Integer, default=None)

    def __repr__(self) -> str:
        return f"<IntegrationSystemConfig {self.developer_name!r}>"
