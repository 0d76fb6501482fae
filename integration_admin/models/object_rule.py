"""Object rules (tier 2): object X fires events toward system Y."""

from __future__ import annotations

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class IntegrationObjectRule(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "integration_object_rule"
    __table_args__ = (
        UniqueConstraint("sobject_name", "system_api_name", name="uq_rule_object_system"),
    )

    developer_name: Mapped[str] = mapped_column(String(80), default="")
    sobject_name: Mapped[str] = mapped_column(String(100), index=True)
    system_api_name: Mapped[str] = mapped_column(String(80), index=True)
    trigger_reason: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<IntegrationObjectRule {self.sobject_name!r}->{self.system_api_name!r}>"
