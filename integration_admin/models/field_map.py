"""Field mappings (tier 3): source field -> target attribute per object + system."""

from __future__ import annotations

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class IntegrationFieldMapConfig(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "integration_field_map_config"
    __table_args__ = (
        UniqueConstraint(
            "sobject_name", "system_api_name", "source_field_api",
            name="uq_field_map_object_system_field",
        ),
    )

    developer_name: Mapped[str] = mapped_column(String(80), default="")
    sobject_name: Mapped[str] = mapped_column(String(100), index=True)
    system_api_name: Mapped[str] = mapped_column(String(80), index=True)
    source_field_api: Mapped[str] = mapped_column(String(100))
    target_field_name: Mapped[str] = mapped_column(String(200), default="")
    is_required: Mapped[bool] = mapped_column(Boolean, default=False)
    data_type: Mapped[str] = mapped_column(String(50), default="String")  # derived from describe

    def __repr__(self) -> str:
        return f"<IntegrationFieldMapConfig {self.sobject_name}.{self.source_field_api}>"
