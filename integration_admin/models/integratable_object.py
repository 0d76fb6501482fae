"""Registry of objects whose fields can be described and mapped."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class IntegratableObject(UUIDMixin, TimestampMixin, Base):
    """Binds an object api name to the table whose columns describe it."""

    __tablename__ = "integratable_object"

    api_name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    label: Mapped[str] = mapped_column(String(200))
    table_name: Mapped[str] = mapped_column(String(100))

    def __repr__(self) -> str:
        return f"<IntegratableObject {self.api_name!r} table={self.table_name!r}>"
