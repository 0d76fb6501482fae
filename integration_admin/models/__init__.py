"""Integration admin models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin
from .system import IntegrationSystemConfig
from .object_rule import IntegrationObjectRule
from .field_map import IntegrationFieldMapConfig
from .integratable_object import IntegratableObject

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "IntegrationSystemConfig",
    "IntegrationObjectRule",
    "IntegrationFieldMapConfig",
    "IntegratableObject",
]
