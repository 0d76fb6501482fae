"""Cascading three-tier configuration editor."""

from .drafts import DraftStore, Tier
from .options import Option, OptionCache
from .resolver import ContextResolution, ContextResolver, FieldContext, reconcile_data_types
from .session import IntegrationAdminEditor, Tab

__all__ = [
    "ContextResolution",
    "ContextResolver",
    "DraftStore",
    "FieldContext",
    "IntegrationAdminEditor",
    "Option",
    "OptionCache",
    "Tab",
    "Tier",
    "reconcile_data_types",
]
