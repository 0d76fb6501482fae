"""The admin editor: one session over the three configuration tiers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ..config import settings
from ..errors import AdminError, ValidationError, extract_error
from ..schemas.admin import FieldMapping, ObjectRule, SystemConfig
from .drafts import DraftStore, Tier
from .options import OptionCache
from .resolver import ContextResolution, ContextResolver, FieldContext
from .validation import (
    is_complete_mapping,
    is_complete_rule,
    rows_in_context,
    validate_field_mappings,
    validate_object_rules,
    validate_systems,
)

if TYPE_CHECKING:
    from ..gateway import AdminGateway

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    SYSTEMS = "systems"
    MAPPINGS = "mappings"
    FIELDS = "fields"


class IntegrationAdminEditor:
    """Holds the drafts, lookups and UI state for one editing session.

    Every public operation catches its own failures and reports them through
    ``error_message``; nothing propagates to the caller. Saves and lookups
    return ``True`` on success so callers can chain without inspecting state.
    """

    def __init__(
        self,
        gateway: AdminGateway,
        *,
        refresh_after_save: bool | None = None,
        default_data_type: str | None = None,
    ):
        self.gateway = gateway
        self.options = OptionCache()
        self.drafts = DraftStore()
        self.resolver = ContextResolver(gateway)
        self.refresh_after_save = (
            settings.refresh_after_save if refresh_after_save is None else refresh_after_save
        )
        self.default_data_type = default_data_type or settings.default_field_data_type

        self.active_tab = Tab.SYSTEMS
        self.context: FieldContext | None = None
        self.error_message: str | None = None
        self._pending = 0

    # -- UI state ----------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._pending > 0

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    def _fail(self, error: Any, action: str) -> None:
        self.error_message = extract_error(error)
        logger.warning("%s failed: %s", action, self.error_message)

    def change_tab(self, tab: Tab | str) -> None:
        self.active_tab = Tab(tab)
        self.error_message = None

    # -- lookups -----------------------------------------------------------

    def _apply_systems(self, systems: list[SystemConfig]) -> None:
        self.drafts.load(Tier.SYSTEMS, systems)
        self.options.load_systems(systems)

    async def initialize(self) -> None:
        """Fetch systems, object rules and integratable objects concurrently.

        Each lookup is applied on its own; a failing one leaves its collection
        untouched and surfaces its error.
        """
        self.error_message = None
        with self._busy():
            systems, rules, objects = await asyncio.gather(
                self.gateway.fetch_systems(),
                self.gateway.fetch_object_rules(),
                self.gateway.fetch_integratable_objects(),
                return_exceptions=True,
            )

        for name, outcome, apply in (
            ("Loading systems", systems, self._apply_systems),
            ("Loading object rules", rules, lambda r: self.drafts.load(Tier.OBJECT_RULES, r)),
            ("Loading integratable objects", objects, self.options.load_objects),
        ):
            if isinstance(outcome, BaseException):
                self._fail(outcome, name)
            else:
                apply(outcome)

    async def _lookup(self, action: str, fetch: Callable[[], Awaitable[Any]], apply) -> bool:
        with self._busy():
            try:
                result = await fetch()
            except Exception as e:
                self._fail(e, action)
                return False
        apply(result)
        return True

    async def load_systems(self) -> bool:
        return await self._lookup("Loading systems", self.gateway.fetch_systems, self._apply_systems)

    async def load_object_rules(self) -> bool:
        return await self._lookup(
            "Loading object rules",
            self.gateway.fetch_object_rules,
            lambda rules: self.drafts.load(Tier.OBJECT_RULES, rules),
        )

    async def load_integratable_objects(self) -> bool:
        return await self._lookup(
            "Loading integratable objects",
            self.gateway.fetch_integratable_objects,
            self.options.load_objects,
        )

    # -- edits -------------------------------------------------------------

    def _update(self, tier: Tier, row_id: str, field_name: str, value: Any, derived=None) -> bool:
        try:
            self.drafts.update_field(tier, row_id, field_name, value, derived=derived)
        except AdminError as e:
            self._fail(e, f"Editing {tier.value}.{field_name}")
            return False
        return True

    def update_system(self, row_id: str, field_name: str, value: Any) -> bool:
        return self._update(Tier.SYSTEMS, row_id, field_name, value)

    def update_object_rule(self, row_id: str, field_name: str, value: Any) -> bool:
        return self._update(Tier.OBJECT_RULES, row_id, field_name, value)

    def update_field_mapping(self, row_id: str, field_name: str, value: Any) -> bool:
        derived = None
        if field_name == "source_field_api":
            described = self.options.data_type_for("" if value is None else str(value))
            if described:
                derived = {"data_type": described}
        return self._update(Tier.FIELD_MAPPINGS, row_id, field_name, value, derived=derived)

    def add_system(self) -> str:
        return self.drafts.add_row(Tier.SYSTEMS)["row_id"]

    def add_object_rule(self) -> str:
        row = self.drafts.add_row(
            Tier.OBJECT_RULES,
            {
                "sobject_name": self.options.default_object,
                "system_api_name": self.options.default_system,
                "is_active": True,
            },
        )
        return row["row_id"]

    @property
    def can_add_field_mapping(self) -> bool:
        return self.context is not None and self.context.is_complete

    def add_field_mapping(self) -> str | None:
        if not self.can_add_field_mapping:
            return None
        row = self.drafts.add_row(
            Tier.FIELD_MAPPINGS,
            {
                "sobject_name": self.context.sobject_name,
                "system_api_name": self.context.system_api_name,
                "data_type": self.default_data_type,
            },
        )
        return row["row_id"]

    # -- cascading context -------------------------------------------------

    async def edit_fields(self, row_id: str) -> bool:
        """Open the field-mapping tier for the object rule ``row_id``."""
        try:
            rule = self.drafts.get_row(Tier.OBJECT_RULES, row_id)
        except AdminError as e:
            self._fail(e, "Opening field mappings")
            return False
        return await self.open_context(rule["sobject_name"], rule["system_api_name"])

    async def open_context(self, sobject_name: str, system_api_name: str) -> bool:
        self.active_tab = Tab.FIELDS
        self.error_message = None
        if not sobject_name or not system_api_name:
            self.error_message = "Select an object and a system before editing field mappings."
            return False

        with self._busy():
            try:
                resolution = await self.resolver.resolve(sobject_name, system_api_name)
            except Exception as e:
                self._fail(e, f"Resolving {sobject_name} / {system_api_name}")
                return False
        if resolution is None:
            return False
        self._apply_resolution(resolution)
        return True

    def _apply_resolution(self, resolution: ContextResolution) -> None:
        self.options.load_fields(resolution.fields)
        self.drafts.load(Tier.FIELD_MAPPINGS, resolution.mappings)
        self.context = resolution.context

    # -- saves -------------------------------------------------------------

    def _draft_marker(self, tier: Tier) -> tuple[int, ...]:
        """Changes whenever the tier's draft (or the context feeding it) moves."""
        if tier is Tier.FIELD_MAPPINGS:
            return (self.drafts.version(tier), self.resolver.generation)
        return (self.drafts.version(tier),)

    async def _save(
        self,
        tier: Tier,
        rows: list[dict[str, Any]],
        validate: Callable[[list[dict[str, Any]]], None],
        dto: type[BaseModel],
        persist: Callable[[list[Any]], Awaitable[Any]],
        refresh: Callable[[], Awaitable[bool]],
        is_complete: Callable[[dict[str, Any]], bool] | None = None,
    ) -> bool:
        self.error_message = None
        try:
            validate(rows)
        except ValidationError as e:
            self._fail(e, f"Saving {tier.value}")
            return False

        payload = self.drafts.payload(tier, rows)
        # The backend skips incomplete rows; they must survive the reload.
        unsaved = [row for row in rows if not is_complete(row)] if is_complete else []
        marker = self._draft_marker(tier)
        with self._busy():
            try:
                await persist([dto.model_validate(item) for item in payload])
            except Exception as e:
                self._fail(e, f"Saving {tier.value}")
                return False

        logger.info("Saved %d %s row(s)", len(payload), tier.value)
        if not self.refresh_after_save:
            return True
        if self._draft_marker(tier) != marker:
            logger.debug("Skipping %s reload: draft changed while saving", tier.value)
            return True
        if await refresh():
            self.drafts.restore(tier, unsaved)
        return True

    async def save_systems(self) -> bool:
        return await self._save(
            Tier.SYSTEMS,
            self.drafts.snapshot(Tier.SYSTEMS),
            validate_systems,
            SystemConfig,
            self.gateway.persist_systems,
            self.load_systems,
        )

    async def save_object_rules(self) -> bool:
        return await self._save(
            Tier.OBJECT_RULES,
            self.drafts.snapshot(Tier.OBJECT_RULES),
            validate_object_rules,
            ObjectRule,
            self.gateway.persist_object_rules,
            self.load_object_rules,
            is_complete=is_complete_rule,
        )

    async def save_field_mappings(self) -> bool:
        """Save the active context's mappings; a no-op when no context is open."""
        if not self.can_add_field_mapping:
            return False
        context = self.context
        rows = rows_in_context(self.drafts.snapshot(Tier.FIELD_MAPPINGS), context)

        async def persist(mappings: list[FieldMapping]) -> None:
            await self.gateway.persist_field_mappings(
                context.sobject_name, context.system_api_name, mappings
            )

        return await self._save(
            Tier.FIELD_MAPPINGS,
            rows,
            lambda rs: validate_field_mappings(rs, context),
            FieldMapping,
            persist,
            lambda: self.open_context(context.sobject_name, context.system_api_name),
            is_complete=is_complete_mapping,
        )
