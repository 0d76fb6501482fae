"""Cascading context resolution and data-type reconciliation."""

from __future__ import annotations

import asyncio

import pytest
from conftest import make_gateway

from integration_admin.editor.resolver import ContextResolver, FieldContext, reconcile_data_types
from integration_admin.errors import GatewayError
from integration_admin.schemas.admin import DescribedField, FieldMapping


def test_fresh_description_overrides_stored_type():
    mappings = [FieldMapping(source_field_api="Amount", data_type="Legacy")]
    rows = reconcile_data_types(mappings, {"Amount": "Number"})
    assert rows[0]["data_type"] == "Number"


def test_stored_type_kept_when_field_not_described():
    mappings = [{"source_field_api": "Gone__c", "data_type": "Text"}]
    rows = reconcile_data_types(mappings, {"Amount": "Number"})
    assert rows[0]["data_type"] == "Text"


@pytest.mark.asyncio
async def test_resolve_joins_both_lookups(gateway):
    resolver = ContextResolver(gateway)

    resolution = await resolver.resolve("Opportunity", "BILLING")

    assert resolution.context == FieldContext("Opportunity", "BILLING")
    assert [f.api_name for f in resolution.fields] == ["Amount", "CloseDate", "Name"]
    by_field = {m["source_field_api"]: m for m in resolution.mappings}
    assert by_field["Amount"]["data_type"] == "Currency"
    assert by_field["Legacy_Code__c"]["data_type"] == "Legacy"
    gateway.fetch_describable_fields.assert_awaited_once_with("Opportunity")
    gateway.fetch_field_mappings.assert_awaited_once_with("Opportunity", "BILLING")


@pytest.mark.asyncio
async def test_lookups_overlap_in_time():
    both_started = asyncio.Event()
    started: list[str] = []

    async def fetch_fields(sobject_name):
        started.append("fields")
        if len(started) == 2:
            both_started.set()
        await asyncio.wait_for(both_started.wait(), timeout=1)
        return []

    async def fetch_mappings(sobject_name, system_api_name):
        started.append("mappings")
        if len(started) == 2:
            both_started.set()
        await asyncio.wait_for(both_started.wait(), timeout=1)
        return []

    gateway = make_gateway()
    gateway.fetch_describable_fields.side_effect = fetch_fields
    gateway.fetch_field_mappings.side_effect = fetch_mappings

    resolution = await ContextResolver(gateway).resolve("Opportunity", "BILLING")
    assert resolution is not None
    assert sorted(started) == ["fields", "mappings"]


@pytest.mark.asyncio
async def test_either_failure_fails_the_whole_resolution(gateway):
    gateway.fetch_field_mappings.side_effect = GatewayError("mappings down")

    with pytest.raises(GatewayError, match="mappings down"):
        await ContextResolver(gateway).resolve("Opportunity", "BILLING")

    gateway.fetch_describable_fields.assert_awaited_once()


@pytest.mark.asyncio
async def test_stale_resolution_is_discarded():
    release_account = asyncio.Event()

    async def fetch_fields(sobject_name):
        if sobject_name == "Account":
            await release_account.wait()
        return [DescribedField(label="X", api_name="X", data_type="String")]

    gateway = make_gateway()
    gateway.fetch_describable_fields.side_effect = fetch_fields
    resolver = ContextResolver(gateway)

    older = asyncio.create_task(resolver.resolve("Account", "ERP"))
    await asyncio.sleep(0)
    newer = await resolver.resolve("Opportunity", "BILLING")
    release_account.set()

    assert newer.context == FieldContext("Opportunity", "BILLING")
    assert await older is None
    assert resolver.generation == 2


@pytest.mark.asyncio
async def test_stale_failure_is_discarded_too():
    release = asyncio.Event()

    async def fetch_fields(sobject_name):
        if sobject_name == "Account":
            await release.wait()
            raise GatewayError("late failure")
        return []

    gateway = make_gateway()
    gateway.fetch_describable_fields.side_effect = fetch_fields
    resolver = ContextResolver(gateway)

    older = asyncio.create_task(resolver.resolve("Account", "ERP"))
    await asyncio.sleep(0)
    await resolver.resolve("Opportunity", "BILLING")
    release.set()

    assert await older is None
