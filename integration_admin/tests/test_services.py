"""Reference backend services: natural-key upserts and describe."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from integration_admin.errors import (
    DuplicateFieldMappingError,
    DuplicateObjectRuleError,
    InvalidSystemConfigError,
    UnknownObjectError,
)
from integration_admin.schemas.admin import FieldMapping, ObjectRule, SystemConfig
from integration_admin.services import describe_svc, field_map_svc, object_rule_svc, system_svc


@pytest.mark.asyncio
async def test_upsert_systems_by_developer_name(db: AsyncSession):
    await system_svc.upsert_systems(db, [SystemConfig(developer_name="BILLING", label="Billing")])
    await system_svc.upsert_systems(db, [
        SystemConfig(developer_name="BILLING", label="Billing v2", is_active=False, max_retries=5),
        SystemConfig(developer_name="ERP", label="ERP"),
    ])

    systems = await system_svc.list_systems(db)
    assert [s.developer_name for s in systems] == ["BILLING", "ERP"]
    assert systems[0].label == "Billing v2"
    assert systems[0].is_active is False
    assert systems[0].max_retries == 5


@pytest.mark.asyncio
async def test_upsert_systems_requires_developer_name(db: AsyncSession):
    with pytest.raises(InvalidSystemConfigError):
        await system_svc.upsert_systems(db, [SystemConfig(developer_name="")])


@pytest.mark.asyncio
async def test_upsert_rules_by_object_and_system(db: AsyncSession):
    await object_rule_svc.upsert_rules(db, [
        ObjectRule(sobject_name="Opportunity", system_api_name="BILLING", trigger_reason="Won"),
    ])
    saved = await object_rule_svc.upsert_rules(db, [
        ObjectRule(sobject_name="Opportunity", system_api_name="BILLING", is_active=False),
        ObjectRule(sobject_name="Account", system_api_name=""),
    ])

    rules = await object_rule_svc.list_rules(db)
    assert saved == 1
    assert len(rules) == 1
    assert rules[0].developer_name == "Opportunity_BILLING"
    assert rules[0].is_active is False
    assert rules[0].trigger_reason == ""


@pytest.mark.asyncio
async def test_upsert_rules_rejects_duplicate_pairs(db: AsyncSession):
    rule = ObjectRule(sobject_name="Opportunity", system_api_name="BILLING")
    with pytest.raises(DuplicateObjectRuleError):
        await object_rule_svc.upsert_rules(db, [rule, rule])
    assert await object_rule_svc.list_rules(db) == []


@pytest.mark.asyncio
async def test_upsert_mappings_scoped_to_context(db: AsyncSession):
    await field_map_svc.upsert_mappings(db, "Opportunity", "BILLING", [
        FieldMapping(source_field_api="amount", target_field_name="total", data_type="Decimal"),
        FieldMapping(source_field_api="", target_field_name="ignored"),
    ])
    await field_map_svc.upsert_mappings(db, "Opportunity", "BILLING", [
        FieldMapping(source_field_api="amount", target_field_name="grand_total", is_required=True),
    ])
    await field_map_svc.upsert_mappings(db, "Opportunity", "ERP", [
        FieldMapping(source_field_api="amount", target_field_name="value"),
    ])

    billing = await field_map_svc.list_mappings(db, "Opportunity", "BILLING")
    assert len(billing) == 1
    assert billing[0].target_field_name == "grand_total"
    assert billing[0].is_required is True
    assert billing[0].sobject_name == "Opportunity"
    assert billing[0].developer_name == "Opportunity_BILLING_amount"
    assert len(await field_map_svc.list_mappings(db, "Opportunity", "ERP")) == 1


@pytest.mark.asyncio
async def test_upsert_mappings_rejects_duplicate_fields(db: AsyncSession):
    mapping = FieldMapping(source_field_api="amount")
    with pytest.raises(DuplicateFieldMappingError):
        await field_map_svc.upsert_mappings(db, "Opportunity", "BILLING", [mapping, mapping])


@pytest.mark.asyncio
async def test_describe_reflects_registered_table(db: AsyncSession):
    await describe_svc.register_object(db, "Opportunity", "opportunity", label="Opportunity")

    fields = {f.api_name: f for f in await describe_svc.describe_fields(db, "Opportunity")}

    assert fields["name"].data_type == "String"
    assert fields["amount"].data_type == "Decimal"
    assert fields["probability"].data_type == "Double"
    assert fields["close_date"].data_type == "Date"
    assert fields["is_won"].data_type == "Boolean"
    assert fields["description"].data_type == "TextArea"
    assert fields["last_activity_at"].data_type == "DateTime"
    assert fields["id"].data_type == "Integer"
    assert fields["close_date"].label == "Close Date"


@pytest.mark.asyncio
async def test_register_object_repoints_existing(db: AsyncSession):
    await describe_svc.register_object(db, "Opportunity", "opportunity")
    obj = await describe_svc.register_object(db, "Opportunity", "opportunity_v2", label="Deals")

    assert obj.table_name == "opportunity_v2"
    assert obj.label == "Deals"
    assert len(await describe_svc.list_objects(db)) == 1


@pytest.mark.asyncio
async def test_describe_unknown_object(db: AsyncSession):
    with pytest.raises(UnknownObjectError):
        await describe_svc.describe_fields(db, "Nope")


@pytest.mark.asyncio
async def test_describe_missing_table(db: AsyncSession):
    await describe_svc.register_object(db, "Ghost", "no_such_table")
    with pytest.raises(UnknownObjectError, match="missing table"):
        await describe_svc.describe_fields(db, "Ghost")
