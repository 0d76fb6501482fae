"""JSON API exposing the admin boundary operations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import UnknownObjectError, ValidationError
from ..schemas.admin import (
    DescribedField,
    FieldMapping,
    IntegratableObjectInfo,
    ObjectRule,
    SaveResult,
    SystemConfig,
)
from ..services import describe_svc, field_map_svc, object_rule_svc, system_svc

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/systems", response_model=list[SystemConfig])
async def list_systems(db: AsyncSession = Depends(get_db)):
    return [SystemConfig.model_validate(s) for s in await system_svc.list_systems(db)]


@router.put("/systems", response_model=SaveResult)
async def save_systems(systems: list[SystemConfig], db: AsyncSession = Depends(get_db)):
    try:
        saved = await system_svc.upsert_systems(db, systems)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return SaveResult(saved=saved)


@router.get("/object-rules", response_model=list[ObjectRule])
async def list_object_rules(db: AsyncSession = Depends(get_db)):
    return [ObjectRule.model_validate(r) for r in await object_rule_svc.list_rules(db)]


@router.put("/object-rules", response_model=SaveResult)
async def save_object_rules(rules: list[ObjectRule], db: AsyncSession = Depends(get_db)):
    try:
        saved = await object_rule_svc.upsert_rules(db, rules)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return SaveResult(saved=saved)


@router.get("/field-mappings", response_model=list[FieldMapping])
async def list_field_mappings(
    sobject_name: str = Query(alias="sObjectName"),
    system_api_name: str = Query(alias="systemApiName"),
    db: AsyncSession = Depends(get_db),
):
    rows = await field_map_svc.list_mappings(db, sobject_name, system_api_name)
    return [FieldMapping.model_validate(m) for m in rows]


@router.put("/field-mappings", response_model=SaveResult)
async def save_field_mappings(
    mappings: list[FieldMapping],
    sobject_name: str = Query(alias="sObjectName"),
    system_api_name: str = Query(alias="systemApiName"),
    db: AsyncSession = Depends(get_db),
):
    try:
        saved = await field_map_svc.upsert_mappings(db, sobject_name, system_api_name, mappings)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return SaveResult(saved=saved)


@router.get("/objects", response_model=list[IntegratableObjectInfo])
async def list_integratable_objects(db: AsyncSession = Depends(get_db)):
    return [IntegratableObjectInfo.model_validate(o) for o in await describe_svc.list_objects(db)]


@router.get("/objects/{api_name:path}/fields", response_model=list[DescribedField])
async def describe_object_fields(api_name: str, db: AsyncSession = Depends(get_db)):
    try:
        return await describe_svc.describe_fields(db, api_name)
    except UnknownObjectError as e:
        raise HTTPException(status_code=404, detail=e.message)
