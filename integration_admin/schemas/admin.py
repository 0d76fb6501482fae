"""Boundary DTOs exchanged between the editor and the admin backend.

Attribute names are snake_case; the JSON form uses the camelCase names the
integration pipeline has always used (``developerName``, ``sObjectName``...).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class _DTO(BaseModel):
    model_config = {"populate_by_name": True, "from_attributes": True}


class SystemConfig(_DTO):
    developer_name: str = Field("", alias="developerName")
    label: str = ""
    is_active: bool = Field(True, alias="isActive")
    max_retries: int | None = Field(None, alias="maxRetries", ge=0)


class ObjectRule(_DTO):
    developer_name: str = Field("", alias="developerName")
    sobject_name: str = Field("", alias="sObjectName")
    system_api_name: str = Field("", alias="systemApiName")
    trigger_reason: str = Field("", alias="triggerReason")
    is_active: bool = Field(True, alias="isActive")


class FieldMapping(_DTO):
    developer_name: str = Field("", alias="developerName")
    sobject_name: str = Field("", alias="sObjectName")
    system_api_name: str = Field("", alias="systemApiName")
    source_field_api: str = Field("", alias="sourceFieldAPI")
    target_field_name: str = Field("", alias="targetFieldName")
    is_required: bool = Field(False, alias="isRequired")
    data_type: str = Field("String", alias="dataType")


class DescribedField(_DTO):
    label: str
    api_name: str = Field(alias="apiName")
    data_type: str = Field(alias="dataType")


class IntegratableObjectInfo(_DTO):
    label: str
    api_name: str = Field(alias="apiName")


class SaveResult(BaseModel):
    saved: int = 0
