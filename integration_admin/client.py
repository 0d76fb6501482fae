"""HTTP gateway: talks to the admin JSON API over httpx."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from .config import settings
from .errors import GatewayError
from .schemas.admin import (
    DescribedField,
    FieldMapping,
    IntegratableObjectInfo,
    ObjectRule,
    SystemConfig,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/admin"


class AdminAPIClient:
    """Admin API client implementing the editor's gateway contract.

    Usage:
        async with AdminAPIClient() as api:
            editor = IntegrationAdminEditor(api)
            await editor.initialize()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.api_base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            headers={"Content-Type": "application/json"},
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
    ) -> Any:
        """Make an API request; non-2xx responses raise GatewayError with the body."""
        try:
            response = await self._client.request(
                method=method,
                url=f"{API_PREFIX}{path}",
                params=params,
                json=json,
            )
        except httpx.HTTPError as e:
            raise GatewayError(f"Admin API unreachable: {e}") from e

        if response.is_error:
            try:
                body = response.json() if response.content else None
            except ValueError:
                body = response.text
            logger.warning("%s %s failed with %s", method, path, response.status_code)
            raise GatewayError(
                f"API error: {response.status_code}", response.status_code, body
            )
        return response.json() if response.content else None

    @staticmethod
    def _dump(items: Sequence[Any]) -> list[dict]:
        return [item.model_dump(by_alias=True) for item in items]

    @staticmethod
    def _context(sobject_name: str, system_api_name: str) -> dict[str, str]:
        return {"sObjectName": sobject_name, "systemApiName": system_api_name}

    async def fetch_systems(self) -> list[SystemConfig]:
        data = await self._request("GET", "/systems")
        return [SystemConfig.model_validate(item) for item in data]

    async def persist_systems(self, systems: Sequence[SystemConfig]) -> None:
        await self._request("PUT", "/systems", json=self._dump(systems))

    async def fetch_object_rules(self) -> list[ObjectRule]:
        data = await self._request("GET", "/object-rules")
        return [ObjectRule.model_validate(item) for item in data]

    async def persist_object_rules(self, rules: Sequence[ObjectRule]) -> None:
        await self._request("PUT", "/object-rules", json=self._dump(rules))

    async def fetch_field_mappings(
        self, sobject_name: str, system_api_name: str
    ) -> list[FieldMapping]:
        data = await self._request(
            "GET", "/field-mappings", params=self._context(sobject_name, system_api_name)
        )
        return [FieldMapping.model_validate(item) for item in data]

    async def persist_field_mappings(
        self, sobject_name: str, system_api_name: str, mappings: Sequence[FieldMapping]
    ) -> None:
        await self._request(
            "PUT",
            "/field-mappings",
            params=self._context(sobject_name, system_api_name),
            json=self._dump(mappings),
        )

    async def fetch_describable_fields(self, sobject_name: str) -> list[DescribedField]:
        data = await self._request("GET", f"/objects/{quote(sobject_name, safe='')}/fields")
        return [DescribedField.model_validate(item) for item in data]

    async def fetch_integratable_objects(self) -> list[IntegratableObjectInfo]:
        data = await self._request("GET", "/objects")
        return [IntegratableObjectInfo.model_validate(item) for item in data]
