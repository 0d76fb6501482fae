"""Async test fixtures for integration admin tests using SQLite."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from integration_admin.database import create_tables, get_db
from integration_admin.gateway import DatabaseGateway
from integration_admin.schemas.admin import (
    DescribedField,
    FieldMapping,
    IntegratableObjectInfo,
    ObjectRule,
    SystemConfig,
)

OPPORTUNITY_DDL = """
CREATE TABLE opportunity (
    id INTEGER PRIMARY KEY,
    name VARCHAR(120) NOT NULL,
    amount NUMERIC(12, 2),
    probability REAL,
    close_date DATE,
    is_won BOOLEAN,
    description TEXT,
    last_activity_at DATETIME
)
"""


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await create_tables(eng)
    async with eng.begin() as conn:
        await conn.execute(text(OPPORTUNITY_DDL))
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def db_gateway(session_factory):
    return DatabaseGateway(session_factory)


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTPX async test client against the admin app."""
    from integration_admin.app import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api(session_factory):
    """AdminAPIClient wired to the app in-process."""
    from integration_admin.app import app
    from integration_admin.client import AdminAPIClient

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AdminAPIClient("http://test", transport=ASGITransport(app=app)) as c:
        yield c

    app.dependency_overrides.clear()


# ============================================================================
# In-memory gateway double
# ============================================================================

SYSTEMS = [
    SystemConfig(developer_name="BILLING", label="Billing", is_active=True, max_retries=3),
    SystemConfig(developer_name="ERP", label="ERP", is_active=False, max_retries=0),
]

OBJECTS = [
    IntegratableObjectInfo(label="Opportunity", api_name="Opportunity"),
    IntegratableObjectInfo(label="Account", api_name="Account"),
]

FIELDS = {
    "Opportunity": [
        DescribedField(label="Amount", api_name="Amount", data_type="Currency"),
        DescribedField(label="Close Date", api_name="CloseDate", data_type="Date"),
        DescribedField(label="Name", api_name="Name", data_type="String"),
    ],
    "Account": [
        DescribedField(label="Industry", api_name="Industry", data_type="Picklist"),
    ],
}


def make_gateway(
    systems=None,
    rules=None,
    objects=None,
    fields=None,
    mappings=None,
) -> MagicMock:
    """Gateway double; fetches return copies of the given data, persists record calls."""
    systems = SYSTEMS if systems is None else systems
    rules = [] if rules is None else rules
    objects = OBJECTS if objects is None else objects
    fields = FIELDS if fields is None else fields
    mappings = {} if mappings is None else mappings

    async def fetch_fields(sobject_name):
        return list(fields.get(sobject_name, []))

    async def fetch_mappings(sobject_name, system_api_name):
        return [m.model_copy() for m in mappings.get((sobject_name, system_api_name), [])]

    gateway = MagicMock()
    gateway.fetch_systems = AsyncMock(side_effect=lambda: [s.model_copy() for s in systems])
    gateway.fetch_object_rules = AsyncMock(side_effect=lambda: [r.model_copy() for r in rules])
    gateway.fetch_integratable_objects = AsyncMock(return_value=list(objects))
    gateway.fetch_describable_fields = AsyncMock(side_effect=fetch_fields)
    gateway.fetch_field_mappings = AsyncMock(side_effect=fetch_mappings)
    gateway.persist_systems = AsyncMock(return_value=None)
    gateway.persist_object_rules = AsyncMock(return_value=None)
    gateway.persist_field_mappings = AsyncMock(return_value=None)
    return gateway


@pytest.fixture
def gateway():
    return make_gateway(
        rules=[
            ObjectRule(
                developer_name="Opportunity_BILLING",
                sobject_name="Opportunity",
                system_api_name="BILLING",
                trigger_reason="Stage = Closed Won",
            ),
        ],
        mappings={
            ("Opportunity", "BILLING"): [
                FieldMapping(
                    developer_name="Opp_Amount",
                    sobject_name="Opportunity",
                    system_api_name="BILLING",
                    source_field_api="Amount",
                    target_field_name="total",
                    data_type="Text",
                ),
                FieldMapping(
                    developer_name="Opp_Legacy",
                    sobject_name="Opportunity",
                    system_api_name="BILLING",
                    source_field_api="Legacy_Code__c",
                    target_field_name="legacy",
                    data_type="Legacy",
                ),
            ],
        },
    )
