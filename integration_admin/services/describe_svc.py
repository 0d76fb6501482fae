"""Describe service: integratable objects and their reflected fields."""

from __future__ import annotations

from sqlalchemy import inspect, select, types
from sqlalchemy.exc import NoSuchTableError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import UnknownObjectError
from ..models.integratable_object import IntegratableObject
from ..schemas.admin import DescribedField

# Checked in order: subclasses before their parents (Float < Numeric, Text < String).
_TYPE_CLASSES: list[tuple[type[types.TypeEngine], str]] = [
    (types.Boolean, "Boolean"),
    (types.Integer, "Integer"),
    (types.Float, "Double"),
    (types.Numeric, "Decimal"),
    (types.DateTime, "DateTime"),
    (types.Date, "Date"),
    (types.Text, "TextArea"),
    (types.String, "String"),
]


def classify_type(column_type: types.TypeEngine) -> str:
    for type_class, data_type in _TYPE_CLASSES:
        if isinstance(column_type, type_class):
            return data_type
    return "String"


def _label_for(column: dict) -> str:
    return column.get("comment") or column["name"].replace("_", " ").title()


async def list_objects(db: AsyncSession) -> list[IntegratableObject]:
    stmt = select(IntegratableObject).order_by(IntegratableObject.label)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_object(db: AsyncSession, api_name: str) -> IntegratableObject | None:
    stmt = select(IntegratableObject).where(IntegratableObject.api_name == api_name)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def register_object(
    db: AsyncSession, api_name: str, table_name: str, label: str | None = None
) -> IntegratableObject:
    """Register (or re-point) an object so its table's columns can be described."""
    obj = await get_object(db, api_name)
    if obj is None:
        obj = IntegratableObject(api_name=api_name, label=label or api_name, table_name=table_name)
        db.add(obj)
    else:
        obj.table_name = table_name
        if label:
            obj.label = label
    await db.commit()
    await db.refresh(obj)
    return obj


async def describe_fields(db: AsyncSession, sobject_name: str) -> list[DescribedField]:
    """List the fields of a registered object with their classified data types."""
    obj = await get_object(db, sobject_name)
    if obj is None:
        raise UnknownObjectError(f"Object {sobject_name!r} is not integratable.")

    table_name = obj.table_name
    conn = await db.connection()
    try:
        columns = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_columns(table_name)
        )
    except NoSuchTableError:
        raise UnknownObjectError(
            f"Object {sobject_name!r} points at missing table {table_name!r}."
        ) from None

    return [
        DescribedField(
            label=_label_for(col),
            api_name=col["name"],
            data_type=classify_type(col["type"]),
        )
        for col in columns
    ]
