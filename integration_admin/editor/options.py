"""Read-only lookup lists that feed selection widgets and new-row defaults."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Option:
    label: str
    value: str
    data_type: str | None = None


def record_value(record: Any, name: str, default: Any = "") -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


class OptionCache:
    """Holds the systems, integratable objects and describable fields lists.

    Every loader replaces its list wholesale with a tuple, so readers can keep
    a reference without worrying about later loads mutating it.
    """

    def __init__(self) -> None:
        self.systems: tuple[Option, ...] = ()
        self.objects: tuple[Option, ...] = ()
        self.fields: tuple[Option, ...] = ()

    def load_systems(self, systems: Iterable[Any]) -> None:
        names = [record_value(s, "developer_name") for s in systems]
        self.systems = tuple(Option(label=n, value=n) for n in names if n)

    def load_objects(self, objects: Iterable[Any]) -> None:
        self.objects = tuple(
            Option(label=record_value(o, "label"), value=record_value(o, "api_name")) for o in objects
        )

    def load_fields(self, fields: Iterable[Any]) -> None:
        self.fields = tuple(
            Option(
                label=f"{record_value(f, 'label')} ({record_value(f, 'api_name')})",
                value=record_value(f, "api_name"),
                data_type=record_value(f, "data_type", None),
            )
            for f in fields
        )

    @property
    def default_system(self) -> str:
        return self.systems[0].value if self.systems else ""

    @property
    def default_object(self) -> str:
        return self.objects[0].value if self.objects else ""

    def field_types(self) -> dict[str, str]:
        """Map of field api name -> described data type."""
        return {f.value: f.data_type for f in self.fields if f.data_type}

    def data_type_for(self, api_name: str) -> str | None:
        for f in self.fields:
            if f.value == api_name:
                return f.data_type
        return None
