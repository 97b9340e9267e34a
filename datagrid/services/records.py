from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

from sqlalchemy import Column
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.hybrid import HybridExtensionType


class _RemovedRelation:
    __slots__ = ()

    def __repr__(self) -> str:
        return "REMOVED_RELATION"

    def __bool__(self) -> bool:
        return False


# Left in a record's relation map once an edit replaced the relation with a scalar.
REMOVED_RELATION = _RemovedRelation()


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: _serialize_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


class Record:
    """One result row: plain fields and loaded relations kept in separate maps.

    ``derived_fields`` names the fields whose value is defined by a formula on the
    model (hybrid properties, expression-backed column properties) rather than stored.
    """

    __slots__ = ("fields", "relations", "derived_fields")

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        relations: Mapping[str, Any] | None = None,
        derived_fields: Iterable[str] = (),
    ):
        self.fields: dict[str, Any] = dict(fields or {})
        self.relations: dict[str, Any] = dict(relations or {})
        self.derived_fields: frozenset[str] = frozenset(derived_fields)

    def __repr__(self) -> str:
        return f"Record(fields={self.fields!r}, relations={sorted(self.relations)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return (
            self.fields == other.fields
            and self.relations == other.relations
            and self.derived_fields == other.derived_fields
        )

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def is_derived(self, name: str) -> bool:
        return name in self.derived_fields

    def set_field(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def relation_loaded(self, name: str) -> bool:
        return name in self.relations

    def get_relation(self, name: str, default: Any = None) -> Any:
        return self.relations.get(name, default)

    def set_relation(self, name: str, value: Any) -> None:
        self.relations[name] = value

    def disassociate(self, name: str) -> None:
        self.relations[name] = REMOVED_RELATION

    def copy(self) -> Record:
        return Record(self.fields, self.relations, self.derived_fields)

    def to_dict(self) -> dict[str, Any]:
        data = {key: _serialize_value(value) for key, value in self.fields.items()}
        for key, value in self.relations.items():
            if value is REMOVED_RELATION:
                continue
            data[key] = _serialize_value(value)
        return data


def _hybrid_value(row: Any, key: str) -> Any:
    try:
        return getattr(row, key)
    except TypeError:
        # Python formula over a NULL operand, SQL would give NULL too.
        return None


def _derived_field_names(mapper: Any) -> set[str]:
    names = set()
    for key, descriptor in mapper.all_orm_descriptors.items():
        if getattr(descriptor, "extension_type", None) is HybridExtensionType.HYBRID_PROPERTY:
            names.add(key)
    for prop in mapper.column_attrs:
        if any(not isinstance(column, Column) for column in prop.columns):
            names.add(prop.key)
    return names


def record_from_model(row: Any, *, with_relations: bool = True) -> Record:
    """Convert a mapped ORM instance into a :class:`Record`.

    Only relationships that are already loaded on the instance become relations,
    nothing is lazy-loaded here. Related rows are converted one level deep.
    """
    mapper = sa_inspect(type(row))
    derived = _derived_field_names(mapper)
    fields = {prop.key: getattr(row, prop.key) for prop in mapper.column_attrs}
    for key in derived:
        if key not in fields:
            fields[key] = _hybrid_value(row, key)

    relations: dict[str, Any] = {}
    if with_relations:
        unloaded = sa_inspect(row).unloaded
        for rel in mapper.relationships:
            if rel.key in unloaded:
                continue
            related = getattr(row, rel.key)
            if related is None:
                relations[rel.key] = None
            elif rel.uselist:
                relations[rel.key] = [record_from_model(item, with_relations=False) for item in related]
            else:
                relations[rel.key] = record_from_model(related, with_relations=False)
    return Record(fields, relations, derived)


def as_record(item: Any) -> Record:
    if isinstance(item, Record):
        return item
    if isinstance(item, Mapping):
        return Record(item)
    return record_from_model(item)
