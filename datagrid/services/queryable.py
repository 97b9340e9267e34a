from __future__ import annotations

import copy
import re
from typing import Any, Callable, Iterable, Literal, Protocol, Sequence

from sqlalchemy import asc, desc, or_
from sqlalchemy.orm import Query, RelationshipProperty

from datagrid.core.errors import UnknownColumnError
from datagrid.services.page import Page
from datagrid.services.records import Record, as_record, record_from_model

Direction = Literal["asc", "desc"]

LIKE_ESCAPE = "\\"


class Queryable(Protocol):
    def order_by(self, field: str, direction: Direction) -> "Queryable":
        ...

    def where_any_like(self, fields: Sequence[str], pattern: str) -> "Queryable":
        ...

    def paginate(self, page_size: int, page: int = 1) -> Page:
        ...


class SqlAlchemyQueryable:
    """Queryable over a SQLAlchemy ORM ``Query`` selecting one mapped entity."""

    def __init__(self, query: Query, model: type | None = None):
        self.query = query
        self.model = model if model is not None else query.column_descriptions[0]["entity"]

    def _column(self, field: str):
        col = getattr(self.model, field, None)
        if col is None or not hasattr(col, "ilike"):
            raise UnknownColumnError(field)
        if isinstance(getattr(col, "property", None), RelationshipProperty):
            raise UnknownColumnError(field)
        return col

    def order_by(self, field: str, direction: Direction) -> "SqlAlchemyQueryable":
        col = self._column(field)
        q = self.query.order_by(asc(col) if direction == "asc" else desc(col))
        return SqlAlchemyQueryable(q, self.model)

    def where_any_like(self, fields: Sequence[str], pattern: str) -> "SqlAlchemyQueryable":
        columns = [self._column(field) for field in fields]
        q = self.query.filter(or_(*[col.ilike(pattern, escape=LIKE_ESCAPE) for col in columns]))
        return SqlAlchemyQueryable(q, self.model)

    def paginate(self, page_size: int, page: int = 1) -> Page:
        total = self.query.count()
        rows = self.query.offset((page - 1) * page_size).limit(page_size).all()
        return Page(
            records=[record_from_model(row) for row in rows],
            page_number=page,
            page_size=page_size,
            total_count=total,
        )


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally inside a pattern."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return text


def like_to_regex(pattern: str) -> re.Pattern:
    parts = []
    chars = iter(pattern)
    for char in chars:
        if char == LIKE_ESCAPE:
            parts.append(re.escape(next(chars, LIKE_ESCAPE)))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _sort_key(field: str) -> Callable[[Record], tuple]:
    # None sorts before any value, the way SQLite orders NULLs.
    def key(record: Record) -> tuple:
        value = record.get(field)
        return (value is not None, value)

    return key


class InMemoryQueryable:
    """Queryable over records already held in memory, with SQL LIKE matching."""

    def __init__(self, items: Iterable[Any]):
        self.records: list[Record] = [as_record(item) for item in items]
        self.orderings: tuple[tuple[str, Direction], ...] = ()
        self.predicates: tuple[tuple[tuple[str, ...], re.Pattern], ...] = ()

    def order_by(self, field: str, direction: Direction) -> "InMemoryQueryable":
        clone = copy.copy(self)
        clone.orderings = self.orderings + ((field, direction),)
        return clone

    def where_any_like(self, fields: Sequence[str], pattern: str) -> "InMemoryQueryable":
        clone = copy.copy(self)
        clone.predicates = self.predicates + ((tuple(fields), like_to_regex(pattern)),)
        return clone

    def _matches(self, record: Record) -> bool:
        for fields, regex in self.predicates:
            if not any(
                record.get(field) is not None and regex.fullmatch(str(record.get(field)))
                for field in fields
            ):
                return False
        return True

    def all(self) -> list[Record]:
        rows = [record for record in self.records if self._matches(record)]
        # Stable sorts applied from the last clause to the first.
        for field, direction in reversed(self.orderings):
            rows.sort(key=_sort_key(field), reverse=direction == "desc")
        return rows

    def paginate(self, page_size: int, page: int = 1) -> Page:
        rows = self.all()
        start = (page - 1) * page_size
        return Page(
            records=rows[start:start + page_size],
            page_number=page,
            page_size=page_size,
            total_count=len(rows),
        )
