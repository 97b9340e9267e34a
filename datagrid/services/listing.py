from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional

from datagrid.core.config import settings
from datagrid.core.errors import MalformedSortError
from datagrid.schemas.listing import ListRequest, positive_int_or_none
from datagrid.services.page import Page
from datagrid.services.queryable import Direction, Queryable, escape_like
from datagrid.services.rules import AddRule, EditRule, rule_value
from datagrid.services.shaping import apply_changes_to

_LOG = logging.getLogger("datagrid.listing")

SORT_DIRECTIONS = ("asc", "desc")


def parse_sort(raw: str, separator: Optional[str] = None) -> tuple[str, Direction]:
    separator = separator or settings.LISTING_SORT_SEPARATOR
    parts = str(raw).split(separator)
    if len(parts) != 2:
        raise MalformedSortError(raw, f'expected "<field>{separator}<direction>"')
    field = parts[0].strip()
    direction = parts[1].strip().lower()
    if not field:
        raise MalformedSortError(raw, "field is empty")
    if direction not in SORT_DIRECTIONS:
        raise MalformedSortError(raw, 'direction must be "asc" or "desc"')
    return field, direction


def apply_sort(queryable: Queryable, request: ListRequest) -> Queryable:
    if not (request.sort or "").strip():
        return queryable
    field, direction = parse_sort(request.sort)
    _LOG.debug("sort field=%s direction=%s", field, direction)
    return queryable.order_by(field, direction)


def apply_filter(queryable: Queryable, request: ListRequest) -> Queryable:
    text = request.filter or ""
    if not text.strip() or not request.searchable:
        return queryable
    _LOG.debug("filter text=%r fields=%s", text, request.searchable)
    return queryable.where_any_like(list(request.searchable), f"%{escape_like(text)}%")


def resolve_per_page(value: Any, default: Optional[int] = None) -> int:
    per_page = positive_int_or_none(value)
    if per_page is not None:
        return per_page
    return default or settings.LISTING_DEFAULT_PER_PAGE


def paginate(queryable: Queryable, request: ListRequest, default_per_page: Optional[int] = None) -> Page:
    per_page = resolve_per_page(request.per_page, default_per_page)
    page_number = positive_int_or_none(request.page) or 1
    page = queryable.paginate(per_page, page_number)
    _LOG.debug(
        "paginate page=%s per_page=%s total=%s",
        page.page_number,
        page.page_size,
        page.total_count,
    )
    return page


@dataclass(frozen=True)
class ListingPlan:
    """Immutable description of one listing: the shaping rules and the page size default."""

    edit_rules: tuple[EditRule, ...] = ()
    add_rules: tuple[AddRule, ...] = ()
    default_per_page: Optional[int] = None

    def apply_changes_to(self, page: Page) -> Page:
        return apply_changes_to(page, self.edit_rules, self.add_rules)

    def make(self, queryable: Queryable, request: ListRequest) -> Page:
        query = apply_sort(queryable, request)
        query = apply_filter(query, request)
        page = paginate(query, request, self.default_per_page)
        return self.apply_changes_to(page)


class ListingBuilder:
    """Collects column edits and additions, then freezes them into a :class:`ListingPlan`.

    Registering the same column twice replaces the earlier content but keeps its
    original position in the application order.
    """

    def __init__(self, default_per_page: Optional[int] = None):
        self.default_per_page = default_per_page
        self._columns_to_edit: dict[str, Any] = {}
        self._columns_to_add: dict[str, Any] = {}

    @property
    def columns_to_edit(self) -> MappingProxyType:
        return MappingProxyType(self._columns_to_edit)

    @property
    def columns_to_add(self) -> MappingProxyType:
        return MappingProxyType(self._columns_to_add)

    def edit_column(self, column: str, content: Any) -> "ListingBuilder":
        self._columns_to_edit[column] = rule_value(content)
        return self

    def add_column(self, column: str, content: Any) -> "ListingBuilder":
        self._columns_to_add[column] = rule_value(content)
        return self

    def build(self) -> ListingPlan:
        return ListingPlan(
            edit_rules=tuple(EditRule(column, value) for column, value in self._columns_to_edit.items()),
            add_rules=tuple(AddRule(column, value) for column, value in self._columns_to_add.items()),
            default_per_page=self.default_per_page,
        )


def make_listing(queryable: Queryable, request: ListRequest, plan: Optional[ListingPlan] = None) -> Page:
    """Sort, filter, paginate and shape one listing request."""
    return (plan or ListingPlan()).make(queryable, request)
