from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

from datagrid.core.config import settings
from datagrid.services.request_params import RequestParams


def positive_int_or_none(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = str(value).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return number if number > 0 else None


class ListRequest(BaseModel):
    sort: Optional[str] = None
    filter: Optional[str] = None
    searchable: List[str] = []
    per_page: Optional[int] = None
    page: int = 1

    @field_validator("searchable", mode="before")
    @classmethod
    def _coerce_searchable(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip() for item in value if str(item or "").strip()]

    @field_validator("per_page", mode="before")
    @classmethod
    def _coerce_per_page(cls, value):
        return positive_int_or_none(value)

    @field_validator("page", mode="before")
    @classmethod
    def _coerce_page(cls, value):
        return positive_int_or_none(value) or 1

    @classmethod
    def from_params(cls, params: RequestParams) -> "ListRequest":
        names = {
            "sort": settings.LISTING_SORT_PARAM,
            "filter": settings.LISTING_FILTER_PARAM,
            "searchable": settings.LISTING_SEARCHABLE_PARAM,
            "per_page": settings.LISTING_PER_PAGE_PARAM,
            "page": settings.LISTING_PAGE_PARAM,
        }
        data = {}
        for key, name in names.items():
            if not params.has_field(name):
                continue
            value = params.get_field(name)
            # Repeated scalar params: the last one wins.
            if key != "searchable" and isinstance(value, list):
                value = value[-1]
            data[key] = value
        return cls(**data)
