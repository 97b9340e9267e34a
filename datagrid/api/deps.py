from __future__ import annotations

from typing import Any

from fastapi import Request
from starlette.datastructures import URL

from datagrid.core.config import settings
from datagrid.schemas.listing import ListRequest
from datagrid.services.page import Page
from datagrid.services.request_params import RequestParams


def list_request_dependency(request: Request) -> ListRequest:
    return ListRequest.from_params(RequestParams(request.query_params))


def _page_url(url: URL | None, page_number: int) -> str | None:
    if url is None:
        return None
    return str(url.include_query_params(**{settings.LISTING_PAGE_PARAM: page_number}))


def page_payload(page: Page, url: URL | None = None) -> dict[str, Any]:
    next_page = page.page_number + 1 if page.has_more_pages else None
    prev_page = page.page_number - 1 if page.page_number > 1 else None
    return {
        "total": page.total_count,
        "per_page": page.page_size,
        "current_page": page.page_number,
        "last_page": page.last_page,
        "next_page_url": _page_url(url, next_page) if next_page else None,
        "prev_page_url": _page_url(url, prev_page) if prev_page else None,
        "from": page.first_item,
        "to": page.last_item,
        "data": [record.to_dict() for record in page.records],
    }
