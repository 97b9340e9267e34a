from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from datagrid.core.errors import ListingError

_LOG = logging.getLogger("datagrid.http")


def install_listing_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ListingError)
    async def _listing_error_handler(request: Request, exc: ListingError):
        if exc.status_code >= 500:
            _LOG.error("%s %s listing misconfigured: %s", request.method, request.url.path, exc.detail)
        else:
            _LOG.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
