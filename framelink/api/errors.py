"""Exception handlers: HTML error pages for pages, JSON for the API."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from framelink.ui.errors import global_error_page, not_found_page

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def is_api_request(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


async def page_aware_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Render the not-found page for unknown pages, JSON otherwise."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and not is_api_request(request):
        return HTMLResponse(not_found_page(), status_code=status.HTTP_404_NOT_FOUND)
    return await http_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Last-resort handler for exceptions nothing else caught."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    if is_api_request(request):
        return JSONResponse(
            {"detail": "Internal server error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return HTMLResponse(
        global_error_page(request.url.path),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error page handlers on an application.

    Used for the API app and for the NiceGUI app that serves the pages.
    """
    app.add_exception_handler(StarletteHTTPException, page_aware_http_exception_handler)
    app.add_exception_handler(status.HTTP_404_NOT_FOUND, page_aware_http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
