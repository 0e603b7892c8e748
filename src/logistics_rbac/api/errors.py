"""Translate RBACError into JSON error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import RBACError, create_error_response, get_http_status_code


async def rbac_error_handler(request: Request, exc: RBACError) -> JSONResponse:
    return JSONResponse(status_code=get_http_status_code(exc), content=create_error_response(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Map administrative errors (not found, conflict, ...) to HTTP statuses."""
    app.add_exception_handler(RBACError, rbac_error_handler)
