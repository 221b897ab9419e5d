"""FastAPI exception handlers aligned with HTTP API contract."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...services.graph_errors import (
    GraphEngineError,
    InvalidHopsError,
    PageNotFoundError,
    ProjectNotFoundError,
    UnknownGroupKeyError,
    UnknownGroupModeError,
    UnknownNodeError,
)

logger = logging.getLogger(__name__)

DEFAULT_ERRORS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("validation_error", "Invalid request payload"),
    status.HTTP_404_NOT_FOUND: ("not_found", "Resource not found"),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("internal_error", "Internal server error"),
}

GRAPH_ERRORS: Dict[type, Tuple[int, str]] = {
    ProjectNotFoundError: (status.HTTP_404_NOT_FOUND, "project_not_found"),
    PageNotFoundError: (status.HTTP_404_NOT_FOUND, "page_not_found"),
    UnknownNodeError: (status.HTTP_404_NOT_FOUND, "unknown_node"),
    UnknownGroupKeyError: (status.HTTP_404_NOT_FOUND, "unknown_group_key"),
    InvalidHopsError: (status.HTTP_400_BAD_REQUEST, "invalid_hops"),
    UnknownGroupModeError: (status.HTTP_400_BAD_REQUEST, "unknown_group_mode"),
}


def _normalize_error(
    status_code: int, detail: Any
) -> Tuple[str, str, Optional[Dict[str, Any]]]:
    default_error, default_message = DEFAULT_ERRORS.get(
        status_code, DEFAULT_ERRORS[status.HTTP_500_INTERNAL_SERVER_ERROR]
    )
    if isinstance(detail, dict):
        error = detail.get("error", default_error)
        message = detail.get("message", default_message)
        detail_payload = detail.get("detail")
        if detail_payload is None:
            remainder = {
                k: v for k, v in detail.items() if k not in {"error", "message", "detail"}
            }
            detail_payload = remainder or None
        return error, message, detail_payload
    if isinstance(detail, str) and detail:
        return default_error, detail, None
    return default_error, default_message, None


def _response(status_code: int, detail: Any) -> JSONResponse:
    error, message, extra = _normalize_error(status_code, detail)
    return JSONResponse(
        status_code=status_code, content={"error": error, "message": message, "detail": extra}
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    detail = {"detail": {"errors": exc.errors()}}
    return _response(status.HTTP_400_BAD_REQUEST, detail)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _response(exc.status_code, exc.detail)


async def graph_engine_exception_handler(
    request: Request, exc: GraphEngineError
) -> JSONResponse:
    status_code, error = status.HTTP_400_BAD_REQUEST, "graph_error"
    for error_type, mapped in GRAPH_ERRORS.items():
        if isinstance(exc, error_type):
            status_code, error = mapped
            break
    logger.info(
        "Graph request rejected",
        extra={"path": request.url.path, "error": error, "status_code": status_code},
    )
    return _response(
        status_code, {"error": error, "message": exc.message, "detail": exc.details or None}
    )


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.args[0] if exc.args else None)


def register_error_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(GraphEngineError, graph_engine_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = [
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "graph_engine_exception_handler",
    "internal_exception_handler",
]
