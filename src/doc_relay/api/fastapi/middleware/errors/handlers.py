from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from doc_relay.exceptions import DocRelayError

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    415: "Unsupported Media Type",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def problem_response(
    request: Request,
    *,
    status: int,
    detail: Any,
    code: str,
    title: Optional[str] = None,
    **extra: Any,
) -> JSONResponse:
    body = {
        "type": "about:blank",
        "title": title or _TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "code": code,
        "instance": request.url.path,
        **extra,
    }
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_MEDIA_TYPE)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DocRelayError)
    async def _doc_relay_error(request: Request, exc: DocRelayError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "%s on %s (%s): %s", type(exc).__name__, request.url.path, exc.status_code, exc,
            extra={
                "http_method": request.method,
                "path": request.url.path,
                "status_code": exc.status_code,
                "operation": exc.operation,
            },
        )
        extra: dict[str, Any] = {}
        if exc.identifier:
            extra["identifier"] = exc.identifier
        return problem_response(
            request,
            status=exc.status_code,
            title=exc.title,
            detail=exc.message,
            code=exc.code,
            **extra,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return problem_response(
            request,
            status=exc.status_code,
            detail=exc.detail,
            code=f"HTTP_{exc.status_code}",
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return problem_response(
            request,
            status=422,
            detail="Request validation failed",
            code="VALIDATION_ERROR",
            errors=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()],
        )

