from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from doc_relay.api.fastapi.middleware.errors.handlers import problem_response


def _declared_length(request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject uploads by declared Content-Length before the body is spooled."""

    def __init__(self, app, max_bytes: int = 50_000_000):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        size = _declared_length(request)
        if size is not None and size > self.max_bytes:
            return problem_response(
                request,
                status=413,
                detail=f"Request body exceeds {self.max_bytes} bytes.",
                code="PAYLOAD_TOO_LARGE",
            )
        return await call_next(request)
