import logging

from starlette.middleware.base import BaseHTTPMiddleware

from .handlers import problem_response

logger = logging.getLogger(__name__)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Last line: anything no exception handler claimed becomes a 500 problem."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"{type(exc).__name__} on {request.url.path} (500): {exc}",
                exc_info=True,
                extra={"http_method": request.method, "path": request.url.path, "status_code": 500},
            )
            # Exception text is not echoed to the client
            return problem_response(
                request,
                status=500,
                detail="Internal Server Error",
                code=type(exc).__name__,
            )
