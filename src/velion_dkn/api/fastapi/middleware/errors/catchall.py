import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Last line of defence: log anything unhandled, return a bare 500 envelope."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "%s on %s %s (500)",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc_info=True,
                extra={
                    "http_method": request.method,
                    "path": request.url.path,
                    "status_code": 500,
                    "user_id": getattr(request.state, "user_id", None),
                },
            )
            return JSONResponse(status_code=500, content={"success": False, "message": GENERIC_ERROR})
