from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

# room for multipart boundaries and the metadata form fields
FORM_OVERHEAD_BYTES = 64 * 1024


def too_large_message(max_bytes: int) -> str:
    return f"File size too large. Maximum size is {max_bytes // (1024 * 1024)}MB."


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared length exceeds the upload ceiling."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes + FORM_OVERHEAD_BYTES:
            return JSONResponse(
                status_code=400,
                content={"success": False, "message": too_large_message(self.max_bytes)},
            )
        return await call_next(request)
