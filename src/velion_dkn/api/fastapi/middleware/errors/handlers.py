from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from velion_dkn.exceptions import DknError

logger = logging.getLogger(__name__)


def envelope_error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


def _describe_validation(exc: RequestValidationError) -> str:
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("query", "body", "path", "form")]
        field = ".".join(loc)
        msg = err.get("msg", "invalid value")
        return f"Invalid value for {field}: {msg}" if field else f"Invalid request: {msg}"
    return "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DknError)
    async def _dkn_error(request: Request, exc: DknError):
        extra = {
            "http_method": request.method,
            "path": request.url.path,
            "status_code": exc.status_code,
            "user_id": getattr(request.state, "user_id", None),
        }
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc, extra=extra)
        else:
            logger.debug("%s: %s", type(exc).__name__, exc.message, extra=extra)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return envelope_error(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return envelope_error(400, _describe_validation(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route not found"
        else:
            message = str(exc.detail)
        return envelope_error(exc.status_code, message, getattr(exc, "headers", None))
