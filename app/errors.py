"""Error hierarchy for question and book operations.

Every error carries a stable ``code`` and the HTTP status it maps to; the
FastAPI handlers registered in ``install_error_handlers`` render them as
``{"error": {"code": ..., "message": ...}}``. Anything else becomes a bare
500 so internal details never reach the client.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MemoirError(Exception):
    code = "memoir_error"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class Unauthenticated(MemoirError):
    code = "unauthenticated"
    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class Forbidden(MemoirError):
    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFound(MemoirError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class PreconditionFailed(MemoirError):
    code = "precondition_failed"
    http_status = status.HTTP_412_PRECONDITION_FAILED


class InsufficientContent(MemoirError):
    code = "insufficient_content"
    http_status = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(MemoirError):
    """Renderer or delivery channel failed; never retried here."""
    code = "upstream_failure"
    http_status = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str, detail: str = ""):
        # detail stays in the server log; clients only see which service failed
        super().__init__(f"{service} failed")
        self.service = service
        self.detail = detail


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MemoirError)
    async def _memoir_error_handler(request: Request, exc: MemoirError):
        if exc.http_status >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, getattr(exc, "detail", "") or exc.message)
        else:
            logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "internal_error", "message": "An unexpected error occurred"}},
        )
