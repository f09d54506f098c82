"""Domain errors raised by the service layer and their HTTP mapping.

Services never raise ``HTTPException``; routers let these propagate and the
handlers registered here turn them into ``{"detail": ...}`` responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    status_code = 400


class AuthenticationError(DomainError):
    status_code = 401

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail)


class NotFoundOrForbidden(DomainError):
    """A referenced row is missing, deleted, or owned by someone else.

    The three cases are indistinguishable to the caller.
    """

    status_code = 400


class FeatureDisabled(NotFoundOrForbidden):
    status_code = 404

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(detail)


class ConflictError(DomainError):
    status_code = 409


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _domain_error(request: Request, exc: DomainError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})
