"""
Error types for Rentwise.

Every error carries a user-visible notification (title + description)
which the API layer returns as the response body.
"""
import logging
import sqlite3
from contextlib import contextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RentwiseError(Exception):
    status_code = 400

    def __init__(self, title: str, description: Optional[str] = None):
        super().__init__(description or title)
        self.title = title
        self.description = description

    def to_notification(self) -> dict:
        return {"title": self.title, "description": self.description, "variant": "destructive"}


class DataAccessError(RentwiseError):
    """A query or mutation against the data store failed."""
    status_code = 500


class NotFoundError(RentwiseError):
    status_code = 404


class PermissionDeniedError(RentwiseError):
    status_code = 403


class ConflictError(RentwiseError):
    """A business rule rejected the mutation."""
    status_code = 400


@contextmanager
def storage_errors(title: str):
    """Translate storage failures raised inside the block into DataAccessError."""
    try:
        yield
    except (sqlite3.Error, FileNotFoundError) as e:
        logger.warning(f"[STORE] {title}: {e}")
        raise DataAccessError(title, str(e)) from e


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RentwiseError)
    async def rentwise_error(request: Request, exc: RentwiseError):
        if exc.status_code >= 500:
            logger.error(f"[API] {request.method} {request.url.path}: {exc.title}: {exc.description}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_notification())
