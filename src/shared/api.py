"""Exception handlers translating domain and checkout errors into HTTP responses.

Protean's handlers cover ``ValidationError`` (400) and ``ObjectNotFoundError``
(404). Conflicts and storage errors use the ``{success, message, error}``
envelope, checkout errors the ``{ok, error: {kind, message, retryable}}`` one.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from sqlalchemy.exc import SQLAlchemyError

from shared.exceptions import CheckoutError, ConflictError

logger = structlog.get_logger(__name__)


async def _conflict_error(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"success": False, "message": "Already exists", "error": exc.messages},
    )


async def _storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("storage.error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Error while accessing the catalog", "error": str(exc)},
    )


async def _checkout_error(request: Request, exc: CheckoutError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ConflictError, _conflict_error)
    app.add_exception_handler(SQLAlchemyError, _storage_error)
    app.add_exception_handler(CheckoutError, _checkout_error)
