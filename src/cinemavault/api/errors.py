"""Exception → HTTP response mapping."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from cinemavault.exceptions import CinemaVaultError, ConsistencyFailure

logger = structlog.get_logger(__name__)


async def cinemavault_error_handler(request: Request, exc: CinemaVaultError) -> JSONResponse:
    if not isinstance(exc, ConsistencyFailure):
        logger.info("request_rejected", path=request.url.path, error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """Protean's handlers (``ValidationError`` → 400 and friends) plus the CinemaVault taxonomy."""
    register_exception_handlers(app)
    app.add_exception_handler(CinemaVaultError, cinemavault_error_handler)
