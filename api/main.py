"""
FastAPI API Service Entry Point
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.routes import events, swaps
from shared.config import get_settings
from shared.logging_config import configure_logging
from swaps.errors import ErrorKind, SwapError

# Configure structured JSON logging on startup
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SlotSwap API",
    version="1.0.0",
)

settings = get_settings()
origins = settings.CORS_ORIGINS.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(swaps.router, tags=["swaps"])
app.include_router(events.router, tags=["events"])

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.UNAVAILABLE: 503,
}


@app.exception_handler(SwapError)
async def swap_error_handler(request: Request, exc: SwapError) -> JSONResponse:
    """Render engine failures with their kind, ids and retry hint."""
    status_code = ERROR_STATUS_CODES.get(exc.kind, 400)
    logger.info(
        f"Swap error {exc.error_code}: {exc.message}",
        extra={"error_code": exc.error_code, "request_path": request.url.path},
    )
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


# Exception handler for validation errors
@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Return 400 with validation error details."""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error_code": ErrorKind.INVALID_ARGUMENT.value,
            "error_message": "Validation error",
            "details": {"errors": jsonable_errors(exc)},
        },
    )


def jsonable_errors(exc) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.get("/health")
async def health_check() -> JSONResponse:
    """
    Health check endpoint for Docker health checks and monitoring.

    Checks:
    - PostgreSQL connectivity (SELECT 1 query)

    Returns:
        200 OK if all systems healthy
        503 Service Unavailable if degraded
    """
    from sqlalchemy import text

    from database.connection import get_async_session

    health_status = {"status": "healthy", "postgres": "unknown"}
    status_code = 200

    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
            health_status["postgres"] = "connected"
    except Exception:
        logger.warning("Health check could not reach PostgreSQL", exc_info=True)
        health_status["postgres"] = "disconnected"
        health_status["status"] = "degraded"
        status_code = 503

    return JSONResponse(status_code=status_code, content=health_status)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "SlotSwap API - Use /health for health checks"}
