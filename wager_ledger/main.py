"""Wager Ledger: Main FastAPI Application.

Records wagers between Slack users and tracks them through an append-only
log of operations (propose, accept, reject, take, cancel, close, appeal).
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api import api_router, register_error_handlers
from .core import close_db, get_settings, init_db
from .schemas import ErrorResponse
from .services import POLICY_TABLE, verify_policy_table

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    # Refuse to start with an inconsistent policy table
    verify_policy_table(POLICY_TABLE)
    logger.info("Parameter policy table verified")

    # In production, tables are managed by migrations
    if settings.environment != "production":
        await init_db()
    logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")
    yield
    await close_db()
    logger.info(f"{settings.app_name} shut down")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## Wager Ledger API

    Record wagers between two or more parties, optionally mediated by an
    arbiter, and track them through an append-only operation log.

    - **Policy-checked operations**: each operation type declares which wager
      fields it forbids, allows or requires.
    - **Atomic**: users, wagers, offers and the operation record are created
      and linked in one transaction.
    - **Append-only**: operations are never edited after creation.
    """,
    openapi_url=f"{settings.api_prefix}/openapi.json",
    docs_url=f"{settings.api_prefix}/docs",
    redoc_url=f"{settings.api_prefix}/redoc",
    lifespan=lifespan,
)

register_error_handlers(app)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    message = "An unexpected error occurred"
    if settings.debug:
        message = f"{message}: {str(exc)[:200]}"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="internal_error",
            message=message,
            details=[],
        ).model_dump(by_alias=True),
    )


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wager_ledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
