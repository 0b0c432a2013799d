"""API routes for the Wager Ledger."""

from fastapi import APIRouter

from .error_handlers import register_error_handlers
from .operations import router as operations_router
from .wagers import router as wagers_router

# Main API router
api_router = APIRouter()

api_router.include_router(operations_router)
api_router.include_router(wagers_router)

__all__ = ["api_router", "register_error_handlers"]
