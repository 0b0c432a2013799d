"""Wager API Routes: read-only views of wagers and their operation logs."""

from uuid import UUID

from fastapi import APIRouter

from ..schemas import OperationHistoryResponse, OperationLogEntry, WagerRef, WagerResponse
from .operations import OperationEngineDep

router = APIRouter(prefix="/wagers", tags=["wagers"])


@router.get(
    "/by-number/{sequential_id}",
    response_model=WagerResponse,
    summary="Get a wager by its sequential number",
)
async def get_wager_by_number(sequential_id: int, engine: OperationEngineDep):
    wager = await engine.get_wager(sequential_id=sequential_id)
    return WagerResponse.model_validate(wager)


@router.get(
    "/{wager_id}",
    response_model=WagerResponse,
    summary="Get a wager by id",
)
async def get_wager(wager_id: UUID, engine: OperationEngineDep):
    wager = await engine.get_wager(wager_id=wager_id)
    return WagerResponse.model_validate(wager)


@router.get(
    "/{wager_id}/operations",
    response_model=OperationHistoryResponse,
    summary="Get a wager's operation log",
)
async def get_operation_history(wager_id: UUID, engine: OperationEngineDep):
    """Operations are returned oldest first; the log is append-only."""
    wager, operations = await engine.get_operation_history(wager_id=wager_id)
    return OperationHistoryResponse(
        wager=WagerRef.from_wager(wager),
        operations=[OperationLogEntry.from_operation(op) for op in operations],
    )
