"""
Operation API Routes: append operations to the wager ledger.

POST /operations is the single mutation endpoint. PROPOSE creates a wager;
every other type acts on an existing wager referenced by opaque id or
sequential id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ..core import SessionFactoryDep, SettingsDep
from ..schemas import OperationCreateRequest, OperationResponse, UserRef, WagerRef
from ..services import OperationEngine

router = APIRouter(prefix="/operations", tags=["operations"])


# =============================================================================
# DEPENDENCIES
# =============================================================================


def get_operation_engine(
    session_factory: SessionFactoryDep,
    settings: SettingsDep,
) -> OperationEngine:
    return OperationEngine(
        session_factory,
        handle_pattern=settings.slack_handle_pattern,
        max_attempts=settings.operation_max_attempts,
    )


OperationEngineDep = Annotated[OperationEngine, Depends(get_operation_engine)]


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post(
    "",
    response_model=OperationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an operation",
    description="""
    Validate and apply one operation as a single transaction.

    - PROPOSE requires `wagerParameters` and no wager reference.
    - Every other type requires exactly one of `wagerOpaqueId` /
      `wagerSequentialId` and no `wagerParameters`.
    """,
)
async def submit_operation(
    request: OperationCreateRequest,
    engine: OperationEngineDep,
):
    """Submit an operation."""
    result = await engine.submit(request.to_request())
    return OperationResponse(
        id=result.operation.id,
        type=result.operation.type,
        acting_user=UserRef.model_validate(result.acting_user),
        wager=WagerRef.from_wager(result.wager),
        created_at=result.operation.created_at,
    )
