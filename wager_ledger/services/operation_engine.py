"""
Operation Engine: validates and applies wager operations atomically.

Every submitted operation runs in two phases inside one transaction:

1. Resolve: find-or-create the acting user, then create (PROPOSE) or look
   up the target wager, find-or-create the taker/arbiter, and stage the
   Operation row.
2. Link: wire the operation to its user and wager, set the wager's
   participants and add the wager to each participant's collection.

The link phase starts only after every resolve step has completed. On any
failure the whole transaction rolls back, so no half-linked Operation or
orphaned Offer is ever visible.
"""

from collections.abc import Awaitable, Callable
from typing import Sequence, TypeVar
from uuid import UUID
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.database import run_in_transaction
from ..models import Operation, OperationType, User, Wager, WagerStatus
from .dto import OperationRequest, OperationResult
from .errors import (
    LedgerError,
    SequentialIdConflict,
    TransactionFailedError,
    WagerNotFound,
)
from .operation_validator import (
    DEFAULT_HANDLE_PATTERN,
    check_wager_reference,
    validate_operation,
)
from .parameter_policy import POLICY_TABLE, PolicyTable
from .wager_repository import NewWagerFields, WagerRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


class OperationEngine:
    """
    Entry point for appending operations to the wager ledger.

    Guarantees:
    1. Requests are validated before any I/O
    2. All reads and writes for one request share one transaction
    3. Users are find-or-create (one row per Slack handle); wagers and
       operations are always new rows
    4. Operations are never updated after creation
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: WagerRepository | None = None,
        policy_table: PolicyTable = POLICY_TABLE,
        handle_pattern: str = DEFAULT_HANDLE_PATTERN,
        max_attempts: int = 5,
    ):
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._repository = repository or WagerRepository()
        self._policy_table = policy_table
        self._handle_pattern = handle_pattern

    # =========================================================================
    # SUBMIT OPERATION
    # =========================================================================

    async def submit(self, request: OperationRequest) -> OperationResult:
        """
        Validate and apply one operation.

        Raises:
            OperationValidationError: request rejected, nothing touched.
            WagerNotFound: referenced wager does not exist.
            UserDeleted: a handle belongs to a deleted user.
            SequentialIdConflict: concurrent PROPOSEs kept taking the
                wager number after every retry.
            TransactionFailedError: anything else went wrong; rolled back.
        """
        validate_operation(request, self._policy_table, self._handle_pattern)

        description = f"{request.operation_type.value} by {request.acting_user_handle}"
        attempt = 1
        while True:
            try:
                result = await self._transaction(
                    lambda session: self._apply(session, request),
                    description=description,
                )
                break
            except SequentialIdConflict:
                if attempt >= self._max_attempts:
                    logger.error(
                        f"Gave up on {description} after {attempt} sequential id conflicts"
                    )
                    raise
                logger.warning(
                    f"Sequential id taken during {description}, retrying (attempt {attempt})"
                )
                attempt += 1

        logger.info(
            f"Recorded {result.operation.type.value} operation {result.operation.id} "
            f"on wager #{result.wager.sequential_id} by {result.acting_user.slack_handle}"
        )
        return result

    async def _apply(self, session: AsyncSession, request: OperationRequest) -> OperationResult:
        repo = self._repository

        # --- Resolve phase ---------------------------------------------------
        acting = await repo.find_or_create_user(session, request.acting_user_handle)
        if acting.created:
            logger.info(f"Created user for Slack handle {request.acting_user_handle}")

        taker: User | None = None
        arbiter: User | None = None

        if request.operation_type == OperationType.PROPOSE:
            params = request.wager_parameters
            taker_handle = _blank_to_none(params.taker_handle)
            arbiter_handle = _blank_to_none(params.arbiter_handle)

            wager = await repo.create_wager_with_offers(
                session,
                NewWagerFields(
                    outcome=params.outcome,
                    status=WagerStatus.UNACCEPTED if taker_handle else WagerStatus.LISTED,
                    maker_offer=params.maker_offer,
                    taker_offer=params.taker_offer,
                    expiration=params.expiration,
                    maturation=params.maturation,
                ),
            )
            logger.info(f"Staged wager #{wager.sequential_id} ({wager.status.value})")
            if taker_handle:
                taker = (await repo.find_or_create_user(session, taker_handle)).entity
            if arbiter_handle:
                arbiter = (await repo.find_or_create_user(session, arbiter_handle)).entity
        else:
            wager = await self._find_wager(
                session, request.wager_id, request.wager_sequential_id
            )

        operation = await repo.create_operation(session, request.operation_type)

        # --- Link phase ------------------------------------------------------
        user = acting.entity
        await repo.link_operation_to_user(session, operation, user)
        await repo.link_operation_to_wager(session, operation, wager)

        # Applies to every operation type, so a non-PROPOSE operation hands
        # the maker role to whoever issued it.
        await repo.set_wager_maker(session, wager, user)

        if taker is not None:
            await repo.set_wager_taker(session, wager, taker)
            await repo.add_wager_to_user_collection(session, taker, wager)
        if arbiter is not None:
            await repo.set_wager_arbiter(session, wager, arbiter)
            await repo.add_wager_to_user_collection(session, arbiter, wager)
        await repo.add_wager_to_user_collection(session, user, wager)

        try:
            await session.flush()
        except IntegrityError as e:
            if repo.is_sequential_id_conflict(e):
                raise SequentialIdConflict(
                    f"Wager #{wager.sequential_id} was taken by a concurrent PROPOSE"
                ) from e
            raise

        return OperationResult(
            operation=operation,
            wager=wager,
            acting_user=user,
            acting_user_created=acting.created,
        )

    # =========================================================================
    # READS
    # =========================================================================

    async def get_wager(
        self,
        wager_id: UUID | None = None,
        sequential_id: int | None = None,
    ) -> Wager:
        """Fetch a wager (with offers and participants) by exactly one reference."""
        check_wager_reference(wager_id, sequential_id)
        return await self._transaction(
            lambda session: self._find_wager(session, wager_id, sequential_id),
            description="wager lookup",
        )

    async def get_operation_history(
        self,
        wager_id: UUID | None = None,
        sequential_id: int | None = None,
    ) -> tuple[Wager, Sequence[Operation]]:
        """Return a wager and its operation log, oldest first."""
        check_wager_reference(wager_id, sequential_id)

        async def load(session: AsyncSession) -> tuple[Wager, Sequence[Operation]]:
            wager = await self._find_wager(session, wager_id, sequential_id)
            operations = await self._repository.list_operations_for_wager(session, wager.id)
            return wager, operations

        return await self._transaction(load, description="operation history")

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    async def _find_wager(
        self,
        session: AsyncSession,
        wager_id: UUID | None,
        sequential_id: int | None,
    ) -> Wager:
        if wager_id is not None:
            wager = await self._repository.find_wager_by_id(session, wager_id)
            reference = str(wager_id)
        else:
            wager = await self._repository.find_wager_by_sequential_id(session, sequential_id)
            reference = f"#{sequential_id}"
        if wager is None:
            raise WagerNotFound(f"Wager {reference} not found")
        return wager

    async def _transaction(
        self,
        fn: Callable[[AsyncSession], Awaitable[T]],
        description: str,
    ) -> T:
        """Run ``fn`` in one transaction, wrapping infrastructure failures."""
        try:
            return await run_in_transaction(self._session_factory, fn)
        except LedgerError:
            raise
        except Exception as e:
            logger.error(f"Transaction for {description} rolled back: {e}")
            raise TransactionFailedError(
                f"Transaction for {description} failed and was rolled back"
            ) from e
