"""
Wager Repository: the persistence gateway used by the operation engine.

Every method takes the transaction handle (an AsyncSession) as its first
argument. Nothing here commits; the caller owns the transaction boundary.
Writes are staged on the session and flushed by the caller, so the unit of
work orders the INSERTs by foreign-key dependency.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence
from uuid import UUID, uuid4

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import (
    Offer,
    OfferRole,
    Operation,
    OperationType,
    User,
    UserWager,
    Wager,
    WagerStatus,
)
from .dto import FindOrCreateResult, OfferTerms
from .errors import UserDeleted


@dataclass
class NewWagerFields:
    """Column values for a wager created by PROPOSE."""
    outcome: str
    status: WagerStatus
    maker_offer: OfferTerms
    taker_offer: OfferTerms
    expiration: datetime | None = None
    maturation: datetime | None = None


def _insert_ignoring_conflicts(session: AsyncSession, table):
    """INSERT ... ON CONFLICT DO NOTHING for the session's dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table).on_conflict_do_nothing()
    if dialect == "sqlite":
        return sqlite.insert(table).on_conflict_do_nothing()
    raise NotImplementedError(
        f"Race-safe find-or-create is not supported on the {dialect} dialect"
    )


class WagerRepository:
    """Transaction-scoped reads and writes for users, wagers and operations."""

    # =========================================================================
    # USERS
    # =========================================================================

    async def find_user_by_handle(
        self, session: AsyncSession, slack_handle: str
    ) -> User | None:
        result = await session.execute(
            select(User).where(
                User.slack_handle == slack_handle,
                User.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def find_or_create_user(
        self, session: AsyncSession, slack_handle: str
    ) -> FindOrCreateResult[User]:
        """
        Return the live user for a handle, creating it if absent.

        The INSERT ignores unique-constraint conflicts, so two transactions
        racing on the same handle end up sharing one row: the loser's insert
        is a no-op and its follow-up SELECT returns the winner's row.
        """
        user = await self.find_user_by_handle(session, slack_handle)
        if user is not None:
            return FindOrCreateResult(entity=user, created=False)

        stmt = _insert_ignoring_conflicts(session, User).values(
            id=uuid4(), slack_handle=slack_handle
        )
        result = await session.execute(stmt)
        created = result.rowcount == 1

        user = await self.find_user_by_handle(session, slack_handle)
        if user is None:
            # Only reachable when the conflicting row is soft-deleted
            raise UserDeleted(f"User {slack_handle} has been deleted")
        return FindOrCreateResult(entity=user, created=created)

    # =========================================================================
    # WAGERS
    # =========================================================================

    @staticmethod
    def is_sequential_id_conflict(exc: IntegrityError) -> bool:
        """True when ``exc`` is the wagers.sequential_id unique constraint firing."""
        # PostgreSQL names uq_wagers_sequential_id, SQLite names wagers.sequential_id
        return "sequential_id" in str(exc.orig)

    async def next_sequential_id(self, session: AsyncSession) -> int:
        result = await session.execute(
            select(func.coalesce(func.max(Wager.sequential_id), 0) + 1)
        )
        return result.scalar_one()

    async def create_wager_with_offers(
        self, session: AsyncSession, fields: NewWagerFields
    ) -> Wager:
        """
        Stage a new Wager with both of its Offers.

        The maker is not known here; it is set in the link phase before the
        caller flushes.
        """
        wager = Wager(
            id=uuid4(),
            sequential_id=await self.next_sequential_id(session),
            outcome=fields.outcome,
            status=fields.status,
            taker_id=None,
            arbiter_id=None,
            expiration=fields.expiration,
            maturation=fields.maturation,
            offers=[
                self._build_offer(OfferRole.MAKER, fields.maker_offer),
                self._build_offer(OfferRole.TAKER, fields.taker_offer),
            ],
        )
        session.add(wager)
        return wager

    @staticmethod
    def _build_offer(role: OfferRole, terms: OfferTerms) -> Offer:
        return Offer(
            id=uuid4(),
            role=role,
            currency=terms.currency,
            amount_in_cents=terms.amount_in_cents,
            description=terms.description or "",
        )

    def _wager_query(self):
        return select(Wager).where(Wager.deleted_at.is_(None)).options(
            selectinload(Wager.offers),
            selectinload(Wager.maker),
            selectinload(Wager.taker),
            selectinload(Wager.arbiter),
        )

    async def find_wager_by_id(
        self, session: AsyncSession, wager_id: UUID
    ) -> Wager | None:
        result = await session.execute(self._wager_query().where(Wager.id == wager_id))
        return result.scalar_one_or_none()

    async def find_wager_by_sequential_id(
        self, session: AsyncSession, sequential_id: int
    ) -> Wager | None:
        result = await session.execute(
            self._wager_query().where(Wager.sequential_id == sequential_id)
        )
        return result.scalar_one_or_none()

    async def set_wager_maker(self, session: AsyncSession, wager: Wager, user: User) -> None:
        wager.maker = user

    async def set_wager_taker(self, session: AsyncSession, wager: Wager, user: User) -> None:
        wager.taker = user

    async def set_wager_arbiter(self, session: AsyncSession, wager: Wager, user: User) -> None:
        wager.arbiter = user

    async def add_wager_to_user_collection(
        self, session: AsyncSession, user: User, wager: Wager
    ) -> bool:
        """Add the wager to the user's collection; returns False if already there."""
        for pending in session.new:
            if (
                isinstance(pending, UserWager)
                and pending.user is user
                and pending.wager is wager
            ):
                return False
        if await session.get(UserWager, (user.id, wager.id)) is not None:
            return False
        session.add(UserWager(user=user, wager=wager))
        return True

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def create_operation(
        self, session: AsyncSession, operation_type: OperationType
    ) -> Operation:
        """Stage an Operation of the given type, not yet linked to anything."""
        operation = Operation(id=uuid4(), type=operation_type)
        session.add(operation)
        return operation

    async def link_operation_to_user(
        self, session: AsyncSession, operation: Operation, user: User
    ) -> None:
        operation.user = user

    async def link_operation_to_wager(
        self, session: AsyncSession, operation: Operation, wager: Wager
    ) -> None:
        operation.wager = wager

    async def list_operations_for_wager(
        self, session: AsyncSession, wager_id: UUID
    ) -> Sequence[Operation]:
        result = await session.execute(
            select(Operation)
            .where(
                Operation.wager_id == wager_id,
                Operation.deleted_at.is_(None),
            )
            .options(selectinload(Operation.user))
            .order_by(Operation.created_at, Operation.id)
        )
        return result.scalars().all()
