"""Shared fixtures: a file-backed SQLite database per test, the engine, and an API client.

A file database (not :memory:) gives every session its own connection, so
concurrent transactions behave like they would against a real server.
"""

import os

# Must be set before the application modules build their engine and settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from wager_ledger.core import create_session_factory, get_session_factory
from wager_ledger.main import app
from wager_ledger.models import Base, Currency, OperationType
from wager_ledger.services import (
    OfferTerms,
    OperationEngine,
    OperationRequest,
    WagerParameters,
)


# =============================================================================
# DATABASE
# =============================================================================


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
async def session(session_factory):
    """A separate session for inspecting what the engine committed."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def count_rows(session: AsyncSession):
    """Count committed rows of a model, bypassing the session's identity map."""

    async def _count(model) -> int:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()

    return _count


@pytest.fixture
def ledger(session_factory) -> OperationEngine:
    return OperationEngine(session_factory)


# =============================================================================
# REQUESTS
# =============================================================================


@pytest.fixture
def stake() -> OfferTerms:
    return OfferTerms(currency=Currency.USD, amount_in_cents=500, description="bet")


@pytest.fixture
def proposal_parameters(stake: OfferTerms) -> WagerParameters:
    """Minimal valid PROPOSE parameters (no taker, no arbiter)."""
    return WagerParameters(
        outcome="Team A wins",
        maker_offer=stake,
        taker_offer=OfferTerms(currency=Currency.USD, amount_in_cents=500, description="bet"),
    )


@pytest.fixture
def propose_request(proposal_parameters: WagerParameters) -> OperationRequest:
    return OperationRequest(
        acting_user_handle="U1",
        operation_type=OperationType.PROPOSE,
        wager_parameters=proposal_parameters,
    )


@pytest.fixture
def proposal_body() -> dict:
    """The PROPOSE example request as it arrives over HTTP."""
    return {
        "actingUserHandle": "U1",
        "operationType": "PROPOSE",
        "wagerParameters": {
            "outcome": "Team A wins",
            "makerOffer": {"currency": "USD", "amountInCents": 500, "description": "bet"},
            "takerOffer": {"currency": "USD", "amountInCents": 500, "description": "bet"},
        },
    }


# =============================================================================
# API
# =============================================================================


@pytest.fixture
async def client(session_factory):
    """FastAPI test client wired to the per-test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
