"""
Test configuration for the Quicksizer test suite.

Every test gets its own SQLite database file under tmp_path (via aiosqlite),
with tables created from the ORM metadata — no PostgreSQL or Redis needed.
"""
from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from quicksizer.config import Settings
from quicksizer.database import build_engine, build_session_factory, create_tables
from quicksizer.main import create_app
from quicksizer.service import CostEstimationService
from quicksizer.store import EstimateStore, QuestionnaireStore


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'quicksizer.db'}",
        run_migrations=False,
        redis_url="",
        debug=False,
    )


@pytest_asyncio.fixture
async def engine(test_settings: Settings):
    engine = build_engine(test_settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def questionnaire_store(session_factory) -> QuestionnaireStore:
    return QuestionnaireStore(session_factory)


@pytest.fixture
def estimate_store(session_factory) -> EstimateStore:
    return EstimateStore(session_factory)


@pytest.fixture
def service(questionnaire_store, estimate_store) -> CostEstimationService:
    return CostEstimationService(questionnaire_store, estimate_store)


@pytest_asyncio.fixture
async def client(test_settings: Settings):
    """Async httpx client over ASGI transport, with the app lifespan running."""
    app = create_app(test_settings)
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
