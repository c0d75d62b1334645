"""
database.py — SQLAlchemy 2.0 async engine and session factory builders.

This module owns ALL database connection infrastructure, but holds no
connection state itself: the engine and session factory are built once in
the FastAPI lifespan hook and kept on app.state.

Usage in the lifespan hook:
    engine = build_engine(settings)
    app.state.service = CostEstimationService.from_session_factory(
        build_session_factory(engine)
    )

Usage in store.py (each store operation opens its own short transaction):
    async with self._session_factory() as session, session.begin(): ...
"""
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from quicksizer.config import Settings


# ---------------------------------------------------------------------------
# Declarative base — ALL ORM models inherit from this
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base.
    All ORM models in quicksizer/models/ inherit from Base.
    Defined here (not in models/) to prevent circular imports in alembic/env.py.
    """
    pass


# JSONB on PostgreSQL, plain JSON everywhere else (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Engine / session factory builders
# ---------------------------------------------------------------------------
def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine. Pool sizing only applies to server databases."""
    kwargs: dict = {"echo": settings.debug}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=5,              # Core connection pool size
            max_overflow=10,          # Extra connections under peak load
            pool_pre_ping=True,       # Detect and discard stale connections before each use
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,   # Keep objects usable after commit without re-querying
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table from the ORM metadata. Used when migrations are off."""
    import quicksizer.models  # noqa: F401  (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
