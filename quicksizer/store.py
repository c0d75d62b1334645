"""
store.py — Data access layer for Quicksizer.

Two stores, each constructed with an async session factory (no module-level
engine or session):

  - QuestionnaireStore : create / get_by_session / get_by_id / list_all / summary
  - EstimateStore      : get_by_questionnaire_id / create (at most one per questionnaire)

Design principles:
  - Every operation is its own short transaction: single-record writes are
    atomic, nothing spans two records
  - Uniqueness is enforced by the database, not by check-then-insert:
    questionnaires.session_id and estimates.questionnaire_id are UNIQUE and
    the resulting IntegrityError becomes DuplicateSession / EstimateAlreadyExists
  - Any other driver error becomes StorageFailure and propagates — no retries here
  - Lookups return None for "no such record"; they never raise for it
  - Returns Pydantic domain objects (not ORM instances)
  - Logs ids only — never company names
"""
import logging
from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterator, Mapping, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quicksizer.estimation.schemas import CostComputation, Estimate
from quicksizer.exceptions import DuplicateSession, EstimateAlreadyExists, StorageFailure
from quicksizer.models.estimate import EstimateORM
from quicksizer.models.questionnaire import QuestionnaireORM
from quicksizer.questionnaire.schemas import (
    Questionnaire,
    QuestionnaireInput,
    QuestionnaireSummary,
)
from quicksizer.questionnaire.validator import validate_questionnaire

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Translate driver / connection errors into StorageFailure."""
    try:
        yield
    except (DBAPIError, OSError) as exc:
        logger.error("Storage failure during %s: %s", operation, type(exc).__name__)
        raise StorageFailure(operation, exc) from exc


def _round_half_up(value: Any) -> int:
    if value is None:
        return 0
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Questionnaire store
# ---------------------------------------------------------------------------

class QuestionnaireStore:
    """Submitted questionnaires, keyed by session_id and by numeric id."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def create(
        self,
        payload: Union[QuestionnaireInput, Mapping[str, Any]],
    ) -> Questionnaire:
        """
        Validate and persist a questionnaire; assigns id and created_at.

        Raises:
            ValidationError: input violates a field constraint (nothing written).
            DuplicateSession: session_id already has a questionnaire (nothing written).
            StorageFailure: database unavailable.
        """
        data = validate_questionnaire(payload)
        orm = QuestionnaireORM(
            session_id=data.session_id,
            company_name=data.company_name,
            industry=data.industry.value,
            data_size=data.data_size.value,
            developer_count=data.developer_count,
            required_functionalities=[f.value for f in data.required_functionalities],
            deployment_preference=data.deployment_preference.value,
            monthly_data_volume_gb=data.monthly_data_volume_gb,
            concurrent_users=data.concurrent_users,
            compliance_requirements=data.compliance_requirements,
            high_availability_needed=data.high_availability_needed,
        )
        with _storage_errors("questionnaire create"):
            try:
                async with self._session_factory() as session, session.begin():
                    session.add(orm)
                    await session.flush()
                    await session.refresh(orm)
            except IntegrityError as exc:
                logger.info("Duplicate questionnaire rejected session_id=%s", data.session_id)
                raise DuplicateSession(data.session_id) from exc

        logger.info(
            "Saved questionnaire questionnaire_id=%s session_id=%s",
            orm.id,
            orm.session_id,
        )
        return Questionnaire.model_validate(orm)

    async def get_by_session(self, session_id: str) -> Optional[Questionnaire]:
        """Returns None if no questionnaire was submitted for this session."""
        with _storage_errors("questionnaire lookup"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(QuestionnaireORM).where(QuestionnaireORM.session_id == session_id)
                )
                orm = result.scalar_one_or_none()
        if orm is None:
            return None
        return Questionnaire.model_validate(orm)

    async def get_by_id(self, questionnaire_id: int) -> Optional[Questionnaire]:
        with _storage_errors("questionnaire lookup"):
            async with self._session_factory() as session:
                orm = await session.get(QuestionnaireORM, questionnaire_id)
        if orm is None:
            return None
        return Questionnaire.model_validate(orm)

    async def list_all(self) -> list[Questionnaire]:
        """
        All questionnaires, most recently created first.
        id breaks ties between rows created in the same clock tick.
        """
        with _storage_errors("questionnaire list"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(QuestionnaireORM).order_by(
                        QuestionnaireORM.created_at.desc(),
                        QuestionnaireORM.id.desc(),
                    )
                )
                rows = result.scalars().all()
        return [Questionnaire.model_validate(row) for row in rows]

    async def summary(self) -> QuestionnaireSummary:
        """
        Dashboard aggregates: questionnaire count, distinct industries,
        and average team size / monthly volume rounded to whole numbers.
        """
        with _storage_errors("questionnaire summary"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(
                        func.count(QuestionnaireORM.id),
                        func.count(func.distinct(QuestionnaireORM.industry)),
                        func.avg(QuestionnaireORM.developer_count),
                        func.avg(QuestionnaireORM.monthly_data_volume_gb),
                    )
                )
                total, industries, avg_developers, avg_volume = result.one()
        return QuestionnaireSummary(
            total_assessments=total or 0,
            unique_industries=industries or 0,
            avg_developers=_round_half_up(avg_developers),
            avg_monthly_data_volume_gb=_round_half_up(avg_volume),
        )


# ---------------------------------------------------------------------------
# Estimate store
# ---------------------------------------------------------------------------

class EstimateStore:
    """Computed estimates — at most one per questionnaire, never updated."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def get_by_questionnaire_id(self, questionnaire_id: int) -> Optional[Estimate]:
        """Returns None if no estimate has been computed for this questionnaire yet."""
        with _storage_errors("estimate lookup"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(EstimateORM).where(EstimateORM.questionnaire_id == questionnaire_id)
                )
                orm = result.scalar_one_or_none()
        if orm is None:
            return None
        return Estimate.model_validate(orm)

    async def create(self, questionnaire_id: int, computation: CostComputation) -> Estimate:
        """
        Persist a computed estimate; assigns id and created_at.

        Raises:
            EstimateAlreadyExists: an estimate for questionnaire_id is already stored
                (lost a concurrent first-request race). Nothing written.
            StorageFailure: database unavailable.
        """
        orm = EstimateORM(
            questionnaire_id=questionnaire_id,
            base_cost=computation.base_cost,
            data_storage_cost=computation.data_storage_cost,
            compute_cost=computation.compute_cost,
            functionality_cost=computation.functionality_cost,
            compliance_cost=computation.compliance_cost,
            support_cost=computation.support_cost,
            total_monthly_cost=computation.total_monthly_cost,
            total_annual_cost=computation.total_annual_cost,
            cost_breakdown={label: float(amount) for label, amount in computation.cost_breakdown.items()},
            recommendations=list(computation.recommendations),
        )
        with _storage_errors("estimate create"):
            try:
                async with self._session_factory() as session, session.begin():
                    session.add(orm)
                    await session.flush()
                    await session.refresh(orm)
            except IntegrityError as exc:
                raise EstimateAlreadyExists(questionnaire_id) from exc

        logger.info(
            "Saved estimate estimate_id=%s questionnaire_id=%s total_monthly_cost=%s",
            orm.id,
            questionnaire_id,
            computation.total_monthly_cost,
        )
        return Estimate.model_validate(orm)
