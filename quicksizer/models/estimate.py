"""
models/estimate.py — SQLAlchemy ORM model for computed cost estimates.

Table: estimates
One-to-zero-or-one with questionnaires (questionnaire_id unique index).
The unique constraint is what arbitrates two concurrent first requests for
the same questionnaire: the loser's INSERT fails and it re-reads the winner's row.
"""
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from quicksizer.database import Base, JSONType


def _money() -> Mapped[Decimal]:
    return mapped_column(Numeric(18, 2), nullable=False)


class EstimateORM(Base):
    """
    ORM model for one questionnaire's monthly/annual cost estimate.

    Monetary columns are NUMERIC(18, 2), wide enough for the largest accepted
    questionnaire. Values are rounded to cents by the pricing engine before
    they get here.
    cost_breakdown: JSON object {label: amount}. JSONB does not keep key order,
                    so readers re-order by BREAKDOWN_LABELS.
    recommendations: JSON array of advisory strings, in trigger order.
    """
    __tablename__ = "estimates"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    questionnaire_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questionnaires.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,     # At most one estimate per questionnaire
        index=True,
        comment="References questionnaires.id — one-to-one relationship",
    )
    base_cost: Mapped[Decimal] = _money()
    data_storage_cost: Mapped[Decimal] = _money()
    compute_cost: Mapped[Decimal] = _money()
    functionality_cost: Mapped[Decimal] = _money()
    compliance_cost: Mapped[Decimal] = _money()
    support_cost: Mapped[Decimal] = _money()
    total_monthly_cost: Mapped[Decimal] = _money()
    total_annual_cost: Mapped[Decimal] = _money()
    cost_breakdown: Mapped[dict] = mapped_column(
        JSONType,
        nullable=False,
        comment="Labelled copy of the six cost components",
    )
    recommendations: Mapped[list] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
