"""
models/questionnaire.py — SQLAlchemy ORM model for submitted questionnaires.

Table: questionnaires
One row per client session (session_id unique). Rows are never updated.
"""
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from quicksizer.database import Base, JSONType


class QuestionnaireORM(Base):
    """
    ORM model for one customer's requirements questionnaire.

    Enum-valued answers are stored as their string values (no database enum
    types) so adding an option only touches questionnaire/schemas.py.
    required_functionalities: JSON array of Functionality values.
    """
    __tablename__ = "questionnaires"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    session_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
        comment="Client-supplied session identifier — one questionnaire per session",
    )
    company_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    industry: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Mirrors Industry enum",
    )
    data_size: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="'small' | 'medium' | 'large' | 'enterprise'",
    )
    developer_count: Mapped[int] = mapped_column(Integer, nullable=False)
    required_functionalities: Mapped[list] = mapped_column(
        JSONType,
        nullable=False,
        comment="JSON array of Functionality values, duplicates removed",
    )
    deployment_preference: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="'cloud' | 'on_premise' | 'hybrid'",
    )
    monthly_data_volume_gb: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    concurrent_users: Mapped[int] = mapped_column(Integer, nullable=False)
    compliance_requirements: Mapped[bool] = mapped_column(Boolean, nullable=False)
    high_availability_needed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
