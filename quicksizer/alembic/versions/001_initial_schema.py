"""initial_schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000 UTC

Creates the two core tables:
  - questionnaires  (submitted requirements, one per session_id)
  - estimates       (computed cost estimate, at most one per questionnaire)
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_json = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=18, scale=2), nullable=False)


def upgrade() -> None:
    # --- questionnaires table ---
    op.create_table(
        "questionnaires",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False, comment="Client-supplied session identifier — one questionnaire per session"),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("industry", sa.String(length=20), nullable=False, comment="Mirrors Industry enum"),
        sa.Column("data_size", sa.String(length=10), nullable=False, comment="'small' | 'medium' | 'large' | 'enterprise'"),
        sa.Column("developer_count", sa.Integer(), nullable=False),
        sa.Column("required_functionalities", _json, nullable=False, comment="JSON array of Functionality values, duplicates removed"),
        sa.Column("deployment_preference", sa.String(length=10), nullable=False, comment="'cloud' | 'on_premise' | 'hybrid'"),
        sa.Column("monthly_data_volume_gb", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("concurrent_users", sa.Integer(), nullable=False),
        sa.Column("compliance_requirements", sa.Boolean(), nullable=False),
        sa.Column("high_availability_needed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_questionnaires_session_id"), "questionnaires", ["session_id"], unique=True)
    op.create_index(op.f("ix_questionnaires_created_at"), "questionnaires", ["created_at"], unique=False)

    # --- estimates table ---
    op.create_table(
        "estimates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("questionnaire_id", sa.Integer(), nullable=False, comment="References questionnaires.id — one-to-one relationship"),
        _money("base_cost"),
        _money("data_storage_cost"),
        _money("compute_cost"),
        _money("functionality_cost"),
        _money("compliance_cost"),
        _money("support_cost"),
        _money("total_monthly_cost"),
        _money("total_annual_cost"),
        sa.Column("cost_breakdown", _json, nullable=False, comment="Labelled copy of the six cost components"),
        sa.Column("recommendations", _json, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["questionnaire_id"], ["questionnaires.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_estimates_questionnaire_id"), "estimates", ["questionnaire_id"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_estimates_questionnaire_id"), table_name="estimates")
    op.drop_table("estimates")
    op.drop_index(op.f("ix_questionnaires_created_at"), table_name="questionnaires")
    op.drop_index(op.f("ix_questionnaires_session_id"), table_name="questionnaires")
    op.drop_table("questionnaires")
