"""
schemas.py — Questionnaire Pydantic v2 data contracts.

Defines:
  - Industry, DataSize, Functionality, DeploymentPreference enums
  - Amount               (Decimal that serialises as a JSON number)
  - QuestionnaireInput   (what a client submits)
  - Questionnaire        (the stored, immutable record: input + id + created_at)
  - QuestionnaireSummary (aggregate figures for the sales dashboard)
  - ErrorDetail, ErrorBody, ErrorResponse  (cross-cutting error envelope)

required_functionalities is de-duplicated on the way in (first occurrence
wins), so every downstream consumer sees each capability at most once.
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Industry(str, Enum):
    finance = "finance"
    healthcare = "healthcare"
    retail = "retail"
    manufacturing = "manufacturing"
    technology = "technology"
    other = "other"


class DataSize(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"
    enterprise = "enterprise"


class Functionality(str, Enum):
    etl = "etl"
    data_warehousing = "data_warehousing"
    ml = "ml"
    analytics = "analytics"
    real_time = "real_time"


class DeploymentPreference(str, Enum):
    cloud = "cloud"
    on_premise = "on_premise"
    hybrid = "hybrid"


# Decimal internally, plain number on the wire
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# QuestionnaireInput — what the questionnaire form submits
# ---------------------------------------------------------------------------

class QuestionnaireInput(BaseModel):
    """
    One customer's platform requirements.

    session_id is supplied by the caller and must be unique across all
    questionnaires; the store rejects a second submission for the same id.
    """
    model_config = ConfigDict(extra="forbid")

    session_id: str = Field(
        ..., min_length=1, max_length=128,
        description="Opaque client session identifier. One questionnaire per session.",
    )
    company_name: Optional[str] = Field(
        default=None, max_length=255,
        description="Customer company name. Blank values are stored as null.",
    )
    industry: Industry
    data_size: DataSize = Field(
        ...,
        description="Coarse data-volume tier. Selects the base platform fee and per-GB storage rate.",
    )
    developer_count: int = Field(..., gt=0)
    required_functionalities: List[Functionality] = Field(
        ..., min_length=1,
        description="Capabilities the customer needs. At least one; duplicates are dropped.",
    )
    deployment_preference: DeploymentPreference
    monthly_data_volume_gb: Amount = Field(
        ..., gt=0, allow_inf_nan=False,
        description="Expected monthly data volume in GB, kept at 2 decimal places.",
    )
    concurrent_users: int = Field(..., gt=0)
    compliance_requirements: bool
    high_availability_needed: bool

    @field_validator("company_name")
    @classmethod
    def blank_company_name_is_null(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("required_functionalities")
    @classmethod
    def drop_duplicate_functionalities(cls, value: List[Functionality]) -> List[Functionality]:
        return list(dict.fromkeys(value))

    @field_validator("monthly_data_volume_gb")
    @classmethod
    def volume_to_cents(cls, value: Decimal) -> Decimal:
        quantized = value.quantize(CENT, rounding=ROUND_HALF_UP)
        if quantized <= 0:
            raise ValueError("must be at least 0.01 GB")
        return quantized


# ---------------------------------------------------------------------------
# Questionnaire — stored record
# ---------------------------------------------------------------------------

class Questionnaire(QuestionnaireInput):
    """A persisted questionnaire. Never modified after creation."""
    model_config = ConfigDict(extra="forbid", frozen=True, from_attributes=True)

    id: int
    created_at: datetime


class QuestionnaireSummary(BaseModel):
    """Headline numbers shown above the questionnaire list on the sales dashboard."""
    model_config = ConfigDict(extra="forbid")

    total_assessments: int = 0
    unique_industries: int = 0
    avg_developers: int = 0
    avg_monthly_data_volume_gb: int = 0


# ---------------------------------------------------------------------------
# Error response models — used by main.py exception handlers (cross-cutting)
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    """Single field-level validation or business-rule error."""
    model_config = ConfigDict(extra="forbid")

    field: Optional[str] = None   # Dot-notation field path, e.g. "developer_count"
    issue: str                     # Human-readable description of the problem


class ErrorBody(BaseModel):
    """Error envelope body."""
    model_config = ConfigDict(extra="forbid")

    code: str                                      # VALIDATION_ERROR, NOT_FOUND, etc.
    message: str                                   # High-level error description
    details: List[ErrorDetail] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """
    Standard error response format for all Quicksizer endpoints.

    Structure: {"error": {"code": "...", "message": "...", "details": [...]}}
    """
    model_config = ConfigDict(extra="forbid")

    error: ErrorBody


__all__ = [
    "Industry",
    "DataSize",
    "Functionality",
    "DeploymentPreference",
    "Amount",
    "CENT",
    "QuestionnaireInput",
    "Questionnaire",
    "QuestionnaireSummary",
    "ErrorDetail",
    "ErrorBody",
    "ErrorResponse",
]
