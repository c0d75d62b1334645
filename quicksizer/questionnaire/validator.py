"""
Questionnaire validator.

Turns raw questionnaire input into a QuestionnaireInput, collecting EVERY
problem in a single pass (Pydantic structural errors first, then business
rules) and raising one exceptions.ValidationError listing all of them.

Business rules enforced on top of the schema:
  1. session_id must contain something other than whitespace and must not
     be a reserved path segment ("summary")
  2. developer_count / concurrent_users must fit the INTEGER columns
  3. monthly_data_volume_gb must fit the NUMERIC(12, 2) column
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from quicksizer.exceptions import ValidationError
from quicksizer.questionnaire.schemas import QuestionnaireInput

logger = logging.getLogger(__name__)

# Storage limits, mirroring the column definitions in models/questionnaire.py
_MAX_INT_COLUMN = 2_147_483_647
_MAX_VOLUME_GB = Decimal("9999999999.99")

# Path segments under /api/questionnaires/ that a session lookup could never reach
RESERVED_SESSION_IDS = frozenset({"summary"})


def _pydantic_violations(exc: PydanticValidationError) -> list[dict[str, Any]]:
    violations = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        violations.append({"field": field or None, "issue": error["msg"]})
    return violations


def _business_rule_violations(data: QuestionnaireInput) -> list[dict[str, Any]]:
    violations: list[dict[str, Any]] = []

    if not data.session_id.strip():
        violations.append({"field": "session_id", "issue": "session_id must not be blank"})
    elif data.session_id in RESERVED_SESSION_IDS:
        violations.append({"field": "session_id", "issue": f"'{data.session_id}' is a reserved session_id"})

    for field in ("developer_count", "concurrent_users"):
        value = getattr(data, field)
        if value > _MAX_INT_COLUMN:
            violations.append({
                "field": field,
                "issue": f"Value {value:,} exceeds the maximum of {_MAX_INT_COLUMN:,}",
            })

    if data.monthly_data_volume_gb > _MAX_VOLUME_GB:
        violations.append({
            "field": "monthly_data_volume_gb",
            "issue": f"Value exceeds the maximum of {_MAX_VOLUME_GB:,} GB",
        })

    return violations


def validate_questionnaire(
    payload: Union[QuestionnaireInput, Mapping[str, Any]],
) -> QuestionnaireInput:
    """
    Validate questionnaire input and return the normalised QuestionnaireInput.

    Raises:
        ValidationError: listing every violated constraint. Nothing is persisted.
    """
    if isinstance(payload, QuestionnaireInput):
        data = payload
    else:
        try:
            data = QuestionnaireInput.model_validate(dict(payload))
        except PydanticValidationError as exc:
            violations = _pydantic_violations(exc)
            logger.info("Questionnaire rejected: %d structural violation(s)", len(violations))
            raise ValidationError(violations) from exc

    violations = _business_rule_violations(data)
    if violations:
        # session_id and count only, never the company name
        logger.info(
            "Questionnaire rejected: %d business-rule violation(s) session_id=%s",
            len(violations),
            data.session_id,
        )
        raise ValidationError(violations)
    return data
