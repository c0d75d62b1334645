"""
exceptions.py — Quicksizer error taxonomy.

Not-found is NOT an exception anywhere in the core: lookups return None and
only the HTTP layer turns that into a 404.
"""
from __future__ import annotations

from typing import Any, Optional


class QuicksizerError(Exception):
    """Base class for every domain error raised by the core."""


class ValidationError(QuicksizerError, ValueError):
    """
    Questionnaire input violates one or more field constraints.

    violations: every problem found, as {"field": str | None, "issue": str}
    dicts, collected in a single pass so the caller sees all of them at once.
    """

    def __init__(self, violations: list[dict[str, Any]]) -> None:
        self.violations = violations
        super().__init__(
            "; ".join(
                f"{v['field']}: {v['issue']}" if v.get("field") else v["issue"]
                for v in violations
            )
        )


class DuplicateSession(QuicksizerError):
    """A questionnaire already exists for this session_id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"A questionnaire already exists for session '{session_id}'")


class EstimateAlreadyExists(QuicksizerError):
    """The estimates.questionnaire_id uniqueness constraint fired."""

    def __init__(self, questionnaire_id: int) -> None:
        self.questionnaire_id = questionnaire_id
        super().__init__(f"An estimate already exists for questionnaire {questionnaire_id}")


class StorageFailure(QuicksizerError):
    """The underlying database is unavailable or rejected the operation."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        detail = f": {type(cause).__name__}" if cause is not None else ""
        super().__init__(f"Storage failure during {operation}{detail}")


__all__ = [
    "QuicksizerError",
    "ValidationError",
    "DuplicateSession",
    "EstimateAlreadyExists",
    "StorageFailure",
]
