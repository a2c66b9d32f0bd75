"""
Base types and constants used across all schemas.

This module defines the shared enums and constrained types that keep
practice records, evaluations and alerts consistent across the workflow.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import Field


# =============================================================================
# GRADE SCALE (Chilean 1.0 - 7.0)
# =============================================================================

MIN_GRADE = Decimal("1.0")
MAX_GRADE = Decimal("7.0")
DEFAULT_PASSING_GRADE = Decimal("4.0")


# =============================================================================
# ENUMS
# =============================================================================

class PracticeState(str, Enum):
    """Lifecycle state of a practice."""
    PENDING = "PENDING"
    PENDING_TEACHER_ACCEPTANCE = "PENDING_TEACHER_ACCEPTANCE"
    REJECTED_BY_TEACHER = "REJECTED_BY_TEACHER"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED_PENDING_EVAL = "FINISHED_PENDING_EVAL"
    EVALUATION_COMPLETE = "EVALUATION_COMPLETE"
    CLOSED = "CLOSED"
    VOIDED = "VOIDED"  # Logical end-state, may be reactivated to PENDING


class PracticeType(str, Enum):
    """Kind of internship."""
    LABOR = "LABOR"
    PROFESSIONAL = "PROFESSIONAL"


class ClosureState(str, Enum):
    """State of the final closure record (acta final)."""
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"  # Immutable once reached


class AlertSeverity(str, Enum):
    """Urgency bucket for an overdue practice."""
    CRITICAL = "CRITICAL"
    LOW = "LOW"
    NORMAL = "NORMAL"


# States that never raise deadline alerts
FINAL_STATES: frozenset[PracticeState] = frozenset(
    {PracticeState.CLOSED, PracticeState.VOIDED}
)


# =============================================================================
# CONSTRAINED TYPES
# =============================================================================

Grade = Annotated[
    Decimal,
    Field(ge=MIN_GRADE, le=MAX_GRADE, decimal_places=2, description="Grade on the 1.0-7.0 scale"),
]

WeightPercent = Annotated[
    int,
    Field(ge=0, le=100, description="Integer percentage between 0 and 100"),
]

NonEmptyStr = Annotated[
    str,
    Field(min_length=1, description="Non-empty string"),
]

PracticeId = Annotated[
    int,
    Field(gt=0, description="Practice primary key"),
]
