"""
Closure Record and Grading Configuration

The closure record (acta final) snapshots both source grades and the
weighted result at the moment of administrative sign-off. The grading
configuration is the single active weighting row owned by the
configuration provider.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from practicum.schemas.base import (
    DEFAULT_PASSING_GRADE,
    ClosureState,
    Grade,
    PracticeId,
    WeightPercent,
)


class GradingConfiguration(BaseModel):
    """
    Active grading weights.

    The weight sum is not validated here: providers enforce it on write
    and the closure engine re-checks it on read.
    """
    model_config = ConfigDict(frozen=True)

    report_weight: WeightPercent = Field(description="porcentajeInforme")
    employer_weight: WeightPercent = Field(description="porcentajeEmpleador")
    min_passing_grade: Grade = Field(default=DEFAULT_PASSING_GRADE)

    @property
    def weight_total(self) -> int:
        return self.report_weight + self.employer_weight

    @property
    def is_balanced(self) -> bool:
        return self.weight_total == 100


class ClosureRecord(BaseModel):
    """Final closure record (acta final), one per practice."""
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    report_grade: Grade
    employer_grade: Grade
    report_weight: WeightPercent
    employer_weight: WeightPercent
    final_grade: Decimal = Field(description="Weighted grade rounded half-up to one decimal")
    passed: bool
    state: ClosureState = ClosureState.PENDING
    closed_at: datetime | None = None

    @property
    def is_validated(self) -> bool:
        return self.state == ClosureState.VALIDATED


class ClosurePreview(BaseModel):
    """
    Weighted final grade as it would be (or was) recorded, for review
    before the administrative sign-off. Never persisted.
    """
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    report_grade: Grade
    employer_grade: Grade
    report_weight: WeightPercent
    employer_weight: WeightPercent
    final_grade: Decimal
    passed: bool
    closure_state: ClosureState = ClosureState.PENDING
