"""
Grade Arithmetic

Decimal arithmetic for the weighted final grade and for grades derived
from rubric scores. Rounding is always half-up, never banker's rounding.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from practicum.schemas.closure import GradingConfiguration
from practicum.schemas.evaluation import (
    EMPLOYER_CRITERIA,
    REPORT_CRITERIA,
    CriterionScore,
    EmployerEvaluation,
    EvaluationCriterion,
    ReportEvaluation,
    unscored,
)
from practicum.workflow.errors import IncompleteCriteriaError, InvalidConfigurationError

ONE_DECIMAL = Decimal("0.1")
TWO_DECIMALS = Decimal("0.01")


def round_half_up(value: Decimal | float | int, quantum: Decimal = ONE_DECIMAL) -> Decimal:
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def ensure_balanced(config: GradingConfiguration) -> None:
    """Raise InvalidConfigurationError unless the weights sum to exactly 100."""
    if not config.is_balanced:
        raise InvalidConfigurationError(config.report_weight, config.employer_weight)


def compute_final_grade(
    report_grade: Decimal,
    employer_grade: Decimal,
    config: GradingConfiguration,
) -> Decimal:
    """
    Weighted final grade, rounded half-up to one decimal.

    final = report * report_weight/100 + employer * employer_weight/100
    """
    ensure_balanced(config)
    weighted = (
        Decimal(report_grade) * Decimal(config.report_weight) / Decimal(100)
        + Decimal(employer_grade) * Decimal(config.employer_weight) / Decimal(100)
    )
    return round_half_up(weighted)


def is_passing(final_grade: Decimal, config: GradingConfiguration) -> bool:
    return final_grade >= config.min_passing_grade


def _weighted_score(
    scores: Iterable[CriterionScore],
    catalogue: Iterable[EvaluationCriterion],
    quantum: Decimal,
) -> Decimal:
    weights = {criterion.id: criterion.weight for criterion in catalogue}
    weighted_sum = 0
    weight_total = 0
    for item in scores:
        weight = weights.get(item.criterion_id)
        if weight is None:
            continue
        weighted_sum += item.score * weight
        weight_total += weight

    if weight_total == 0:
        return Decimal("0")
    return round_half_up(Decimal(weighted_sum) / Decimal(weight_total), quantum)


def employer_grade_from_criteria(scores: Iterable[CriterionScore]) -> Decimal:
    """
    Weighted average of employer criterion scores, rounded half-up to two
    decimals.

    Scores for unknown criteria are ignored. Returns 0 when no known
    criterion was scored.
    """
    return _weighted_score(scores, EMPLOYER_CRITERIA, TWO_DECIMALS)


def report_grade_from_rubric(scores: Iterable[CriterionScore]) -> Decimal:
    """Plain average of the report rubric scores, rounded half-up to one decimal."""
    return _weighted_score(scores, REPORT_CRITERIA, ONE_DECIMAL)


def missing_criteria(
    scores: Iterable[CriterionScore],
    catalogue: Iterable[EvaluationCriterion] = EMPLOYER_CRITERIA,
) -> list[str]:
    return unscored(catalogue, scores)


# =============================================================================
# RUBRIC-BASED EVALUATIONS
# =============================================================================

def build_report_evaluation(
    practice_id: int,
    scores: list[CriterionScore],
    evaluated_at: datetime,
    comments: str | None = None,
) -> ReportEvaluation:
    """Report evaluation whose grade is the rubric average."""
    missing = missing_criteria(scores, REPORT_CRITERIA)
    if missing:
        raise IncompleteCriteriaError(practice_id, missing)
    return ReportEvaluation(
        practice_id=practice_id,
        grade=report_grade_from_rubric(scores),
        evaluated_at=evaluated_at,
        comments=comments,
        criteria=scores,
    )


def build_employer_evaluation(
    practice_id: int,
    scores: list[CriterionScore],
    evaluated_at: datetime,
    comments: str | None = None,
) -> EmployerEvaluation:
    """Employer evaluation whose grade is the weighted criteria average."""
    missing = missing_criteria(scores, EMPLOYER_CRITERIA)
    if missing:
        raise IncompleteCriteriaError(practice_id, missing)
    return EmployerEvaluation(
        practice_id=practice_id,
        grade=employer_grade_from_criteria(scores),
        evaluated_at=evaluated_at,
        comments=comments,
        criteria=scores,
    )
