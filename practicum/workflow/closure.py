"""
Grade Closure Engine

Computes the weighted final grade, produces the closure record (acta
final) and drives the practice to CLOSED. The engine is a pure function
of its inputs: configuration and closing timestamp are passed in, and
the caller persists the returned record and practice as one atomic unit.

Also owns the evaluation-phase rules that lead up to closure: which
states accept evaluations and how a practice advances once they arrive.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from practicum.schemas.base import ClosureState, PracticeState
from practicum.schemas.closure import ClosurePreview, ClosureRecord, GradingConfiguration
from practicum.schemas.evaluation import EmployerEvaluation, ReportEvaluation
from practicum.schemas.practice import Practice
from practicum.workflow.errors import (
    AlreadyClosedError,
    EvaluationLockedError,
    EvaluationMismatchError,
    EvaluationsIncompleteError,
    InvalidStateError,
    ReportNotUploadedError,
)
from practicum.workflow.grading import compute_final_grade, ensure_balanced, is_passing
from practicum.workflow.state_machine import transition

logger = logging.getLogger(__name__)

# States from which EVALUATION_COMPLETE is (or already is) reached
CLOSABLE_STATES = frozenset(
    {PracticeState.FINISHED_PENDING_EVAL, PracticeState.EVALUATION_COMPLETE}
)

# Evaluations may be created or overwritten only in these states
EVALUABLE_STATES = frozenset(
    {
        PracticeState.IN_PROGRESS,
        PracticeState.FINISHED_PENDING_EVAL,
        PracticeState.EVALUATION_COMPLETE,
    }
)


@dataclass(frozen=True)
class ClosureOutcome:
    """Result of a successful closure: both values must be saved together."""
    record: ClosureRecord
    practice: Practice


# =============================================================================
# EVALUATION PHASE
# =============================================================================

def ensure_evaluation_editable(practice: Practice) -> None:
    if practice.state not in EVALUABLE_STATES:
        raise EvaluationLockedError(practice.id, practice.state.value)


def ensure_report_gradable(practice: Practice) -> None:
    """The instructor grades the report only once it is uploaded."""
    ensure_evaluation_editable(practice)
    if not practice.has_report:
        raise ReportNotUploadedError(practice.id)


def advance_after_evaluation(
    practice: Practice,
    has_report_eval: bool,
    has_employer_eval: bool,
) -> Practice:
    """
    State the practice moves to once an evaluation is stored.

    A graded report ends a running practice (IN_PROGRESS ->
    FINISHED_PENDING_EVAL); with both evaluations present the practice
    becomes EVALUATION_COMPLETE. Otherwise it is returned unchanged.
    """
    if practice.state == PracticeState.IN_PROGRESS and has_report_eval:
        practice = transition(practice, PracticeState.FINISHED_PENDING_EVAL)
    if (
        practice.state == PracticeState.FINISHED_PENDING_EVAL
        and has_report_eval
        and has_employer_eval
    ):
        practice = transition(practice, PracticeState.EVALUATION_COMPLETE)
    return practice


# =============================================================================
# CLOSURE
# =============================================================================

def _check_evaluations(
    practice: Practice,
    report_eval: ReportEvaluation | None,
    employer_eval: EmployerEvaluation | None,
) -> None:
    missing = []
    if report_eval is None:
        missing.append("report")
    if employer_eval is None:
        missing.append("employer")
    if missing:
        raise EvaluationsIncompleteError(practice.id, missing)

    for evaluation in (report_eval, employer_eval):
        if evaluation.practice_id != practice.id:
            raise EvaluationMismatchError(practice.id, evaluation.practice_id)


def compute_and_close(
    practice: Practice,
    report_eval: ReportEvaluation | None,
    employer_eval: EmployerEvaluation | None,
    config: GradingConfiguration,
    closed_at: datetime,
    existing: ClosureRecord | None = None,
) -> ClosureOutcome:
    """
    Close a practice with its weighted final grade.

    Args:
        practice: Practice in FINISHED_PENDING_EVAL or EVALUATION_COMPLETE
        report_eval: Instructor report evaluation
        employer_eval: Employer evaluation
        config: Active grading configuration
        closed_at: Closure timestamp recorded on the acta
        existing: Current closure record for the practice, if any

    Returns:
        ClosureOutcome with the VALIDATED record and the CLOSED practice

    Raises:
        EvaluationsIncompleteError: An evaluation is missing
        EvaluationMismatchError: An evaluation belongs to another practice
        AlreadyClosedError: Existing closure record is already VALIDATED
        InvalidConfigurationError: Weights do not sum to 100
        InvalidStateError: Practice cannot reach EVALUATION_COMPLETE
    """
    _check_evaluations(practice, report_eval, employer_eval)

    if existing is not None and existing.is_validated:
        raise AlreadyClosedError(practice.id)

    ensure_balanced(config)

    if practice.state not in CLOSABLE_STATES:
        raise InvalidStateError(practice.id, practice.state.value)

    if practice.state == PracticeState.FINISHED_PENDING_EVAL:
        practice = transition(practice, PracticeState.EVALUATION_COMPLETE)

    final_grade = compute_final_grade(report_eval.grade, employer_eval.grade, config)
    record = ClosureRecord(
        practice_id=practice.id,
        report_grade=report_eval.grade,
        employer_grade=employer_eval.grade,
        report_weight=config.report_weight,
        employer_weight=config.employer_weight,
        final_grade=final_grade,
        passed=is_passing(final_grade, config),
        state=ClosureState.VALIDATED,
        closed_at=closed_at,
    )
    closed = transition(practice, PracticeState.CLOSED)

    logger.info(
        "Practice %s closed with final grade %s (%s/%s)",
        practice.id, final_grade, config.report_weight, config.employer_weight,
    )
    return ClosureOutcome(record=record, practice=closed)


def preview_closure(
    practice: Practice,
    report_eval: ReportEvaluation | None,
    employer_eval: EmployerEvaluation | None,
    config: GradingConfiguration | None,
    existing: ClosureRecord | None = None,
) -> ClosurePreview:
    """
    Read-only view of the final grade.

    A VALIDATED record is shown as stored, whatever the current
    configuration says, and `config` may be None; otherwise the grade
    is computed with `config`.
    """
    if existing is not None and existing.is_validated:
        return ClosurePreview(
            practice_id=existing.practice_id,
            report_grade=existing.report_grade,
            employer_grade=existing.employer_grade,
            report_weight=existing.report_weight,
            employer_weight=existing.employer_weight,
            final_grade=existing.final_grade,
            passed=existing.passed,
            closure_state=existing.state,
        )

    _check_evaluations(practice, report_eval, employer_eval)
    final_grade = compute_final_grade(report_eval.grade, employer_eval.grade, config)
    return ClosurePreview(
        practice_id=practice.id,
        report_grade=report_eval.grade,
        employer_grade=employer_eval.grade,
        report_weight=config.report_weight,
        employer_weight=config.employer_weight,
        final_grade=final_grade,
        passed=is_passing(final_grade, config),
        closure_state=existing.state if existing is not None else ClosureState.PENDING,
    )
