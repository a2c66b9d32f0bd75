"""
Practicum Workflow Package

Pure core of the practice workflow: the lifecycle state machine, the
grade closure engine, the deadline classifier and the alert aggregator.
No module here performs I/O or reads the system clock.
"""

from practicum.workflow.state_machine import (
    TRANSITIONS,
    allowed_targets,
    can_transition,
    is_terminal,
    transition,
)
from practicum.workflow.grading import (
    build_employer_evaluation,
    build_report_evaluation,
    compute_final_grade,
    employer_grade_from_criteria,
    missing_criteria,
    report_grade_from_rubric,
)
from practicum.workflow.closure import (
    ClosureOutcome,
    advance_after_evaluation,
    compute_and_close,
    preview_closure,
)
from practicum.workflow.scheduling import suggest_end_date
from practicum.workflow.deadlines import (
    DeadlineClassifier,
    DeadlinePolicy,
    classify_acceptance_expiring,
    classify_overdue,
    classify_upcoming_milestones,
)
from practicum.workflow.aggregator import combine_summaries, group_by_campus, summarize

__all__ = [
    # State machine
    "TRANSITIONS",
    "allowed_targets",
    "can_transition",
    "is_terminal",
    "transition",
    # Grading
    "build_employer_evaluation",
    "build_report_evaluation",
    "compute_final_grade",
    "employer_grade_from_criteria",
    "missing_criteria",
    "report_grade_from_rubric",
    # Closure
    "ClosureOutcome",
    "advance_after_evaluation",
    "compute_and_close",
    "preview_closure",
    # Scheduling
    "suggest_end_date",
    # Deadlines
    "DeadlineClassifier",
    "DeadlinePolicy",
    "classify_acceptance_expiring",
    "classify_overdue",
    "classify_upcoming_milestones",
    # Aggregation
    "combine_summaries",
    "group_by_campus",
    "summarize",
]
