"""
Practicum Schemas Package

Pydantic models that are the data contracts of the practice workflow:
practices, evaluations, closure records, grading configuration and alerts.
"""

from practicum.schemas.base import (
    AlertSeverity,
    ClosureState,
    PracticeState,
    PracticeType,
)
from practicum.schemas.practice import Practice, ProgramRef
from practicum.schemas.evaluation import (
    EMPLOYER_CRITERIA,
    REPORT_CRITERIA,
    CriterionScore,
    EvaluationCriterion,
    EmployerEvaluation,
    ReportEvaluation,
)
from practicum.schemas.closure import ClosurePreview, ClosureRecord, GradingConfiguration
from practicum.schemas.alerts import (
    AcceptanceExpiring,
    AlertReport,
    AlertSummary,
    CampusDigest,
    EndingSoon,
    InitialFormExpiring,
    OverdueClassification,
    ReportPending,
    UpcomingMilestones,
)

__all__ = [
    # Enums
    "AlertSeverity",
    "ClosureState",
    "PracticeState",
    "PracticeType",
    # Practice
    "Practice",
    "ProgramRef",
    # Evaluations
    "EMPLOYER_CRITERIA",
    "REPORT_CRITERIA",
    "CriterionScore",
    "EvaluationCriterion",
    "EmployerEvaluation",
    "ReportEvaluation",
    # Closure
    "ClosurePreview",
    "ClosureRecord",
    "GradingConfiguration",
    # Alerts
    "AcceptanceExpiring",
    "AlertReport",
    "AlertSummary",
    "CampusDigest",
    "EndingSoon",
    "InitialFormExpiring",
    "OverdueClassification",
    "ReportPending",
    "UpcomingMilestones",
]
