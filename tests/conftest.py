"""
Shared Fixtures

Deterministic builders for practices, evaluations and a workflow service
wired to the in-memory store and a frozen clock.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from practicum.schemas.base import PracticeState, PracticeType
from practicum.schemas.closure import GradingConfiguration
from practicum.schemas.evaluation import (
    EMPLOYER_CRITERIA,
    REPORT_CRITERIA,
    CriterionScore,
    EmployerEvaluation,
    ReportEvaluation,
)
from practicum.schemas.practice import Practice, ProgramRef
from practicum.services.configuration import StaticConfigurationProvider
from practicum.services.memory import InMemoryPracticeStore
from practicum.services.practice_service import PracticeWorkflowService

TODAY = date(2025, 6, 30)
FROZEN_NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)

INFORMATICA = ProgramRef(
    id=1,
    name="Ingeniería en Informática",
    campus_id=10,
    campus_name="Sede Central",
    labor_hours=180,
    professional_hours=360,
)
ENFERMERIA = ProgramRef(id=2, name="Técnico en Enfermería", campus_id=20, campus_name="Sede Norte")


@pytest.fixture
def today():
    """Calendar day the frozen clock reports."""
    return TODAY


@pytest.fixture
def now():
    """Frozen clock instant used for evaluations and closures."""
    return FROZEN_NOW


@pytest.fixture
def informatica():
    return INFORMATICA


@pytest.fixture
def enfermeria():
    return ENFERMERIA


@pytest.fixture
def make_practice():
    """Builder for practices; keyword overrides replace any field."""

    def _make(
        practice_id: int = 1,
        state: PracticeState = PracticeState.PENDING,
        start: date = date(2025, 3, 1),
        end: date = date(2025, 6, 1),
        program: ProgramRef = INFORMATICA,
        **overrides,
    ) -> Practice:
        values = {
            "id": practice_id,
            "type": PracticeType.LABOR,
            "start_date": start,
            "end_date": end,
            "state": state,
            "student_id": 100 + practice_id,
            "program": program,
            "instructor_id": 7,
        }
        values.update(overrides)
        return Practice(**values)

    return _make


@pytest.fixture
def make_report_eval():
    def _make(practice_id: int = 1, grade: str = "5.0") -> ReportEvaluation:
        return ReportEvaluation(
            practice_id=practice_id, grade=Decimal(grade), evaluated_at=FROZEN_NOW
        )

    return _make


@pytest.fixture
def make_employer_eval():
    def _make(practice_id: int = 1, grade: str = "6.0") -> EmployerEvaluation:
        return EmployerEvaluation(
            practice_id=practice_id, grade=Decimal(grade), evaluated_at=FROZEN_NOW
        )

    return _make


@pytest.fixture
def report_scores():
    """Builder for a full report rubric; `overrides` maps criterion id to score."""

    def _make(default: int = 5, **overrides: int) -> list[CriterionScore]:
        return [
            CriterionScore(criterion_id=c.id, score=overrides.get(c.id, default))
            for c in REPORT_CRITERIA
        ]

    return _make


@pytest.fixture
def employer_scores():
    """Builder for a full set of employer criterion scores."""

    def _make(default: int = 5, **overrides: int) -> list[CriterionScore]:
        return [
            CriterionScore(criterion_id=c.id, score=overrides.get(c.id, default))
            for c in EMPLOYER_CRITERIA
        ]

    return _make


@pytest.fixture
def config_40_60():
    return GradingConfiguration(report_weight=40, employer_weight=60)


@pytest.fixture
def store():
    return InMemoryPracticeStore()


@pytest.fixture
def service(store, config_40_60):
    return PracticeWorkflowService(
        store,
        StaticConfigurationProvider(config_40_60),
        clock=lambda: FROZEN_NOW,
    )
