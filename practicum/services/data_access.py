"""
Data Access Layer

SQLAlchemy-backed PracticeStore and ConfigurationProvider.

- Practices carry a `version` column; every save is a conditional UPDATE
  on the expected version, so two racing transitions cannot both succeed.
- `atomic()` shares one transaction across calls, so a closure record and
  the CLOSED state are committed together or not at all.
- Database exceptions are translated to DependencyUnavailableError.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from practicum import settings
from practicum.schemas.base import FINAL_STATES
from practicum.schemas.closure import ClosureRecord, GradingConfiguration
from practicum.schemas.evaluation import CriterionScore, EmployerEvaluation, ReportEvaluation
from practicum.schemas.practice import Practice, ProgramRef
from practicum.workflow.errors import (
    ConcurrentModificationError,
    DependencyUnavailableError,
    InvalidConfigurationError,
    PracticeNotFoundError,
)

logger = logging.getLogger(__name__)

Base = declarative_base()

CONFIGURATION_ID = 1  # Single active configuration row


class PracticeRow(Base):
    __tablename__ = "practices"

    id = Column(Integer, primary_key=True)
    type = Column(String(20), nullable=False)
    start_date = Column("fecha_inicio", Date, nullable=False)
    end_date = Column("fecha_termino", Date, nullable=False)
    state = Column(String(40), nullable=False, index=True)
    student_id = Column(Integer, nullable=False)
    program_id = Column(Integer, nullable=False)
    program_name = Column(String(200), nullable=False)
    campus_id = Column(Integer)
    campus_name = Column(String(200))
    program_labor_hours = Column(Integer)
    program_professional_hours = Column(Integer)
    instructor_id = Column(Integer)
    host_organization = Column(String(200))
    report_document = Column(String(500))
    student_completed_on = Column(Date)
    rejection_reason = Column(Text)
    void_reason = Column(Text)
    version = Column(Integer, nullable=False, default=0)


class ReportEvaluationRow(Base):
    __tablename__ = "report_evaluations"

    practice_id = Column(Integer, primary_key=True)
    grade = Column(Numeric(4, 2), nullable=False)
    evaluated_at = Column(DateTime, nullable=False)
    comments = Column(Text)
    criteria = Column(JSON)


class EmployerEvaluationRow(Base):
    __tablename__ = "employer_evaluations"

    practice_id = Column(Integer, primary_key=True)
    grade = Column(Numeric(4, 2), nullable=False)
    evaluated_at = Column(DateTime, nullable=False)
    comments = Column(Text)
    criteria = Column(JSON)


class ClosureRecordRow(Base):
    __tablename__ = "closure_records"

    practice_id = Column(Integer, primary_key=True)
    report_grade = Column(Numeric(4, 2), nullable=False)
    employer_grade = Column(Numeric(4, 2), nullable=False)
    report_weight = Column(Integer, nullable=False)
    employer_weight = Column(Integer, nullable=False)
    final_grade = Column(Numeric(4, 2), nullable=False)
    passed = Column(Boolean, nullable=False)
    state = Column(String(20), nullable=False)
    closed_at = Column(DateTime)


class GradingConfigurationRow(Base):
    __tablename__ = "grading_configuration"

    id = Column(Integer, primary_key=True)
    report_weight = Column(Integer, nullable=False)
    employer_weight = Column(Integer, nullable=False)
    min_passing_grade = Column(Numeric(4, 2), nullable=False)


# =============================================================================
# ROW <-> MODEL MAPPING
# =============================================================================

def _practice_values(practice: Practice) -> dict:
    return {
        "type": practice.type.value,
        "start_date": practice.start_date,
        "end_date": practice.end_date,
        "state": practice.state.value,
        "student_id": practice.student_id,
        "program_id": practice.program.id,
        "program_name": practice.program.name,
        "campus_id": practice.program.campus_id,
        "campus_name": practice.program.campus_name,
        "program_labor_hours": practice.program.labor_hours,
        "program_professional_hours": practice.program.professional_hours,
        "instructor_id": practice.instructor_id,
        "host_organization": practice.host_organization,
        "report_document": practice.report_document,
        "student_completed_on": practice.student_completed_on,
        "rejection_reason": practice.rejection_reason,
        "void_reason": practice.void_reason,
    }


def _to_practice(row: PracticeRow) -> Practice:
    return Practice(
        id=row.id,
        type=row.type,
        start_date=row.start_date,
        end_date=row.end_date,
        state=row.state,
        student_id=row.student_id,
        program=ProgramRef(
            id=row.program_id,
            name=row.program_name,
            campus_id=row.campus_id,
            campus_name=row.campus_name,
            labor_hours=row.program_labor_hours,
            professional_hours=row.program_professional_hours,
        ),
        instructor_id=row.instructor_id,
        host_organization=row.host_organization,
        report_document=row.report_document,
        student_completed_on=row.student_completed_on,
        rejection_reason=row.rejection_reason,
        void_reason=row.void_reason,
        version=row.version,
    )


def _to_closure(row: ClosureRecordRow) -> ClosureRecord:
    return ClosureRecord(
        practice_id=row.practice_id,
        report_grade=row.report_grade,
        employer_grade=row.employer_grade,
        report_weight=row.report_weight,
        employer_weight=row.employer_weight,
        final_grade=Decimal(row.final_grade),
        passed=row.passed,
        state=row.state,
        closed_at=row.closed_at,
    )


def _upsert(session: Session, model, key: int, **values) -> None:
    """Update the row keyed by `key` in place, inserting it when missing."""
    row = session.get(model, key)
    if row is None:
        row = model(**{model.__mapper__.primary_key[0].key: key})
        session.add(row)
    for name, value in values.items():
        setattr(row, name, value)


# =============================================================================
# STORE
# =============================================================================

def get_engine(database_url: str | None = None) -> Engine:
    return create_engine(database_url or settings.database_url())


def init_db(engine: Engine, seed_configuration: bool = True) -> None:
    """Create tables and, optionally, the default 50/50 configuration row."""
    Base.metadata.create_all(engine)
    if not seed_configuration:
        return
    defaults = settings.grading_defaults()
    with sessionmaker(bind=engine).begin() as session:
        if session.get(GradingConfigurationRow, CONFIGURATION_ID) is None:
            session.add(GradingConfigurationRow(id=CONFIGURATION_ID, **defaults))


class SqlPracticeStore:
    """
    PracticeStore over a SQLAlchemy engine.

    One store instance tracks one open transaction at a time; use one
    instance per request or worker.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine)
        self._active: Session | None = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._active is not None:
            yield
            return
        try:
            with self._session_factory.begin() as session:
                self._active = session
                try:
                    yield
                finally:
                    self._active = None
        except DBAPIError as e:
            logger.warning("Database transaction failed: %s", e)
            raise DependencyUnavailableError("database", str(e)) from e

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._active is not None:
            yield self._active
            return
        try:
            with self._session_factory.begin() as session:
                yield session
        except DBAPIError as e:
            logger.warning("Database operation failed: %s", e)
            raise DependencyUnavailableError("database", str(e)) from e

    # -- practices -----------------------------------------------------------

    def add_practice(self, practice: Practice) -> Practice:
        with self._session() as session:
            session.add(PracticeRow(id=practice.id, version=practice.version, **_practice_values(practice)))
        return practice

    def get_practice(self, practice_id: int) -> Practice:
        with self._session() as session:
            row = session.get(PracticeRow, practice_id)
            if row is None:
                raise PracticeNotFoundError(practice_id)
            return _to_practice(row)

    def list_active_practices(self) -> list[Practice]:
        final = [state.value for state in FINAL_STATES]
        with self._session() as session:
            rows = session.scalars(
                select(PracticeRow)
                .where(PracticeRow.state.not_in(final))
                .order_by(PracticeRow.id)
            ).all()
            return [_to_practice(row) for row in rows]

    def save_practice(self, practice: Practice, expected_version: int) -> Practice:
        with self._session() as session:
            result = session.execute(
                update(PracticeRow)
                .where(PracticeRow.id == practice.id, PracticeRow.version == expected_version)
                .values(version=expected_version + 1, **_practice_values(practice))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if session.get(PracticeRow, practice.id) is None:
                    raise PracticeNotFoundError(practice.id)
                raise ConcurrentModificationError(practice.id, expected_version)
        return practice.model_copy(update={"version": expected_version + 1})

    # -- evaluations ---------------------------------------------------------

    def get_report_evaluation(self, practice_id: int) -> ReportEvaluation | None:
        with self._session() as session:
            row = session.get(ReportEvaluationRow, practice_id)
            if row is None:
                return None
            return ReportEvaluation(
                practice_id=row.practice_id,
                grade=row.grade,
                evaluated_at=row.evaluated_at,
                comments=row.comments,
                criteria=[CriterionScore(**item) for item in row.criteria or []],
            )

    def get_employer_evaluation(self, practice_id: int) -> EmployerEvaluation | None:
        with self._session() as session:
            row = session.get(EmployerEvaluationRow, practice_id)
            if row is None:
                return None
            return EmployerEvaluation(
                practice_id=row.practice_id,
                grade=row.grade,
                evaluated_at=row.evaluated_at,
                comments=row.comments,
                criteria=[CriterionScore(**item) for item in row.criteria or []],
            )

    def save_report_evaluation(self, evaluation: ReportEvaluation) -> None:
        with self._session() as session:
            _upsert(
                session,
                ReportEvaluationRow,
                evaluation.practice_id,
                grade=evaluation.grade,
                evaluated_at=evaluation.evaluated_at,
                comments=evaluation.comments,
                criteria=[item.model_dump() for item in evaluation.criteria],
            )

    def save_employer_evaluation(self, evaluation: EmployerEvaluation) -> None:
        with self._session() as session:
            _upsert(
                session,
                EmployerEvaluationRow,
                evaluation.practice_id,
                grade=evaluation.grade,
                evaluated_at=evaluation.evaluated_at,
                comments=evaluation.comments,
                criteria=[item.model_dump() for item in evaluation.criteria],
            )

    # -- closure -------------------------------------------------------------

    def get_closure(self, practice_id: int) -> ClosureRecord | None:
        with self._session() as session:
            row = session.get(ClosureRecordRow, practice_id)
            return _to_closure(row) if row is not None else None

    def save_closure(self, record: ClosureRecord) -> None:
        with self._session() as session:
            _upsert(
                session,
                ClosureRecordRow,
                record.practice_id,
                report_grade=record.report_grade,
                employer_grade=record.employer_grade,
                report_weight=record.report_weight,
                employer_weight=record.employer_weight,
                final_grade=record.final_grade,
                passed=record.passed,
                state=record.state.value,
                closed_at=record.closed_at,
            )

    # -- configuration -------------------------------------------------------

    def get_active_configuration(self) -> GradingConfiguration:
        with self._session() as session:
            row = session.get(GradingConfigurationRow, CONFIGURATION_ID)
            if row is None:
                raise DependencyUnavailableError(
                    "grading configuration", "No configuration row found"
                )
            return GradingConfiguration(
                report_weight=row.report_weight,
                employer_weight=row.employer_weight,
                min_passing_grade=row.min_passing_grade,
            )

    def update_configuration(
        self,
        report_weight: int,
        employer_weight: int,
        min_passing_grade: Decimal | None = None,
    ) -> GradingConfiguration:
        """Upsert the single configuration row; weights must sum to 100."""
        configuration = GradingConfiguration(
            report_weight=report_weight,
            employer_weight=employer_weight,
            min_passing_grade=(
                min_passing_grade
                if min_passing_grade is not None
                else settings.grading_defaults()["min_passing_grade"]
            ),
        )
        if not configuration.is_balanced:
            raise InvalidConfigurationError(report_weight, employer_weight)

        with self._session() as session:
            _upsert(
                session,
                GradingConfigurationRow,
                CONFIGURATION_ID,
                report_weight=configuration.report_weight,
                employer_weight=configuration.employer_weight,
                min_passing_grade=configuration.min_passing_grade,
            )
        logger.info(
            "Grading configuration updated: report %s%%, employer %s%%",
            report_weight, employer_weight,
        )
        return configuration
