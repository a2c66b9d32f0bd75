"""
Practice Workflow Service

Entry points for callers (UI, API, scheduled jobs). Each operation loads
what it needs from the store and the configuration provider, calls the
pure workflow core, and persists the result inside one atomic unit.

Audit records and participant notifications stay with the caller: they
are emitted only after an operation here returns successfully.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable

from practicum.schemas.alerts import (
    AcceptanceExpiring,
    AlertReport,
    AlertSummary,
    OverdueClassification,
    UpcomingMilestones,
)
from practicum.schemas.base import PracticeState, PracticeType
from practicum.schemas.closure import ClosurePreview, ClosureRecord
from practicum.schemas.evaluation import CriterionScore, EmployerEvaluation, ReportEvaluation
from practicum.schemas.practice import Practice, ProgramRef
from practicum.services.ports import ConfigurationProvider, PracticeStore
from practicum.workflow.aggregator import group_by_campus, summarize
from practicum.workflow.closure import (
    advance_after_evaluation,
    compute_and_close,
    ensure_evaluation_editable,
    ensure_report_gradable,
    preview_closure,
)
from practicum.workflow.deadlines import DeadlineClassifier, DeadlinePolicy, as_date
from practicum.workflow.errors import InvalidHoursError, PracticumError
from practicum.workflow.grading import build_employer_evaluation, build_report_evaluation
from practicum.workflow import scheduling
from practicum.workflow.state_machine import transition

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PracticeWorkflowService:
    """
    Facade over the practice workflow.

    Args:
        store: Persistence collaborator
        configuration: Grading configuration provider
        policy: Deadline thresholds (defaults to DeadlinePolicy())
        clock: Source of the current time (closures, evaluations, acta 1 dates)
    """

    def __init__(
        self,
        store: PracticeStore,
        configuration: ConfigurationProvider,
        policy: DeadlinePolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.configuration = configuration
        self.classifier = DeadlineClassifier(policy)
        self.clock = clock

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def change_state(
        self,
        practice_id: int,
        target: PracticeState,
        reason: str | None = None,
    ) -> Practice:
        """
        Apply one state machine transition and persist it.

        Entering PENDING_TEACHER_ACCEPTANCE stamps today's date as the
        student's completion of the initial form, which starts the
        instructor's acceptance window. A move to CLOSED goes through
        close_evaluation so the practice never closes without its acta.
        """
        if PracticeState(target) == PracticeState.CLOSED:
            transition(self.store.get_practice(practice_id), PracticeState.CLOSED)
            self.close_evaluation(practice_id)
            return self.store.get_practice(practice_id)

        try:
            with self.store.atomic():
                practice = self.store.get_practice(practice_id)
                updated = transition(practice, target, reason)
                if updated.state == PracticeState.PENDING_TEACHER_ACCEPTANCE:
                    updated = updated.model_copy(
                        update={"student_completed_on": as_date(self.clock())}
                    )
                elif updated.state == PracticeState.PENDING:
                    updated = updated.model_copy(update={"student_completed_on": None})
                saved = self.store.save_practice(updated, expected_version=practice.version)
        except PracticumError as e:
            logger.warning("Practice %s: state change to %s rejected: %s", practice_id, target, e)
            raise

        logger.info(
            "Practice %s: %s -> %s", practice_id, practice.state.value, saved.state.value
        )
        return saved

    def complete_initial_form(self, practice_id: int) -> Practice:
        """Student completed acta 1: hand the practice to the instructor."""
        return self.change_state(practice_id, PracticeState.PENDING_TEACHER_ACCEPTANCE)

    def suggest_end_date(
        self,
        start_date: date,
        practice_type: PracticeType,
        program: ProgramRef,
    ) -> date:
        """Suggested fechaTermino from the hours the program requires."""
        hours = scheduling.required_hours(program, practice_type)
        if hours is None or hours <= 0:
            raise InvalidHoursError(hours, PracticeType(practice_type).value)
        return scheduling.suggest_end_date(start_date, hours)

    # =========================================================================
    # EVALUATION & CLOSURE
    # =========================================================================

    def upload_report(self, practice_id: int, document: str) -> Practice:
        """Attach or replace the student's final report (same states as evaluations)."""
        with self.store.atomic():
            practice = self.store.get_practice(practice_id)
            ensure_evaluation_editable(practice)
            saved = self.store.save_practice(
                practice.model_copy(update={"report_document": document}),
                expected_version=practice.version,
            )
        logger.info("Practice %s: report uploaded", practice_id)
        return saved

    def close_evaluation(self, practice_id: int) -> ClosureRecord:
        """
        Compute the final grade and close the practice.

        The CLOSED state and the closure record are saved in the same
        transaction; the versioned practice save runs first so a
        concurrent closer fails before any record is written.
        """
        try:
            with self.store.atomic():
                practice = self.store.get_practice(practice_id)
                outcome = compute_and_close(
                    practice,
                    self.store.get_report_evaluation(practice_id),
                    self.store.get_employer_evaluation(practice_id),
                    self.configuration.get_active_configuration(),
                    closed_at=self.clock(),
                    existing=self.store.get_closure(practice_id),
                )
                self.store.save_practice(outcome.practice, expected_version=practice.version)
                self.store.save_closure(outcome.record)
        except PracticumError as e:
            logger.warning("Practice %s: closure rejected: %s", practice_id, e)
            raise

        return outcome.record

    def preview_final_grade(self, practice_id: int) -> ClosurePreview:
        """Final grade as it stands now, without closing anything."""
        practice = self.store.get_practice(practice_id)
        existing = self.store.get_closure(practice_id)
        if existing is not None and existing.is_validated:
            return preview_closure(practice, None, None, None, existing=existing)
        return preview_closure(
            practice,
            self.store.get_report_evaluation(practice_id),
            self.store.get_employer_evaluation(practice_id),
            self.configuration.get_active_configuration(),
            existing=existing,
        )

    def _advance(self, practice: Practice) -> Practice:
        advanced = advance_after_evaluation(
            practice,
            has_report_eval=self.store.get_report_evaluation(practice.id) is not None,
            has_employer_eval=self.store.get_employer_evaluation(practice.id) is not None,
        )
        if advanced.state == practice.state:
            return practice
        saved = self.store.save_practice(advanced, expected_version=practice.version)
        logger.info(
            "Practice %s: %s -> %s", practice.id, practice.state.value, saved.state.value
        )
        return saved

    def submit_report_evaluation(self, evaluation: ReportEvaluation) -> ReportEvaluation:
        """
        Create or overwrite the instructor's report evaluation.

        Requires the uploaded report. A running practice moves to
        FINISHED_PENDING_EVAL, and to EVALUATION_COMPLETE once the
        employer evaluation is also present.
        """
        with self.store.atomic():
            practice = self.store.get_practice(evaluation.practice_id)
            ensure_report_gradable(practice)
            self.store.save_report_evaluation(evaluation)
            self._advance(practice)
        logger.info("Practice %s: report evaluation recorded", evaluation.practice_id)
        return evaluation

    def submit_employer_evaluation(self, evaluation: EmployerEvaluation) -> EmployerEvaluation:
        """Create or overwrite the employer's evaluation."""
        with self.store.atomic():
            practice = self.store.get_practice(evaluation.practice_id)
            ensure_evaluation_editable(practice)
            self.store.save_employer_evaluation(evaluation)
            self._advance(practice)
        logger.info("Practice %s: employer evaluation recorded", evaluation.practice_id)
        return evaluation

    def evaluate_report(
        self,
        practice_id: int,
        scores: list[CriterionScore],
        comments: str | None = None,
    ) -> ReportEvaluation:
        """Grade the report from its rubric; the grade is the rubric average."""
        evaluation = build_report_evaluation(practice_id, scores, self.clock(), comments)
        return self.submit_report_evaluation(evaluation)

    def evaluate_employer(
        self,
        practice_id: int,
        scores: list[CriterionScore],
        comments: str | None = None,
    ) -> EmployerEvaluation:
        """Employer evaluation from the weighted standard criteria."""
        evaluation = build_employer_evaluation(practice_id, scores, self.clock(), comments)
        return self.submit_employer_evaluation(evaluation)

    # =========================================================================
    # DEADLINES & ALERTS
    # =========================================================================

    def _candidates(self, practices: Iterable[Practice] | None) -> list[Practice]:
        if practices is None:
            return self.store.list_active_practices()
        return list(practices)

    def classify_overdue(
        self,
        today: date | datetime,
        practices: Iterable[Practice] | None = None,
    ) -> list[OverdueClassification]:
        return self.classifier.classify_overdue(today, self._candidates(practices))

    def classify_acceptance_expiring(
        self,
        today: date | datetime,
        practices: Iterable[Practice] | None = None,
    ) -> list[AcceptanceExpiring]:
        return self.classifier.classify_acceptance_expiring(today, self._candidates(practices))

    def classify_upcoming_milestones(
        self,
        today: date | datetime,
        practices: Iterable[Practice] | None = None,
    ) -> UpcomingMilestones:
        return self.classifier.classify_upcoming_milestones(today, self._candidates(practices))

    def summarize(
        self,
        classifications: Iterable[OverdueClassification],
        campus_id: int | None = None,
    ) -> AlertSummary:
        return summarize(classifications, campus_id=campus_id)

    def build_alert_report(
        self,
        today: date | datetime,
        practices: Iterable[Practice] | None = None,
    ) -> AlertReport:
        """Run every deadline check once and package the results for the notifier."""
        candidates = self._candidates(practices)
        overdue = self.classifier.classify_overdue(today, candidates)
        report = AlertReport(
            generated_for=as_date(today),
            overdue=overdue,
            summary=summarize(overdue),
            acceptance_expiring=self.classifier.classify_acceptance_expiring(today, candidates),
            initial_form_expiring=self.classifier.classify_initial_form_expiring(today, candidates),
            milestones=self.classifier.classify_upcoming_milestones(today, candidates),
            campus_digests=group_by_campus(overdue),
        )
        logger.info(
            "Alert report for %s: %d overdue (%d critical), %d acceptance expiring",
            report.generated_for,
            report.summary.total,
            report.summary.critical,
            len(report.acceptance_expiring),
        )
        return report
