"""
Deadline Classifier

Decides which practices have crossed a notification-worthy threshold.

Checks:
- Overdue closure: past fechaTermino and not CLOSED/VOIDED, bucketed by
  days late into CRITICAL / LOW / NORMAL after a grace period.
- Teacher acceptance expiring: waiting on the instructor for too long.
- Initial form (acta 1) expiring: student has not completed the form.
- Upcoming milestones: termination approaching, report upload overdue.

Every check is a read-only projection parameterised by `today`; nothing
here reads the system clock or mutates a practice. Practices are
classified independently, so input may be partitioned freely.
"""

import logging
from datetime import date, datetime
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from practicum import settings
from practicum.schemas.alerts import (
    AcceptanceExpiring,
    EndingSoon,
    InitialFormExpiring,
    OverdueClassification,
    ReportPending,
    UpcomingMilestones,
)
from practicum.schemas.base import AlertSeverity, PracticeState
from practicum.schemas.practice import Practice

logger = logging.getLogger(__name__)

REPORT_PENDING_STATES = frozenset(
    {PracticeState.IN_PROGRESS, PracticeState.FINISHED_PENDING_EVAL}
)


class DeadlinePolicy(BaseModel):
    """Thresholds for every deadline check, in whole days."""
    model_config = ConfigDict(frozen=True)

    grace_days: int = Field(default=settings.OVERDUE_THRESHOLDS["grace_days"], ge=0)
    low_days: int = Field(default=settings.OVERDUE_THRESHOLDS["low_days"], ge=0)
    critical_after: int = Field(default=settings.OVERDUE_THRESHOLDS["critical_after"], ge=0)

    acceptance_window_days: int = Field(
        default=settings.DEADLINE_WINDOWS["acceptance_window_days"], ge=0
    )
    initial_form_window_days: int = Field(
        default=settings.DEADLINE_WINDOWS["initial_form_window_days"], ge=0
    )
    advance_notice_days: int = Field(
        default=settings.DEADLINE_WINDOWS["advance_notice_days"], ge=0
    )
    upcoming_window_days: int = Field(
        default=settings.DEADLINE_WINDOWS["upcoming_window_days"], ge=0
    )
    report_grace_days: int = Field(
        default=settings.DEADLINE_WINDOWS["report_grace_days"], ge=0
    )

    @model_validator(mode="after")
    def validate_bucket_order(self) -> "DeadlinePolicy":
        if not self.grace_days <= self.low_days <= self.critical_after:
            raise ValueError(
                "Overdue thresholds must satisfy grace_days <= low_days <= critical_after"
            )
        return self

    @classmethod
    def from_env(cls) -> "DeadlinePolicy":
        return cls(**settings.overdue_thresholds(), **settings.deadline_windows())

    def severity_for(self, days_late: int) -> AlertSeverity | None:
        """Bucket for a number of days late, or None inside the grace period."""
        if days_late > self.critical_after:
            return AlertSeverity.CRITICAL
        if days_late >= self.low_days:
            return AlertSeverity.LOW
        if days_late >= self.grace_days:
            return AlertSeverity.NORMAL
        return None


def as_date(value: date | datetime) -> date:
    """Calendar day of `value`; datetimes are truncated."""
    if isinstance(value, datetime):
        return value.date()
    return value


class DeadlineClassifier:
    """Runs every deadline check against a single policy."""

    def __init__(self, policy: DeadlinePolicy | None = None):
        self.policy = policy or DeadlinePolicy()

    def classify_overdue(
        self,
        today: date | datetime,
        practices: Iterable[Practice],
    ) -> list[OverdueClassification]:
        """Overdue practices, ordered by end date then id."""
        today = as_date(today)
        flagged = []
        for practice in practices:
            if practice.is_final:
                continue
            days_late = (today - practice.end_date).days
            if days_late <= 0:
                continue
            severity = self.policy.severity_for(days_late)
            if severity is None:
                continue
            flagged.append(
                OverdueClassification(
                    practice_id=practice.id,
                    severity=severity,
                    days_late=days_late,
                    end_date=practice.end_date,
                    state=practice.state,
                    program_name=practice.program.name,
                    campus_id=practice.program.campus_id,
                    campus_name=practice.program.campus_name,
                    instructor_id=practice.instructor_id,
                )
            )

        flagged.sort(key=lambda item: (item.end_date, item.practice_id))
        logger.debug("Overdue check flagged %d practices", len(flagged))
        return flagged

    def classify_acceptance_expiring(
        self,
        today: date | datetime,
        practices: Iterable[Practice],
    ) -> list[AcceptanceExpiring]:
        """
        Practices in PENDING_TEACHER_ACCEPTANCE whose acceptance window is
        about to expire or has expired.

        The window is counted from the day the student completed the
        initial form; the alert fires `advance_notice_days` before expiry.
        """
        today = as_date(today)
        alert_after = self.policy.acceptance_window_days - self.policy.advance_notice_days
        flagged = []
        for practice in practices:
            if practice.state != PracticeState.PENDING_TEACHER_ACCEPTANCE:
                continue
            if practice.student_completed_on is None:
                continue
            elapsed = (today - practice.student_completed_on).days
            if elapsed < alert_after:
                continue
            flagged.append(
                AcceptanceExpiring(
                    practice_id=practice.id,
                    instructor_id=practice.instructor_id,
                    days_elapsed=elapsed,
                    days_remaining=self.policy.acceptance_window_days - elapsed,
                )
            )

        flagged.sort(key=lambda item: (item.days_remaining, item.practice_id))
        logger.debug("Acceptance check flagged %d practices", len(flagged))
        return flagged

    def classify_initial_form_expiring(
        self,
        today: date | datetime,
        practices: Iterable[Practice],
    ) -> list[InitialFormExpiring]:
        """PENDING practices whose student has not completed acta 1 in time."""
        today = as_date(today)
        alert_after = self.policy.initial_form_window_days - self.policy.advance_notice_days
        flagged = []
        for practice in practices:
            if practice.state != PracticeState.PENDING:
                continue
            if practice.student_completed_on is not None:
                continue
            elapsed = (today - practice.start_date).days
            if elapsed < alert_after:
                continue
            flagged.append(
                InitialFormExpiring(
                    practice_id=practice.id,
                    student_id=practice.student_id,
                    days_elapsed=elapsed,
                    days_remaining=self.policy.initial_form_window_days - elapsed,
                )
            )

        flagged.sort(key=lambda item: (item.days_remaining, item.practice_id))
        return flagged

    def classify_upcoming_milestones(
        self,
        today: date | datetime,
        practices: Iterable[Practice],
    ) -> UpcomingMilestones:
        """
        Termination approaching (IN_PROGRESS, end date within the upcoming
        window, both edges inclusive) and report pending (running or
        finished practice without a report, `report_grace_days` or more
        past the end date).
        """
        today = as_date(today)
        ending_soon = []
        report_pending = []
        for practice in practices:
            if practice.state == PracticeState.IN_PROGRESS:
                remaining = (practice.end_date - today).days
                if 0 <= remaining <= self.policy.upcoming_window_days:
                    ending_soon.append(
                        EndingSoon(
                            practice_id=practice.id,
                            end_date=practice.end_date,
                            days_remaining=remaining,
                        )
                    )

            if practice.state in REPORT_PENDING_STATES and not practice.has_report:
                overdue = (today - practice.end_date).days
                if overdue >= self.policy.report_grace_days:
                    report_pending.append(
                        ReportPending(
                            practice_id=practice.id,
                            end_date=practice.end_date,
                            days_overdue=overdue,
                        )
                    )

        ending_soon.sort(key=lambda item: (item.end_date, item.practice_id))
        report_pending.sort(key=lambda item: (item.end_date, item.practice_id))
        logger.debug(
            "Milestone check: %d ending soon, %d report pending",
            len(ending_soon), len(report_pending),
        )
        return UpcomingMilestones(ending_soon=ending_soon, report_pending=report_pending)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def classify_overdue(
    today: date | datetime,
    practices: Iterable[Practice],
    policy: DeadlinePolicy | None = None,
) -> list[OverdueClassification]:
    return DeadlineClassifier(policy).classify_overdue(today, practices)


def classify_acceptance_expiring(
    today: date | datetime,
    practices: Iterable[Practice],
    policy: DeadlinePolicy | None = None,
) -> list[AcceptanceExpiring]:
    return DeadlineClassifier(policy).classify_acceptance_expiring(today, practices)


def classify_upcoming_milestones(
    today: date | datetime,
    practices: Iterable[Practice],
    policy: DeadlinePolicy | None = None,
) -> UpcomingMilestones:
    return DeadlineClassifier(policy).classify_upcoming_milestones(today, practices)
