"""
Alert Schemas

Transient outputs of the deadline classifier and the alert aggregator.
None of these is persisted: they are regenerated on every run and handed
to an external notifier.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from practicum.schemas.base import AlertSeverity, PracticeId, PracticeState


class OverdueClassification(BaseModel):
    """A practice past its end date that has not been closed."""
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    severity: AlertSeverity
    days_late: int = Field(ge=0)
    end_date: date
    state: PracticeState
    program_name: str
    campus_id: int | None = None
    campus_name: str | None = None
    instructor_id: int | None = None


class AcceptanceExpiring(BaseModel):
    """Practice waiting on the instructor's acceptance for too long."""
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    instructor_id: int | None
    days_elapsed: int
    days_remaining: int


class InitialFormExpiring(BaseModel):
    """PENDING practice whose student has not completed the initial form (acta 1)."""
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    student_id: int
    days_elapsed: int
    days_remaining: int


class EndingSoon(BaseModel):
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    end_date: date
    days_remaining: int = Field(ge=0)


class ReportPending(BaseModel):
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    end_date: date
    days_overdue: int = Field(ge=0)


class UpcomingMilestones(BaseModel):
    """Termination approaching and report-upload overdue, for running practices."""
    model_config = ConfigDict(frozen=True)

    ending_soon: list[EndingSoon] = Field(default_factory=list)
    report_pending: list[ReportPending] = Field(default_factory=list)

    @property
    def ending_soon_ids(self) -> list[int]:
        return [item.practice_id for item in self.ending_soon]

    @property
    def report_pending_ids(self) -> list[int]:
        return [item.practice_id for item in self.report_pending]


class AlertSummary(BaseModel):
    """
    Reporting statistics over overdue classifications.

    `total_days_late` is carried so partial summaries computed over
    disjoint partitions can be combined without losing the average.
    """
    model_config = ConfigDict(frozen=True)

    total: int = 0
    by_severity: dict[AlertSeverity, int] = Field(
        default_factory=lambda: {severity: 0 for severity in AlertSeverity}
    )
    total_days_late: int = 0
    average_days_late: int = 0
    by_program: dict[str, int] = Field(default_factory=dict)

    @property
    def critical(self) -> int:
        return self.by_severity.get(AlertSeverity.CRITICAL, 0)

    @property
    def low(self) -> int:
        return self.by_severity.get(AlertSeverity.LOW, 0)

    @property
    def normal(self) -> int:
        return self.by_severity.get(AlertSeverity.NORMAL, 0)


class CampusDigest(BaseModel):
    """Overdue practices of one campus, addressed to its coordinator."""
    model_config = ConfigDict(frozen=True)

    campus_id: int | None
    campus_name: str
    program_names: list[str]
    practices: list[OverdueClassification]
    summary: AlertSummary


class AlertReport(BaseModel):
    """Everything a scheduled alert run produces for the notifier."""
    model_config = ConfigDict(frozen=True)

    generated_for: date
    overdue: list[OverdueClassification]
    summary: AlertSummary
    acceptance_expiring: list[AcceptanceExpiring]
    initial_form_expiring: list[InitialFormExpiring]
    milestones: UpcomingMilestones
    campus_digests: list[CampusDigest]
