"""
Practice Data Model

The practice is the central record of the workflow. It is a frozen value
object: the state machine returns updated copies instead of mutating it.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from practicum.schemas.base import (
    FINAL_STATES,
    NonEmptyStr,
    PracticeId,
    PracticeState,
    PracticeType,
)


class ProgramRef(BaseModel):
    """Academic program (carrera) a practice belongs to."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Program identifier")
    name: NonEmptyStr = Field(description="Program display name")
    campus_id: int | None = Field(default=None, description="Campus (sede) identifier")
    campus_name: str | None = Field(default=None, description="Campus display name")
    labor_hours: int | None = Field(default=None, ge=0, description="Hours required for a LABOR practice")
    professional_hours: int | None = Field(
        default=None, ge=0, description="Hours required for a PROFESSIONAL practice"
    )


class Practice(BaseModel):
    """
    A student internship record.

    Mutated only through state machine transitions. Never physically
    deleted: CLOSED and VOIDED are its logical end-states.
    """
    model_config = ConfigDict(frozen=True)

    id: PracticeId
    type: PracticeType
    start_date: date = Field(description="fechaInicio")
    end_date: date = Field(description="fechaTermino")
    state: PracticeState = PracticeState.PENDING

    student_id: int = Field(description="Owning student")
    program: ProgramRef
    instructor_id: int | None = Field(
        default=None,
        description="Supervising instructor, null until assigned"
    )
    host_organization: str | None = Field(default=None, description="Host company name")

    report_document: str | None = Field(
        default=None,
        description="Reference to the uploaded final report"
    )
    student_completed_on: date | None = Field(
        default=None,
        description="Date the student completed the initial form (acta 1)"
    )
    rejection_reason: str | None = None
    void_reason: str | None = None

    version: int = Field(default=0, ge=0, description="Optimistic concurrency counter")

    @model_validator(mode="after")
    def validate_date_range(self) -> "Practice":
        """End date may never precede the start date."""
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self

    @property
    def is_final(self) -> bool:
        return self.state in FINAL_STATES

    @property
    def has_report(self) -> bool:
        return bool(self.report_document)
