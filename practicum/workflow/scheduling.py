"""
Practice Scheduling

Suggested end date (fechaTermino) for a new practice, derived from the
hours its program requires. Only Monday to Friday count as working days.
"""

import math
from datetime import date, timedelta

from practicum.schemas.base import PracticeType
from practicum.schemas.practice import ProgramRef
from practicum.workflow.errors import InvalidHoursError

HOURS_PER_WORKDAY = 8


def is_workday(day: date) -> bool:
    return day.weekday() < 5


def required_hours(program: ProgramRef, practice_type: PracticeType) -> int | None:
    """Hours the program requires for the given practice type."""
    if PracticeType(practice_type) == PracticeType.LABOR:
        return program.labor_hours
    return program.professional_hours


def suggest_end_date(start: date, hours: int) -> date:
    """
    Last working day needed to complete `hours` starting on `start`.

    A start on a working day counts as the first day worked. No holiday
    calendar is applied.

    Raises:
        InvalidHoursError: hours is zero or negative
    """
    if hours <= 0:
        raise InvalidHoursError(hours)

    workdays = math.ceil(hours / HOURS_PER_WORKDAY)
    if is_workday(start):
        workdays -= 1

    end = start
    added = 0
    while added < workdays:
        end += timedelta(days=1)
        if is_workday(end):
            added += 1
    return end
