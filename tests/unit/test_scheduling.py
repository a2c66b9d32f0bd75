"""
Unit tests for the suggested end date.

2025-03-03 is a Monday; 2025-03-01 is a Saturday.
"""

from datetime import date

import pytest

from practicum.schemas.base import PracticeType
from practicum.workflow.errors import InvalidHoursError
from practicum.workflow.scheduling import is_workday, required_hours, suggest_end_date

MONDAY = date(2025, 3, 3)
SATURDAY = date(2025, 3, 1)


class TestSuggestEndDate:

    def test_one_week(self) -> None:
        """40 hours from a Monday should end that Friday."""
        assert suggest_end_date(MONDAY, 40) == date(2025, 3, 7)

    def test_weekend_is_skipped(self) -> None:
        """The sixth working day after a Monday start should be the next Monday."""
        assert suggest_end_date(MONDAY, 48) == date(2025, 3, 10)

    def test_partial_day_counts_as_full_day(self) -> None:
        """9 hours need two working days."""
        assert suggest_end_date(MONDAY, 9) == date(2025, 3, 4)

    def test_single_day_on_workday_ends_same_day(self) -> None:
        """A one-day practice starting on a working day should end that day."""
        assert suggest_end_date(date(2025, 3, 7), 8) == date(2025, 3, 7)

    def test_weekend_start_is_not_worked(self) -> None:
        """A Saturday start should not count as a worked day."""
        assert suggest_end_date(SATURDAY, 8) == MONDAY

    def test_program_hours(self) -> None:
        """180 hours (23 days) from a Monday should end on a Wednesday four weeks later."""
        result = suggest_end_date(MONDAY, 180)
        assert result == date(2025, 4, 2)
        assert is_workday(result)

    @pytest.mark.parametrize("hours", [0, -8])
    def test_non_positive_hours_rejected(self, hours) -> None:
        """Zero or negative hours should raise InvalidHoursError."""
        with pytest.raises(InvalidHoursError) as exc_info:
            suggest_end_date(MONDAY, hours)
        assert exc_info.value.hours == hours


class TestRequiredHours:

    def test_hours_by_practice_type(self, informatica) -> None:
        """LABOR and PROFESSIONAL should read their own program hours."""
        assert required_hours(informatica, PracticeType.LABOR) == 180
        assert required_hours(informatica, PracticeType.PROFESSIONAL) == 360

    def test_hours_not_configured(self, enfermeria) -> None:
        """A program without hours should report None."""
        assert required_hours(enfermeria, PracticeType.LABOR) is None
