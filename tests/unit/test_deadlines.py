"""
Unit tests for the deadline classifier.

Tests verify:
1. Overdue bucket boundaries (4/5/6/7/14/15/16 days late)
2. Final states are never flagged
3. Acceptance and initial-form windows
4. Upcoming milestones (ending soon, report pending)
5. Output is independent of input order
"""

from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from practicum.schemas.base import AlertSeverity, PracticeState
from practicum.workflow.deadlines import (
    DeadlineClassifier,
    DeadlinePolicy,
    as_date,
    classify_acceptance_expiring,
    classify_overdue,
    classify_upcoming_milestones,
)

S = PracticeState


@pytest.fixture
def days_ago(today):
    def _days_ago(days: int) -> date:
        return today - timedelta(days=days)

    return _days_ago


@pytest.fixture
def overdue_practice(make_practice, days_ago):
    """Practice whose end date lies `days_late` days before today."""

    def _make(practice_id: int, days_late: int, state: PracticeState = S.IN_PROGRESS, **kw):
        end = days_ago(days_late)
        return make_practice(
            practice_id, state=state, start=end - timedelta(days=60), end=end, **kw
        )

    return _make


@pytest.fixture
def awaiting_acceptance(make_practice, days_ago, today):
    """Practice waiting for the instructor since `completed_days_ago`."""

    def _make(practice_id: int, completed_days_ago: int | None, **kw):
        completed = days_ago(completed_days_ago) if completed_days_ago is not None else None
        return make_practice(
            practice_id,
            state=S.PENDING_TEACHER_ACCEPTANCE,
            start=days_ago(10),
            end=today + timedelta(days=80),
            student_completed_on=completed,
            **kw,
        )

    return _make


# =============================================================================
# OVERDUE
# =============================================================================

class TestOverdueBuckets:

    @pytest.mark.parametrize(
        "days_late,expected",
        [
            (1, None),
            (4, None),
            (5, AlertSeverity.NORMAL),
            (6, AlertSeverity.NORMAL),
            (7, AlertSeverity.LOW),
            (14, AlertSeverity.LOW),
            (15, AlertSeverity.LOW),
            (16, AlertSeverity.CRITICAL),
            (120, AlertSeverity.CRITICAL),
        ],
    )
    def test_boundaries(self, days_late, expected, today, overdue_practice) -> None:
        """Each bucket edge should land in the right severity."""
        result = classify_overdue(today, [overdue_practice(1, days_late)])
        if expected is None:
            assert result == []
        else:
            assert [item.severity for item in result] == [expected]
            assert result[0].days_late == days_late

    @pytest.mark.parametrize("days_late", [0, -3])
    def test_not_yet_ended(self, days_late, today, days_ago, make_practice) -> None:
        """Practices ending today or later should not be overdue."""
        practice = make_practice(
            1, state=S.IN_PROGRESS, start=days_ago(30), end=days_ago(days_late)
        )
        assert classify_overdue(today, [practice]) == []

    @pytest.mark.parametrize("state", [S.CLOSED, S.VOIDED])
    def test_final_states_never_flagged(self, state, today, overdue_practice) -> None:
        """CLOSED and VOIDED practices should never be flagged."""
        assert classify_overdue(today, [overdue_practice(1, 40, state=state)]) == []

    @pytest.mark.parametrize(
        "state",
        [S.PENDING, S.PENDING_TEACHER_ACCEPTANCE, S.REJECTED_BY_TEACHER, S.FINISHED_PENDING_EVAL],
    )
    def test_other_states_flagged(self, state, today, overdue_practice) -> None:
        """Any non-final state past its end date should be flagged."""
        assert len(classify_overdue(today, [overdue_practice(1, 20, state=state)])) == 1

    def test_classification_carries_context(
        self, today, days_ago, overdue_practice, enfermeria
    ) -> None:
        """The classification should carry program and campus data."""
        result = classify_overdue(today, [overdue_practice(3, 10, program=enfermeria)])
        item = result[0]
        assert item.practice_id == 3
        assert item.program_name == enfermeria.name
        assert item.campus_id == enfermeria.campus_id
        assert item.end_date == days_ago(10)
        assert item.state == S.IN_PROGRESS

    def test_accepts_datetime(self, today, overdue_practice) -> None:
        """A datetime should be truncated to its calendar day."""
        now = datetime(today.year, today.month, today.day, 23, 59)
        assert classify_overdue(now, [overdue_practice(1, 16)])[0].days_late == 16


class TestOverdueOrdering:

    def test_sorted_by_end_date_then_id(self, today, overdue_practice) -> None:
        """Oldest end date first, ties broken by id."""
        practices = [
            overdue_practice(4, 8),
            overdue_practice(2, 20),
            overdue_practice(1, 8),
            overdue_practice(3, 20),
        ]
        ids = [item.practice_id for item in classify_overdue(today, practices)]
        assert ids == [2, 3, 1, 4]

    def test_input_order_does_not_matter(self, today, overdue_practice) -> None:
        """Reversing the input should give the same output."""
        practices = [overdue_practice(i, 5 + i) for i in range(1, 15)]
        forward = classify_overdue(today, practices)
        backward = classify_overdue(today, list(reversed(practices)))
        assert forward == backward

    def test_partitions_union_to_whole(self, today, overdue_practice) -> None:
        """Classifying halves separately should flag the same practices."""
        practices = [overdue_practice(i, 3 * i) for i in range(1, 10)]
        whole = {item.practice_id for item in classify_overdue(today, practices)}
        left = classify_overdue(today, practices[:4])
        right = classify_overdue(today, practices[4:])
        assert whole == {item.practice_id for item in left + right}

    def test_input_is_not_mutated(self, today, overdue_practice) -> None:
        """Classification should leave the practices untouched."""
        practice = overdue_practice(1, 20)
        classify_overdue(today, [practice])
        assert practice.state == S.IN_PROGRESS
        assert practice.version == 0


class TestDeadlinePolicy:

    def test_defaults(self) -> None:
        """Default buckets should be 5/7/15."""
        policy = DeadlinePolicy()
        assert (policy.grace_days, policy.low_days, policy.critical_after) == (5, 7, 15)

    def test_custom_thresholds(self, today, overdue_practice) -> None:
        """A custom policy should move the bucket edges."""
        policy = DeadlinePolicy(grace_days=1, low_days=3, critical_after=10)
        classifier = DeadlineClassifier(policy)
        result = classifier.classify_overdue(today, [overdue_practice(1, 11)])
        assert result[0].severity == AlertSeverity.CRITICAL

    def test_thresholds_must_be_ordered(self) -> None:
        """Out-of-order thresholds should fail validation."""
        with pytest.raises(ValidationError):
            DeadlinePolicy(grace_days=10, low_days=7, critical_after=15)

    def test_from_env(self, monkeypatch) -> None:
        """Environment overrides should be applied over the defaults."""
        monkeypatch.setenv("PRACTICUM_CRITICAL_AFTER", "30")
        monkeypatch.setenv("PRACTICUM_UPCOMING_WINDOW_DAYS", "14")
        policy = DeadlinePolicy.from_env()
        assert policy.critical_after == 30
        assert policy.upcoming_window_days == 14
        assert policy.grace_days == 5

    def test_as_date_truncates(self) -> None:
        """as_date should drop the time of day."""
        assert as_date(datetime(2025, 1, 2, 18, 30)) == date(2025, 1, 2)


# =============================================================================
# ACCEPTANCE / INITIAL FORM
# =============================================================================

class TestAcceptanceExpiring:

    @pytest.mark.parametrize(
        "elapsed,flagged,remaining",
        [
            (0, False, None),
            (3, False, None),
            (4, True, 1),   # one day of advance notice
            (5, True, 0),
            (9, True, -4),
        ],
    )
    def test_window_edges(self, elapsed, flagged, remaining, today, awaiting_acceptance) -> None:
        """The alert should fire one day before the window closes."""
        result = classify_acceptance_expiring(today, [awaiting_acceptance(1, elapsed)])
        if not flagged:
            assert result == []
        else:
            assert result[0].days_elapsed == elapsed
            assert result[0].days_remaining == remaining

    def test_requires_student_completion(self, today, awaiting_acceptance) -> None:
        """Without a completion date there is no window to check."""
        assert classify_acceptance_expiring(today, [awaiting_acceptance(1, None)]) == []

    def test_only_pending_teacher_acceptance(self, today, days_ago, make_practice) -> None:
        """Other states should be ignored even with a completion date."""
        practice = make_practice(
            1,
            state=S.IN_PROGRESS,
            start=days_ago(10),
            end=today + timedelta(days=80),
            student_completed_on=days_ago(9),
        )
        assert classify_acceptance_expiring(today, [practice]) == []

    def test_most_urgent_first(self, today, awaiting_acceptance) -> None:
        """Fewest days remaining should come first."""
        practices = [awaiting_acceptance(1, 4), awaiting_acceptance(2, 7), awaiting_acceptance(3, 5)]
        ids = [item.practice_id for item in classify_acceptance_expiring(today, practices)]
        assert ids == [2, 3, 1]

    def test_carries_instructor(self, today, awaiting_acceptance) -> None:
        """The alert should name the instructor to notify."""
        result = classify_acceptance_expiring(today, [awaiting_acceptance(1, 5, instructor_id=42)])
        assert result[0].instructor_id == 42


class TestInitialFormExpiring:

    def test_counts_from_start_date(self, today, days_ago, make_practice) -> None:
        """The acta 1 window should run from the start date."""
        practice = make_practice(1, state=S.PENDING, start=days_ago(4), end=today + timedelta(days=60))
        result = DeadlineClassifier().classify_initial_form_expiring(today, [practice])
        assert [(item.days_elapsed, item.days_remaining) for item in result] == [(4, 1)]

    def test_not_flagged_when_completed(self, today, days_ago, make_practice) -> None:
        """A completed acta 1 should silence the alert."""
        practice = make_practice(
            1,
            state=S.PENDING,
            start=days_ago(10),
            end=today + timedelta(days=60),
            student_completed_on=days_ago(1),
        )
        assert DeadlineClassifier().classify_initial_form_expiring(today, [practice]) == []

    def test_not_flagged_inside_window(self, today, days_ago, make_practice) -> None:
        """Early days of the window should not alert."""
        practice = make_practice(1, state=S.PENDING, start=days_ago(2), end=today + timedelta(days=60))
        assert DeadlineClassifier().classify_initial_form_expiring(today, [practice]) == []


# =============================================================================
# MILESTONES
# =============================================================================

class TestUpcomingMilestones:

    @pytest.mark.parametrize(
        "days_to_end,flagged",
        [(-1, False), (0, True), (3, True), (7, True), (8, False)],
    )
    def test_ending_soon_window(self, days_to_end, flagged, today, days_ago, make_practice) -> None:
        """Running practices ending within seven days should be listed."""
        practice = make_practice(
            1, state=S.IN_PROGRESS, start=days_ago(60), end=today + timedelta(days=days_to_end)
        )
        result = classify_upcoming_milestones(today, [practice])
        assert (result.ending_soon_ids == [1]) is flagged

    def test_ending_soon_only_in_progress(self, today, days_ago, make_practice) -> None:
        """Practices not yet started should not be listed as ending soon."""
        practice = make_practice(
            1, state=S.PENDING, start=days_ago(60), end=today + timedelta(days=2)
        )
        assert classify_upcoming_milestones(today, [practice]).ending_soon == []

    @pytest.mark.parametrize(
        "days_since_end,flagged",
        [(0, False), (2, False), (3, True), (10, True)],
    )
    def test_report_pending_grace(self, days_since_end, flagged, today, overdue_practice) -> None:
        """A missing report should be flagged after the grace period."""
        practice = overdue_practice(1, days_since_end, state=S.FINISHED_PENDING_EVAL)
        result = classify_upcoming_milestones(today, [practice])
        assert (result.report_pending_ids == [1]) is flagged

    def test_report_pending_cleared_by_upload(self, today, overdue_practice) -> None:
        """An uploaded report should clear the reminder."""
        practice = overdue_practice(
            1, 10, state=S.IN_PROGRESS, report_document="informes/1.pdf"
        )
        assert classify_upcoming_milestones(today, [practice]).report_pending == []

    def test_report_pending_ignores_evaluation_complete(self, today, overdue_practice) -> None:
        """Evaluated practices should not ask for a report."""
        practice = overdue_practice(1, 10, state=S.EVALUATION_COMPLETE)
        assert classify_upcoming_milestones(today, [practice]).report_pending == []

    def test_report_pending_days_overdue(self, today, overdue_practice) -> None:
        """The reminder should count days since the end date."""
        result = classify_upcoming_milestones(today, [overdue_practice(5, 6)])
        assert result.report_pending[0].days_overdue == 6
