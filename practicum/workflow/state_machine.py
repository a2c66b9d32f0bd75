"""
Practice State Machine

Single authority over which lifecycle transitions are legal. The whole
lifecycle lives in one transition table; callers never re-implement the
checks. `transition` validates a (current, target) pair and returns an
updated copy of the practice. It does not serialise access: callers
must guarantee at most one in-flight transition per practice id.
"""

import logging

from practicum.schemas.base import PracticeState
from practicum.schemas.practice import Practice
from practicum.workflow.errors import (
    AlreadyTerminalError,
    InvalidTransitionError,
    MissingReasonError,
)

logger = logging.getLogger(__name__)

S = PracticeState

TRANSITIONS: dict[PracticeState, frozenset[PracticeState]] = {
    S.PENDING: frozenset({S.PENDING_TEACHER_ACCEPTANCE, S.VOIDED}),
    S.PENDING_TEACHER_ACCEPTANCE: frozenset({S.REJECTED_BY_TEACHER, S.IN_PROGRESS, S.VOIDED}),
    S.REJECTED_BY_TEACHER: frozenset({S.PENDING_TEACHER_ACCEPTANCE, S.VOIDED}),
    S.IN_PROGRESS: frozenset({S.FINISHED_PENDING_EVAL, S.VOIDED}),
    S.FINISHED_PENDING_EVAL: frozenset({S.EVALUATION_COMPLETE, S.IN_PROGRESS, S.VOIDED}),
    S.EVALUATION_COMPLETE: frozenset({S.CLOSED, S.FINISHED_PENDING_EVAL}),
    S.CLOSED: frozenset(),
    S.VOIDED: frozenset({S.PENDING}),
}

VOID_REASON_MIN_LENGTH = 10
VOID_REASON_MAX_LENGTH = 500


def allowed_targets(state: PracticeState) -> frozenset[PracticeState]:
    return TRANSITIONS[PracticeState(state)]


def can_transition(state: PracticeState, target: PracticeState) -> bool:
    return PracticeState(target) in allowed_targets(state)


def is_terminal(state: PracticeState) -> bool:
    """CLOSED is the only state with no way out."""
    return not allowed_targets(state)


def validate_void_reason(practice_id: int, reason: str | None) -> str:
    """Return the stripped reason or raise MissingReasonError."""
    cleaned = (reason or "").strip()
    if not VOID_REASON_MIN_LENGTH <= len(cleaned) <= VOID_REASON_MAX_LENGTH:
        raise MissingReasonError(
            practice_id,
            length=len(cleaned),
            minimum=VOID_REASON_MIN_LENGTH,
            maximum=VOID_REASON_MAX_LENGTH,
        )
    return cleaned


def transition(
    practice: Practice,
    target: PracticeState,
    reason: str | None = None,
) -> Practice:
    """
    Move a practice to `target`.

    Args:
        practice: Current practice record
        target: Requested next state
        reason: Mandatory when voiding (10-500 chars); recorded as the
            rejection reason when the instructor rejects

    Returns:
        Updated copy of the practice

    Raises:
        AlreadyTerminalError: Practice is CLOSED
        InvalidTransitionError: Target not reachable from the current state
        MissingReasonError: Voiding without an acceptable reason
    """
    target = PracticeState(target)
    current = practice.state

    if is_terminal(current):
        raise AlreadyTerminalError(practice.id, current.value)

    if not can_transition(current, target):
        raise InvalidTransitionError(practice.id, current.value, target.value)

    update: dict[str, object] = {"state": target}
    if target == S.VOIDED:
        update["void_reason"] = validate_void_reason(practice.id, reason)
    elif target == S.REJECTED_BY_TEACHER and reason and reason.strip():
        update["rejection_reason"] = reason.strip()

    logger.debug("Practice %s: %s -> %s", practice.id, current.value, target.value)
    return practice.model_copy(update=update)
