"""
Workflow Errors

Every error carries a stable `code` and a specific message so callers can
tell "you cannot do this because X" apart from "the system failed, try
again". Business-rule violations are never retried; collaborator failures
surface as DependencyUnavailableError and retry policy belongs to the
caller.
"""

from typing import Any


class PracticumError(Exception):
    """Base class for all workflow errors."""

    code = "PRACTICUM_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.context}


# =============================================================================
# BUSINESS-RULE VIOLATIONS
# =============================================================================

class InvalidTransitionError(PracticumError):
    """Target state is not reachable from the current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, practice_id: int, current: str, target: str) -> None:
        super().__init__(
            f"No se puede cambiar de {current} a {target}",
            practice_id=practice_id,
            current=current,
            target=target,
        )
        self.practice_id = practice_id
        self.current = current
        self.target = target


class MissingReasonError(PracticumError):
    """Voiding requires a reason between 10 and 500 characters."""

    code = "MISSING_REASON"

    def __init__(self, practice_id: int, length: int, minimum: int, maximum: int) -> None:
        if length == 0:
            message = "El motivo de anulación es obligatorio"
        elif length < minimum:
            message = f"El motivo debe tener al menos {minimum} caracteres"
        else:
            message = f"El motivo no puede exceder los {maximum} caracteres"
        super().__init__(message, practice_id=practice_id, length=length)
        self.practice_id = practice_id
        self.length = length


class AlreadyTerminalError(PracticumError):
    """A CLOSED practice admits no transitions at all."""

    code = "ALREADY_TERMINAL"

    def __init__(self, practice_id: int, state: str) -> None:
        super().__init__(
            f"La práctica {practice_id} está {state} y no admite cambios de estado",
            practice_id=practice_id,
            state=state,
        )
        self.practice_id = practice_id
        self.state = state


class EvaluationsIncompleteError(PracticumError):
    """Closure requires both the report and the employer evaluation."""

    code = "EVALUATIONS_INCOMPLETE"

    def __init__(self, practice_id: int, missing: list[str]) -> None:
        super().__init__(
            "Las evaluaciones del informe y empleador deben estar completadas",
            practice_id=practice_id,
            missing=missing,
        )
        self.practice_id = practice_id
        self.missing = missing


class InvalidStateError(PracticumError):
    """Practice cannot reach EVALUATION_COMPLETE, so it cannot be closed."""

    code = "INVALID_STATE"

    def __init__(self, practice_id: int, state: str) -> None:
        super().__init__(
            f"La práctica {practice_id} en estado {state} no puede cerrarse",
            practice_id=practice_id,
            state=state,
        )
        self.practice_id = practice_id
        self.state = state


class AlreadyClosedError(PracticumError):
    """The closure record is VALIDATED and can no longer change."""

    code = "ALREADY_CLOSED"

    def __init__(self, practice_id: int) -> None:
        super().__init__(
            "El acta final ya está cerrada y no puede modificarse",
            practice_id=practice_id,
        )
        self.practice_id = practice_id


class InvalidConfigurationError(PracticumError):
    """Grading weights do not add up to exactly 100."""

    code = "INVALID_CONFIGURATION"

    def __init__(self, report_weight: int, employer_weight: int) -> None:
        super().__init__(
            "La suma de los porcentajes del informe y del empleador debe ser exactamente 100%",
            report_weight=report_weight,
            employer_weight=employer_weight,
        )
        self.report_weight = report_weight
        self.employer_weight = employer_weight


class EvaluationLockedError(PracticumError):
    """Evaluations are accepted only while the practice is running or awaiting evaluation."""

    code = "EVALUATION_LOCKED"

    def __init__(self, practice_id: int, state: str) -> None:
        super().__init__(
            f"Las evaluaciones de la práctica {practice_id} no pueden modificarse en estado {state}",
            practice_id=practice_id,
            state=state,
        )
        self.practice_id = practice_id
        self.state = state


class ReportNotUploadedError(PracticumError):
    """The report cannot be graded before the student uploads it."""

    code = "REPORT_NOT_UPLOADED"

    def __init__(self, practice_id: int) -> None:
        super().__init__(
            "El informe de práctica debe estar subido antes de evaluar",
            practice_id=practice_id,
        )
        self.practice_id = practice_id


class IncompleteCriteriaError(PracticumError):
    """A rubric was submitted without a score for every criterion."""

    code = "INCOMPLETE_CRITERIA"

    def __init__(self, practice_id: int, missing: list[str]) -> None:
        super().__init__(
            f"Faltan puntajes para los criterios: {', '.join(missing)}",
            practice_id=practice_id,
            missing=missing,
        )
        self.practice_id = practice_id
        self.missing = missing


class EvaluationMismatchError(PracticumError):
    """An evaluation belongs to a different practice than the one being closed."""

    code = "EVALUATION_MISMATCH"

    def __init__(self, practice_id: int, evaluation_practice_id: int) -> None:
        super().__init__(
            f"La evaluación de la práctica {evaluation_practice_id} "
            f"no corresponde a la práctica {practice_id}",
            practice_id=practice_id,
            evaluation_practice_id=evaluation_practice_id,
        )
        self.practice_id = practice_id
        self.evaluation_practice_id = evaluation_practice_id


class InvalidHoursError(PracticumError):
    """Program has no positive hour requirement for the practice type."""

    code = "INVALID_HOURS"

    def __init__(self, hours: int | None, practice_type: str | None = None) -> None:
        super().__init__(
            "Las horas de práctica requeridas deben ser un número positivo",
            hours=hours,
            practice_type=practice_type,
        )
        self.hours = hours
        self.practice_type = practice_type


class PracticeNotFoundError(PracticumError):
    code = "PRACTICE_NOT_FOUND"

    def __init__(self, practice_id: int) -> None:
        super().__init__("Práctica no encontrada", practice_id=practice_id)
        self.practice_id = practice_id


class ConcurrentModificationError(PracticumError):
    """Another caller changed the practice since it was loaded."""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, practice_id: int, expected_version: int) -> None:
        super().__init__(
            f"La práctica {practice_id} fue modificada por otra operación",
            practice_id=practice_id,
            expected_version=expected_version,
        )
        self.practice_id = practice_id
        self.expected_version = expected_version


# =============================================================================
# COLLABORATOR FAILURES
# =============================================================================

class DependencyUnavailableError(PracticumError):
    """Configuration or persistence collaborator failed; safe to retry later."""

    code = "DEPENDENCY_UNAVAILABLE"

    def __init__(self, dependency: str, details: str | None = None) -> None:
        super().__init__(
            f"Servicio no disponible: {dependency}",
            dependency=dependency,
            details=details,
        )
        self.dependency = dependency
        self.details = details


def is_business_rule_violation(error: BaseException) -> bool:
    """True for errors the caller must not retry."""
    return isinstance(error, PracticumError) and not isinstance(
        error, (DependencyUnavailableError, ConcurrentModificationError)
    )
