"""
Collaborator Protocols

The workflow core never loads or saves anything itself. These protocols
describe what the service layer needs from persistence and configuration.
"""

from typing import ContextManager, Protocol

from practicum.schemas.closure import ClosureRecord, GradingConfiguration
from practicum.schemas.evaluation import EmployerEvaluation, ReportEvaluation
from practicum.schemas.practice import Practice


class ConfigurationProvider(Protocol):
    """Supplies the active grading configuration (read-only)."""

    def get_active_configuration(self) -> GradingConfiguration:
        """Raise DependencyUnavailableError when no configuration can be read."""
        ...


class PracticeStore(Protocol):
    """Persistence collaborator for practices, evaluations and closures."""

    def atomic(self) -> ContextManager[None]:
        """All calls inside commit together or roll back together."""
        ...

    def add_practice(self, practice: Practice) -> Practice:
        ...

    def get_practice(self, practice_id: int) -> Practice:
        """Raise PracticeNotFoundError when missing."""
        ...

    def list_active_practices(self) -> list[Practice]:
        """Every practice that is neither CLOSED nor VOIDED."""
        ...

    def save_practice(self, practice: Practice, expected_version: int) -> Practice:
        """
        Persist `practice` if the stored version still equals
        `expected_version`; return it with the incremented version.
        Raise ConcurrentModificationError otherwise.
        """
        ...

    def get_report_evaluation(self, practice_id: int) -> ReportEvaluation | None:
        ...

    def get_employer_evaluation(self, practice_id: int) -> EmployerEvaluation | None:
        ...

    def save_report_evaluation(self, evaluation: ReportEvaluation) -> None:
        ...

    def save_employer_evaluation(self, evaluation: EmployerEvaluation) -> None:
        ...

    def get_closure(self, practice_id: int) -> ClosureRecord | None:
        ...

    def save_closure(self, record: ClosureRecord) -> None:
        """Upsert: one closure record per practice."""
        ...
