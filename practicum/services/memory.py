"""
In-Memory Practice Store

Dictionary-backed PracticeStore. Deterministic and dependency-free, used
by tests and local tooling. Not safe for concurrent use.
"""

from contextlib import contextmanager
from typing import Iterator

from practicum.schemas.closure import ClosureRecord
from practicum.schemas.evaluation import EmployerEvaluation, ReportEvaluation
from practicum.schemas.practice import Practice
from practicum.workflow.errors import ConcurrentModificationError, PracticeNotFoundError


class InMemoryPracticeStore:
    """PracticeStore keeping frozen models in dictionaries keyed by practice id."""

    def __init__(self, practices: list[Practice] | None = None):
        self.practices: dict[int, Practice] = {}
        self.report_evaluations: dict[int, ReportEvaluation] = {}
        self.employer_evaluations: dict[int, EmployerEvaluation] = {}
        self.closures: dict[int, ClosureRecord] = {}
        for practice in practices or []:
            self.add_practice(practice)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = (
            dict(self.practices),
            dict(self.report_evaluations),
            dict(self.employer_evaluations),
            dict(self.closures),
        )
        try:
            yield
        except BaseException:
            (
                self.practices,
                self.report_evaluations,
                self.employer_evaluations,
                self.closures,
            ) = snapshot
            raise

    def add_practice(self, practice: Practice) -> Practice:
        if practice.id in self.practices:
            raise ValueError(f"Practice {practice.id} already exists")
        self.practices[practice.id] = practice
        return practice

    def get_practice(self, practice_id: int) -> Practice:
        try:
            return self.practices[practice_id]
        except KeyError:
            raise PracticeNotFoundError(practice_id) from None

    def list_active_practices(self) -> list[Practice]:
        return [p for _, p in sorted(self.practices.items()) if not p.is_final]

    def save_practice(self, practice: Practice, expected_version: int) -> Practice:
        stored = self.get_practice(practice.id)
        if stored.version != expected_version:
            raise ConcurrentModificationError(practice.id, expected_version)
        saved = practice.model_copy(update={"version": expected_version + 1})
        self.practices[practice.id] = saved
        return saved

    def get_report_evaluation(self, practice_id: int) -> ReportEvaluation | None:
        return self.report_evaluations.get(practice_id)

    def get_employer_evaluation(self, practice_id: int) -> EmployerEvaluation | None:
        return self.employer_evaluations.get(practice_id)

    def save_report_evaluation(self, evaluation: ReportEvaluation) -> None:
        self.report_evaluations[evaluation.practice_id] = evaluation

    def save_employer_evaluation(self, evaluation: EmployerEvaluation) -> None:
        self.employer_evaluations[evaluation.practice_id] = evaluation

    def get_closure(self, practice_id: int) -> ClosureRecord | None:
        return self.closures.get(practice_id)

    def save_closure(self, record: ClosureRecord) -> None:
        self.closures[record.practice_id] = record
