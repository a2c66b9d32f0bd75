"""
Evaluation Schemas

A practice receives two independent evaluations:
- ReportEvaluation: the supervising instructor grades the final report,
  optionally scored on the seven-item report rubric.
- EmployerEvaluation: the host organisation grades the student's work,
  optionally broken down per weighted standard criterion.

Both are upserted while the practice is being evaluated.
"""

from datetime import datetime
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from practicum.schemas.base import Grade, NonEmptyStr, PracticeId


class EvaluationCriterion(BaseModel):
    """A standard evaluation criterion and its relative weight."""
    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    name: NonEmptyStr
    description: str = ""
    weight: int = Field(default=1, gt=0, le=100)


# Employer weights sum to 100
EMPLOYER_CRITERIA: tuple[EvaluationCriterion, ...] = (
    EvaluationCriterion(
        id="puntualidad",
        name="Puntualidad y Asistencia",
        description="Cumple con horarios establecidos y presenta bajo ausentismo",
        weight=15,
    ),
    EvaluationCriterion(
        id="responsabilidad",
        name="Responsabilidad",
        description="Cumple con las tareas asignadas en tiempo y forma",
        weight=20,
    ),
    EvaluationCriterion(
        id="iniciativa",
        name="Iniciativa y Proactividad",
        description="Propone mejoras y actúa de manera proactiva",
        weight=15,
    ),
    EvaluationCriterion(
        id="trabajo_equipo",
        name="Trabajo en Equipo",
        description="Se integra bien al equipo y colabora efectivamente",
        weight=15,
    ),
    EvaluationCriterion(
        id="comunicacion",
        name="Comunicación",
        description="Se comunica de manera clara y efectiva",
        weight=10,
    ),
    EvaluationCriterion(
        id="conocimientos",
        name="Aplicación de Conocimientos",
        description="Aplica conocimientos académicos en el trabajo práctico",
        weight=15,
    ),
    EvaluationCriterion(
        id="adaptabilidad",
        name="Adaptabilidad",
        description="Se adapta a cambios y nuevas situaciones",
        weight=10,
    ),
)

# Report rubric items count equally
REPORT_CRITERIA: tuple[EvaluationCriterion, ...] = (
    EvaluationCriterion(id="claridad_objetivos", name="Claridad de Objetivos"),
    EvaluationCriterion(id="fundamentacion_teorica", name="Fundamentación Teórica"),
    EvaluationCriterion(id="metodologia_aplicada", name="Metodología Aplicada"),
    EvaluationCriterion(id="analisis_resultados", name="Análisis de Resultados"),
    EvaluationCriterion(id="conclusiones_recomendaciones", name="Conclusiones y Recomendaciones"),
    EvaluationCriterion(id="calidad_redaccion", name="Calidad de Redacción"),
    EvaluationCriterion(id="presentacion_formato", name="Presentación y Formato"),
)


class CriterionScore(BaseModel):
    """Integer score (1-7) given to one criterion."""
    model_config = ConfigDict(frozen=True)

    criterion_id: NonEmptyStr
    score: int = Field(ge=1, le=7)


def unscored(
    catalogue: Iterable[EvaluationCriterion],
    scores: Iterable[CriterionScore],
) -> list[str]:
    """Ids from `catalogue` that have no score, in catalogue order."""
    scored = {item.criterion_id for item in scores}
    return [criterion.id for criterion in catalogue if criterion.id not in scored]


class ReportEvaluation(BaseModel):
    """
    Instructor grade for the final report.

    When rubric scores are supplied, every rubric item must be scored.
    """
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    grade: Grade
    evaluated_at: datetime
    comments: str | None = Field(default=None, max_length=2000)
    criteria: list[CriterionScore] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_rubric_complete(self) -> "ReportEvaluation":
        missing = unscored(REPORT_CRITERIA, self.criteria) if self.criteria else []
        if missing:
            raise ValueError(f"Missing report criteria: {', '.join(missing)}")
        return self


class EmployerEvaluation(BaseModel):
    """
    Employer grade for the student's performance.

    When criteria are supplied, every standard criterion must be scored.
    The overall grade remains the authoritative value used for closure.
    """
    model_config = ConfigDict(frozen=True)

    practice_id: PracticeId
    grade: Grade
    evaluated_at: datetime
    comments: str | None = Field(default=None, max_length=2000)
    criteria: list[CriterionScore] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_criteria_complete(self) -> "EmployerEvaluation":
        missing = unscored(EMPLOYER_CRITERIA, self.criteria) if self.criteria else []
        if missing:
            raise ValueError(f"Missing employer criteria: {', '.join(missing)}")
        return self
