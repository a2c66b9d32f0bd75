"""
Alert Aggregator

Reduces overdue classifications into reporting statistics. Every
reduction is a count or a sum, so results do not depend on input order
and partial summaries can be combined.
"""

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from practicum.schemas.alerts import AlertSummary, CampusDigest, OverdueClassification
from practicum.schemas.base import AlertSeverity

NO_CAMPUS_NAME = "Sin sede"


def _average(total_days: int, count: int) -> int:
    if count == 0:
        return 0
    return int((Decimal(total_days) / Decimal(count)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def summarize(
    classifications: Iterable[OverdueClassification],
    campus_id: int | None = None,
) -> AlertSummary:
    """
    Build summary statistics.

    Args:
        classifications: Output of the overdue check
        campus_id: Only count practices of this campus when given

    Returns:
        AlertSummary with totals, per-severity counts, the average days
        late (rounded half-up, 0 for empty input) and counts per program
    """
    severities: Counter[AlertSeverity] = Counter()
    programs: Counter[str] = Counter()
    total = 0
    total_days = 0

    for item in classifications:
        if campus_id is not None and item.campus_id != campus_id:
            continue
        total += 1
        total_days += item.days_late
        severities[item.severity] += 1
        programs[item.program_name] += 1

    return AlertSummary(
        total=total,
        by_severity={severity: severities[severity] for severity in AlertSeverity},
        total_days_late=total_days,
        average_days_late=_average(total_days, total),
        by_program=dict(sorted(programs.items())),
    )


def combine_summaries(summaries: Iterable[AlertSummary]) -> AlertSummary:
    """Merge summaries computed over disjoint partitions of the input."""
    severities: Counter[AlertSeverity] = Counter()
    programs: Counter[str] = Counter()
    total = 0
    total_days = 0

    for summary in summaries:
        total += summary.total
        total_days += summary.total_days_late
        severities.update(summary.by_severity)
        programs.update(summary.by_program)

    return AlertSummary(
        total=total,
        by_severity={severity: severities[severity] for severity in AlertSeverity},
        total_days_late=total_days,
        average_days_late=_average(total_days, total),
        by_program=dict(sorted(programs.items())),
    )


def group_by_campus(classifications: Iterable[OverdueClassification]) -> list[CampusDigest]:
    """One digest per campus, for that campus' coordinator. Ordered by campus name."""
    grouped: dict[int | None, list[OverdueClassification]] = {}
    for item in classifications:
        grouped.setdefault(item.campus_id, []).append(item)

    digests = []
    for campus_id, items in grouped.items():
        name = next((i.campus_name for i in items if i.campus_name), None) or NO_CAMPUS_NAME
        digests.append(
            CampusDigest(
                campus_id=campus_id,
                campus_name=name,
                program_names=sorted({i.program_name for i in items}),
                practices=items,
                summary=summarize(items),
            )
        )

    digests.sort(key=lambda digest: (digest.campus_name, digest.campus_id or 0))
    return digests
