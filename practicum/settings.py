"""
Workflow Thresholds Configuration

Explicit thresholds for deadline classification and grading defaults.
Every value can be overridden through a PRACTICUM_* environment variable.
"""

import os
from decimal import Decimal


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from e


# Overdue-closure buckets (days past fechaTermino)
OVERDUE_THRESHOLDS = {
    "grace_days": 5,       # Below this: not flagged
    "low_days": 7,         # From here: LOW
    "critical_after": 15,  # Strictly above this: CRITICAL
}

# Deadline windows (days)
DEADLINE_WINDOWS = {
    "acceptance_window_days": 5,      # Instructor acceptance, counted from student completion
    "initial_form_window_days": 5,    # Acta 1, counted from fechaInicio
    "advance_notice_days": 1,         # Alert this many days before a window expires
    "upcoming_window_days": 7,        # Termination approaching
    "report_grace_days": 3,           # Report upload overdue after fechaTermino
}

# Grading defaults used when no configuration row exists
GRADING_DEFAULTS = {
    "report_weight": 50,
    "employer_weight": 50,
    "min_passing_grade": "4.0",
}


def overdue_thresholds() -> dict[str, int]:
    return {
        key: _env_int(f"PRACTICUM_{key.upper()}", value)
        for key, value in OVERDUE_THRESHOLDS.items()
    }


def deadline_windows() -> dict[str, int]:
    return {
        key: _env_int(f"PRACTICUM_{key.upper()}", value)
        for key, value in DEADLINE_WINDOWS.items()
    }


def grading_defaults() -> dict[str, object]:
    return {
        "report_weight": _env_int("PRACTICUM_REPORT_WEIGHT", GRADING_DEFAULTS["report_weight"]),
        "employer_weight": _env_int("PRACTICUM_EMPLOYER_WEIGHT", GRADING_DEFAULTS["employer_weight"]),
        "min_passing_grade": Decimal(
            os.getenv("PRACTICUM_MIN_PASSING_GRADE", GRADING_DEFAULTS["min_passing_grade"])
        ),
    }


def database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///practicum.db")
