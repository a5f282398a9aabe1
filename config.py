from __future__ import annotations

import logging
import math
import os
import sys
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_SWEEP_RANGE: Tuple[int, int] = (3, 15)
LOGGER_NAME = "team_demand"

_INT_FIELDS = {"developers_turnover", "planned_team_size"}
_BOOL_FIELDS = {"auto_calculate_hotfix"}
_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def setup_logging(name: str = LOGGER_NAME) -> logging.Logger:
    """Configure a stderr logger once. Level comes from LOG_LEVEL (default INFO)."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    return logger


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_STRINGS:
            return True
        if v in _FALSE_STRINGS:
            return False
        raise ValueError(f"Cannot interpret {value!r} as a boolean")
    return bool(value)


@dataclass(frozen=True)
class PlanningInputs:
    """Everything the user plans for one year. Regenerated whole on every change."""

    # Work volume (hours)
    contract_hours: float
    contract_debt: float
    minor_hours: float
    minor_debt: float

    # Hotfixes
    auto_calculate_hotfix: bool
    hotfix_releases: float
    hotfix_tasks_per_release: float
    hotfix_hours_per_task: float
    manual_hotfix_hours: float

    # Calendar
    work_days_per_year: float
    vacation_days: float
    sick_days: float
    hours_per_day: float
    productivity_percent: float

    # Task risks
    risk_percent: float

    # Turnover
    developers_turnover: int
    productivity_before_leaving: float
    months_without_person: float
    productivity_onboarding: float

    # Team
    planned_team_size: int

    @classmethod
    def from_mapping(
        cls,
        values: Mapping[str, Any],
        base: Optional["PlanningInputs"] = None,
    ) -> "PlanningInputs":
        """Build inputs from form values, coercing types only.

        Keys may be snake_case or camelCase. Keys that are missing are taken
        from ``base`` (the reference defaults when omitted). Unknown keys
        raise ``KeyError``.
        """
        if base is None:
            from defaults import reference_defaults
            base = reference_defaults()

        known = {f.name for f in fields(cls)}
        data = base.as_dict()
        for key, value in values.items():
            name = key if key in known else _snake_case(key)
            if name not in known:
                raise KeyError(f"Unknown planning input: {key!r}")
            if name in _BOOL_FIELDS:
                data[name] = _coerce_bool(value)
            elif name in _INT_FIELDS:
                data[name] = int(float(value))
            else:
                data[name] = float(value)
        return cls(**data)

    def replace(self, **changes: Any) -> "PlanningInputs":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculationResults:
    """Output container returned by the calculation engine."""

    hotfix_hours: float
    base_volume: float
    volume_with_risks: float
    real_work_days: float
    brutto_hours_per_year: float
    effective_hours_per_dev: float
    turnover_losses_per_person: float
    total_turnover_losses: float
    total_demand: float
    fte_needed: float
    team_capacity: float
    coverage_percent: float
    debt_hours: float

    @property
    def risk_hours(self) -> float:
        return self.volume_with_risks - self.base_volume

    @property
    def recommended_headcount(self) -> Optional[int]:
        """FTE rounded up to whole developers, or None when FTE is not finite."""
        if not math.isfinite(self.fte_needed):
            return None
        return math.ceil(self.fte_needed)

    @property
    def is_covered(self) -> bool:
        return self.coverage_percent >= 100

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in asdict(self).values())

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class DebtScenario:
    """Projected yearly debt for one team size."""

    size: int
    debt: float
