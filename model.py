"""
Team Demand Calculation Engine
Pure arithmetic: one set of planning inputs drives one set of results.
The debt sweep projects how yearly debt shrinks as headcount grows.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Tuple

import pandas as pd

from config import (
    DEFAULT_SWEEP_RANGE,
    LOGGER_NAME,
    CalculationResults,
    DebtScenario,
    PlanningInputs,
)

logger = logging.getLogger(LOGGER_NAME)

MONTHS_PER_YEAR = 12
DEBT_HIGH_HOURS = 2000


def _div(num: float, den: float) -> float:
    """IEEE-754 division: x/0 is +/-inf signed by both operands, 0/0 is nan."""
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num) * math.copysign(1.0, den)
    return num / den


def _floor_zero(value: float) -> float:
    if math.isnan(value):
        return value
    return max(0.0, value)


def _round_half_up(value: float) -> float:
    if not math.isfinite(value):
        return value
    return float(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Workload
# ---------------------------------------------------------------------------

def compute_hotfix_hours(inputs: PlanningInputs) -> float:
    if inputs.auto_calculate_hotfix:
        return (
            inputs.hotfix_releases
            * inputs.hotfix_tasks_per_release
            * inputs.hotfix_hours_per_task
        )
    return inputs.manual_hotfix_hours


def compute_base_volume(inputs: PlanningInputs, hotfix_hours: float) -> float:
    return (
        inputs.contract_hours
        + inputs.contract_debt
        + inputs.minor_hours
        + inputs.minor_debt
        + hotfix_hours
    )


def apply_risk(base_volume: float, risk_percent: float) -> float:
    """Flat uplift over the whole base volume, not per category."""
    return base_volume * (1 + risk_percent / 100)


# ---------------------------------------------------------------------------
# Calendar & turnover
# ---------------------------------------------------------------------------

def compute_calendar(inputs: PlanningInputs) -> Tuple[float, float, float]:
    """Return (real_work_days, brutto_hours_per_year, effective_hours_per_dev).

    Real work days are not clamped; a misconfigured calendar goes negative.
    """
    real_work_days = inputs.work_days_per_year - inputs.vacation_days - inputs.sick_days
    brutto_hours_per_year = real_work_days * inputs.hours_per_day
    effective_hours_per_dev = brutto_hours_per_year * (inputs.productivity_percent / 100)
    return real_work_days, brutto_hours_per_year, effective_hours_per_dev


def compute_turnover_losses(
    inputs: PlanningInputs,
    brutto_hours_per_year: float,
) -> Tuple[float, float]:
    """Return (losses per departing developer, total losses) in hours.

    One departure costs three phases: the leaver's slow last month, the
    vacant months, and the newcomer's first month. Phases are measured against
    a normal month at baseline productivity. Productivity above baseline in
    the last or onboarding month makes that term a gain.
    """
    brutto_hours_per_month = brutto_hours_per_year / MONTHS_PER_YEAR
    normal_month = brutto_hours_per_month * (inputs.productivity_percent / 100)

    loss_last_month = normal_month - brutto_hours_per_month * inputs.productivity_before_leaving / 100
    loss_empty_months = normal_month * inputs.months_without_person
    loss_onboarding_month = normal_month - brutto_hours_per_month * inputs.productivity_onboarding / 100

    per_person = loss_last_month + loss_empty_months + loss_onboarding_month
    return per_person, per_person * inputs.developers_turnover


# ---------------------------------------------------------------------------
# Demand & staffing
# ---------------------------------------------------------------------------

def compute_demand(volume_with_risks: float, total_turnover_losses: float) -> float:
    return volume_with_risks + total_turnover_losses


def compute_staffing(
    total_demand: float,
    effective_hours_per_dev: float,
    planned_team_size: int,
) -> Tuple[float, float, float, float]:
    """Return (fte_needed, team_capacity, coverage_percent, debt_hours).

    Surplus capacity shows up only as coverage above 100; debt is never negative.
    """
    fte_needed = _div(total_demand, effective_hours_per_dev)
    team_capacity = effective_hours_per_dev * planned_team_size
    coverage_percent = _div(team_capacity, total_demand) * 100
    debt_hours = _floor_zero(total_demand - team_capacity)
    return fte_needed, team_capacity, coverage_percent, debt_hours


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute(inputs: PlanningInputs) -> CalculationResults:
    hotfix_hours = compute_hotfix_hours(inputs)
    base_volume = compute_base_volume(inputs, hotfix_hours)
    volume_with_risks = apply_risk(base_volume, inputs.risk_percent)

    real_work_days, brutto_hours_per_year, effective_hours_per_dev = compute_calendar(inputs)
    per_person, total_losses = compute_turnover_losses(inputs, brutto_hours_per_year)

    total_demand = compute_demand(volume_with_risks, total_losses)
    fte_needed, team_capacity, coverage_percent, debt_hours = compute_staffing(
        total_demand, effective_hours_per_dev, inputs.planned_team_size
    )

    results = CalculationResults(
        hotfix_hours=hotfix_hours,
        base_volume=base_volume,
        volume_with_risks=volume_with_risks,
        real_work_days=real_work_days,
        brutto_hours_per_year=brutto_hours_per_year,
        effective_hours_per_dev=effective_hours_per_dev,
        turnover_losses_per_person=per_person,
        total_turnover_losses=total_losses,
        total_demand=total_demand,
        fte_needed=fte_needed,
        team_capacity=team_capacity,
        coverage_percent=coverage_percent,
        debt_hours=debt_hours,
    )

    logger.debug(
        "demand=%.1f capacity=%.1f fte=%.2f coverage=%.1f%%",
        total_demand, team_capacity, fte_needed, coverage_percent,
    )
    if not results.is_finite:
        logger.warning(
            "Non-finite staffing figures (effective hours per dev=%s, demand=%s)",
            effective_hours_per_dev, total_demand,
        )
    return results


def sweep_debt_by_team_size(
    total_demand: float,
    effective_hours_per_dev: float,
    size_range: Tuple[int, int] = DEFAULT_SWEEP_RANGE,
) -> List[DebtScenario]:
    """Yearly debt for every team size in the inclusive range, demand held fixed."""
    lo, hi = size_range
    return [
        DebtScenario(
            size=size,
            debt=_floor_zero(total_demand - effective_hours_per_dev * size),
        )
        for size in range(int(lo), int(hi) + 1)
    ]


def sweep_results(
    results: CalculationResults,
    size_range: Tuple[int, int] = DEFAULT_SWEEP_RANGE,
) -> List[DebtScenario]:
    return sweep_debt_by_team_size(
        results.total_demand, results.effective_hours_per_dev, size_range
    )


# ---------------------------------------------------------------------------
# Tables for display & export
# ---------------------------------------------------------------------------

def load_structure_frame(inputs: PlanningInputs, results: CalculationResults) -> pd.DataFrame:
    """Yearly load split by kind of work, including risk and turnover uplifts."""
    rows = [
        ("Contracts", inputs.contract_hours),
        ("Contract debt", inputs.contract_debt),
        ("Minor releases", inputs.minor_hours),
        ("Minor debt", inputs.minor_debt),
        ("Hotfixes", results.hotfix_hours),
        (f"Risks ({inputs.risk_percent:g}%)", results.risk_hours),
        ("Turnover losses", results.total_turnover_losses),
    ]
    return pd.DataFrame(rows, columns=["Category", "Hours"])


def demand_vs_capacity_frame(results: CalculationResults) -> pd.DataFrame:
    return pd.DataFrame({
        "Metric": ["Demand", "Team capacity"],
        "Hours": [
            _round_half_up(results.total_demand),
            _round_half_up(results.team_capacity),
        ],
    })


def debt_band(debt_hours: float) -> str:
    """'clear' at zero debt, 'high' above DEBT_HIGH_HOURS, 'moderate' in between."""
    if debt_hours == 0:
        return "clear"
    if debt_hours > DEBT_HIGH_HOURS:
        return "high"
    return "moderate"


def debt_scenarios_frame(scenarios: Iterable[DebtScenario]) -> pd.DataFrame:
    rows = [
        {
            "Team size": s.size,
            "Label": f"{s.size} devs",
            "Debt hours": _round_half_up(s.debt),
        }
        for s in scenarios
    ]
    if not rows:
        return pd.DataFrame(columns=["Team size", "Label", "Debt hours"])
    return pd.DataFrame(rows)


def summary_frame(inputs: PlanningInputs, results: CalculationResults) -> pd.DataFrame:
    rows = [
        ("Hotfix hours", results.hotfix_hours),
        ("Base volume (h)", results.base_volume),
        ("Volume with risks (h)", results.volume_with_risks),
        ("Real work days", results.real_work_days),
        ("Brutto hours per developer", results.brutto_hours_per_year),
        ("Effective hours per developer", results.effective_hours_per_dev),
        ("Turnover losses per person (h)", results.turnover_losses_per_person),
        ("Turnover losses total (h)", results.total_turnover_losses),
        ("Total demand (h)", results.total_demand),
        ("FTE needed", results.fte_needed),
        ("Recommended headcount", results.recommended_headcount),
        (f"Team capacity ({inputs.planned_team_size} devs, h)", results.team_capacity),
        ("Coverage (%)", results.coverage_percent),
        ("Debt (h)", results.debt_hours),
    ]
    return pd.DataFrame(rows, columns=["Metric", "Value"])
