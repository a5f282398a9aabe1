"""Reference planning assumptions for one development team."""

from config import PlanningInputs


def reference_defaults() -> PlanningInputs:
    return PlanningInputs(
        contract_hours=5500.0,
        contract_debt=1000.0,
        minor_hours=870.0,
        minor_debt=830.0,
        auto_calculate_hotfix=True,
        hotfix_releases=42.0,
        hotfix_tasks_per_release=5.0,
        hotfix_hours_per_task=8.0,
        manual_hotfix_hours=1680.0,
        work_days_per_year=247.0,
        vacation_days=28.0,
        sick_days=14.0,
        hours_per_day=8.0,
        productivity_percent=75.0,
        risk_percent=10.0,
        developers_turnover=2,
        productivity_before_leaving=50.0,
        months_without_person=1.0,
        productivity_onboarding=50.0,
        planned_team_size=7,
    )
