"""
Tests for the team demand engine — workload, calendar, turnover, staffing
and the debt-by-team-size sweep.
"""

import math

import pytest

from config import DebtScenario
from model import (
    apply_risk,
    compute,
    compute_base_volume,
    compute_calendar,
    compute_demand,
    compute_hotfix_hours,
    compute_staffing,
    compute_turnover_losses,
    debt_band,
    debt_scenarios_frame,
    demand_vs_capacity_frame,
    load_structure_frame,
    summary_frame,
    sweep_debt_by_team_size,
    sweep_results,
)


class TestWorkload:

    def test_auto_hotfix_is_product(self, inputs):
        assert compute_hotfix_hours(inputs) == 42 * 5 * 8

    def test_manual_hotfix_ignores_release_fields(self, inputs):
        manual = inputs.replace(
            auto_calculate_hotfix=False,
            manual_hotfix_hours=333.0,
            hotfix_releases=1000.0,
            hotfix_tasks_per_release=1000.0,
        )
        assert compute_hotfix_hours(manual) == 333.0

    def test_base_volume_is_exact_sum(self, inputs):
        assert compute_base_volume(inputs, 1680.0) == 5500 + 1000 + 870 + 830 + 1680

    def test_zero_risk_keeps_volume(self):
        assert apply_risk(9880.0, 0) == 9880.0

    def test_risk_is_flat_uplift(self):
        assert apply_risk(9880.0, 10) == pytest.approx(10868.0)
        assert apply_risk(1000.0, 25) == pytest.approx(1250.0)


class TestCalendar:

    def test_reference_calendar(self, inputs):
        real_days, brutto, effective = compute_calendar(inputs)
        assert real_days == 205
        assert brutto == 1640
        assert effective == pytest.approx(1230.0)

    def test_misconfigured_calendar_goes_negative(self, inputs):
        real_days, brutto, _ = compute_calendar(inputs.replace(vacation_days=300.0))
        assert real_days == 247 - 300 - 14
        assert brutto < 0


class TestTurnover:

    def test_reference_losses(self, inputs):
        per_person, total = compute_turnover_losses(inputs, 1640.0)
        # 34.17 last month + 102.5 vacant + 34.17 onboarding
        assert per_person == pytest.approx(170.8333, abs=1e-3)
        assert total == pytest.approx(341.6667, abs=1e-3)

    def test_total_scales_with_departures(self, inputs):
        per_person, _ = compute_turnover_losses(inputs, 1640.0)
        _, total = compute_turnover_losses(inputs.replace(developers_turnover=5), 1640.0)
        assert total == pytest.approx(per_person * 5)

    def test_no_departures_no_loss(self, inputs):
        _, total = compute_turnover_losses(inputs.replace(developers_turnover=0), 1640.0)
        assert total == 0

    def test_vacancy_term_is_additive(self, inputs):
        one, _ = compute_turnover_losses(inputs, 1640.0)
        three, _ = compute_turnover_losses(inputs.replace(months_without_person=3.0), 1640.0)
        assert three - one == pytest.approx(2 * 102.5)

    def test_onboarding_above_baseline_is_a_gain(self, inputs):
        eager = inputs.replace(
            productivity_before_leaving=100.0,
            productivity_onboarding=100.0,
            months_without_person=0.0,
        )
        per_person, _ = compute_turnover_losses(eager, 1640.0)
        # each of the two months contributes 102.5 - 136.67
        assert per_person == pytest.approx(2 * (102.5 - 1640 / 12), abs=1e-9)
        assert per_person < 0


class TestStaffing:

    def test_debt_never_negative(self):
        _, capacity, coverage, debt = compute_staffing(1000.0, 500.0, 4)
        assert capacity == 2000.0
        assert coverage == pytest.approx(200.0)
        assert debt == 0

    def test_exact_cover_is_hundred_percent(self):
        _, _, coverage, debt = compute_staffing(1500.0, 500.0, 3)
        assert coverage == 100.0
        assert debt == 0

    def test_zero_effective_hours_gives_inf(self):
        fte, capacity, coverage, debt = compute_staffing(1000.0, 0.0, 5)
        assert math.isinf(fte)
        assert capacity == 0
        assert coverage == 0
        assert debt == 1000.0

    def test_zero_demand_and_zero_capacity_gives_nan(self):
        fte, _, coverage, _ = compute_staffing(0.0, 0.0, 5)
        assert math.isnan(fte)
        assert math.isnan(coverage)

    def test_zero_demand_coverage_is_inf(self):
        _, _, coverage, debt = compute_staffing(0.0, 1230.0, 5)
        assert math.isinf(coverage)
        assert debt == 0

    def test_demand_is_sum(self):
        assert compute_demand(10868.0, 341.5) == 11209.5


class TestCompute:

    def test_reference_scenario(self, results):
        assert results.hotfix_hours == 1680
        assert results.base_volume == 9880
        assert results.volume_with_risks == pytest.approx(10868.0)
        assert results.real_work_days == 205
        assert results.brutto_hours_per_year == 1640
        assert results.effective_hours_per_dev == pytest.approx(1230.0)
        assert results.team_capacity == pytest.approx(8610.0)
        assert results.total_demand == pytest.approx(11209.6667, abs=1e-3)
        assert results.fte_needed == pytest.approx(11209.6667 / 1230, abs=1e-5)
        assert results.coverage_percent == pytest.approx(8610 / 11209.6667 * 100, abs=1e-4)
        assert results.debt_hours == pytest.approx(2599.6667, abs=1e-3)

    def test_derived_properties(self, results):
        assert results.recommended_headcount == 10
        assert results.risk_hours == pytest.approx(988.0)
        assert not results.is_covered
        assert results.is_finite

    def test_deterministic(self, inputs):
        assert compute(inputs) == compute(inputs)
        assert compute(inputs).as_dict() == compute(inputs).as_dict()

    def test_large_team_has_no_debt(self, inputs):
        res = compute(inputs.replace(planned_team_size=20))
        assert res.debt_hours == 0
        assert res.coverage_percent > 100
        assert res.is_covered

    def test_debt_non_increasing_in_team_size(self, inputs):
        debts = [compute(inputs.replace(planned_team_size=n)).debt_hours for n in range(1, 16)]
        assert all(a >= b for a, b in zip(debts, debts[1:]))

    def test_zero_calendar_is_not_finite(self, inputs, caplog):
        with caplog.at_level("WARNING", logger="team_demand"):
            res = compute(inputs.replace(work_days_per_year=42.0))
        assert res.effective_hours_per_dev == 0
        assert math.isinf(res.fte_needed)
        assert res.recommended_headcount is None
        assert not res.is_finite
        assert "Non-finite" in caplog.text


class TestSweep:

    def test_reference_range(self, results):
        scenarios = sweep_results(results)
        assert [s.size for s in scenarios] == list(range(3, 16))
        assert scenarios[0].size == 3
        assert scenarios[0].debt == pytest.approx(11209.6667 - 3690, abs=1e-3)

    def test_monotone_and_reaches_zero(self, results):
        scenarios = sweep_results(results)
        debts = [s.debt for s in scenarios]
        assert all(a >= b for a, b in zip(debts, debts[1:]))
        for s in scenarios:
            if s.size * results.effective_hours_per_dev >= results.total_demand:
                assert s.debt == 0
        assert scenarios[-1].debt == 0

    def test_custom_range(self):
        scenarios = sweep_debt_by_team_size(1000.0, 300.0, (1, 4))
        assert [(s.size, s.debt) for s in scenarios] == [(1, 700.0), (2, 400.0), (3, 100.0), (4, 0.0)]

    def test_empty_range(self):
        assert sweep_debt_by_team_size(1000.0, 300.0, (5, 4)) == []

    def test_restartable(self, results):
        assert sweep_results(results) == sweep_results(results)

    def test_sweep_does_not_touch_results(self, results):
        before = results.as_dict()
        sweep_results(results, (1, 30))
        assert results.as_dict() == before


class TestFrames:

    def test_load_structure(self, inputs, results):
        df = load_structure_frame(inputs, results)
        assert list(df["Category"]) == [
            "Contracts", "Contract debt", "Minor releases", "Minor debt",
            "Hotfixes", "Risks (10%)", "Turnover losses",
        ]
        assert df["Hours"].sum() == pytest.approx(results.total_demand)

    def test_demand_vs_capacity_rounds(self, results):
        df = demand_vs_capacity_frame(results)
        assert list(df["Metric"]) == ["Demand", "Team capacity"]
        assert list(df["Hours"]) == [11210.0, 8610.0]

    def test_debt_scenarios_rounds_and_labels(self):
        df = debt_scenarios_frame([DebtScenario(3, 10.5), DebtScenario(4, 0.0)])
        assert list(df["Label"]) == ["3 devs", "4 devs"]
        assert list(df["Debt hours"]) == [11.0, 0.0]

    def test_debt_scenarios_empty(self):
        df = debt_scenarios_frame([])
        assert df.empty
        assert list(df.columns) == ["Team size", "Label", "Debt hours"]

    def test_summary_has_headline_figures(self, inputs, results):
        df = summary_frame(inputs, results)
        table = dict(zip(df["Metric"], df["Value"]))
        assert table["Recommended headcount"] == 10
        assert table["Team capacity (7 devs, h)"] == pytest.approx(8610.0)


class TestSignedZero:

    def test_negative_zero_effective_hours(self):
        fte, _, _, _ = compute_staffing(1000.0, -0.0, 5)
        assert fte == -math.inf

    def test_negative_demand_over_positive_zero(self):
        fte, _, _, _ = compute_staffing(-10.0, 0.0, 5)
        assert fte == -math.inf

    def test_negative_demand_over_negative_zero(self):
        fte, _, _, _ = compute_staffing(-10.0, -0.0, 5)
        assert fte == math.inf

    def test_zero_productivity_negative_calendar(self, inputs):
        res = compute(inputs.replace(productivity_percent=0.0, vacation_days=300.0))
        assert res.effective_hours_per_dev == 0
        assert math.copysign(1.0, res.effective_hours_per_dev) == -1.0
        assert res.fte_needed == -math.inf


class TestDebtBand:

    @pytest.mark.parametrize("debt, band", [
        (0.0, "clear"), (1.0, "moderate"), (2000.0, "moderate"), (2001.0, "high"),
    ])
    def test_bands(self, debt, band):
        assert debt_band(debt) == band

    def test_reference_sweep_bands(self, results):
        df = debt_scenarios_frame(sweep_results(results))
        bands = [debt_band(d) for d in df["Debt hours"]]
        assert bands[0] == "high"
        assert bands[-1] == "clear"
        assert "moderate" in bands
