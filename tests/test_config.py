"""Tests for PlanningInputs construction and coercion."""

import dataclasses
import logging

import pytest

from config import PlanningInputs, setup_logging
from defaults import reference_defaults


class TestFromMapping:

    def test_empty_mapping_gives_defaults(self):
        assert PlanningInputs.from_mapping({}) == reference_defaults()

    def test_camel_case_keys(self):
        inp = PlanningInputs.from_mapping({"contractHours": 6000, "plannedTeamSize": 9})
        assert inp.contract_hours == 6000.0
        assert inp.planned_team_size == 9

    def test_snake_case_keys(self):
        inp = PlanningInputs.from_mapping({"risk_percent": "15"})
        assert inp.risk_percent == 15.0

    def test_counts_become_int(self):
        inp = PlanningInputs.from_mapping({"developersTurnover": "3", "plannedTeamSize": 7.0})
        assert inp.developers_turnover == 3
        assert isinstance(inp.developers_turnover, int)
        assert isinstance(inp.planned_team_size, int)

    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("off", False), ("1", True), ("No", False), (0, False), (True, True),
    ])
    def test_switch_coercion(self, raw, expected):
        inp = PlanningInputs.from_mapping({"autoCalculateHotfix": raw})
        assert inp.auto_calculate_hotfix is expected

    def test_bad_switch_string(self):
        with pytest.raises(ValueError):
            PlanningInputs.from_mapping({"autoCalculateHotfix": "maybe"})

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            PlanningInputs.from_mapping({"overtimeHours": 10})

    def test_non_numeric(self):
        with pytest.raises(ValueError):
            PlanningInputs.from_mapping({"contractHours": "lots"})

    def test_no_range_checks(self):
        inp = PlanningInputs.from_mapping({"productivityPercent": 150, "sickDays": -5})
        assert inp.productivity_percent == 150.0
        assert inp.sick_days == -5.0

    def test_base_is_respected(self):
        base = reference_defaults().replace(hours_per_day=6.0)
        inp = PlanningInputs.from_mapping({"vacationDays": 20}, base=base)
        assert inp.hours_per_day == 6.0
        assert inp.vacation_days == 20.0


class TestImmutability:

    def test_frozen(self):
        inp = reference_defaults()
        with pytest.raises(dataclasses.FrozenInstanceError):
            inp.contract_hours = 1.0

    def test_replace_returns_new(self):
        inp = reference_defaults()
        other = inp.replace(contract_hours=1.0)
        assert other.contract_hours == 1.0
        assert inp.contract_hours == 5500.0


def test_setup_logging_adds_one_handler(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    name = "team_demand_test_logger"
    first = setup_logging(name)
    second = setup_logging(name)
    assert first is second
    assert len(first.handlers) == 1
    assert first.level == logging.DEBUG
    first.handlers.clear()
