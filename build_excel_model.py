"""
Build a standalone, formula-driven Team Demand Excel Model.
Run this script to generate Team_Demand_Model.xlsx.

Yellow input cells carry defined names; every derived figure on the
Calculation and Debt Scenarios sheets is a live formula over those names,
shown next to the value the Python engine computed for the same inputs.
"""

from __future__ import annotations

import argparse
import io
import logging
import math
from typing import List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.workbook.defined_name import DefinedName

from config import (
    DEFAULT_SWEEP_RANGE,
    LOGGER_NAME,
    CalculationResults,
    PlanningInputs,
    setup_logging,
)
from defaults import reference_defaults
from model import compute, sweep_results

logger = logging.getLogger(LOGGER_NAME)

# ── Palette ──────────────────────────────────────────────────────────────
NAVY = "051C2C"
BLUE = "2251FF"
TEAL = "00A9F4"
GREY = "7F8C8D"
LIGHT = "F5F6F7"
DARK = "1A1A2E"
YELLOW_INPUT = "FFF9E6"
GREEN_OK = "E8F5E9"

# ── Styles ───────────────────────────────────────────────────────────────
navy_fill = PatternFill(start_color=NAVY, end_color=NAVY, fill_type="solid")
light_fill = PatternFill(start_color=LIGHT, end_color=LIGHT, fill_type="solid")
input_fill = PatternFill(start_color=YELLOW_INPUT, end_color=YELLOW_INPUT, fill_type="solid")
green_fill = PatternFill(start_color=GREEN_OK, end_color=GREEN_OK, fill_type="solid")

title_font = Font(name="Calibri", size=16, bold=True, color=NAVY)
section_font = Font(name="Calibri", size=12, bold=True, color=NAVY)
label_font = Font(name="Calibri", size=10, color=DARK)
input_font = Font(name="Calibri", size=10, color=BLUE, bold=True)
formula_font = Font(name="Calibri", size=10, color=GREY, italic=True)
hdr_font = Font(name="Calibri", size=10, bold=True, color="FFFFFF")
body_font = Font(name="Calibri", size=10, color=DARK)
note_font = Font(name="Calibri", size=9, color=GREY, italic=True)

thin_border = Border(
    left=Side(style="thin", color="D0D5DD"),
    right=Side(style="thin", color="D0D5DD"),
    top=Side(style="thin", color="D0D5DD"),
    bottom=Side(style="thin", color="D0D5DD"),
)

align_center = Alignment(horizontal="center", vertical="center")

# (section, [(label, field, defined name, number format)])
INPUT_SECTIONS: List[Tuple[str, List[Tuple[str, str, str, str]]]] = [
    ("WORK VOLUME (HOURS PER YEAR)", [
        ("Contract hours", "contract_hours", "ContractHours", "#,##0"),
        ("Contract debt from previous years", "contract_debt", "ContractDebt", "#,##0"),
        ("Minor release hours", "minor_hours", "MinorHours", "#,##0"),
        ("Minor release debt", "minor_debt", "MinorDebt", "#,##0"),
    ]),
    ("HOTFIXES", [
        ("Calculate hotfixes automatically (1 = yes, 0 = no)", "auto_calculate_hotfix", "AutoHotfix", "0"),
        ("Releases per year", "hotfix_releases", "HotfixReleases", "#,##0"),
        ("Hotfix tasks per release", "hotfix_tasks_per_release", "HotfixTasks", "#,##0.0"),
        ("Hours per hotfix task", "hotfix_hours_per_task", "HotfixTaskHours", "#,##0.0"),
        ("Manual hotfix hours (used when automatic is 0)", "manual_hotfix_hours", "ManualHotfix", "#,##0"),
    ]),
    ("CALENDAR", [
        ("Work days per year", "work_days_per_year", "WorkDays", "0"),
        ("Vacation days", "vacation_days", "VacationDays", "0"),
        ("Sick days", "sick_days", "SickDays", "0"),
        ("Hours per day", "hours_per_day", "HoursPerDay", "0.0"),
        ("Productivity (%)", "productivity_percent", "Productivity", "0"),
    ]),
    ("TASK RISKS", [
        ("Risk buffer (%)", "risk_percent", "RiskPct", "0"),
    ]),
    ("TURNOVER", [
        ("Developers leaving per year", "developers_turnover", "Turnover", "0"),
        ("Productivity in the last month before leaving (%)", "productivity_before_leaving", "ProdBeforeLeaving", "0"),
        ("Months without a person (search)", "months_without_person", "MonthsVacant", "0.0"),
        ("Productivity in the newcomer's first month (%)", "productivity_onboarding", "ProdOnboarding", "0"),
    ]),
    ("TEAM", [
        ("Planned team size (developers)", "planned_team_size", "TeamSize", "0"),
    ]),
]

# (label, defined name, formula, result field or None, number format, how calculated)
CALC_ROWS: List[Tuple[str, str, str, Optional[str], str, str]] = [
    ("Hotfix hours", "HotfixHours",
     "=IF(AutoHotfix=1,HotfixReleases*HotfixTasks*HotfixTaskHours,ManualHotfix)",
     "hotfix_hours", "#,##0", "Releases × tasks × hours, or the manual figure"),
    ("Base volume", "BaseVolume",
     "=ContractHours+ContractDebt+MinorHours+MinorDebt+HotfixHours",
     "base_volume", "#,##0", "All planned work plus hotfixes"),
    ("Volume with risks", "VolumeWithRisks",
     "=BaseVolume*(1+RiskPct/100)",
     "volume_with_risks", "#,##0", "Flat risk uplift over the whole base volume"),
    ("Real work days", "RealWorkDays",
     "=WorkDays-VacationDays-SickDays",
     "real_work_days", "0", "Work days minus vacation and sick days"),
    ("Brutto hours per developer", "BruttoYear",
     "=RealWorkDays*HoursPerDay",
     "brutto_hours_per_year", "#,##0", "Real work days × hours per day"),
    ("Effective hours per developer", "EffectiveHours",
     "=BruttoYear*Productivity/100",
     "effective_hours_per_dev", "#,##0", "Brutto hours × productivity"),
    ("Brutto hours per month", "BruttoMonth",
     "=BruttoYear/12",
     None, "#,##0.00", "Average calendar month"),
    ("Normal productive hours per month", "NormalMonth",
     "=BruttoMonth*Productivity/100",
     None, "#,##0.00", "What a developer delivers in an ordinary month"),
    ("Loss in leaver's last month", "LossLastMonth",
     "=NormalMonth-BruttoMonth*ProdBeforeLeaving/100",
     None, "#,##0.00", "Normal month minus the slowed-down last month"),
    ("Loss while the seat is empty", "LossVacancy",
     "=NormalMonth*MonthsVacant",
     None, "#,##0.00", "Normal month × months without a person"),
    ("Loss in newcomer's first month", "LossOnboarding",
     "=NormalMonth-BruttoMonth*ProdOnboarding/100",
     None, "#,##0.00", "Normal month minus the onboarding month"),
    ("Turnover loss per person", "LossPerPerson",
     "=LossLastMonth+LossVacancy+LossOnboarding",
     "turnover_losses_per_person", "#,##0", "Sum of the three phases"),
    ("Turnover losses total", "TurnoverLosses",
     "=LossPerPerson*Turnover",
     "total_turnover_losses", "#,##0", "Per-person loss × developers leaving"),
    ("Total demand", "TotalDemand",
     "=VolumeWithRisks+TurnoverLosses",
     "total_demand", "#,##0", "Volume with risks plus turnover losses"),
    ("FTE needed", "FTENeeded",
     "=TotalDemand/EffectiveHours",
     "fte_needed", "0.00", "Total demand ÷ effective hours per developer"),
    ("Recommended headcount", "Headcount",
     "=-INT(-FTENeeded)",
     None, "0", "FTE rounded up to whole developers"),
    ("Team capacity", "TeamCapacity",
     "=EffectiveHours*TeamSize",
     "team_capacity", "#,##0", "Effective hours × planned team size"),
    ("Coverage (%)", "Coverage",
     "=TeamCapacity/TotalDemand*100",
     "coverage_percent", "0.0", "Team capacity as a share of demand"),
    ("Debt (hours)", "DebtHours",
     "=MAX(0,TotalDemand-TeamCapacity)",
     "debt_hours", "#,##0", "Demand the team cannot cover, never below zero"),
]


def _style_header_row(ws, row, col_start, col_end):
    for c in range(col_start, col_end + 1):
        cell = ws.cell(row=row, column=c)
        cell.fill = navy_fill
        cell.font = hdr_font
        cell.alignment = align_center
        cell.border = thin_border


def _style_data_cell(ws, row, col, is_input=False, is_formula=False):
    cell = ws.cell(row=row, column=col)
    cell.border = thin_border
    cell.alignment = Alignment(vertical="center")
    if is_input:
        cell.fill = input_fill
        cell.font = input_font
    elif is_formula:
        cell.fill = green_fill
        cell.font = formula_font
    else:
        cell.font = body_font


def _cell_number(value):
    """Excel has no inf/nan; leave such cells blank."""
    if value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


# ═════════════════════════════════════════════════════════════════════════
# SHEET: INPUTS
# ═════════════════════════════════════════════════════════════════════════
def build_inputs_sheet(wb, inputs: PlanningInputs):
    ws = wb.create_sheet("Inputs")
    ws.sheet_properties.tabColor = BLUE

    ws.column_dimensions["A"].width = 3
    ws.column_dimensions["B"].width = 52
    ws.column_dimensions["C"].width = 16

    ws["B2"] = "Team Demand Model — Inputs"
    ws["B2"].font = title_font
    ws["B3"] = "Yellow cells = you can change these. All other sheets update automatically."
    ws["B3"].font = note_font

    values = inputs.as_dict()
    row = 5
    for section, items in INPUT_SECTIONS:
        ws.cell(row=row, column=2, value=section).font = section_font
        row += 1
        for lbl, field_name, named, fmt in items:
            ws.cell(row=row, column=2, value=lbl).font = label_font
            val = values[field_name]
            if isinstance(val, bool):
                val = int(val)
            cell = ws.cell(row=row, column=3, value=val)
            cell.number_format = fmt
            _style_data_cell(ws, row, 3, is_input=True)
            wb.defined_names.add(DefinedName(named, attr_text=f"Inputs!$C${row}"))
            row += 1
        row += 1

    return ws


# ═════════════════════════════════════════════════════════════════════════
# SHEET: CALCULATION
# ═════════════════════════════════════════════════════════════════════════
def build_calculation_sheet(wb, results: CalculationResults):
    ws = wb.create_sheet("Calculation")
    ws.sheet_properties.tabColor = NAVY

    ws.column_dimensions["A"].width = 3
    ws.column_dimensions["B"].width = 36
    ws.column_dimensions["C"].width = 16
    ws.column_dimensions["D"].width = 16
    ws.column_dimensions["E"].width = 55

    ws["B2"] = "Team Demand Model — Calculation"
    ws["B2"].font = title_font
    ws["B3"] = "Green cells are formulas. 'Engine value' is the figure computed when this file was built."
    ws["B3"].font = note_font

    row = 5
    _style_header_row(ws, row, 2, 5)
    for ci, h in enumerate(["Metric", "Formula", "Engine value", "How calculated"], 2):
        ws.cell(row=row, column=ci, value=h)
    row += 1

    derived = results.as_dict()
    derived_extra = {"Headcount": results.recommended_headcount}
    for lbl, named, formula, field_name, fmt, how in CALC_ROWS:
        ws.cell(row=row, column=2, value=lbl).font = label_font
        ws.cell(row=row, column=2).border = thin_border

        c_formula = ws.cell(row=row, column=3, value=formula)
        c_formula.number_format = fmt
        _style_data_cell(ws, row, 3, is_formula=True)
        wb.defined_names.add(DefinedName(named, attr_text=f"Calculation!$C${row}"))

        if field_name is not None:
            engine_value = derived[field_name]
        else:
            engine_value = derived_extra.get(named)
        c_engine = ws.cell(row=row, column=4, value=_cell_number(engine_value))
        c_engine.number_format = fmt
        _style_data_cell(ws, row, 4)

        ws.cell(row=row, column=5, value=how).font = note_font
        row += 1

    return ws


# ═════════════════════════════════════════════════════════════════════════
# SHEET: DEBT SCENARIOS
# ═════════════════════════════════════════════════════════════════════════
def build_debt_sheet(wb, results: CalculationResults, size_range: Tuple[int, int]):
    ws = wb.create_sheet("Debt Scenarios")
    ws.sheet_properties.tabColor = TEAL

    ws.column_dimensions["A"].width = 3
    for c_letter in ["B", "C", "D", "E"]:
        ws.column_dimensions[c_letter].width = 18

    ws["B2"] = "Yearly debt by team size"
    ws["B2"].font = title_font
    ws["B3"] = "Demand is held fixed; only the number of developers changes."
    ws["B3"].font = note_font

    _style_header_row(ws, 5, 2, 5)
    for ci, h in enumerate(["Team size", "Capacity", "Debt", "Engine debt"], 2):
        ws.cell(row=5, column=ci, value=h)

    for i, scenario in enumerate(sweep_results(results, size_range)):
        r = 6 + i
        ws.cell(row=r, column=2, value=scenario.size).number_format = "0"
        _style_data_cell(ws, r, 2)

        ws.cell(row=r, column=3, value=f"=EffectiveHours*B{r}").number_format = "#,##0"
        _style_data_cell(ws, r, 3, is_formula=True)

        ws.cell(row=r, column=4, value=f"=MAX(0,TotalDemand-C{r})").number_format = "#,##0"
        _style_data_cell(ws, r, 4, is_formula=True)

        ws.cell(row=r, column=5, value=_cell_number(scenario.debt)).number_format = "#,##0"
        _style_data_cell(ws, r, 5)
        if i % 2:
            ws.cell(row=r, column=5).fill = light_fill

    return ws


# ═════════════════════════════════════════════════════════════════════════
# SHEET: HOW THIS MODEL WORKS
# ═════════════════════════════════════════════════════════════════════════
def build_how_it_works_sheet(wb):
    ws = wb.active
    ws.title = "How This Model Works"
    ws.sheet_properties.tabColor = NAVY

    ws.column_dimensions["A"].width = 3
    ws.column_dimensions["B"].width = 100

    ws["B2"] = "Team Demand Model — How It Works"
    ws["B2"].font = title_font

    content = [
        ("WHAT THIS MODEL DOES", section_font),
        ("It answers: 'How many developers do we need to deliver next year's planned work?'", label_font),
        ("", None),
        ("STEP 1 — WORKLOAD", section_font),
        ("Contract and minor-release hours, their carried-over debt, and hotfixes add up to the base volume.", label_font),
        ("A flat risk percentage is added on top for changing requirements and underestimates.", label_font),
        ("", None),
        ("STEP 2 — CALENDAR", section_font),
        ("Work days minus vacation and sick days, times hours per day, gives brutto hours per developer.", label_font),
        ("Applying the productivity percentage gives effective hours per developer.", label_font),
        ("", None),
        ("STEP 3 — TURNOVER", section_font),
        ("Each departing developer costs a slow last month, the months the seat stays empty, and a slow first month for the newcomer.", label_font),
        ("", None),
        ("STEP 4 — STAFFING", section_font),
        ("FTE needed = total demand ÷ effective hours per developer.", label_font),
        ("Coverage = team capacity ÷ total demand. Debt = demand the planned team cannot cover.", label_font),
    ]
    for i, (text, font) in enumerate(content):
        cell = ws.cell(row=4 + i, column=2, value=text or None)
        if font is not None:
            cell.font = font
    return ws


# ═════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═════════════════════════════════════════════════════════════════════════
def build_workbook(
    inputs: PlanningInputs,
    results: Optional[CalculationResults] = None,
    size_range: Tuple[int, int] = DEFAULT_SWEEP_RANGE,
) -> Workbook:
    if results is None:
        results = compute(inputs)

    wb = Workbook()
    build_how_it_works_sheet(wb)
    build_inputs_sheet(wb, inputs)
    build_calculation_sheet(wb, results)
    build_debt_sheet(wb, results, size_range)
    return wb


def workbook_bytes(
    inputs: PlanningInputs,
    results: Optional[CalculationResults] = None,
    size_range: Tuple[int, int] = DEFAULT_SWEEP_RANGE,
) -> bytes:
    buf = io.BytesIO()
    build_workbook(inputs, results, size_range).save(buf)
    return buf.getvalue()


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build the formula-driven Team Demand workbook.")
    parser.add_argument("--output", default="Team_Demand_Model.xlsx", help="Path of the .xlsx to write")
    args = parser.parse_args(argv)

    setup_logging()
    inputs = reference_defaults()
    wb = build_workbook(inputs)
    wb.save(args.output)
    logger.info("Saved to: %s", args.output)


if __name__ == "__main__":
    main()
