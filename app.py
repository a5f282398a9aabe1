"""
Team Demand Planner — Streamlit UI
One page: planning inputs on top, results and charts below.
Every rerun rebuilds the whole PlanningInputs and recomputes.
"""

import sys
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go

sys.path.insert(0, str(Path(__file__).resolve().parent))

from config import DEFAULT_SWEEP_RANGE, PlanningInputs, setup_logging
from defaults import reference_defaults
from model import (
    compute,
    debt_band,
    debt_scenarios_frame,
    demand_vs_capacity_frame,
    load_structure_frame,
    summary_frame,
    sweep_results,
)
from build_excel_model import workbook_bytes

setup_logging()

# ---------------------------------------------------------------------------
# Palette
# ---------------------------------------------------------------------------
MCK_NAVY = "#051C2C"
MCK_BLUE = "#2251FF"
MCK_TEAL = "#00A9F4"
MCK_GREEN = "#00B140"
MCK_RED = "#E74C3C"
MCK_AMBER = "#F59E0B"
MCK_GREY = "#7F8C8D"
MCK_WHITE = "#FFFFFF"
MCK_DARK = "#1A1A2E"

LOAD_COLORS = [MCK_NAVY, MCK_BLUE, MCK_TEAL, "#1ABC9C", "#8E44AD", MCK_AMBER, MCK_RED]
DEBT_COLORS = {"clear": MCK_GREEN, "moderate": MCK_AMBER, "high": MCK_RED}

INPUT_KEY_PREFIX = "in_"
SWEEP_KEY = "sweep_range"


# ---------------------------------------------------------------------------
# Page config & CSS
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Team Demand Planner",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(f"""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');

    .stApp {{ font-family: 'Inter', 'Helvetica Neue', Arial, sans-serif; }}
    .main .block-container {{ padding-top: 1.5rem; max-width: 1200px; }}

    [data-testid="collapsedControl"] {{ display: none; }}
    header[data-testid="stHeader"] {{ display: none; }}

    .mck-header {{
        background: {MCK_NAVY}; color: white;
        padding: 1.6rem 2rem; border-radius: 8px; margin-bottom: 1.2rem;
    }}
    .mck-header h1 {{ margin: 0; font-size: 1.5rem; font-weight: 600; letter-spacing: -0.02em; }}
    .mck-header p {{ margin: 0.3rem 0 0 0; font-size: 0.82rem; opacity: 0.7; }}

    .kpi-row {{ display: flex; gap: 1rem; margin-bottom: 1.5rem; }}
    .kpi-card {{
        flex: 1; background: {MCK_WHITE}; border: 1px solid #E0E4E8;
        border-radius: 8px; padding: 1.1rem 1.4rem; box-shadow: 0 1px 3px rgba(0,0,0,0.04);
    }}
    .kpi-card .kpi-label {{
        font-size: 0.7rem; font-weight: 500; color: {MCK_GREY};
        text-transform: uppercase; letter-spacing: 0.05em; margin-bottom: 0.3rem;
    }}
    .kpi-card .kpi-value {{ font-size: 1.5rem; font-weight: 700; color: {MCK_NAVY}; }}
    .kpi-card .kpi-sub {{ font-size: 0.75rem; color: {MCK_GREY}; margin-top: 0.15rem; }}

    .card h5 {{
        background: #EBF4FA; color: {MCK_NAVY}; font-size: 0.78rem; font-weight: 600;
        text-transform: uppercase; letter-spacing: 0.03em;
        margin: 0 0 1rem 0; padding: 0.65rem 1rem; border-radius: 6px;
    }}

    .help-text {{
        font-size: 0.76rem; color: #6B7280; line-height: 1.45;
        margin-top: -0.2rem; margin-bottom: 0.7rem;
    }}
</style>
""", unsafe_allow_html=True)


def _render_header(subtitle: str):
    st.markdown(f"""
    <div class="mck-header">
        <h1>Team Demand Planner</h1>
        <p>{subtitle}</p>
    </div>
    """, unsafe_allow_html=True)


def _card(title: str):
    st.markdown(f'<div class="card"><h5>{title}</h5></div>', unsafe_allow_html=True)


def _fmt(value: float, pattern: str = "{:,.0f}") -> str:
    try:
        return pattern.format(value)
    except (TypeError, ValueError):
        return "—"


def _bar_layout(fig, y_title: str, height: int = 400):
    fig.update_layout(
        height=height,
        margin=dict(l=20, r=20, t=30, b=20),
        plot_bgcolor=MCK_WHITE, paper_bgcolor=MCK_WHITE,
        font=dict(family="Inter", size=12, color=MCK_DARK),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        xaxis=dict(gridcolor="#E8EAED", title=""),
        yaxis=dict(gridcolor="#E8EAED", title=y_title),
    )


# ═══════════════════════════════════════════════════════════════════════════
# INPUTS
# ═══════════════════════════════════════════════════════════════════════════
def _collect_inputs(base: PlanningInputs) -> PlanningInputs:
    values = {}

    _card("Work volume — planned hours for the year")
    c1, c2 = st.columns(2)
    with c1:
        values["contract_hours"] = st.number_input("Contract hours per year", value=base.contract_hours, step=100.0, key="in_contract_hours")
        values["minor_hours"] = st.number_input("Minor release hours", value=base.minor_hours, step=10.0, key="in_minor_hours")
    with c2:
        values["contract_debt"] = st.number_input("Contract debt from previous years", value=base.contract_debt, step=100.0, key="in_contract_debt")
        values["minor_debt"] = st.number_input("Minor release debt", value=base.minor_debt, step=10.0, key="in_minor_debt")

    _card("Hotfixes")
    values["auto_calculate_hotfix"] = st.toggle(
        "Calculate hotfix hours automatically", value=base.auto_calculate_hotfix,
        key="in_auto_calculate_hotfix",
    )
    if values["auto_calculate_hotfix"]:
        c1, c2, c3 = st.columns(3)
        with c1:
            values["hotfix_releases"] = st.number_input("Releases per year", value=base.hotfix_releases, step=1.0, key="in_hotfix_releases")
        with c2:
            values["hotfix_tasks_per_release"] = st.number_input("Hotfix tasks per release", value=base.hotfix_tasks_per_release, step=1.0, key="in_hotfix_tasks_per_release")
        with c3:
            values["hotfix_hours_per_task"] = st.number_input("Hours per hotfix task", value=base.hotfix_hours_per_task, step=1.0, key="in_hotfix_hours_per_task")
    else:
        values["manual_hotfix_hours"] = st.number_input("Hotfix hours per year", value=base.manual_hotfix_hours, step=10.0, key="in_manual_hotfix_hours")

    _card("Calendar & productivity")
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        values["work_days_per_year"] = st.number_input("Work days per year", value=base.work_days_per_year, step=1.0, key="in_work_days_per_year")
    with c2:
        values["vacation_days"] = st.number_input("Vacation days", value=base.vacation_days, step=1.0, key="in_vacation_days")
    with c3:
        values["sick_days"] = st.number_input("Sick days", value=base.sick_days, step=1.0, key="in_sick_days")
    with c4:
        values["hours_per_day"] = st.number_input("Hours per day", value=base.hours_per_day, step=0.5, key="in_hours_per_day")
    values["productivity_percent"] = st.slider(
        "Productivity (%)", 0, 100, int(base.productivity_percent), 5,
        help="Share of working time spent on planned development",
        key="in_productivity_percent",
    )

    _card("Task risks")
    values["risk_percent"] = st.slider(
        "Risk buffer on tasks and infrastructure (%)", 0, 30, int(base.risk_percent), 1,
        help="Changing requirements, underestimates, infrastructure problems",
        key="in_risk_percent",
    )

    _card("Team turnover")
    values["developers_turnover"] = st.number_input(
        "Developers leaving per year", value=base.developers_turnover, min_value=0, step=1,
        key="in_developers_turnover",
    )
    c1, c2, c3 = st.columns(3)
    with c1:
        values["productivity_before_leaving"] = st.slider(
            "Productivity in the last month before leaving (%)", 0, 100,
            int(base.productivity_before_leaving), 5,
            key="in_productivity_before_leaving",
        )
    with c2:
        values["months_without_person"] = st.number_input(
            "Months without a person (search)", value=base.months_without_person, step=0.5,
            key="in_months_without_person",
        )
    with c3:
        values["productivity_onboarding"] = st.slider(
            "Productivity in the newcomer's first month (%)", 0, 100,
            int(base.productivity_onboarding), 5,
            key="in_productivity_onboarding",
        )

    _card("Team")
    values["planned_team_size"] = st.number_input(
        "Developers in the team", value=base.planned_team_size, min_value=1, step=1,
        key="in_planned_team_size",
    )
    st.markdown(
        '<div class="help-text">A team lead who actually writes code counts as one developer. A CTO does not.</div>',
        unsafe_allow_html=True,
    )

    return PlanningInputs.from_mapping(values, base=base)


# ═══════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════
def _render_results(inputs: PlanningInputs):
    result = compute(inputs)

    if not result.is_finite:
        st.warning("Effective hours per developer or total demand is zero — check the calendar and productivity inputs.")

    headcount = result.recommended_headcount
    st.markdown(f"""
    <div class="kpi-row">
        <div class="kpi-card">
            <div class="kpi-label">Total demand</div>
            <div class="kpi-value">{_fmt(result.total_demand)} h</div>
            <div class="kpi-sub">Including risks and turnover losses</div>
        </div>
        <div class="kpi-card">
            <div class="kpi-label">Team capacity</div>
            <div class="kpi-value">{_fmt(result.team_capacity)} h</div>
            <div class="kpi-sub">{inputs.planned_team_size} developers × {_fmt(result.effective_hours_per_dev)} effective hours</div>
        </div>
        <div class="kpi-card">
            <div class="kpi-label">FTE needed</div>
            <div class="kpi-value">{_fmt(result.fte_needed, "{:,.2f}")}</div>
            <div class="kpi-sub">Rounded up: {headcount if headcount is not None else "—"} developers</div>
        </div>
        <div class="kpi-card">
            <div class="kpi-label">Coverage</div>
            <div class="kpi-value" style="color:{MCK_GREEN if result.is_covered else MCK_RED}">{_fmt(result.coverage_percent, "{:,.1f}")}%</div>
            <div class="kpi-sub">Share of the work the planned team closes</div>
        </div>
    </div>
    """, unsafe_allow_html=True)

    if result.debt_hours > 0:
        st.error(f"Expected yearly debt: {result.debt_hours:,.0f} hours")
    if result.is_covered:
        st.success("✓ The team can handle the planned volume of work!")

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Volume with risks", f"{_fmt(result.volume_with_risks)} h")
    with c2:
        st.metric("Turnover loss per person", f"{_fmt(result.turnover_losses_per_person)} h")
    with c3:
        st.metric("Turnover losses per year", f"{_fmt(result.total_turnover_losses)} h")

    tab_load, tab_capacity, tab_debt, tab_table = st.tabs([
        "Load structure", "Demand vs capacity", "Debt by team size", "Summary table",
    ])

    with tab_load:
        load = load_structure_frame(inputs, result)
        fig = go.Figure(go.Bar(
            x=load["Category"], y=load["Hours"], marker_color=LOAD_COLORS[:len(load)],
        ))
        _bar_layout(fig, "Hours")
        st.plotly_chart(fig, use_container_width=True)

    with tab_capacity:
        dvc = demand_vs_capacity_frame(result)
        fig = go.Figure(go.Bar(
            x=dvc["Metric"], y=dvc["Hours"], marker_color=[MCK_RED, MCK_GREEN],
        ))
        _bar_layout(fig, "Hours")
        st.plotly_chart(fig, use_container_width=True)

    with tab_debt:
        size_range = st.slider("Team sizes to compare", 1, 30, DEFAULT_SWEEP_RANGE, 1, key=SWEEP_KEY)
        scenarios = debt_scenarios_frame(sweep_results(result, size_range))
        fig = go.Figure(go.Bar(
            x=scenarios["Label"], y=scenarios["Debt hours"],
            marker_color=[DEBT_COLORS[debt_band(d)] for d in scenarios["Debt hours"]],
        ))
        _bar_layout(fig, "Expected yearly debt (h)")
        st.plotly_chart(fig, use_container_width=True)

    with tab_table:
        summary = summary_frame(inputs, result)
        st.dataframe(summary, use_container_width=True, hide_index=True)
        d1, d2 = st.columns(2)
        with d1:
            st.download_button("Download CSV", summary.to_csv(index=False),
                               "team_demand_summary.csv", "text/csv")
        with d2:
            st.download_button(
                "Download Excel model",
                workbook_bytes(inputs, result, size_range),
                "Team_Demand_Model.xlsx",
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )


# ═══════════════════════════════════════════════════════════════════════════
# Router
# ═══════════════════════════════════════════════════════════════════════════
_render_header("How many developers the team needs, given work volume, risks and turnover")

if st.button("⟳  Reset to reference defaults"):
    for key in list(st.session_state.keys()):
        if key.startswith(INPUT_KEY_PREFIX) or key == SWEEP_KEY:
            del st.session_state[key]
    st.rerun()

_render_results(_collect_inputs(reference_defaults()))
