import logging
from datetime import date

import streamlit as st

from dashboard.constants import (
    DAY_LABELS,
    DAY_TO_INDEX,
    DEFAULT_FREQUENCY,
    DEFAULT_HABIT_COLOR,
    DEFAULT_PERIOD,
    PERIOD_OPTIONS,
    STATS_COLUMNS,
    TRACKER_DAYS,
)
from dashboard.data import repositories
from dashboard.visualizations import completion_label, completion_pie, tracker_day_label

logger = logging.getLogger(__name__)


def _toggle_done(habit_id, day_iso, widget_key):
    requested = bool(st.session_state.get(widget_key, False))
    try:
        repositories.set_habit_done(habit_id, day_iso, requested)
    except Exception as exc:
        logger.warning("Toggle failed for %s on %s: %s", habit_id, day_iso, exc)
        st.session_state[widget_key] = not requested
        st.session_state["habits.toggle_error"] = str(exc)


def _render_add_form():
    with st.form(key="habits.add_form", clear_on_submit=True):
        st.text_input("Habit name", key="habits.new_name", placeholder="e.g. Morning Yoga")
        st.multiselect(
            "Repeat on",
            options=DAY_LABELS,
            default=[DAY_LABELS[idx] for idx in DEFAULT_FREQUENCY],
            key="habits.new_days",
        )
        form_cols = st.columns(2)
        with form_cols[0]:
            st.date_input("Start date", value=date.today(), key="habits.new_start")
        with form_cols[1]:
            st.color_picker("Color tag", value=DEFAULT_HABIT_COLOR, key="habits.new_color")
        submitted = st.form_submit_button("Create habit")

    if not submitted:
        return
    frequency = [DAY_TO_INDEX[label] for label in st.session_state.get("habits.new_days", [])]
    name = (st.session_state.get("habits.new_name") or "").strip()
    if not name or not frequency:
        st.warning("Give the habit a name and at least one weekday.")
        return
    try:
        repositories.add_habit(
            name,
            st.session_state.get("habits.new_color", DEFAULT_HABIT_COLOR),
            frequency,
            st.session_state.get("habits.new_start"),
        )
        st.rerun()
    except RuntimeError as exc:
        st.warning(str(exc))


def _render_stats(period):
    try:
        payload = repositories.get_habit_stats(period)
    except RuntimeError as exc:
        st.warning(f"Stats unavailable: {exc}")
        return
    items = payload.get("items", [])
    if not items:
        st.info("No habits yet. Add one below.")
        return
    st.caption(f"{payload.get('window_days', 0)} tracked days since {payload.get('anchor') or 'the beginning'}")
    cols = st.columns(STATS_COLUMNS)
    for idx, stat in enumerate(items):
        with cols[idx % STATS_COLUMNS]:
            st.markdown(
                f"<span style='color:{stat.get('color')}'>●</span> **{stat.get('name')}**  \n"
                f"{completion_label(stat)}",
                unsafe_allow_html=True,
            )
            st.plotly_chart(
                completion_pie(stat),
                use_container_width=True,
                key=f"habits.pie.{stat['habit_id']}",
            )


def _render_tracker():
    try:
        grid = repositories.get_tracker_grid(TRACKER_DAYS)
    except RuntimeError as exc:
        st.warning(f"Tracker unavailable: {exc}")
        return
    rows = grid.get("rows", [])
    if not rows:
        return
    dates = grid.get("dates", [])
    header = st.columns([2.2] + [1] * len(dates))
    header[0].markdown("**Habit**")
    for idx, day_iso in enumerate(dates):
        header[idx + 1].caption(tracker_day_label(day_iso))

    for row in rows:
        row_cols = st.columns([2.2] + [1] * len(dates))
        row_cols[0].markdown(row.get("name") or "")
        for idx, cell in enumerate(row.get("cells", [])):
            widget_key = f"habits.done.{row['habit_id']}.{cell['date']}"
            with row_cols[idx + 1]:
                if not cell.get("scheduled"):
                    st.markdown("·")
                    continue
                # Server state wins on every rerun.
                st.session_state[widget_key] = bool(cell.get("done"))
                st.checkbox(
                    cell["date"],
                    key=widget_key,
                    label_visibility="collapsed",
                    on_change=_toggle_done,
                    args=(row["habit_id"], cell["date"], widget_key),
                )


def render_habits_tab(ctx):
    st.markdown("<div class='section-title'>Habit Dashboard</div>", unsafe_allow_html=True)
    if not repositories.api_enabled():
        st.info("API_BASE_URL is not configured.")
        return

    error = st.session_state.pop("habits.toggle_error", None)
    if error:
        st.warning(error)

    period_keys = list(PERIOD_OPTIONS)
    period = st.selectbox(
        "Period",
        period_keys,
        index=period_keys.index(ctx.get("period", DEFAULT_PERIOD)),
        format_func=lambda key: PERIOD_OPTIONS[key],
        key="habits.period",
    )

    top_cols = st.columns([1, 1.6])
    with top_cols[0]:
        _render_stats(period)
    with top_cols[1]:
        _render_tracker()

    with st.expander("Add habit"):
        _render_add_form()
