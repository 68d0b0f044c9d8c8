"""
Habit Tracker - Dashboard

Run with:
    streamlit run Habit_Tracker.py
"""

from __future__ import annotations

from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from habit_tracker.errors import HabitTrackerError
from habit_tracker.layout import GridLayout, cells_frame, grid_geometry_for
from habit_tracker.metrics import daily_progress_frame, month_bounds, stats_frame, streaks_for
from habit_tracker.ui_helpers import (
    app_header,
    color_dot,
    error_message,
    get_repository,
    get_settings,
    toast_error,
)
from habit_tracker.viewport import GestureTracker, Transform, Viewport


st.set_page_config(
    page_title="Habit Tracker",
    page_icon="✅",
    layout="wide",
)

VIEW_WIDTH = 1100
VIEW_HEIGHT = 420
PAN_STEP = 200

EMPTY_FILL = "#e5e7eb"
FUTURE_FILL = "#f3f4f6"


def viewport_tracker(layout: GridLayout) -> GestureTracker:
    """
    One tracker per session. The view is reset whenever the layout inputs
    change (which habits, which day is today, day count, cell size).
    """
    tracker = st.session_state.get("grid_tracker")
    if tracker is None:
        tracker = GestureTracker(Viewport())
        st.session_state["grid_tracker"] = tracker
    if st.session_state.get("grid_layout_key") != layout.view_key:
        tracker.viewport.fit_to_content(
            layout.grid_width, layout.grid_height, layout.today_column_x, VIEW_WIDTH, VIEW_HEIGHT
        )
        st.session_state["grid_layout_key"] = layout.view_key
    return tracker


def grid_chart(layout: GridLayout, names: dict, transform: Transform) -> alt.LayerChart:
    df = cells_frame(layout)
    df["name"] = df["habit_id"].map(names)
    df["fill"] = df.apply(
        lambda r: r["color"] if r["state"] == "filled" else (FUTURE_FILL if r["state"] == "future" else EMPTY_FILL),
        axis=1,
    )
    s = transform.scale
    for col in ("x", "x2"):
        df[col] = df[col] * s + transform.x
    for col in ("y", "y2"):
        df[col] = df[col] * s + transform.y

    x_scale = alt.Scale(domain=[0, VIEW_WIDTH])
    y_scale = alt.Scale(domain=[0, VIEW_HEIGHT], reverse=True)

    cells = alt.Chart(df).mark_rect(clip=True, cornerRadius=layout.corner_radius * s).encode(
        x=alt.X("x:Q", scale=x_scale, axis=None),
        x2="x2:Q",
        y=alt.Y("y:Q", scale=y_scale, axis=None),
        y2="y2:Q",
        color=alt.Color("fill:N", scale=None),
        tooltip=["name:N", "day:N", "state:N"],
    )
    today_ring = alt.Chart(df[df["is_today"]]).mark_rect(
        clip=True, filled=False, stroke="#111827", strokeWidth=1.5
    ).encode(x=alt.X("x:Q", scale=x_scale), x2="x2:Q", y=alt.Y("y:Q", scale=y_scale), y2="y2:Q")

    months = pd.DataFrame(
        [{"text": m.text, "x": m.x, "y": m.y} for m in layout.month_labels] or [{"text": "", "x": 0, "y": 0}]
    )
    rows = pd.DataFrame([{"text": r.text, "x": r.x, "y": r.y} for r in layout.row_labels])
    labels = pd.concat([months, rows], ignore_index=True)
    labels["x"] = labels["x"] * s + transform.x
    labels["y"] = labels["y"] * s + transform.y
    text = alt.Chart(labels).mark_text(align="left", baseline="bottom", clip=True, fontSize=11 * s).encode(
        x=alt.X("x:Q", scale=x_scale), y=alt.Y("y:Q", scale=y_scale), text="text:N"
    )

    return (cells + today_ring + text).properties(width=VIEW_WIDTH, height=VIEW_HEIGHT)


def render_grid() -> None:
    repo = get_repository()
    settings = get_settings()
    habits = repo.list_active_display_habits()
    if not habits:
        st.info("No habits yet. Create one in **Habits**.")
        return

    layout = grid_geometry_for(repo, settings)
    if layout.is_empty:
        st.info("All habits are paused.")
        return

    tracker = viewport_tracker(layout)
    viewport = tracker.viewport

    c1, c2, c3, c4, c5, c6 = st.columns([0.1, 0.1, 0.1, 0.1, 0.15, 0.45])
    if c1.button("◀", help="Pan left"):
        viewport.pan_by(PAN_STEP, 0)
    if c2.button("▶", help="Pan right"):
        viewport.pan_by(-PAN_STEP, 0)
    if c3.button("−", help="Zoom out"):
        viewport.zoom_out(VIEW_WIDTH, VIEW_HEIGHT)
    if c4.button("+", help="Zoom in"):
        viewport.zoom_in(VIEW_WIDTH, VIEW_HEIGHT)
    if c5.button("Reset view"):
        viewport.fit_to_content(layout.grid_width, layout.grid_height, layout.today_column_x, VIEW_WIDTH, VIEW_HEIGHT)
    c6.caption(f"{layout.dates[0]} to {layout.dates[-1]} · zoom {viewport.zoom_percent}%")

    names = {h.id: h.name for h in habits}
    st.altair_chart(grid_chart(layout, names, viewport.transform()), use_container_width=False)

    with st.expander("Toggle a day"):
        left, mid, right = st.columns([0.5, 0.3, 0.2])
        habit = left.selectbox("Habit", habits, format_func=lambda h: h.name, key="grid_habit")
        day = mid.date_input("Date", value=date.today(), max_value=date.today(), key="grid_day")
        if right.button("Toggle", key="grid_toggle"):
            try:
                repo.toggle_log(habit.id, day)
            except HabitTrackerError as e:
                toast_error(error_message(e))
            else:
                st.rerun()


def render_today(today: date) -> None:
    st.subheader("Today")
    repo = get_repository()
    active = repo.list_habits_by_status("active")

    if not active:
        st.info("No active habits. Create one in **Habits**.")
        return

    done, total = repo.today_progress(today)
    st.progress(done / total if total else 0.0, text=f"{done} of {total} habits completed today")

    col1, col2 = st.columns([1.2, 1.0], gap="large")

    with col1:
        st.markdown("#### Habits")
        for h in active:
            completed = bool(repo.log_for(h.id, today))
            left, right = st.columns([0.75, 0.25])
            with left:
                st.markdown(f"{color_dot(h.color)} **{h.name}**", unsafe_allow_html=True)
                if h.description:
                    st.caption(h.description)
            with right:
                label = "Done ✅" if completed else "Mark done"
                if st.button(label, key=f"done_{h.id}"):
                    try:
                        repo.toggle_log(h.id, today)
                    except HabitTrackerError as e:
                        toast_error(error_message(e))
                    else:
                        st.rerun()

    with col2:
        st.markdown("#### Quick stats")
        for h in active:
            stats = streaks_for(repo, h.id, today)
            st.write(f"**{h.name}**")
            st.caption(f"{stats.current_streak} day streak · {stats.month_rate}% this month")
            st.divider()


def render_stats(today: date) -> None:
    repo = get_repository()
    habits = repo.list_active_display_habits()
    if not habits:
        st.info("No habits to show.")
        return

    df = stats_frame(repo, habits, today)
    for _, row in df.iterrows():
        with st.container(border=True):
            st.markdown(f"{color_dot(row['color'])} **{row['name']}**", unsafe_allow_html=True)
            c1, c2, c3, c4 = st.columns(4)
            c1.metric("Current Streak", int(row["current_streak"]))
            c2.metric("Total", int(row["total"]))
            c3.metric("This Month", f"{int(row['month_rate'])}%")
            c4.metric("Best Streak", int(row["longest_streak"]))


def render_month_progress(df: pd.DataFrame) -> None:
    chart_df = df.copy()
    chart_df["day"] = pd.to_datetime(chart_df["day"])

    base = alt.Chart(chart_df).encode(
        x=alt.X("day:T", title="Date")
    )

    done_line = base.mark_line().encode(
        y=alt.Y("cum_done:Q", title="Cumulative completions"),
        tooltip=["day:T", "done:Q", "cum_done:Q", "tracked:Q", "cum_tracked:Q"],
    )

    tracked_line = base.mark_line(strokeDash=[4, 4]).encode(
        y=alt.Y("cum_tracked:Q"),
        tooltip=["day:T", "tracked:Q", "cum_tracked:Q"],
    )

    st.altair_chart((tracked_line + done_line).interactive(), use_container_width=True)


def render_month(today: date) -> None:
    repo = get_repository()
    habits = repo.list_habits_by_status("active")
    month_pick = st.date_input("Month", value=today, help="Pick any day in the month you want to review.")
    month_start, month_end = month_bounds(month_pick)
    if not habits:
        st.info("Create a habit first to see progress for the month.")
        return

    end = min(month_end, today)
    if end < month_start:
        st.info("Nothing logged for that month yet.")
        return

    df = daily_progress_frame(repo, habits, month_start, end)
    total_tracked = int(df["tracked"].sum())
    total_done = int(df["done"].sum())
    rate = (total_done / total_tracked) if total_tracked else 0.0

    c1, c2, c3 = st.columns(3)
    c1.metric("Completions", f"{total_done}")
    c2.metric("Habit-days", f"{total_tracked}")
    c3.metric("Completion rate", f"{rate:.0%}")

    render_month_progress(df)


def main() -> None:
    app_header("Habit Tracker", "We are what we repeatedly do.")

    today = date.today()
    grid_tab, today_tab, stats_tab, month_tab = st.tabs(["Grid", "Today", "Stats", "This month"])
    with grid_tab:
        render_grid()
    with today_tab:
        render_today(today)
    with stats_tab:
        render_stats(today)
    with month_tab:
        render_month(today)


if __name__ == "__main__":
    main()
