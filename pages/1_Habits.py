"""
Habits page

Create, edit, archive and delete habits. Frequencies are kept simple:
- daily
- weekly (with a target number of days per week)

Archiving hides a habit but keeps its history; deleting removes both.
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from habit_tracker.config import COLORS
from habit_tracker.errors import HabitTrackerError
from habit_tracker.models import FREQUENCIES, STATUSES
from habit_tracker.ui_helpers import (
    app_header,
    color_dot,
    error_message,
    get_repository,
    toast_error,
    toast_success,
)

st.set_page_config(page_title="Habits", page_icon="📌", layout="wide")


def main() -> None:
    app_header("Habits", "Create habits, pick a color, and decide how often they are due.")

    repo = get_repository()
    habits = repo.list_active_display_habits()

    left, right = st.columns([0.9, 1.1], gap="large")

    with left:
        st.subheader("Your habits")
        if not habits:
            st.info("No habits yet.")
        else:
            for h in habits:
                cols = st.columns([0.75, 0.25])
                with cols[0]:
                    paused = " _(paused)_" if h.status == "paused" else ""
                    st.markdown(f"{color_dot(h.color)} **{h.name}**{paused}", unsafe_allow_html=True)
                    if h.description:
                        st.caption(h.description)
                with cols[1]:
                    if st.button("Edit", key=f"edit_{h.id}"):
                        st.session_state["edit_id"] = h.id
                        st.session_state["confirm_delete"] = False
                        st.rerun()

        archived = repo.list_habits_by_status("archived")
        if archived:
            st.divider()
            with st.expander(f"Archived ({len(archived)})"):
                for h in archived:
                    cols = st.columns([0.75, 0.25])
                    cols[0].write(h.name)
                    if cols[1].button("Restore", key=f"restore_{h.id}"):
                        try:
                            repo.restore_habit(h.id)
                        except HabitTrackerError as e:
                            toast_error(error_message(e))
                        else:
                            toast_success("Habit restored")
                            st.rerun()

    with right:
        edit_id = st.session_state.get("edit_id", None)
        habit = None
        if edit_id:
            habit = next((h for h in habits if h.id == edit_id), None)
        st.subheader("Edit Habit" if habit else "New Habit")

        name = st.text_input("Name", value=habit.name if habit else "", placeholder="e.g. Read 20 pages")
        desc = st.text_area(
            "Description", value=(habit.description or "") if habit else "", height=90, placeholder="Optional"
        )
        color = st.selectbox(
            "Color",
            options=list(COLORS),
            index=COLORS.index(habit.color) if habit and habit.color in COLORS else 0,
        )
        frequency = st.selectbox(
            "Frequency",
            options=list(FREQUENCIES),
            index=FREQUENCIES.index(habit.frequency) if habit else 0,
        )
        target_days = None
        if frequency == "weekly":
            target_days = st.number_input(
                "Days per week",
                min_value=1,
                max_value=7,
                value=(habit.target_days or 3) if habit else 3,
            )

        status = "active"
        start = None
        if habit:
            options = [s for s in STATUSES if s != "archived"]
            status = st.selectbox(
                "Status", options=options, index=options.index(habit.status) if habit.status in options else 0
            )
        else:
            start = st.date_input("Start date", value=date.today())

        save_col, archive_col, del_col = st.columns([0.4, 0.3, 0.3])
        with save_col:
            if st.button("Save", type="primary"):
                try:
                    if habit:
                        repo.update_habit(
                            habit.id,
                            name=name,
                            description=desc,
                            color=color,
                            frequency=frequency,
                            target_days=target_days,
                            status=status,
                        )
                        toast_success("Habit updated")
                    else:
                        repo.create_habit(
                            name=name,
                            description=desc,
                            color=color,
                            frequency=frequency,
                            target_days=target_days,
                            created_at=start.isoformat() if start else None,
                        )
                        toast_success("Habit created")
                except (ValueError, HabitTrackerError) as e:
                    toast_error(error_message(e))
                else:
                    st.session_state["edit_id"] = None
                    st.rerun()
        with archive_col:
            if habit and st.button("Archive", help="Hides the habit but keeps its history."):
                try:
                    repo.archive_habit(habit.id)
                except HabitTrackerError as e:
                    toast_error(error_message(e))
                else:
                    st.session_state["edit_id"] = None
                    toast_success("Habit archived")
                    st.rerun()
        with del_col:
            if habit:
                if st.button("Delete", help="Deletes the habit and its history."):
                    st.session_state["confirm_delete"] = True

        if habit and st.session_state.get("confirm_delete"):
            st.warning("Permanently delete this habit and all data? This cannot be undone.")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Cancel"):
                    st.session_state["confirm_delete"] = False
                    st.rerun()
            with c2:
                if st.button("Delete permanently", type="primary"):
                    try:
                        repo.delete_habit(habit.id)
                    except HabitTrackerError as e:
                        toast_error(error_message(e))
                    else:
                        st.session_state["confirm_delete"] = False
                        st.session_state["edit_id"] = None
                        toast_success("Habit deleted")
                        st.rerun()


if __name__ == "__main__":
    main()
