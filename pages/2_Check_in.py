"""
Check-in page

Mark habits as done for a selected date and write a note for the day. The
default is today, but you can backfill earlier days as well. Future days
cannot be checked off.
"""

from __future__ import annotations

from datetime import date

import streamlit as st

from habit_tracker.config import NOTE_AUTOSAVE_SECONDS
from habit_tracker.errors import HabitTrackerError
from habit_tracker.notes import NoteAutosave
from habit_tracker.ui_helpers import app_header, error_message, get_repository, toast_error, toast_success

st.set_page_config(page_title="Check-in", page_icon="🗓️", layout="wide")


def note_autosave() -> NoteAutosave:
    if "note_autosave" not in st.session_state:
        st.session_state["note_autosave"] = NoteAutosave(get_repository())
    return st.session_state["note_autosave"]


def done_key(habit_id: str, day: str) -> str:
    return f"done_{habit_id}_{day}"


def save_checkbox(habit_id: str, day: str) -> None:
    try:
        get_repository().upsert_log(habit_id, day, st.session_state[done_key(habit_id, day)])
    except HabitTrackerError as e:
        toast_error(error_message(e))


def save_note_edit(day: str, note_key: str) -> None:
    # on_change fires once the text is committed, so each call is one finished edit
    autosave = note_autosave()
    autosave.edit(day, st.session_state[note_key])
    try:
        autosave.flush()
    except HabitTrackerError as e:
        toast_error(error_message(e))


@st.fragment(run_every=NOTE_AUTOSAVE_SECONDS)
def note_status(day: str) -> None:
    autosave = note_autosave()
    try:
        autosave.poll()
    except HabitTrackerError as e:
        toast_error(error_message(e))
    if autosave.pending(day):
        st.caption("Saving…")


def main() -> None:
    app_header("Check-in", "Mark habits as done and jot down how the day went.")

    repo = get_repository()

    chosen = st.date_input("Date", value=date.today(), max_value=date.today())
    day = chosen.isoformat()

    habits = repo.list_habits_by_status("active")
    if not habits:
        st.info("Create a habit first.")
    else:
        done, total = repo.today_progress(day)
        st.write(f"### {done} of {total} done on {day}")

        if st.button("Mark all done"):
            try:
                for h in habits:
                    repo.upsert_log(h.id, day, True)
            except HabitTrackerError as e:
                toast_error(error_message(e))
            else:
                toast_success("Saved")
                st.rerun()

        for h in habits:
            key = done_key(h.id, day)
            # the stored log is the source of truth for the checkbox
            st.session_state[key] = bool(repo.log_for(h.id, day))
            with st.container(border=True):
                col1, col2 = st.columns([0.25, 0.75])
                with col1:
                    st.checkbox("Done", key=key, on_change=save_checkbox, args=(h.id, day))
                with col2:
                    st.write(f"**{h.name}**")
                    if h.description:
                        st.caption(h.description)

    st.divider()
    st.subheader("Note")
    note_key = f"note_{day}"
    if note_key not in st.session_state:
        st.session_state[note_key] = repo.note_for(day)
    st.text_area(
        "How was your day? Any reflections...",
        key=note_key,
        height=140,
        on_change=save_note_edit,
        args=(day, note_key),
    )
    note_status(day)


if __name__ == "__main__":
    main()
