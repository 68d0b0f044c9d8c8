"""
Settings page

Grid appearance, export/import and the reset button.
"""

from __future__ import annotations

import streamlit as st

from habit_tracker.config import ACCENT_COLORS, CELL_SIZE_PRESETS, THEMES, save_setting
from habit_tracker.errors import HabitTrackerError
from habit_tracker.transfer import dumps, export_all, export_filename, import_all
from habit_tracker.ui_helpers import (
    app_header,
    confirm_box,
    error_message,
    get_repository,
    get_settings,
    toast_error,
    toast_success,
)

st.set_page_config(page_title="Settings", page_icon="⚙️", layout="wide")


def update(key: str, value) -> None:
    try:
        save_setting(get_repository().store, key, value)
    except (ValueError, HabitTrackerError) as e:
        toast_error(error_message(e))
    else:
        toast_success("Saved")


def main() -> None:
    app_header("Settings")

    repo = get_repository()
    settings = get_settings()

    st.subheader("Appearance")
    c1, c2 = st.columns(2)
    with c1:
        theme = st.selectbox("Theme", options=list(THEMES), index=THEMES.index(settings.theme))
        if theme != settings.theme:
            update("theme", theme)
        accent = st.selectbox("Accent", options=list(ACCENT_COLORS), index=ACCENT_COLORS.index(settings.accent))
        if accent != settings.accent:
            update("accent", accent)
    with c2:
        days = st.number_input("Days to show", min_value=1, max_value=3650, value=settings.days_to_show, step=1)
        if int(days) != settings.days_to_show:
            update("days_to_show", int(days))
        sizes = list(CELL_SIZE_PRESETS)
        cell_size = st.selectbox("Cell size", options=sizes, index=sizes.index(settings.cell_size))
        if cell_size != settings.cell_size:
            update("cell_size", cell_size)

    st.divider()
    st.subheader("Data")
    try:
        document = export_all(repo)
    except HabitTrackerError as e:
        toast_error(error_message(e))
    else:
        st.download_button(
            "Export JSON",
            data=dumps(document),
            file_name=export_filename(repo.today),
            mime="application/json",
        )

    upload = st.file_uploader("Import JSON", type=["json"], help="Merges with your existing data.")
    if upload is not None and st.button("Import"):
        try:
            report = import_all(repo, upload.getvalue())
        except HabitTrackerError as e:
            toast_error(error_message(e))
        else:
            if report.ok:
                toast_success(f"Imported {report.habits} habits, {report.logs} logs, {report.notes} notes")
            else:
                st.warning(f"{len(report.failed)} record(s) could not be imported.")

    st.divider()
    st.subheader("Danger zone")
    if confirm_box("confirm_clear", "Permanently delete ALL habits, logs, and notes"):
        if st.button("Clear all data", type="primary"):
            try:
                repo.clear_all()
            except HabitTrackerError as e:
                toast_error(error_message(e))
            else:
                toast_success("All data cleared")


if __name__ == "__main__":
    main()
