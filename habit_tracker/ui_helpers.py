"""
UI helpers shared across pages (Streamlit).

The repository is built once per process and shared by every page and
session; settings are re-read from the store on each run.
"""

from __future__ import annotations

import streamlit as st

from .config import AppSettings, load_settings
from .db import LocalStore
from .errors import (
    FutureDateError,
    ImportMalformedError,
    ImportVersionError,
    StoreError,
)
from .logging_setup import setup_logging
from .repository import HabitRepository


@st.cache_resource
def get_repository() -> HabitRepository:
    setup_logging()
    return HabitRepository(LocalStore())


def get_settings() -> AppSettings:
    return load_settings(get_repository().store)


def app_header(title: str, subtitle: str | None = None) -> None:
    st.title(title)
    if subtitle:
        st.caption(subtitle)


def toast_success(msg: str) -> None:
    try:
        st.toast(msg, icon="✅")
    except Exception:
        st.success(msg)


def toast_error(msg: str) -> None:
    try:
        st.toast(msg, icon="⚠️")
    except Exception:
        st.error(msg)


def error_message(exc: Exception) -> str:
    if isinstance(exc, StoreError):
        return "Could not save to the local database. Nothing was changed."
    if isinstance(exc, FutureDateError):
        return "That date is in the future."
    if isinstance(exc, ImportVersionError):
        return "Unsupported file version."
    if isinstance(exc, ImportMalformedError):
        return f"Failed to import: {exc}"
    return str(exc)


def confirm_box(key: str, label: str = "I understand") -> bool:
    return st.checkbox(label, key=key)


def color_dot(color: str) -> str:
    return f"<span style='color:{color};font-size:1.2em'>●</span>"
