"""Palettes, grid presets and the user settings kept in the settings table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

COLORS: Tuple[str, ...] = (
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#06b6d4",
    "#3b82f6",
)

ACCENT_COLORS: Tuple[str, ...] = (
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#ef4444",
    "#f97316",
    "#22c55e",
    "#3b82f6",
)

THEMES: Tuple[str, ...] = ("system", "light", "dark")


@dataclass(frozen=True)
class CellSizePreset:
    cell_size: int
    cell_gap: int
    label_width: int


CELL_SIZE_PRESETS: Dict[str, CellSizePreset] = {
    "small": CellSizePreset(cell_size=12, cell_gap=2, label_width=120),
    "medium": CellSizePreset(cell_size=16, cell_gap=3, label_width=140),
    "large": CellSizePreset(cell_size=22, cell_gap=4, label_width=160),
}


@dataclass(frozen=True)
class GridChrome:
    header_height: int = 32
    padding: int = 40


@dataclass(frozen=True)
class ViewportLimits:
    min_scale: float = 0.2
    max_scale: float = 3.0
    button_zoom_factor: float = 1.25
    wheel_zoom_in: float = 1.1
    wheel_zoom_out: float = 0.9
    fit_height_fraction: float = 0.75
    fit_max_scale: float = 1.2


GRID_CHROME = GridChrome()
VIEWPORT_LIMITS = ViewportLimits()

NOTE_AUTOSAVE_SECONDS = 0.5


@dataclass(frozen=True)
class AppSettings:
    theme: str = "system"
    accent: str = ACCENT_COLORS[0]
    days_to_show: int = 365
    cell_size: str = "medium"

    @property
    def preset(self) -> CellSizePreset:
        return CELL_SIZE_PRESETS.get(self.cell_size, CELL_SIZE_PRESETS["medium"])


DEFAULT_SETTINGS = AppSettings()


def _coerce(key: str, value):
    """
    Validate a setting value and return it in its typed form.

    Raises ValueError for anything outside the known vocabulary.
    """
    if key == "theme":
        if value not in THEMES:
            raise ValueError(f"theme must be one of {', '.join(THEMES)}")
        return value
    if key == "accent":
        if value not in ACCENT_COLORS:
            raise ValueError(f"accent must be one of {', '.join(ACCENT_COLORS)}")
        return value
    if key == "days_to_show":
        try:
            days = int(value)
        except (TypeError, ValueError):
            raise ValueError("days_to_show must be a whole number") from None
        if days < 1:
            raise ValueError("days_to_show must be at least 1")
        return days
    if key == "cell_size":
        if value not in CELL_SIZE_PRESETS:
            raise ValueError(f"cell_size must be one of {', '.join(CELL_SIZE_PRESETS)}")
        return value
    return value


def load_settings(store) -> AppSettings:
    """
    Read the known keys from the store, falling back to defaults for anything
    missing or unreadable.
    """
    settings = DEFAULT_SETTINGS
    for key in ("theme", "accent", "days_to_show", "cell_size"):
        row = store.get("settings", key)
        if row is None:
            continue
        try:
            settings = replace(settings, **{key: _coerce(key, row["value"])})
        except ValueError:
            logger.warning("Ignoring invalid stored setting %s=%r", key, row["value"])
    return settings


def save_setting(store, key: str, value) -> AppSettings:
    typed = _coerce(key, value)
    store.put("settings", {"key": key, "value": str(typed)})
    return load_settings(store)
