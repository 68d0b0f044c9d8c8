"""
Pan and zoom for the habit grid.

World coordinates are grid pixels as produced by layout.compute_layout();
local coordinates are pixels inside the visible viewport. The two are
related by local = world * scale + offset.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import VIEWPORT_LIMITS, ViewportLimits

Point = Tuple[float, float]


@dataclass(frozen=True)
class Transform:
    x: float
    y: float
    scale: float

    def to_local(self, point: Point) -> Point:
        return point[0] * self.scale + self.x, point[1] * self.scale + self.y

    def to_world(self, point: Point) -> Point:
        return (point[0] - self.x) / self.scale, (point[1] - self.y) / self.scale

    def matrix(self) -> Tuple[float, float, float, float, float, float]:
        """(a, b, c, d, e, f) in the SVG/canvas convention."""
        return self.scale, 0.0, 0.0, self.scale, self.x, self.y

    def css(self) -> str:
        return f"translate({self.x}px, {self.y}px) scale({self.scale})"


class Viewport:
    def __init__(
        self,
        limits: ViewportLimits = VIEWPORT_LIMITS,
        x: float = 0.0,
        y: float = 0.0,
        scale: float = 1.0,
    ) -> None:
        self.limits = limits
        self.x = x
        self.y = y
        self.scale = self.clamp_scale(scale)

    def clamp_scale(self, scale: float) -> float:
        return max(self.limits.min_scale, min(self.limits.max_scale, scale))

    @property
    def zoom_percent(self) -> int:
        return int(math.floor(self.scale * 100 + 0.5))

    def transform(self) -> Transform:
        return Transform(self.x, self.y, self.scale)

    def zoom_at(self, anchor: Point, factor: float) -> bool:
        """
        Rescale by factor while keeping the world point under anchor fixed.

        Returns False when the clamp leaves the scale where it was.
        """
        new_scale = self.clamp_scale(self.scale * factor)
        if new_scale == self.scale:
            return False
        world_x = (anchor[0] - self.x) / self.scale
        world_y = (anchor[1] - self.y) / self.scale
        self.scale = new_scale
        self.x = anchor[0] - world_x * new_scale
        self.y = anchor[1] - world_y * new_scale
        return True

    def zoom_in(self, viewport_width: float, viewport_height: float) -> bool:
        return self.zoom_at((viewport_width / 2, viewport_height / 2), self.limits.button_zoom_factor)

    def zoom_out(self, viewport_width: float, viewport_height: float) -> bool:
        return self.zoom_at((viewport_width / 2, viewport_height / 2), 1 / self.limits.button_zoom_factor)

    def pan_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def fit_to_content(
        self,
        content_width: float,
        content_height: float,
        target_x: float,
        viewport_width: float,
        viewport_height: float,
    ) -> bool:
        """
        Reset view: fit the content height, center target_x horizontally and
        the content vertically. Empty content leaves the view alone.
        """
        if content_width <= 0 or content_height <= 0:
            return False
        fit = min(viewport_height * self.limits.fit_height_fraction / content_height, self.limits.fit_max_scale)
        self.scale = self.clamp_scale(fit)
        self.x = viewport_width / 2 - target_x * self.scale
        self.y = (viewport_height - content_height * self.scale) / 2
        return True


@dataclass(frozen=True)
class PointerEvent:
    """
    An input event in local coordinates.

    kind is one of: down, move, up, wheel, touchstart, touchmove, touchend.
    points holds one entry per active pointer or finger.
    """

    kind: str
    points: Tuple[Point, ...] = ()
    delta_y: float = 0.0


def _midpoint(a: Point, b: Point) -> Point:
    return (a[0] + b[0]) / 2, (a[1] + b[1]) / 2


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class GestureTracker:
    """
    Turns pointer, wheel and touch events into viewport updates.

    Drag state lives here and nowhere else; handle() returns the resulting
    transform for the caller to apply.
    """

    def __init__(self, viewport: Optional[Viewport] = None) -> None:
        self.viewport = viewport or Viewport()
        self.panning = False
        self._pan_start: Point = (0.0, 0.0)
        self._pan_origin: Point = (0.0, 0.0)
        self._last_distance = 0.0
        self._last_center: Point = (0.0, 0.0)

    def handle(self, event: PointerEvent) -> Transform:
        handler = getattr(self, f"_on_{event.kind}", None)
        if handler is None:
            raise ValueError(f"Unknown pointer event kind {event.kind!r}")
        handler(event)
        return self.viewport.transform()

    def _start_pan(self, point: Point) -> None:
        self.panning = True
        self._pan_start = point
        self._pan_origin = (self.viewport.x, self.viewport.y)

    def _drag_to(self, point: Point) -> None:
        self.viewport.x = self._pan_origin[0] + (point[0] - self._pan_start[0])
        self.viewport.y = self._pan_origin[1] + (point[1] - self._pan_start[1])

    def _on_down(self, event: PointerEvent) -> None:
        if event.points:
            self._start_pan(event.points[0])

    def _on_move(self, event: PointerEvent) -> None:
        if self.panning and event.points:
            self._drag_to(event.points[0])

    def _on_up(self, event: PointerEvent) -> None:
        self.panning = False

    def _on_wheel(self, event: PointerEvent) -> None:
        if not event.points:
            return
        limits = self.viewport.limits
        factor = limits.wheel_zoom_out if event.delta_y > 0 else limits.wheel_zoom_in
        self.viewport.zoom_at(event.points[0], factor)

    def _on_touchstart(self, event: PointerEvent) -> None:
        if len(event.points) == 1:
            self._start_pan(event.points[0])
        elif len(event.points) == 2:
            self.panning = False
            self._last_distance = _distance(*event.points)
            self._last_center = _midpoint(*event.points)

    def _on_touchmove(self, event: PointerEvent) -> None:
        if len(event.points) == 1 and self.panning:
            self._drag_to(event.points[0])
        elif len(event.points) == 2:
            distance = _distance(*event.points)
            center = _midpoint(*event.points)
            if self._last_distance > 0:
                # zoom about the midpoint first, then follow the midpoint
                self.viewport.zoom_at(center, distance / self._last_distance)
                self.viewport.pan_by(center[0] - self._last_center[0], center[1] - self._last_center[1])
            self._last_distance = distance
            self._last_center = center

    def _on_touchend(self, event: PointerEvent) -> None:
        self.panning = False
        self._last_distance = 0.0


def viewport_transform_for(tracker: GestureTracker, event: PointerEvent) -> Transform:
    return tracker.handle(event)
