"""
Viewport transform between world space (node positions) and screen space
(pointer coordinates on the canvas).

    screen = world * zoom + offset

Zoom always scales about the screen origin; panning is the only way to
recenter. Requests outside [ZOOM_MIN, ZOOM_MAX] are clamped.
"""

from dataclasses import dataclass
from typing import Tuple

from research_map.constants import ZOOM_MIN, ZOOM_MAX, ZOOM_STEP

Point = Tuple[float, float]


def clamp_zoom(zoom: float) -> float:
    return max(ZOOM_MIN, min(ZOOM_MAX, zoom))


def world_to_screen(p: Point, zoom: float, offset: Point) -> Point:
    return (p[0] * zoom + offset[0], p[1] * zoom + offset[1])


def screen_to_world(p: Point, zoom: float, offset: Point) -> Point:
    return ((p[0] - offset[0]) / zoom, (p[1] - offset[1]) / zoom)


@dataclass
class Viewport:
    """Pan/zoom state for one editing session."""
    zoom: float = 1.0
    offset: Point = (0.0, 0.0)

    def __post_init__(self):
        self.zoom = clamp_zoom(float(self.zoom))
        self.offset = (float(self.offset[0]), float(self.offset[1]))

    def world_to_screen(self, p: Point) -> Point:
        return world_to_screen(p, self.zoom, self.offset)

    def screen_to_world(self, p: Point) -> Point:
        return screen_to_world(p, self.zoom, self.offset)

    def scale(self, length: float) -> float:
        """World length -> screen length."""
        return length * self.zoom

    def set_zoom(self, zoom: float) -> bool:
        """Clamp and apply. Returns True if the zoom actually changed."""
        new_zoom = clamp_zoom(float(zoom))
        if new_zoom == self.zoom:
            return False
        self.zoom = new_zoom
        return True

    def zoom_in(self) -> bool:
        # Rounding only absorbs float error so ten steps from 1.0 land on 2.0
        return self.set_zoom(round(self.zoom + ZOOM_STEP, 10))

    def zoom_out(self) -> bool:
        return self.set_zoom(round(self.zoom - ZOOM_STEP, 10))

    def pan(self, dx: float, dy: float) -> bool:
        if dx == 0 and dy == 0:
            return False
        self.offset = (self.offset[0] + dx, self.offset[1] + dy)
        return True

    def reset(self) -> bool:
        changed = self.zoom != 1.0 or self.offset != (0.0, 0.0)
        self.zoom = 1.0
        self.offset = (0.0, 0.0)
        return changed

    @property
    def zoom_percent(self) -> int:
        return round(self.zoom * 100)
