# zoom.py
from __future__ import annotations

import math
from enum import Enum

from .renderer import Canvas, Point

MIN_ZOOM = 20
MAX_ZOOM = 500
# step between discrete zoom levels (percent)
ZOOM_INTERVAL = 10

# Selection outline width at 100%.
SELECTED_BORDER_WIDTH = 2


class ZoomType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    CENTER = "CENTER"
    FIT = "FIT"
    ORIGINAL = "ORIGINAL"


def to_percent(ratio: float) -> int:
    """Round half up, so the value matches what the zoom display shows."""
    return math.floor(ratio * 100 + 0.5)


def step_zoom(factor: int, zoom_type: ZoomType) -> int:
    """
    One discrete step from `factor` (whole percent).

    The factor is snapped down to the step boundary first. Stepping out
    from between two boundaries lands on the lower one (95 -> 90), since
    it has not been reached yet.
    """
    remainder = factor % ZOOM_INTERVAL
    factor -= remainder

    if zoom_type == ZoomType.IN:
        return min(factor + ZOOM_INTERVAL, MAX_ZOOM)

    if zoom_type == ZoomType.OUT:
        factor -= ZOOM_INTERVAL
        if remainder > 0:
            factor += ZOOM_INTERVAL
        return max(factor, MIN_ZOOM)

    raise ValueError(f"not a step zoom: {zoom_type!r}")


class ZoomTool:
    """Discrete zoom control for the editor canvas."""

    def __init__(self, canvas: Canvas):
        self.canvas = canvas

    def zoom(self, zoom_type: ZoomType) -> None:
        if zoom_type in (ZoomType.IN, ZoomType.OUT):
            factor = step_zoom(to_percent(self.canvas.zoom()), zoom_type)

        elif zoom_type == ZoomType.CENTER:
            self.canvas.zoom_to_fit()
            factor = to_percent(self.canvas.zoom())
            if factor > 100:
                factor = 100
            elif factor < MIN_ZOOM:
                factor = MIN_ZOOM
            else:
                self.optimize_selection_box_style()
                return

        elif zoom_type == ZoomType.FIT:
            self.canvas.zoom_to_fit()
            factor = to_percent(self.canvas.zoom())
            if factor < MIN_ZOOM:
                factor = MIN_ZOOM
            elif factor > MAX_ZOOM:
                factor = MAX_ZOOM
            else:
                self.optimize_selection_box_style()
                return

        elif zoom_type == ZoomType.ORIGINAL:
            self.canvas.center_content()
            factor = 100

        else:
            raise ValueError(f"unknown zoom type: {zoom_type!r}")

        box = self.canvas.get_content_bbox()
        self.canvas.zoom_to(factor / 100, Point(x=box.x + box.width / 2, y=box.y + box.height / 2))

        self.optimize_selection_box_style()

    def optimize_selection_box_style(self) -> None:
        """Keep selection outlines the same thickness on screen at any zoom."""
        self.canvas.style_selection_boxes(SELECTED_BORDER_WIDTH * self.canvas.zoom())
