"""Camera state for the solar system view."""

from dataclasses import dataclass, replace
from typing import Optional

MIN_SCALE = 0.2
MAX_SCALE = 8.0
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1
PAN_THRESHOLD_PX = 5.0


def clamp_scale(scale: float, min_scale: float = MIN_SCALE, max_scale: float = MAX_SCALE) -> float:
    return min(max_scale, max(min_scale, scale))


def apply_zoom(scale: float, delta: float, min_scale: float = MIN_SCALE,
               max_scale: float = MAX_SCALE) -> float:
    """Multiply ``scale`` by ``delta`` and clamp into ``[min_scale, max_scale]``."""
    return clamp_scale(scale * delta, min_scale, max_scale)


def wheel_delta(delta_y: float) -> float:
    """Zoom factor for a wheel event: scrolling down zooms out."""
    return WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN


@dataclass(frozen=True)
class CameraState:
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def updated(self, x: Optional[float] = None, y: Optional[float] = None,
                scale: Optional[float] = None, min_scale: float = MIN_SCALE,
                max_scale: float = MAX_SCALE) -> "CameraState":
        """Partial update; a new scale is clamped."""
        return replace(
            self,
            x=self.x if x is None else x,
            y=self.y if y is None else y,
            scale=self.scale if scale is None else clamp_scale(scale, min_scale, max_scale),
        )

    def zoomed(self, delta: float, min_scale: float = MIN_SCALE,
               max_scale: float = MAX_SCALE) -> "CameraState":
        return replace(self, scale=apply_zoom(self.scale, delta, min_scale, max_scale))

    def panned_from(self, start: "CameraState", dx: float, dy: float) -> "CameraState":
        """Pan relative to ``start`` so the map follows the pointer 1:1 at any zoom."""
        return replace(self, x=start.x - dx / self.scale, y=start.y - dy / self.scale)


class PanGesture:
    """
    Pointer drag on empty map space.

    The camera follows the pointer from the moment the gesture starts; once
    the pointer has travelled more than ``threshold_px`` on either axis the
    gesture counts as a pan, and the release is not treated as a click.
    """

    def __init__(self, camera: CameraState, x: float, y: float, threshold_px: float = PAN_THRESHOLD_PX):
        self.start = camera
        self.origin = (x, y)
        self.threshold_px = threshold_px
        self.did_pan = False

    def move(self, camera: CameraState, x: float, y: float) -> CameraState:
        dx = x - self.origin[0]
        dy = y - self.origin[1]
        if abs(dx) > self.threshold_px or abs(dy) > self.threshold_px:
            self.did_pan = True
        return camera.panned_from(self.start, dx, dy)
