"""
Pan/zoom state for the focused view over a generated preview.

The focused view scales the result image around the marker (used as the CSS
transform-origin). While a drag is active, pointer deltas scaled by the pan
sensitivity are added to the pan offset captured at drag start.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pan:
    x: float = 0.0
    y: float = 0.0


ORIGIN = Pan()


class DragSubscription:
    """
    An active drag gesture. Holds the pointer and pan positions from drag start.

    Acquired by ViewportController.start_drag and released by end_drag, by
    unfocusing, or by controller teardown. Usable as a context manager.
    """

    def __init__(self, controller: "ViewportController", start_x: float, start_y: float):
        self.controller = controller
        self.start_x = start_x
        self.start_y = start_y
        self.pan_start = controller.pan
        self.active = True

    def move(self, client_x: float, client_y: float) -> Pan:
        if not self.active:
            return self.controller.pan
        return self.controller._apply_delta(self, client_x, client_y)

    def release(self):
        if self.active:
            self.active = False
            self.controller._detach(self)

    def __enter__(self) -> "DragSubscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class ViewportController:
    """Focused-view toggle plus drag-to-pan over the result image"""

    def __init__(
        self,
        zoom_scale: Optional[float] = None,
        sensitivity: Optional[float] = None,
        max_pan: Optional[float] = None,
    ):
        self.zoom_scale = zoom_scale or settings.preview_zoom_scale
        self.sensitivity = sensitivity if sensitivity is not None else settings.pan_sensitivity
        self.max_pan = max_pan if max_pan is not None else settings.preview_max_pan
        self.focused = False
        self.pan = ORIGIN
        self._drag: Optional[DragSubscription] = None

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    def toggle_focus(self) -> bool:
        """Switch between 1x and zoomed view. Pan always resets."""
        self.focused = not self.focused
        self.pan = ORIGIN
        if not self.focused:
            self._release_drag()
        return self.focused

    def reset(self):
        """Back to unfocused 1x with no pan and no active drag."""
        self._release_drag()
        self.focused = False
        self.pan = ORIGIN

    def start_drag(self, client_x: float, client_y: float) -> Optional[DragSubscription]:
        """Begin a pan gesture; ignored unless the view is focused."""
        if not self.focused:
            return None
        self._release_drag()
        self._drag = DragSubscription(self, client_x, client_y)
        return self._drag

    def move_drag(self, client_x: float, client_y: float) -> Pan:
        if self._drag is None:
            return self.pan
        return self._drag.move(client_x, client_y)

    def end_drag(self):
        self._release_drag()

    def transform(self) -> str:
        """CSS transform for the result image."""
        if not self.focused:
            return "scale(1) translate(0, 0)"
        return f"scale({self.zoom_scale:g}) translate({self.pan.x:g}px, {self.pan.y:g}px)"

    def _apply_delta(self, drag: DragSubscription, client_x: float, client_y: float) -> Pan:
        if not self.focused:
            return self.pan
        dx = (client_x - drag.start_x) * self.sensitivity
        dy = (client_y - drag.start_y) * self.sensitivity
        self.pan = Pan(x=self._clamp(drag.pan_start.x + dx), y=self._clamp(drag.pan_start.y + dy))
        return self.pan

    def _clamp(self, value: float) -> float:
        if self.max_pan <= 0:
            return value
        return max(-self.max_pan, min(self.max_pan, value))

    def _release_drag(self):
        if self._drag is not None:
            self._drag.release()

    def _detach(self, drag: DragSubscription):
        if self._drag is drag:
            self._drag = None
