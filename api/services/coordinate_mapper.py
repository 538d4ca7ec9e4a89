"""
Coordinate mapping between pointer events and normalized image space.

Markers are stored as percentages (0-100) of the rendered image's bounding
box. The same percentages are handed back to the client verbatim as CSS
`left`/`top` and `transform-origin` values, so no inverse arithmetic is needed.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

MIN_PERCENT = 0.0
MAX_PERCENT = 100.0


@dataclass(frozen=True)
class ElementRect:
    """Bounding rectangle of the rendered image element, in client pixels"""

    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class Marker:
    """Normalized placement coordinate, percentages on each axis"""

    x: float
    y: float

    def css_position(self) -> Dict[str, str]:
        """Marker dot position as CSS left/top percentages."""
        return {"left": _percent(self.x), "top": _percent(self.y)}

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


def _clamp(value: float) -> float:
    return max(MIN_PERCENT, min(MAX_PERCENT, value))


def _percent(value: float) -> str:
    return f"{value:g}%"


def pointer_to_marker(client_x: float, client_y: float, rect: ElementRect) -> Marker:
    """
    Convert pointer client coordinates over an image element into a marker.

    x% = (client_x - rect.left) / rect.width * 100, same for y. Results are
    clamped to [0, 100] so a pointer that lands on the element border never
    produces a marker outside the image.
    """
    if rect.width <= 0 or rect.height <= 0:
        raise ValueError(f"Element rect must have a positive size, got {rect.width}x{rect.height}")

    raw_x = (client_x - rect.left) / rect.width * 100
    raw_y = (client_y - rect.top) / rect.height * 100
    marker = Marker(x=_clamp(raw_x), y=_clamp(raw_y))

    if marker.x != raw_x or marker.y != raw_y:
        logger.debug(f"Clamped pointer ({raw_x:.2f}%, {raw_y:.2f}%) to ({marker.x:.2f}%, {marker.y:.2f}%)")

    return marker


def make_marker(x: float, y: float) -> Marker:
    """Build a marker from percentages that are already normalized."""
    return Marker(x=_clamp(x), y=_clamp(y))


def transform_origin(marker: Optional[Marker]) -> str:
    """CSS transform-origin for the zoomed result view."""
    if marker is None:
        return "center center"
    return f"{_percent(marker.x)} {_percent(marker.y)}"
