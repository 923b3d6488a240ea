"""
Rectangle primitives shared by the packer, the manual-edit guard and validation.

All lengths are centimetres relative to the top-left corner of the print area.
"""

from __future__ import annotations

from dataclasses import dataclass

from shapely.geometry import box

# Minimum usable side of a free rectangle (cm)
EPSILON = 0.1

# Decimal places kept for derived coordinates
PRECISION = 6


def snap(value: float) -> float:
    """Round a derived coordinate so repeated splits don't drift."""
    return round(value, PRECISION)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle, origin at top-left.

    Far edges are snapped, so an edge computed from ``x + width`` compares
    equal to the same edge stored as a snapped origin.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return snap(self.x + self.width)

    @property
    def bottom(self) -> float:
        return snap(self.y + self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_box(self):
        """Shapely polygon for area and union calculations."""
        return box(self.x, self.y, self.right, self.bottom)


def overlaps(a: Rect, b: Rect) -> bool:
    """True if the interiors intersect. Shared edges are not an overlap."""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def contains(a: Rect, b: Rect) -> bool:
    """True if ``b`` lies entirely within ``a``."""
    return b.x >= a.x and b.y >= a.y and b.right <= a.right and b.bottom <= a.bottom


def fits(rect: Rect, width: float, height: float) -> bool:
    return rect.width >= width and rect.height >= height


def within_area(rect: Rect, area_width: float, area_height: float) -> bool:
    """True if ``rect`` lies inside ``[0, area_width] x [0, area_height]``."""
    return contains(Rect(0.0, 0.0, area_width, area_height), rect)
