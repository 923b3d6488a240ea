"""
Placement scoring heuristics.

Each heuristic ranks a candidate free rectangle with a (primary, tie-break)
pair; lower is better.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .geometry import Rect, fits


class Heuristic(Enum):
    """Rule used to rank candidate free rectangles."""
    TOP_LEFT = "TOP_LEFT"
    TOP_RIGHT = "TOP_RIGHT"
    BEST_SHORT_SIDE_FIT = "BEST_SHORT_SIDE_FIT"
    BEST_AREA_FIT = "BEST_AREA_FIT"


@dataclass(frozen=True)
class Candidate:
    """Winning placement: footprint at the free rectangle's origin."""
    rect: Rect
    rotated: bool
    score: Tuple[float, float]


def score_placement(free: Rect, width: float, height: float, heuristic: Heuristic) -> Tuple[float, float]:
    """Score placing a ``width`` x ``height`` footprint into ``free``."""
    if heuristic == Heuristic.TOP_LEFT:
        return free.y, free.x
    if heuristic == Heuristic.TOP_RIGHT:
        return free.y, -free.x
    if heuristic == Heuristic.BEST_SHORT_SIDE_FIT:
        leftover_horiz = abs(free.width - width)
        leftover_vert = abs(free.height - height)
        return min(leftover_horiz, leftover_vert), free.x
    if heuristic == Heuristic.BEST_AREA_FIT:
        return free.area - width * height, free.x
    raise ValueError(f"Unsupported heuristic: {heuristic}")


def find_best_position(
    free_rects: Iterable[Rect],
    width: float,
    height: float,
    heuristic: Heuristic,
) -> Optional[Candidate]:
    """
    Find the best placement for a ``width`` x ``height`` image.

    Both orientations are tried against every free rectangle, unrotated
    first. A candidate only replaces the current best when its score is
    strictly lower, so exact ties keep the earliest free rectangle.

    Returns:
        The winning Candidate, or None if nothing fits.
    """
    best: Optional[Candidate] = None

    for free in free_rects:
        for rotated, w, h in ((False, width, height), (True, height, width)):
            if not fits(free, w, h):
                continue
            score = score_placement(free, w, h, heuristic)
            if best is None or score < best.score:
                best = Candidate(Rect(free.x, free.y, w, h), rotated, score)

    return best
