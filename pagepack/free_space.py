"""
Free-space tracking for a single page.

A page's free space is a tuple of possibly overlapping maximal rectangles.
Placing an image splits every free rectangle it touches into the leftover
strips above, below, left and right of it; contained and degenerate
rectangles are then pruned.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .geometry import EPSILON, Rect, contains, overlaps, snap

FreeRects = Tuple[Rect, ...]


def initial_free_rects(print_width: float, print_height: float) -> FreeRects:
    return (Rect(0.0, 0.0, print_width, print_height),)


def _split(free: Rect, used: Rect) -> List[Rect]:
    leftovers = []

    if used.y > free.y:
        leftovers.append(Rect(free.x, free.y, free.width, snap(used.y - free.y)))
    if used.bottom < free.bottom:
        leftovers.append(Rect(free.x, snap(used.bottom), free.width, snap(free.bottom - used.bottom)))
    if used.x > free.x:
        leftovers.append(Rect(free.x, free.y, snap(used.x - free.x), free.height))
    if used.right < free.right:
        leftovers.append(Rect(snap(used.right), free.y, snap(free.right - used.right), free.height))

    return leftovers


def prune_free_rects(rects: Iterable[Rect]) -> FreeRects:
    """
    Drop rectangles contained in another one and those thinner than EPSILON.

    Identical rectangles contain each other, so both copies are dropped.
    """
    candidates = list(rects)
    kept = []

    for i, rect in enumerate(candidates):
        if rect.width < EPSILON or rect.height < EPSILON:
            continue
        if any(contains(other, rect) for j, other in enumerate(candidates) if j != i):
            continue
        kept.append(rect)

    return tuple(kept)


def split_free_rects(free_rects: Iterable[Rect], used: Rect) -> FreeRects:
    """Return the free space left after occupying ``used``."""
    regenerated = []
    for free in free_rects:
        if overlaps(used, free):
            regenerated.extend(_split(free, used))
        else:
            regenerated.append(free)
    return prune_free_rects(regenerated)
