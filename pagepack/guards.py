"""
Guards for manual edits of a computed layout.

A moved or rotated image is clamped into the print area and rejected if it
is too large for the print area or overlaps another image on its page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .geometry import overlaps, snap
from .layout import A4, PageLayout, PageSpec, PlacedImage

logger = logging.getLogger(__name__)


class GuardRejection(Enum):
    EXCEEDS_PRINT_AREA = "exceeds print area"
    OVERLAPS_IMAGE = "overlaps another image"


@dataclass(frozen=True)
class GuardResult:
    image: Optional[PlacedImage] = None
    rejected: Optional[GuardRejection] = None

    @property
    def accepted(self) -> bool:
        return self.rejected is None


def clamp_to_bounds(placed: PlacedImage, page: PageSpec = A4) -> PlacedImage:
    max_x = max(0.0, page.print_width - placed.display_width)
    max_y = max(0.0, page.print_height - placed.display_height)
    return replace(
        placed,
        x=snap(min(max(placed.x, 0.0), max_x)),
        y=snap(min(max(placed.y, 0.0), max_y)),
    )


def has_overlap(candidate: PlacedImage, others: Iterable[PlacedImage]) -> bool:
    footprint = candidate.footprint
    return any(overlaps(footprint, other.footprint) for other in others)


def apply_manual_edit(
    candidate: PlacedImage,
    others: Iterable[PlacedImage],
    page: PageSpec = A4,
) -> GuardResult:
    """
    Check an edited placement against the rest of its page.

    Args:
        candidate: The image after the user's move or rotation
        others: The other images on the same page
        page: Page geometry

    Returns:
        GuardResult with the clamped image, or the rejection reason
    """
    if candidate.display_width > page.print_width or candidate.display_height > page.print_height:
        return GuardResult(rejected=GuardRejection.EXCEEDS_PRINT_AREA)

    clamped = clamp_to_bounds(candidate, page)
    if has_overlap(clamped, others):
        return GuardResult(rejected=GuardRejection.OVERLAPS_IMAGE)

    return GuardResult(image=clamped)


def _edit_image(pages, page_index, image_id, updater, page):
    results: List[PageLayout] = []
    outcome = None

    for page_layout in pages:
        target = next((i for i, img in enumerate(page_layout.images) if img.id == image_id), None)
        if page_layout.page_index != page_index or target is None:
            results.append(page_layout)
            continue

        others = [img for i, img in enumerate(page_layout.images) if i != target]
        outcome = apply_manual_edit(updater(page_layout.images[target]), others, page)
        if outcome.accepted:
            images = list(page_layout.images)
            images[target] = outcome.image
            page_layout = PageLayout(page_layout.page_index, tuple(images))
        else:
            logger.info(f"Edit of image {image_id} on page {page_index} rejected: {outcome.rejected.value}")
        results.append(page_layout)

    if outcome is None:
        raise KeyError(f"Image {image_id!r} not found on page {page_index}")
    return results, outcome


def move_image(
    pages: List[PageLayout],
    page_index: int,
    image_id: str,
    x: float,
    y: float,
    page: PageSpec = A4,
) -> Tuple[List[PageLayout], GuardResult]:
    """Move an image; pages are returned unchanged if the move is rejected."""
    return _edit_image(pages, page_index, image_id, lambda img: img.moved_to(x, y), page)


def rotate_image(
    pages: List[PageLayout],
    page_index: int,
    image_id: str,
    page: PageSpec = A4,
) -> Tuple[List[PageLayout], GuardResult]:
    """Toggle an image's rotation in place."""
    return _edit_image(pages, page_index, image_id, lambda img: img.with_rotation(not img.rotated), page)
