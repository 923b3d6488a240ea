"""
Layout validation and page fill statistics.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Sequence

from shapely.geometry import box
from shapely.ops import unary_union

from .geometry import overlaps, within_area
from .layout import A4, ImageItem, PageLayout, PageSpec
from .strategies import layout_score

logger = logging.getLogger(__name__)


def validate_layout(
    images: Sequence[ImageItem],
    pages: Sequence[PageLayout],
    page: PageSpec = A4,
) -> List[str]:
    """
    Check a layout against the images it was built from.

    Checks conservation (each image placed once), rotation consistency,
    page index consistency, no overlap within a page and that every
    footprint lies in the print area.

    Returns:
        Problem descriptions; empty when the layout is valid
    """
    problems = []

    placed_ids = Counter(img.id for p in pages for img in p.images)
    expected_ids = Counter(img.id for img in images)
    for image_id in expected_ids:
        if placed_ids[image_id] == 0:
            problems.append(f"Image {image_id} is missing from the layout")
        elif placed_ids[image_id] > expected_ids[image_id]:
            problems.append(f"Image {image_id} is placed {placed_ids[image_id]} times")
    for image_id in placed_ids:
        if image_id not in expected_ids:
            problems.append(f"Image {image_id} is not part of the input")

    for page_layout in pages:
        for img in page_layout.images:
            if img.page_index != page_layout.page_index:
                problems.append(
                    f"Image {img.id} claims page {img.page_index} but sits on page {page_layout.page_index}"
                )
            expected = (img.image.height, img.image.width) if img.rotated else (img.image.width, img.image.height)
            if (img.display_width, img.display_height) != expected:
                problems.append(
                    f"Image {img.id} display size {img.display_width}x{img.display_height} "
                    f"does not match rotated={img.rotated}"
                )
            if not within_area(img.footprint, page.print_width, page.print_height):
                problems.append(f"Image {img.id} exceeds the print area on page {page_layout.page_index}")

        placed = page_layout.images
        for i in range(len(placed)):
            for j in range(i + 1, len(placed)):
                if overlaps(placed[i].footprint, placed[j].footprint):
                    problems.append(
                        f"Images {placed[i].id} and {placed[j].id} overlap on page {page_layout.page_index}"
                    )

    for problem in problems:
        logger.debug(f"Layout problem: {problem}")
    return problems


def page_fill_ratio(page_layout: PageLayout, page: PageSpec = A4) -> float:
    """Share of the print area covered by images (overflow is clipped)."""
    print_area = page.print_width * page.print_height
    if not page_layout.images or print_area <= 0:
        return 0.0
    covered = unary_union([img.footprint.to_box() for img in page_layout.images])
    covered = covered.intersection(box(0, 0, page.print_width, page.print_height))
    return covered.area / print_area


def layout_statistics(pages: Sequence[PageLayout], page: PageSpec = A4) -> Dict[str, object]:
    fill = [page_fill_ratio(p, page) for p in pages]
    return {
        "pages": len(pages),
        "images": sum(len(p.images) for p in pages),
        "score": layout_score(pages),
        "fill_ratios": fill,
        "mean_fill": sum(fill) / len(fill) if fill else 0.0,
    }
