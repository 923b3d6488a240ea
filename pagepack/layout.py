"""
Page packer: places a sorted image sequence onto fixed-size pages.

The packer is a fold over the sorted images. Each step takes an immutable
PackerState (closed pages, the page being filled and its free rectangles)
and returns the next one, so every intermediate state can be inspected.
"""

from __future__ import annotations

import functools
import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .free_space import FreeRects, initial_free_rects, split_free_rects
from .geometry import Rect, snap
from .heuristics import Heuristic, find_best_position

logger = logging.getLogger(__name__)

# Max-side values closer than this count as equal when sorting
SIDE_TOLERANCE = 0.01


@dataclass(frozen=True)
class PageSpec:
    """Physical page and margins, in centimetres."""
    width: float = 21.0
    height: float = 29.7
    margin_top: float = 1.5
    margin_bottom: float = 1.0
    margin_left: float = 0.5
    margin_right: float = 0.5

    def __post_init__(self):
        if self.print_width <= 0 or self.print_height <= 0:
            raise ValueError(f"Margins leave no print area on a {self.width}x{self.height}cm page")

    @classmethod
    def a4(cls) -> "PageSpec":
        return cls()

    @property
    def print_width(self) -> float:
        return snap(self.width - self.margin_left - self.margin_right)

    @property
    def print_height(self) -> float:
        return snap(self.height - self.margin_top - self.margin_bottom)

    def to_page_coords(self, placed: "PlacedImage") -> Tuple[float, float]:
        """Absolute page position of a placement (print area origin + margins)."""
        return snap(placed.x + self.margin_left), snap(placed.y + self.margin_top)


A4 = PageSpec.a4()


@dataclass(frozen=True)
class ImageItem:
    """An image to lay out. Dimensions in cm."""
    id: str
    width: float
    height: float

    def __post_init__(self):
        if not all(math.isfinite(v) and v > 0 for v in (self.width, self.height)):
            raise ValueError(f"Image {self.id!r} must have a finite positive size, got {self.width}x{self.height}")

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def max_side(self) -> float:
        return max(self.width, self.height)


@dataclass(frozen=True)
class PlacedImage:
    """An image positioned on a page. display_* are the on-page dimensions."""
    image: ImageItem
    x: float
    y: float
    page_index: int
    rotated: bool
    display_width: float
    display_height: float

    @classmethod
    def place(cls, image: ImageItem, x: float, y: float, page_index: int, rotated: bool) -> "PlacedImage":
        if rotated:
            return cls(image, x, y, page_index, True, image.height, image.width)
        return cls(image, x, y, page_index, False, image.width, image.height)

    @property
    def id(self) -> str:
        return self.image.id

    @property
    def footprint(self) -> Rect:
        return Rect(self.x, self.y, self.display_width, self.display_height)

    def moved_to(self, x: float, y: float) -> "PlacedImage":
        return PlacedImage.place(self.image, x, y, self.page_index, self.rotated)

    def with_rotation(self, rotated: bool) -> "PlacedImage":
        return PlacedImage.place(self.image, self.x, self.y, self.page_index, rotated)


@dataclass(frozen=True)
class PageLayout:
    page_index: int
    images: Tuple[PlacedImage, ...] = ()

    @property
    def used_height(self) -> float:
        """Lowest bottom edge on the page, 0 when empty."""
        return max((img.footprint.bottom for img in self.images), default=0.0)


class SortRule(Enum):
    """Order in which images are fed to the packer."""
    AREA_DESC = "AREA_DESC"
    MAX_SIDE_DESC = "MAX_SIDE_DESC"
    WIDTH_DESC = "WIDTH_DESC"
    HEIGHT_DESC = "HEIGHT_DESC"


class OversizePolicy(Enum):
    """What to do with an image that fits the print area in neither orientation."""
    FORCE = "force"    # place at the page origin, overflowing the print area
    REJECT = "reject"  # raise OversizedImageError


class OversizedImageError(ValueError):
    def __init__(self, images: Sequence[ImageItem], page: PageSpec):
        self.images = list(images)
        names = ", ".join(f"{img.id} ({img.width}x{img.height})" for img in self.images)
        super().__init__(
            f"{len(self.images)} image(s) exceed the {page.print_width}x{page.print_height}cm print area: {names}"
        )


def _compare_max_side(a: ImageItem, b: ImageItem) -> float:
    if abs(a.max_side - b.max_side) > SIDE_TOLERANCE:
        return b.max_side - a.max_side
    return b.area - a.area


def sort_images(images: Sequence[ImageItem], rule: SortRule) -> List[ImageItem]:
    """Stable descending sort; ties keep input order."""
    if rule == SortRule.AREA_DESC:
        return sorted(images, key=lambda img: img.area, reverse=True)
    if rule == SortRule.MAX_SIDE_DESC:
        return sorted(images, key=functools.cmp_to_key(_compare_max_side))
    if rule == SortRule.WIDTH_DESC:
        return sorted(images, key=lambda img: img.width, reverse=True)
    if rule == SortRule.HEIGHT_DESC:
        return sorted(images, key=lambda img: img.height, reverse=True)
    raise ValueError(f"Unsupported sort rule: {rule}")


def fits_print_area(image: ImageItem, page: PageSpec = A4) -> bool:
    pw, ph = page.print_width, page.print_height
    return (image.width <= pw and image.height <= ph) or (image.height <= pw and image.width <= ph)


def find_oversized(images: Sequence[ImageItem], page: PageSpec = A4) -> List[ImageItem]:
    """Images that fit the print area in neither orientation."""
    return [img for img in images if not fits_print_area(img, page)]


@dataclass(frozen=True)
class PackerState:
    """Snapshot of the packer between two images."""
    free_rects: FreeRects
    page_index: int = 0
    placed: Tuple[PlacedImage, ...] = ()
    closed: Tuple[PageLayout, ...] = ()

    @classmethod
    def start(cls, page: PageSpec) -> "PackerState":
        return cls(free_rects=initial_free_rects(page.print_width, page.print_height))

    def pages(self) -> List[PageLayout]:
        """Closed pages plus the current one if it has content."""
        pages = list(self.closed)
        if self.placed:
            pages.append(PageLayout(self.page_index, self.placed))
        return pages


def start_new_page(state: PackerState, page: PageSpec) -> PackerState:
    """Close the current page (if it has content) and open a fresh one."""
    closed = state.closed
    if state.placed:
        closed = closed + (PageLayout(state.page_index, state.placed),)
    return PackerState(
        free_rects=initial_free_rects(page.print_width, page.print_height),
        page_index=state.page_index + 1,
        placed=(),
        closed=closed,
    )


def _force_place(state: PackerState, image: ImageItem, page: PageSpec) -> PackerState:
    rotated = image.width > page.print_width and image.height <= page.print_width
    placed = PlacedImage.place(image, 0.0, 0.0, state.page_index, rotated)
    logger.warning(
        f"Image {image.id} ({image.width}x{image.height}cm) does not fit the "
        f"{page.print_width}x{page.print_height}cm print area; forced onto page {state.page_index}"
    )
    state = PackerState(state.free_rects, state.page_index, state.placed + (placed,), state.closed)
    return start_new_page(state, page)


def pack_step(state: PackerState, image: ImageItem, heuristic: Heuristic, page: PageSpec = A4) -> PackerState:
    """Place one image: current page first, then at most one fresh page."""
    candidate = find_best_position(state.free_rects, image.width, image.height, heuristic)

    if candidate is None and state.placed:
        logger.debug(f"Image {image.id} does not fit page {state.page_index}, starting a new page")
        state = start_new_page(state, page)
        candidate = find_best_position(state.free_rects, image.width, image.height, heuristic)

    if candidate is None:
        return _force_place(state, image, page)

    placed = PlacedImage.place(image, candidate.rect.x, candidate.rect.y, state.page_index, candidate.rotated)
    return PackerState(
        free_rects=split_free_rects(state.free_rects, candidate.rect),
        page_index=state.page_index,
        placed=state.placed + (placed,),
        closed=state.closed,
    )


def pack_pages(
    images: Sequence[ImageItem],
    sort_rule: SortRule,
    heuristic: Heuristic,
    page: PageSpec = A4,
    oversize_policy: OversizePolicy = OversizePolicy.FORCE,
) -> List[PageLayout]:
    """
    Pack images onto pages with one sort rule and one heuristic.

    Args:
        images: Images to place, in input order
        sort_rule: Order in which images are fed to the packer
        heuristic: Placement ranking rule
        page: Page geometry
        oversize_policy: Handling of images larger than the print area

    Returns:
        Pages in order; each holds its placements in placement order
    """
    if oversize_policy == OversizePolicy.REJECT:
        oversized = find_oversized(images, page)
        if oversized:
            raise OversizedImageError(oversized, page)

    ordered = sort_images(images, sort_rule)
    final = functools.reduce(
        lambda state, image: pack_step(state, image, heuristic, page),
        ordered,
        PackerState.start(page),
    )
    return final.pages()
