"""
Strategy search: run the packer once per (sort rule, heuristic) pair and
keep the most compact layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .heuristics import Heuristic
from .layout import A4, ImageItem, OversizePolicy, PageLayout, PageSpec, SortRule, pack_pages

logger = logging.getLogger(__name__)

# Weight of one extra page relative to vertical space used (cm)
PAGE_PENALTY = 10000


@dataclass(frozen=True)
class Strategy:
    sort: SortRule
    heuristic: Heuristic

    @property
    def name(self) -> str:
        return f"{self.sort.value}/{self.heuristic.value}"

    @classmethod
    def parse(cls, name: str) -> "Strategy":
        """Build a strategy from ``"SORT/HEURISTIC"``."""
        sort_name, _, heuristic_name = name.partition("/")
        try:
            return cls(SortRule[sort_name.strip().upper()], Heuristic[heuristic_name.strip().upper()])
        except KeyError:
            raise ValueError(f"Unknown strategy: {name!r} (expected SORT/HEURISTIC)") from None


def _combine(sorts: Iterable[SortRule], heuristics: Sequence[Heuristic]) -> Tuple[Strategy, ...]:
    return tuple(Strategy(s, h) for s in sorts for h in heuristics)


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    _combine(
        [SortRule.MAX_SIDE_DESC, SortRule.AREA_DESC],
        [Heuristic.TOP_LEFT, Heuristic.TOP_RIGHT, Heuristic.BEST_SHORT_SIDE_FIT],
    )
    + _combine(
        [SortRule.HEIGHT_DESC, SortRule.WIDTH_DESC],
        [Heuristic.TOP_LEFT, Heuristic.TOP_RIGHT],
    )
)

FULL_STRATEGIES: Tuple[Strategy, ...] = DEFAULT_STRATEGIES + _combine(
    [SortRule.MAX_SIDE_DESC, SortRule.AREA_DESC],
    [Heuristic.BEST_AREA_FIT],
)

STRATEGY_CATALOGS: Dict[str, Tuple[Strategy, ...]] = {
    "default": DEFAULT_STRATEGIES,
    "full": FULL_STRATEGIES,
}


@dataclass(frozen=True)
class StrategyResult:
    strategy: Strategy
    pages: List[PageLayout]
    score: float


def layout_score(pages: Sequence[PageLayout]) -> float:
    """Page count dominates; the height used on each page breaks ties."""
    if not pages:
        return 0
    return len(pages) * PAGE_PENALTY + sum(page.used_height for page in pages)


def evaluate_strategies(
    images: Sequence[ImageItem],
    strategies: Iterable[Strategy] = DEFAULT_STRATEGIES,
    page: PageSpec = A4,
    oversize_policy: OversizePolicy = OversizePolicy.FORCE,
) -> List[StrategyResult]:
    """Run the packer for every strategy, in catalog order."""
    results = []
    for strategy in strategies:
        pages = pack_pages(images, strategy.sort, strategy.heuristic, page, oversize_policy)
        score = layout_score(pages)
        logger.debug(f"Strategy {strategy.name}: {len(pages)} page(s), score {score:.2f}")
        results.append(StrategyResult(strategy, pages, score))
    return results


def select_best(results: Iterable[StrategyResult]) -> Optional[StrategyResult]:
    """Lowest score wins; the first one found wins ties."""
    best = None
    for result in results:
        if best is None or result.score < best.score:
            best = result
    return best


def search_layouts(
    images: Sequence[ImageItem],
    strategies: Iterable[Strategy] = DEFAULT_STRATEGIES,
    page: PageSpec = A4,
    oversize_policy: OversizePolicy = OversizePolicy.FORCE,
) -> Optional[StrategyResult]:
    """Best StrategyResult for the images, or None for empty input."""
    if not images:
        return None

    best = select_best(evaluate_strategies(images, strategies, page, oversize_policy))
    if best is not None:
        logger.info(
            f"Selected strategy {best.strategy.name}: {len(best.pages)} page(s) "
            f"for {len(images)} image(s), score {best.score:.2f}"
        )
    return best


def calculate_layout(
    images: Sequence[ImageItem],
    strategies: Iterable[Strategy] = DEFAULT_STRATEGIES,
    page: PageSpec = A4,
    oversize_policy: OversizePolicy = OversizePolicy.FORCE,
) -> List[PageLayout]:
    """
    Lay images out on the fewest, most compact pages.

    Args:
        images: Images to place; each must have positive dimensions
        strategies: (sort rule, heuristic) pairs to try
        page: Page geometry, A4 by default
        oversize_policy: Handling of images larger than the print area

    Returns:
        Pages of the lowest-scoring layout; empty list for empty input
    """
    best = search_layouts(images, strategies, page, oversize_policy)
    return best.pages if best is not None else []
