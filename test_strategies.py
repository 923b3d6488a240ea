#!/usr/bin/env python3
"""
Tests for the strategy search and the properties of the layouts it returns.
"""

import random

import pytest

from pagepack.geometry import overlaps, within_area
from pagepack.heuristics import Heuristic
from pagepack.layout import A4, ImageItem, OversizedImageError, OversizePolicy, PageLayout, PlacedImage, SortRule, pack_pages
from pagepack.strategies import (
    DEFAULT_STRATEGIES,
    FULL_STRATEGIES,
    STRATEGY_CATALOGS,
    Strategy,
    StrategyResult,
    calculate_layout,
    evaluate_strategies,
    layout_score,
    search_layouts,
    select_best,
)


def _random_images(seed, count, max_side=19.0):
    rng = random.Random(seed)
    return [
        ImageItem(f"img{i}", round(rng.uniform(1.0, max_side), 2), round(rng.uniform(1.0, max_side), 2))
        for i in range(count)
    ]


def _all_placed(pages):
    return [img for page in pages for img in page.images]


def test_default_catalog():
    assert len(DEFAULT_STRATEGIES) == 10
    assert len(set(DEFAULT_STRATEGIES)) == 10
    assert DEFAULT_STRATEGIES[0] == Strategy(SortRule.MAX_SIDE_DESC, Heuristic.TOP_LEFT)
    assert all(s.heuristic != Heuristic.BEST_AREA_FIT for s in DEFAULT_STRATEGIES)
    assert {s.sort for s in DEFAULT_STRATEGIES if s.heuristic == Heuristic.BEST_SHORT_SIDE_FIT} == {
        SortRule.MAX_SIDE_DESC, SortRule.AREA_DESC,
    }


def test_full_catalog_adds_best_area_fit():
    assert len(FULL_STRATEGIES) == 12
    assert FULL_STRATEGIES[:10] == DEFAULT_STRATEGIES
    assert Strategy(SortRule.AREA_DESC, Heuristic.BEST_AREA_FIT) in FULL_STRATEGIES
    assert STRATEGY_CATALOGS["full"] is FULL_STRATEGIES


def test_strategy_names_round_trip():
    strategy = Strategy(SortRule.WIDTH_DESC, Heuristic.TOP_RIGHT)
    assert strategy.name == "WIDTH_DESC/TOP_RIGHT"
    assert Strategy.parse("width_desc/top_right") == strategy
    with pytest.raises(ValueError):
        Strategy.parse("DIAGONAL/TOP_LEFT")


def test_layout_score_formula():
    a = PlacedImage.place(ImageItem("a", 5, 5), 0, 0, 0, False)
    b = PlacedImage.place(ImageItem("b", 5, 8), 5, 2, 0, False)
    c = PlacedImage.place(ImageItem("c", 3, 4), 0, 0, 1, True)
    pages = [PageLayout(0, (a, b)), PageLayout(1, (c,))]
    assert layout_score(pages) == pytest.approx(2 * 10000 + 10 + 3)
    assert layout_score([]) == 0


def test_select_best_keeps_first_on_ties():
    first = StrategyResult(DEFAULT_STRATEGIES[0], [], 10.0)
    second = StrategyResult(DEFAULT_STRATEGIES[1], [], 10.0)
    worse = StrategyResult(DEFAULT_STRATEGIES[2], [], 11.0)
    assert select_best([worse, first, second]) is first
    assert select_best([]) is None


def test_three_small_images_share_one_page():
    images = [ImageItem(f"sq{i}", 5, 5) for i in range(3)]
    pages = calculate_layout(images)

    assert len(pages) == 1
    placed = pages[0].images
    assert len(placed) == 3
    assert not any(img.rotated for img in placed)
    assert not any(overlaps(a.footprint, b.footprint) for i, a in enumerate(placed) for b in placed[i + 1:])


def test_image_wider_than_print_area_is_rotated():
    pages = calculate_layout([ImageItem("banner", 25, 5)])
    placed = pages[0].images[0]
    assert placed.rotated
    assert (placed.display_width, placed.display_height) == (5, 25)


def test_images_exceeding_one_page_spill_over():
    pages = calculate_layout([ImageItem(f"tile{i}", 10, 10) for i in range(6)])
    assert len(pages) >= 2
    assert sum(len(p.images) for p in pages) == 6


def test_empty_input_gives_empty_layout():
    assert calculate_layout([]) == []
    assert search_layouts([]) is None


def test_print_sized_image_fills_one_page():
    pages = calculate_layout([ImageItem("poster", 20.0, 27.2)])
    assert len(pages) == 1
    placed = pages[0].images[0]
    assert (placed.x, placed.y, placed.rotated) == (0, 0, False)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_layout_invariants(seed):
    images = _random_images(seed, 30)
    pages = calculate_layout(images)
    placed = _all_placed(pages)

    assert sorted(img.id for img in placed) == sorted(img.id for img in images)
    for page in pages:
        for i, a in enumerate(page.images):
            assert a.page_index == page.page_index
            assert within_area(a.footprint, A4.print_width, A4.print_height)
            if a.rotated:
                assert (a.display_width, a.display_height) == (a.image.height, a.image.width)
            else:
                assert (a.display_width, a.display_height) == (a.image.width, a.image.height)
            for b in page.images[i + 1:]:
                assert not overlaps(a.footprint, b.footprint)


def test_layout_is_deterministic():
    images = _random_images(3, 25)
    assert calculate_layout(images) == calculate_layout(list(images))


def test_search_result_is_no_worse_than_any_strategy():
    images = _random_images(11, 20)
    best = layout_score(calculate_layout(images))
    for strategy in DEFAULT_STRATEGIES:
        assert best <= layout_score(pack_pages(images, strategy.sort, strategy.heuristic))


def test_evaluate_strategies_reports_every_strategy_in_order():
    images = _random_images(5, 8)
    results = evaluate_strategies(images, FULL_STRATEGIES)
    assert [r.strategy for r in results] == list(FULL_STRATEGIES)
    assert all(r.score == layout_score(r.pages) for r in results)


def test_injected_catalog_is_used():
    images = [ImageItem("a", 4, 4), ImageItem("b", 6, 3)]
    only = Strategy(SortRule.WIDTH_DESC, Heuristic.TOP_RIGHT)
    best = search_layouts(images, [only])
    assert best.strategy == only
    assert best.pages == pack_pages(images, only.sort, only.heuristic)


def test_reject_policy_propagates_from_search():
    with pytest.raises(OversizedImageError):
        calculate_layout([ImageItem("huge", 40, 40)], oversize_policy=OversizePolicy.REJECT)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
