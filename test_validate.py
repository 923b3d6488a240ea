#!/usr/bin/env python3
"""
Tests for layout validation and fill statistics.
"""

import pytest

from pagepack.layout import ImageItem, PageLayout, PlacedImage
from pagepack.strategies import calculate_layout
from pagepack.validate import layout_statistics, page_fill_ratio, validate_layout


def _place(image, x=0.0, y=0.0, page_index=0, rotated=False):
    return PlacedImage.place(image, x, y, page_index, rotated)


def test_computed_layout_is_valid():
    images = [ImageItem(f"p{i}", 6.5, 9.0) for i in range(9)]
    assert validate_layout(images, calculate_layout(images)) == []


def test_detects_missing_and_duplicate_images():
    a, b = ImageItem("a", 5, 5), ImageItem("b", 5, 5)
    pages = [PageLayout(0, (_place(a), _place(a, x=5)))]
    problems = validate_layout([a, b], pages)
    assert any("b is missing" in p for p in problems)
    assert any("a is placed 2 times" in p for p in problems)


def test_detects_unknown_image():
    pages = [PageLayout(0, (_place(ImageItem("ghost", 1, 1)),))]
    assert any("not part of the input" in p for p in validate_layout([], pages))


def test_detects_overlap_and_overflow():
    a, b, c = ImageItem("a", 5, 5), ImageItem("b", 5, 5), ImageItem("c", 30, 25)
    pages = [
        PageLayout(0, (_place(a), _place(b, x=2, y=2))),
        PageLayout(1, (_place(c, page_index=1),)),
    ]
    problems = validate_layout([a, b, c], pages)
    assert any("a and b overlap on page 0" in p for p in problems)
    assert any("c exceeds the print area" in p for p in problems)


def test_detects_rotation_and_page_mismatch():
    a = ImageItem("a", 4, 6)
    bad = PlacedImage(a, 0, 0, 3, True, 4, 6)
    problems = validate_layout([a], [PageLayout(0, (bad,))])
    assert any("does not match rotated=True" in p for p in problems)
    assert any("claims page 3" in p for p in problems)


def test_page_fill_ratio():
    page = PageLayout(0, (_place(ImageItem("half", 10, 13.6)),))
    assert page_fill_ratio(page) == pytest.approx(0.25)
    assert page_fill_ratio(PageLayout(0, ())) == 0.0


def test_fill_ratio_clips_overflow():
    page = PageLayout(0, (_place(ImageItem("huge", 30, 30)),))
    assert page_fill_ratio(page) == pytest.approx(1.0)


def test_layout_statistics():
    images = [ImageItem("a", 10, 13.6), ImageItem("b", 10, 13.6)]
    stats = layout_statistics(calculate_layout(images))
    assert stats["pages"] == 1
    assert stats["images"] == 2
    assert stats["mean_fill"] == pytest.approx(0.5)
    assert stats["score"] == pytest.approx(10000 + 13.6)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
