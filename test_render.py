#!/usr/bin/env python3
"""
Test PNG preview and PDF proof rendering.
"""

import fitz
import pytest
from PIL import Image

from pagepack.layout import A4, ImageItem, PageLayout, PlacedImage
from pagepack.render import render_page_preview, save_pdf_proof, save_preview_png
from pagepack.strategies import calculate_layout


@pytest.fixture
def pages():
    images = [ImageItem(f"card{i}", 9.0, 13.0) for i in range(5)] + [ImageItem("banner", 25, 5)]
    return calculate_layout(images)


def test_preview_matches_sheet_size(pages):
    img = render_page_preview(pages[0], A4, dpi=72)
    assert img.size == (595, 842)
    assert img.mode == "RGB"


def test_preview_marks_placement():
    placed = PlacedImage.place(ImageItem("box", 5, 5), 0, 0, 0, False)
    img = render_page_preview(PageLayout(0, (placed,)), A4, dpi=72)
    # Centre of the box (margins 0.5cm left, 1.5cm top) is filled, not sheet white
    assert img.getpixel((85, 113)) != (255, 255, 255)
    assert img.getpixel((500, 800)) == (255, 255, 255)


def test_save_preview_png_writes_one_file_per_page(tmp_path, pages):
    paths = save_preview_png(pages, str(tmp_path / "previews" / "sheet"), A4, dpi=36)
    assert len(paths) == len(pages)
    assert paths[0].name == "sheet_page1.png"
    with Image.open(paths[0]) as img:
        assert img.size == (298, 421)


def test_save_pdf_proof(tmp_path, pages):
    path = tmp_path / "proof.pdf"
    save_pdf_proof(pages, str(path), A4)

    doc = fitz.open(str(path))
    try:
        assert doc.page_count == len(pages)
        assert doc[0].rect.width == pytest.approx(595.28, abs=0.1)
        assert doc[0].rect.height == pytest.approx(841.89, abs=0.1)
        text = "".join(page.get_text() for page in doc)
        assert "banner" in text
        assert "(rotated)" in text
    finally:
        doc.close()


def test_pdf_proof_of_empty_layout_raises(tmp_path):
    with pytest.raises(ValueError):
        save_pdf_proof([], str(tmp_path / "empty.pdf"))


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
