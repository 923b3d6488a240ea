from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

import fitz  # PyMuPDF
from PIL import Image, ImageDraw, ImageFont

from .geometry import within_area
from .layout import A4, PageLayout, PageSpec
from .units import cm_to_pt, cm_to_px

# Preview colours (RGB)
SHEET_COLOR = (255, 255, 255)
PRINT_AREA_COLOR = (190, 190, 190)
IMAGE_FILL = (225, 232, 245)
IMAGE_OUTLINE = (40, 60, 120)
OVERFLOW_OUTLINE = (200, 30, 30)


def render_page_preview(page_layout: PageLayout, page: PageSpec = A4, dpi: int = 72) -> Image.Image:
    """
    Draw one layout page as boxes on a white sheet.

    Each placement is drawn as a filled, outlined box labelled with its id.
    Rotated placements get a diagonal; placements that leave the print area
    are outlined in red.
    """
    sheet_w = cm_to_px(page.width, dpi)
    sheet_h = cm_to_px(page.height, dpi)
    logging.debug(f"Rendering preview of page {page_layout.page_index}: {sheet_w}x{sheet_h}px at {dpi} DPI")

    img = Image.new("RGB", (sheet_w, sheet_h), color=SHEET_COLOR)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    left = cm_to_px(page.margin_left, dpi)
    top = cm_to_px(page.margin_top, dpi)
    draw.rectangle(
        [left, top, left + cm_to_px(page.print_width, dpi), top + cm_to_px(page.print_height, dpi)],
        outline=PRINT_AREA_COLOR,
    )

    for placed in page_layout.images:
        x_cm, y_cm = page.to_page_coords(placed)
        x0 = cm_to_px(x_cm, dpi)
        y0 = cm_to_px(y_cm, dpi)
        x1 = x0 + max(1, cm_to_px(placed.display_width, dpi)) - 1
        y1 = y0 + max(1, cm_to_px(placed.display_height, dpi)) - 1

        overflow = not within_area(placed.footprint, page.print_width, page.print_height)
        draw.rectangle([x0, y0, x1, y1], fill=IMAGE_FILL, outline=OVERFLOW_OUTLINE if overflow else IMAGE_OUTLINE)
        if placed.rotated:
            draw.line([x0, y0, x1, y1], fill=IMAGE_OUTLINE)
        draw.text((x0 + 3, y0 + 3), placed.id, fill=IMAGE_OUTLINE, font=font)

    return img


def save_preview_png(
    pages: Sequence[PageLayout],
    output_stem: str,
    page: PageSpec = A4,
    dpi: int = 72,
) -> List[Path]:
    """Write one PNG per page as ``<stem>_page<N>.png``; returns the paths."""
    stem = Path(output_stem)
    stem.parent.mkdir(parents=True, exist_ok=True)

    paths = []
    for page_layout in pages:
        path = stem.parent / f"{stem.name}_page{page_layout.page_index + 1}.png"
        render_page_preview(page_layout, page, dpi).save(path, format="PNG", dpi=(dpi, dpi))
        paths.append(path)
        logging.info(f"Wrote preview: {path}")
    return paths


def save_pdf_proof(pages: Sequence[PageLayout], path: str, page: PageSpec = A4) -> None:
    """
    Write a PDF proof: one page per layout page, placements as labelled boxes.

    Coordinates are mapped to absolute page positions (margins added) and
    converted to points.
    """
    if not pages:
        raise ValueError("Cannot write a PDF proof of an empty layout")

    width_pt = cm_to_pt(page.width)
    height_pt = cm_to_pt(page.height)
    doc = fitz.open()

    for page_layout in pages:
        pdf_page = doc.new_page(width=width_pt, height=height_pt)

        print_rect = fitz.Rect(
            cm_to_pt(page.margin_left),
            cm_to_pt(page.margin_top),
            cm_to_pt(page.margin_left + page.print_width),
            cm_to_pt(page.margin_top + page.print_height),
        )
        pdf_page.draw_rect(print_rect, color=(0.75, 0.75, 0.75), width=0.5)

        for placed in page_layout.images:
            x_cm, y_cm = page.to_page_coords(placed)
            rect = fitz.Rect(
                cm_to_pt(x_cm),
                cm_to_pt(y_cm),
                cm_to_pt(x_cm + placed.display_width),
                cm_to_pt(y_cm + placed.display_height),
            )
            pdf_page.draw_rect(rect, color=(0.15, 0.25, 0.5), fill=(0.88, 0.91, 0.96), width=0.75)
            label = f"{placed.id} {placed.image.width:g}x{placed.image.height:g}cm"
            if placed.rotated:
                label += " (rotated)"
            pdf_page.insert_text(fitz.Point(rect.x0 + 3, rect.y0 + 10), label, fontsize=7)

    doc.save(path)
    doc.close()
    logging.info(f"Wrote PDF proof: {path} ({len(pages)} page(s))")
