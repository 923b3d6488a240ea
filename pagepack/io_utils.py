"""
io_utils.py - JSON input and output for layouts

Input is a list of ``{"id", "width", "height"}`` records in centimetres,
either bare or under an ``"images"`` key. Output is the page list with every
placement's position, rotation and display size.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .layout import A4, ImageItem, PageLayout, PageSpec, PlacedImage

logger = logging.getLogger(__name__)

# Image sizes are rounded to this many decimals (0.01 cm) on load
SIZE_DECIMALS = 2


def parse_images(records: Sequence[Any]) -> Tuple[List[ImageItem], List[str]]:
    """
    Turn raw records into ImageItems, collecting problems instead of failing.

    Returns:
        Tuple of (valid_images, error_messages)
    """
    images = []
    errors = []
    seen = set()

    for index, record in enumerate(records):
        if not isinstance(record, dict):
            errors.append(f"Entry {index}: expected an object, got {type(record).__name__}")
            continue

        image_id = str(record.get("id", f"image-{index + 1}"))
        if image_id in seen:
            errors.append(f"Entry {index}: duplicate id {image_id}")
            continue

        try:
            width = round(float(record["width"]), SIZE_DECIMALS)
            height = round(float(record["height"]), SIZE_DECIMALS)
            image = ImageItem(image_id, width, height)
        except KeyError as e:
            errors.append(f"Entry {index} ({image_id}): missing field {e}")
            continue
        except (TypeError, ValueError) as e:
            errors.append(f"Entry {index} ({image_id}): {e}")
            continue

        seen.add(image_id)
        images.append(image)

    return images, errors


def load_images(path: Path) -> Tuple[List[ImageItem], List[str]]:
    """Read an image list from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("images", [])
    if not isinstance(data, list):
        return [], [f"{path}: expected a list of images"]

    logger.debug(f"Read {len(data)} image record(s) from {path}")
    return parse_images(data)


def placed_to_dict(placed: PlacedImage) -> Dict[str, Any]:
    return {
        "id": placed.id,
        "x": placed.x,
        "y": placed.y,
        "pageIndex": placed.page_index,
        "rotated": placed.rotated,
        "width": placed.image.width,
        "height": placed.image.height,
        "displayWidth": placed.display_width,
        "displayHeight": placed.display_height,
    }


def layout_to_dict(
    pages: Sequence[PageLayout],
    page: PageSpec = A4,
    strategy: Optional[str] = None,
    score: Optional[float] = None,
) -> Dict[str, Any]:
    return {
        "page": {
            "width": page.width,
            "height": page.height,
            "marginTop": page.margin_top,
            "marginBottom": page.margin_bottom,
            "marginLeft": page.margin_left,
            "marginRight": page.margin_right,
            "printWidth": page.print_width,
            "printHeight": page.print_height,
        },
        "strategy": strategy,
        "score": score,
        "pages": [
            {"pageIndex": p.page_index, "images": [placed_to_dict(img) for img in p.images]}
            for p in pages
        ],
    }


def layout_from_dict(data: Dict[str, Any]) -> List[PageLayout]:
    """Rebuild pages from ``layout_to_dict`` output."""
    pages = []
    for page_data in data.get("pages", []):
        images = []
        for item in page_data.get("images", []):
            image = ImageItem(str(item["id"]), float(item["width"]), float(item["height"]))
            images.append(PlacedImage(
                image=image,
                x=float(item["x"]),
                y=float(item["y"]),
                page_index=int(item.get("pageIndex", page_data["pageIndex"])),
                rotated=bool(item["rotated"]),
                display_width=float(item["displayWidth"]),
                display_height=float(item["displayHeight"]),
            ))
        pages.append(PageLayout(int(page_data["pageIndex"]), tuple(images)))
    return pages


def save_layout_json(path: Path, layout: Dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(layout, f, indent=2)
    logger.info(f"Layout written: {path}")
