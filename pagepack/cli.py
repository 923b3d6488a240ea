from __future__ import annotations

import argparse
import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List

from .io_utils import layout_from_dict, layout_to_dict, load_images, save_layout_json
from .layout import OversizePolicy, OversizedImageError, PageSpec, find_oversized
from .logger import log_input_validation, log_layout_calculation, setup_logging, write_layout_report
from .render import save_pdf_proof, save_preview_png
from .strategies import STRATEGY_CATALOGS, Strategy, evaluate_strategies, select_best
from .validate import layout_statistics, validate_layout


def _page_from_args(args: argparse.Namespace) -> PageSpec:
    return PageSpec(
        width=args.page_width_cm,
        height=args.page_height_cm,
        margin_top=args.margin_top_cm,
        margin_bottom=args.margin_bottom_cm,
        margin_left=args.margin_left_cm,
        margin_right=args.margin_right_cm,
    )


def _strategies_from_args(args: argparse.Namespace) -> List[Strategy]:
    if args.strategy:
        return [Strategy.parse(name) for name in args.strategy]
    return list(STRATEGY_CATALOGS[args.catalog])


def cli_layout(args: argparse.Namespace) -> int:
    """Compute the best layout for an image list and write the requested outputs."""
    logging.info("Starting layout operation")
    logging.debug(f"Args: {vars(args)}")
    started = datetime.now()
    start_time = time.time()

    try:
        images, errors = load_images(Path(args.input))
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Error reading image list: {e}")
        print(f"Error reading image list: {e}")
        return 5

    log_input_validation(args.input, len(images) + len(errors), len(images), errors)
    if errors and args.strict:
        print(f"{len(errors)} invalid image record(s); aborting (--strict)")
        return 1
    if not images:
        logging.error("No valid images found in input")
        print("No valid images found in input")
        return 1

    try:
        page = _page_from_args(args)
        strategies = _strategies_from_args(args)
    except ValueError as e:
        logging.error(f"Invalid layout settings: {e}")
        print(f"Error: {e}")
        return 1

    policy = OversizePolicy(args.oversize_policy)
    oversized = find_oversized(images, page)
    if oversized:
        logging.warning(f"{len(oversized)} image(s) larger than the {page.print_width}x{page.print_height}cm print area")

    try:
        results = evaluate_strategies(images, strategies, page, policy)
    except OversizedImageError as e:
        logging.error(str(e))
        print(f"Error: {e}")
        return 4

    best = select_best(results)
    stats = layout_statistics(best.pages, page)
    log_layout_calculation(results, best, stats, time.time() - start_time)

    problems = validate_layout(images, best.pages, page)
    for problem in problems:
        logging.warning(problem)

    print(f"Laid out {stats['images']} image(s) on {stats['pages']} page(s) using {best.strategy.name}")

    try:
        if args.output:
            save_layout_json(Path(args.output), layout_to_dict(best.pages, page, best.strategy.name, best.score))
            print(f"Wrote layout: {args.output}")

        if args.pdf:
            Path(args.pdf).parent.mkdir(parents=True, exist_ok=True)
            save_pdf_proof(best.pages, args.pdf, page)
            print(f"Wrote PDF proof: {args.pdf}")

        if args.preview:
            paths = save_preview_png(best.pages, args.preview, page, args.preview_dpi)
            print(f"Wrote {len(paths)} preview PNG(s)")
    except OSError as e:
        logging.error(f"Error writing output: {e}")
        print(f"Error writing output: {e}")
        return 5

    if args.report:
        write_layout_report(
            Path(args.report), args.input, started, best.strategy.name, stats,
            len(images), problems, time.time() - start_time,
        )

    return 0


def cli_validate(args: argparse.Namespace) -> int:
    """Check a saved layout against its image list."""
    try:
        images, errors = load_images(Path(args.images))
        with open(args.layout, "r", encoding="utf-8") as f:
            data = json.load(f)
        pages = layout_from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
        logging.error(f"Error reading inputs: {e}")
        print(f"Error reading inputs: {e}")
        return 5

    try:
        page = _page_from_args(args)
    except ValueError as e:
        logging.error(f"Invalid page settings: {e}")
        print(f"Error: {e}")
        return 1

    log_input_validation(args.images, len(images) + len(errors), len(images), errors)
    problems = validate_layout(images, pages, page)

    if problems:
        print(f"Layout has {len(problems)} problem(s):")
        for problem in problems:
            print(f"  - {problem}")
        return 4

    print(f"Layout is valid: {sum(len(p.images) for p in pages)} image(s) on {len(pages)} page(s)")
    return 0


def cli_strategies(args: argparse.Namespace) -> int:
    """List the strategies of a catalog."""
    for index, strategy in enumerate(STRATEGY_CATALOGS[args.catalog], start=1):
        print(f"{index:2d}. {strategy.name}")
    return 0


def _add_page_arguments(c: argparse.ArgumentParser) -> None:
    defaults = PageSpec.a4()
    c.add_argument("--page-width-cm", type=float, default=defaults.width, help="Page width (cm, default: A4)")
    c.add_argument("--page-height-cm", type=float, default=defaults.height, help="Page height (cm, default: A4)")
    c.add_argument("--margin-top-cm", type=float, default=defaults.margin_top)
    c.add_argument("--margin-bottom-cm", type=float, default=defaults.margin_bottom)
    c.add_argument("--margin-left-cm", type=float, default=defaults.margin_left)
    c.add_argument("--margin-right-cm", type=float, default=defaults.margin_right)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pagepack", description="Pack images onto printable A4 pages")
    sub = p.add_subparsers(dest="cmd")

    c = sub.add_parser("layout", help="Compute the most compact page layout for an image list")
    c.add_argument("--input", required=True, help="JSON image list ({id, width, height} in cm)")
    c.add_argument("--output", help="Output layout JSON path")
    c.add_argument("--pdf", help="Optional PDF proof path")
    c.add_argument("--preview", help="Optional PNG preview path stem (one file per page)")
    c.add_argument("--preview-dpi", type=int, default=72, help="Preview resolution (default: 72)")
    c.add_argument("--report", help="Optional text report path")

    # Layout controls
    c.add_argument("--catalog", choices=sorted(STRATEGY_CATALOGS), default="default",
                   help="Strategy catalog to search (default: 10 strategies)")
    c.add_argument("--strategy", action="append",
                   help="Strategy as SORT/HEURISTIC, e.g. AREA_DESC/TOP_LEFT (repeatable, overrides --catalog)")
    c.add_argument("--oversize-policy", choices=[policy.value for policy in OversizePolicy], default=OversizePolicy.FORCE.value,
                   help="Images larger than the print area: force onto a page or reject the run")
    c.add_argument("--strict", action="store_true", help="Fail if any image record is invalid")
    _add_page_arguments(c)
    c.set_defaults(func=cli_layout)

    v = sub.add_parser("validate", help="Check a layout JSON against its image list")
    v.add_argument("--images", required=True, help="JSON image list")
    v.add_argument("--layout", required=True, help="Layout JSON written by 'layout'")
    _add_page_arguments(v)
    v.set_defaults(func=cli_validate)

    s = sub.add_parser("strategies", help="List the strategies of a catalog")
    s.add_argument("--catalog", choices=sorted(STRATEGY_CATALOGS), default="default")
    s.set_defaults(func=cli_strategies)

    return p


def main(argv: List[str] | None = None) -> int:
    # Setup logging first
    setup_logging()

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        result = args.func(args)
        logging.info(f"Operation completed with exit code: {result}")
        return result
    except Exception as e:
        logging.error(f"Unhandled exception: {e}", exc_info=True)
        print(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
