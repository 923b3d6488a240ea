"""
Logging utilities for PagePack.

Handles logging setup and summaries of input validation and layout runs.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_LOG_FILE = "pagepack_debug.log"


def setup_logging(log_file: Optional[str] = DEFAULT_LOG_FILE, console_level: int = logging.INFO) -> None:
    """Setup logging to both file and console."""
    # Create logger
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    logger.handlers.clear()

    # File handler - detailed logs
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s')
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Console handler - important messages only
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    logging.info(f"Logging initialized. Debug log: {log_file or 'disabled'}")


def log_input_validation(source: str, total: int, valid: int, errors: Sequence[str]) -> None:
    """
    Log image list validation results.

    Args:
        source: Where the images came from
        total: Records read
        valid: Records accepted
        errors: Validation error messages
    """
    logger = logging.getLogger(__name__)

    logger.info(f"Image validation results for '{source}':")
    logger.info(f"  Records read: {total}")
    logger.info(f"  Valid images: {valid}")
    logger.info(f"  Validation errors: {len(errors)}")

    if errors:
        logger.warning("Validation errors:")
        for error in errors[:10]:  # Log first 10 errors
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")


def log_layout_calculation(results, best, statistics: dict, calculation_time: float) -> None:
    """
    Log the strategy search.

    Args:
        results: StrategyResult per strategy tried
        best: The selected StrategyResult
        statistics: Output of validate.layout_statistics for the best layout
        calculation_time: Time taken for the search
    """
    logger = logging.getLogger(__name__)

    logger.info(f"Layout calculation ({len(results)} strategies):")
    for result in results:
        marker = "*" if result is best else " "
        logger.info(f"  {marker} {result.strategy.name:<34} pages {len(result.pages):>3}  score {result.score:.2f}")
    logger.info(f"  Pages: {statistics['pages']}")
    logger.info(f"  Images placed: {statistics['images']}")
    logger.info(f"  Mean fill: {statistics['mean_fill']:.1%}")
    logger.info(f"  Calculation time: {calculation_time:.3f} seconds")


def write_layout_report(report_path: Path, source: str, timestamp: datetime, strategy: str,
                        statistics: dict, num_inputs: int, problems: Sequence[str],
                        process_time: float, error: Optional[str] = None) -> None:
    """
    Write a plain-text report of a layout run.

    Args:
        report_path: Path to report file
        source: Input file name
        timestamp: Run start timestamp
        strategy: Name of the selected strategy
        statistics: Output of validate.layout_statistics
        num_inputs: Number of valid input images
        problems: Layout validation problems
        process_time: Processing time in seconds
        error: Error message if the run failed
    """
    status = 'ERROR' if error else ('WARNINGS' if problems else 'OK')
    report = f"""PagePack - Layout Report
{'=' * 50}

Run Information:
    Input: {source}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}
    Status: {status}

Layout:
    Strategy: {strategy}
    Input Images: {num_inputs}
    Images Placed: {statistics.get('images', 0)}
    Pages: {statistics.get('pages', 0)}
    Score: {statistics.get('score', 0):.2f}
    Mean Fill: {statistics.get('mean_fill', 0.0):.1%}

"""
    fill_ratios = statistics.get('fill_ratios', [])
    if fill_ratios:
        report += "Page Fill:\n"
        for index, ratio in enumerate(fill_ratios):
            report += f"    Page {index + 1}: {ratio:.1%}\n"
        report += "\n"

    if problems:
        report += "Problems:\n"
        for problem in problems:
            report += f"    - {problem}\n"
        report += "\n"

    if error:
        report += f"""Error Information:
    Error: {error}

"""

    report += f"""Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
"""

    logger = logging.getLogger(__name__)
    try:
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write(report)
        logger.info(f"Layout report written: {report_path}")
    except OSError as e:
        logger.error(f"Failed to write layout report {report_path}: {e}")
