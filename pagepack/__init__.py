"""
PagePack - automatic A4 page layout for printable images

Packs independently-sized images onto the fewest printable pages,
allowing 90 degree rotation, by trying several sort and placement
heuristics and keeping the most compact layout.
"""

from .geometry import Rect, overlaps, contains
from .layout import (
    PageSpec,
    ImageItem,
    PlacedImage,
    PageLayout,
    SortRule,
    OversizePolicy,
    OversizedImageError,
)
from .heuristics import Heuristic
from .strategies import (
    Strategy,
    DEFAULT_STRATEGIES,
    FULL_STRATEGIES,
    calculate_layout,
    layout_score,
)

__version__ = "1.0.0"
__author__ = "PagePack Team"
