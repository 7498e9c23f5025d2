"""
Pagination tracking for the document builder.

The tracker owns the running cursor and the page count. Builder operations
plan on a copy of the tracker and swap it in only once the whole operation
has been laid out, so a failed operation never moves the cursor.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .page import PageSpec


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListLayout:
    """Fixed geometry for numbered list items"""
    number_x: float = 72.0
    text_x: float = 90.0
    overflow_threshold: float = 600.0  # measured from the top margin
    top_of_page: float = 72.0          # absolute y after an overflow break


@dataclass
class PaginationTracker:
    """Cursor position and page count of a document"""
    page_spec: PageSpec
    page_count: int = 1
    x: Optional[float] = None
    y: Optional[float] = None

    def __post_init__(self):
        if self.x is None:
            self.x = self.page_spec.left_margin
        if self.y is None:
            self.y = self.page_spec.top_margin

    @property
    def page_index(self) -> int:
        """0-based index of the active page"""
        return self.page_count - 1

    @property
    def content_bottom(self) -> float:
        return self.page_spec.height - self.page_spec.bottom_margin

    @property
    def content_width(self) -> float:
        return self.page_spec.width - self.page_spec.left_margin - self.page_spec.right_margin

    def copy(self) -> 'PaginationTracker':
        return replace(self)

    def fits(self, height: float) -> bool:
        """Whether a box of this height fits above the bottom margin"""
        return self.y + height <= self.content_bottom

    def new_page(self, y: Optional[float] = None) -> int:
        """Start a new page and move the cursor to its top"""
        self.page_count += 1
        self.x = self.page_spec.left_margin
        self.y = self.page_spec.top_margin if y is None else y
        return self.page_index

    def ensure_room(self, height: float) -> bool:
        """Break the page if a box of this height does not fit; True if it broke"""
        if self.fits(height) or self.y <= self.page_spec.top_margin:
            return False
        logger.debug(f"Implicit page break at y={self.y:.1f} (needed {height:.1f})")
        self.new_page()
        return True

    def move_down(self, distance: float):
        self.y += distance

    def list_overflowed(self, layout: ListLayout) -> bool:
        """Whether the cursor has crossed the numbered-list threshold"""
        return self.y > self.page_spec.top_margin + layout.overflow_threshold
