"""
Page geometry for the document builder.

Coordinates are points with the origin at the top-left corner of the page
and y growing downwards.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple

from reportlab.lib.pagesizes import A4, LETTER

from .operations import DrawCommand


@dataclass
class Margins:
    """Page margins in points"""
    top: float
    bottom: float
    left: float
    right: float


@dataclass(frozen=True)
class PageSpec:
    """Page layout specification"""
    width: float       # in points
    height: float      # in points
    top_margin: float
    right_margin: float
    bottom_margin: float
    left_margin: float

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    def new_margins(self) -> Margins:
        return Margins(
            top=self.top_margin, bottom=self.bottom_margin,
            left=self.left_margin, right=self.right_margin,
        )

    @classmethod
    def us_letter(cls, margin: float = 72) -> 'PageSpec':
        """US Letter (8.5 x 11 in)"""
        return cls(
            width=LETTER[0], height=LETTER[1],
            top_margin=margin, right_margin=margin,
            bottom_margin=margin, left_margin=margin
        )

    @classmethod
    def a4(cls, margin: float = 72) -> 'PageSpec':
        """Standard A4 (210 x 297 mm)"""
        return cls(
            width=A4[0], height=A4[1],
            top_margin=margin, right_margin=margin,
            bottom_margin=margin, left_margin=margin
        )

    @classmethod
    def named(cls, name: str, margin: float = 72) -> 'PageSpec':
        """Page spec by name ('letter' or 'a4')"""
        factories = {
            'letter': cls.us_letter,
            'a4': cls.a4,
        }
        factory = factories.get(name.lower())
        if not factory:
            raise ValueError(
                f"Unknown page size: {name}. "
                f"Available: {list(factories.keys())}"
            )
        return factory(margin)


@dataclass
class Page:
    """One page of the document buffer"""
    index: int
    width: float
    height: float
    margins: Margins
    commands: List[DrawCommand] = field(default_factory=list)

    @property
    def number(self) -> int:
        """1-based page number as displayed"""
        return self.index + 1

    @property
    def content_top(self) -> float:
        return self.margins.top

    @property
    def content_bottom(self) -> float:
        return self.height - self.margins.bottom

    @property
    def content_left(self) -> float:
        return self.margins.left

    @property
    def content_right(self) -> float:
        return self.width - self.margins.right

    @property
    def content_box(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom)"""
        return (self.content_left, self.content_top, self.content_right, self.content_bottom)

    @contextmanager
    def margin_override(
        self,
        top: Optional[float] = None,
        bottom: Optional[float] = None,
        left: Optional[float] = None,
        right: Optional[float] = None,
    ) -> Iterator[Margins]:
        """
        Temporarily replace some margins.

        The original margins are restored on every exit path, including
        when the body raises.
        """
        saved = replace(self.margins)
        if top is not None:
            self.margins.top = top
        if bottom is not None:
            self.margins.bottom = bottom
        if left is not None:
            self.margins.left = left
        if right is not None:
            self.margins.right = right
        try:
            yield saved
        finally:
            self.margins.top = saved.top
            self.margins.bottom = saved.bottom
            self.margins.left = saved.left
            self.margins.right = saved.right

    @classmethod
    def from_spec(cls, index: int, spec: PageSpec) -> 'Page':
        return cls(index=index, width=spec.width, height=spec.height, margins=spec.new_margins())
