"""
Committed content operations and the draw commands they leave on pages.

A ContentOperation is the record of one successful builder call; the
document's pages are exactly the fold of these records in submission
order. Draw commands are what the renderer replays for each page.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .styles import LineCap, ResolvedStyle


class OperationKind(str, Enum):
    """Kinds of committed content operations"""
    TEXT = "text"
    POSITIONED_TEXT = "positioned_text"
    LINE = "line"
    UNDERLINED_TEXT = "underlined_text"
    SLICED_TEXT = "sliced_text"
    LIST_ITEM = "list_item"
    PAGE_BREAK = "page_break"
    SET_FONT = "set_font"
    MOVE_DOWN = "move_down"
    HEADER = "header"
    FOOTER = "footer"


@dataclass(frozen=True)
class ContentOperation:
    """One committed builder call"""
    sequence: int
    kind: OperationKind
    page_index: int  # page active at commit time
    style: Optional[ResolvedStyle] = None
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Fragment:
    """A run of text in a single style"""
    text: str
    style: ResolvedStyle

    @property
    def width(self) -> float:
        return self.style.width_of(self.text)


@dataclass(frozen=True)
class TextLine:
    """One laid-out line of text; y is the top of the line box"""
    x: float
    y: float
    fragments: Tuple[Fragment, ...]
    ascent: float
    word_space: float = 0.0
    underline: bool = False

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)


@dataclass(frozen=True)
class Rule:
    """A straight stroked segment"""
    x1: float
    y1: float
    x2: float
    y2: float
    color_hex: str
    cap: LineCap = LineCap.BUTT
    width: float = 1.0


@dataclass(frozen=True)
class Picture:
    """An embedded raster image; (x, y) is its top-left corner"""
    x: float
    y: float
    width: float
    height: float
    data: bytes


DrawCommand = Union[TextLine, Rule, Picture]
