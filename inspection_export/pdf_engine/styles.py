"""
Font management and style resolution for the document builder.

This module handles:
- The registered font set (PDF standard fonts + optional TrueType fonts)
- Resolving symbolic style descriptors (font, size, colour, alignment)
  into validated rendering parameters
"""

import os
import re
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from reportlab.lib import colors
from reportlab.lib.colors import Color, HexColor
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..exceptions import InvalidStyle


logger = logging.getLogger(__name__)


_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class Alignment(str, Enum):
    """Horizontal text alignment"""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class LineCap(str, Enum):
    """Stroke end style for ruled lines"""
    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"

    @property
    def pdf_code(self) -> int:
        return {LineCap.BUTT: 0, LineCap.ROUND: 1, LineCap.SQUARE: 2}[self]


class FontManager:
    """
    Manages the set of fonts the builder may use.

    Handles:
    - The 14 PDF standard fonts (always available)
    - TrueType font discovery across search paths and registration
      with ReportLab
    """

    DEFAULT_SEARCH_PATHS = [
        # System paths (Linux)
        '/usr/share/fonts/truetype/dejavu/',
        '/usr/share/fonts/TTF/',
        '/usr/local/share/fonts/',

        # User paths
        os.path.expanduser('~/.fonts/'),

        # Project paths
        './fonts/',
        './assets/fonts/',
    ]

    def __init__(self, additional_paths: Optional[List[str]] = None):
        """
        Initialize FontManager.

        Args:
            additional_paths: Extra paths to search for fonts
        """
        self.search_paths = list(self.DEFAULT_SEARCH_PATHS)
        if additional_paths:
            self.search_paths = list(additional_paths) + self.search_paths

        self._registered_fonts: Dict[str, str] = {}
        self._font_cache: Dict[str, str] = {}

    @property
    def standard_fonts(self) -> Tuple[str, ...]:
        return tuple(pdfmetrics.standardFonts)

    def find_font_file(self, filename: str) -> Optional[str]:
        """
        Find a font file in search paths.

        Args:
            filename: Font filename (e.g., 'DejaVuSerif.ttf')

        Returns:
            Full path to font file, or None if not found
        """
        if filename in self._font_cache:
            return self._font_cache[filename]

        if Path(filename).is_absolute() and Path(filename).exists():
            self._font_cache[filename] = filename
            return filename

        for search_path in self.search_paths:
            path = Path(search_path) / filename
            if path.exists():
                self._font_cache[filename] = str(path)
                return str(path)

        logger.warning(f"Font file not found: {filename}")
        return None

    def register_font(self, font_name: str, font_file: str) -> bool:
        """
        Register a single TrueType font with ReportLab.

        Args:
            font_name: Name to register (e.g., 'DejaVuSerif')
            font_file: Font filename or absolute path

        Returns:
            True if registration successful
        """
        if font_name in self._registered_fonts:
            return True

        font_path = self.find_font_file(font_file)
        if not font_path:
            logger.error(f"Cannot register font {font_name}: file not found")
            return False

        try:
            pdfmetrics.registerFont(TTFont(font_name, font_path))
        except Exception as e:
            logger.error(f"Failed to register font {font_name}: {e}")
            return False

        self._registered_fonts[font_name] = font_path
        logger.debug(f"Registered font: {font_name} from {font_path}")
        return True

    def register_fonts(self, fonts: Dict[str, str]) -> bool:
        """Register several fonts; True only if all succeeded"""
        success = True
        for font_name, font_file in fonts.items():
            if not self.register_font(font_name, font_file):
                success = False
        return success

    def is_available(self, font_name: str) -> bool:
        return font_name in self.standard_fonts or font_name in self._registered_fonts

    def available_fonts(self) -> Set[str]:
        return set(self.standard_fonts) | set(self._registered_fonts)

    def get_registered_fonts(self) -> Dict[str, str]:
        """Get dict of registered TrueType font names to paths."""
        return dict(self._registered_fonts)


@dataclass(frozen=True)
class ResolvedStyle:
    """Validated rendering parameters"""
    font_name: str
    size: float
    color_hex: str  # normalised '#rrggbb'
    alignment: Alignment = Alignment.LEFT
    line_gap: float = 0.0

    @property
    def color(self) -> Color:
        return HexColor(self.color_hex)

    @property
    def ascent(self) -> float:
        return pdfmetrics.getAscentDescent(self.font_name, self.size)[0]

    @property
    def descent(self) -> float:
        return pdfmetrics.getAscentDescent(self.font_name, self.size)[1]

    @property
    def line_height(self) -> float:
        ascent, descent = pdfmetrics.getAscentDescent(self.font_name, self.size)
        return ascent - descent + self.line_gap

    def width_of(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self.font_name, self.size)

    def with_alignment(self, alignment: Alignment) -> 'ResolvedStyle':
        return ResolvedStyle(self.font_name, self.size, self.color_hex, alignment, self.line_gap)


class StyleResolver:
    """
    Maps symbolic style descriptors to ResolvedStyle.

    Pure: the same inputs always yield the same result, and nothing is
    mutated. Fails with InvalidStyle before any content is written.
    """

    def __init__(self, font_manager: Optional[FontManager] = None, line_gap: float = 0.0):
        self.font_manager = font_manager or FontManager()
        self.line_gap = line_gap
        self._named_colors = {
            name.lower(): color for name, color in colors.getAllNamedColors().items()
        }

    def resolve(
        self,
        font: str,
        size: float,
        color: str = "black",
        alignment: str = "left",
    ) -> ResolvedStyle:
        return ResolvedStyle(
            font_name=self.resolve_font(font),
            size=self.resolve_size(size),
            color_hex=self.resolve_color(color),
            alignment=self.resolve_alignment(alignment),
            line_gap=self.line_gap,
        )

    def resolve_font(self, font: str) -> str:
        if not font or not self.font_manager.is_available(font):
            raise InvalidStyle(f"Font is not registered: {font!r}", font)
        return font

    def resolve_size(self, size: float) -> float:
        try:
            value = float(size)
        except (TypeError, ValueError) as e:
            raise InvalidStyle(f"Font size is not a number: {size!r}", size) from e
        if not value > 0:
            raise InvalidStyle(f"Font size must be positive: {size!r}", size)
        return value

    def resolve_color(self, color: str) -> str:
        """Return the colour token as '#rrggbb'"""
        token = (color or "").strip()
        if _HEX_COLOR.match(token):
            digits = token[1:].lower()
            if len(digits) == 3:
                digits = "".join(ch * 2 for ch in digits)
            return f"#{digits}"

        named = self._named_colors.get(token.lower())
        if named is None:
            raise InvalidStyle(f"Unknown colour: {color!r}", color)
        red, green, blue = (int(round(channel * 255)) for channel in named.rgb())
        return f"#{red:02x}{green:02x}{blue:02x}"

    def resolve_alignment(self, alignment: str) -> Alignment:
        try:
            return Alignment((alignment or "").strip().lower())
        except ValueError as e:
            raise InvalidStyle(f"Unknown alignment: {alignment!r}", alignment) from e

    def resolve_line_cap(self, cap: str) -> LineCap:
        try:
            return LineCap((cap or "").strip().lower())
        except ValueError as e:
            raise InvalidStyle(f"Unknown line cap: {cap!r}", cap) from e
