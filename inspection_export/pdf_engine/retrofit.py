"""
Header/footer retrofit.

Headers and footers are drawn after the body is complete, because a footer
shows "Page X of N" and N is only known once every page exists. The pass
walks a snapshot of the buffered pages, writes into each page directly
(independent of the running cursor) and never creates pages.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from reportlab.lib.utils import ImageReader

from ..exceptions import MalformedPayload
from .layout import align_line, wrap_fragments
from .operations import Fragment, Picture, TextLine
from .page import Page
from .styles import Alignment, ResolvedStyle


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderSpec:
    """Header drawn on every page: date/time text left, logo right"""
    text: str
    style: ResolvedStyle
    horizontal_margin: float
    image: Optional[bytes] = None
    image_size: Optional[Tuple[int, int]] = None  # pixels
    image_height: float = 24.0
    image_offset: float = 10.0


@dataclass(frozen=True)
class FooterSpec:
    """Footer drawn on every page: caller text left, page indicator right"""
    text: str
    left_style: ResolvedStyle
    right_style: ResolvedStyle
    horizontal_margin: float


def page_indicator(index: int, total: int) -> str:
    """Footer page indicator for a 0-based page index"""
    return f"Page {index + 1} of {total}"


def measure_image(data: bytes) -> Tuple[int, int]:
    """
    Validate an image payload and return its pixel size.

    Raises:
        MalformedPayload: If the bytes are not a readable image
    """
    try:
        width, height = ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        raise MalformedPayload(f"Header image is not a readable image: {e}") from e
    if not width or not height:
        raise MalformedPayload("Header image has no pixels")
    return int(width), int(height)


def write_on_page(
    page: Page,
    fragments: Sequence[Fragment],
    x: float,
    y: float,
    width: float,
    alignment: Alignment,
) -> List[TextLine]:
    """
    Lay text out on one specific page without touching any cursor.

    Lines that run past the page's bottom margin are still drawn; the
    page-switch context has no page to flow onto.
    """
    lines: List[TextLine] = []
    for line in wrap_fragments(fragments, width):
        if y + line.line_height > page.content_bottom:
            logger.warning(
                f"Text '{line.text[:30]}' overruns page {page.number} "
                f"(y={y:.1f}, bottom={page.content_bottom:.1f})"
            )
        start_x, word_space = align_line(line, x, width, alignment)
        if line.fragments:
            command = TextLine(
                x=start_x, y=y, fragments=line.fragments,
                ascent=line.ascent, word_space=word_space,
            )
            page.commands.append(command)
            lines.append(command)
        y += line.line_height
    return lines


def apply_header(pages: Sequence[Page], spec: HeaderSpec) -> int:
    """
    Draw the header on every buffered page.

    Returns:
        Number of pages processed
    """
    snapshot = list(pages)
    margin = spec.horizontal_margin

    for page in snapshot:
        original_top = page.margins.top
        with page.margin_override(top=0):
            text_y = original_top / 2
            write_on_page(
                page,
                [Fragment(spec.text, spec.style)],
                x=margin,
                y=text_y,
                width=page.width - 2 * margin,
                alignment=Alignment.LEFT,
            )

            if spec.image and spec.image_size:
                pixel_width, pixel_height = spec.image_size
                height = spec.image_height
                width = height * pixel_width / pixel_height
                page.commands.append(Picture(
                    x=page.width - margin - width,
                    y=text_y - spec.image_offset,
                    width=width,
                    height=height,
                    data=spec.image,
                ))

    logger.info(f"Header applied to {len(snapshot)} pages")
    return len(snapshot)


def apply_footer(pages: Sequence[Page], spec: FooterSpec) -> int:
    """
    Draw the footer on every buffered page.

    The total in "Page X of N" is the page count at the time of the call.

    Returns:
        Number of pages processed
    """
    snapshot = list(pages)
    total = len(snapshot)
    margin = spec.horizontal_margin

    for index, page in enumerate(snapshot):
        original_bottom = page.margins.bottom
        with page.margin_override(bottom=0):
            y = page.height - original_bottom / 2
            width = page.width - 2 * margin
            if spec.text:
                write_on_page(
                    page,
                    [Fragment(spec.text, spec.left_style)],
                    x=margin, y=y, width=width,
                    alignment=Alignment.LEFT,
                )
            write_on_page(
                page,
                [Fragment(page_indicator(index, total), spec.right_style)],
                x=margin, y=y, width=width,
                alignment=Alignment.RIGHT,
            )

    logger.info(f"Footer applied to {total} pages")
    return total
