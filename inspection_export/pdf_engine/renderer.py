"""
PDF rendering of the page buffer using ReportLab's canvas.

Pages keep top-left coordinates; ReportLab draws from the bottom-left,
so every y is flipped against the page height here.
"""

import io
import logging
from typing import Sequence

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

from .operations import DrawCommand, Picture, Rule, TextLine
from .page import Page, PageSpec


logger = logging.getLogger(__name__)


class CanvasRenderer:
    """
    Replays page draw commands onto a ReportLab canvas.

    Produces the whole document as one in-memory byte string.
    """

    UNDERLINE_OFFSET = 0.12    # below the baseline, as a fraction of font size
    UNDERLINE_THICKNESS = 1 / 18

    def __init__(
        self,
        page_spec: PageSpec,
        title: str = "",
        author: str = "",
        creator: str = "",
        invariant: bool = False
    ):
        """
        Initialize renderer.

        Args:
            page_spec: Default page size
            title: PDF metadata title
            author: PDF metadata author
            creator: PDF metadata creator
            invariant: Produce byte-identical output for identical input
        """
        self.page_spec = page_spec
        self.title = title
        self.author = author
        self.creator = creator
        self.invariant = invariant

    def render(self, pages: Sequence[Page]) -> bytes:
        """Render pages in order and return the PDF bytes"""
        buffer = io.BytesIO()
        canvas = pdf_canvas.Canvas(
            buffer,
            pagesize=self.page_spec.size,
            invariant=1 if self.invariant else 0,
        )
        if self.title:
            canvas.setTitle(self.title)
        if self.author:
            canvas.setAuthor(self.author)
        if self.creator:
            canvas.setCreator(self.creator)

        for page in pages:
            canvas.setPageSize((page.width, page.height))
            for command in page.commands:
                canvas.saveState()
                self._draw(canvas, page, command)
                canvas.restoreState()
            canvas.showPage()

        canvas.save()
        data = buffer.getvalue()
        logger.debug(f"Rendered {len(pages)} pages ({len(data)} bytes)")
        return data

    def _draw(self, canvas, page: Page, command: DrawCommand):
        if isinstance(command, TextLine):
            self._draw_text(canvas, page, command)
        elif isinstance(command, Rule):
            self._draw_rule(canvas, page, command)
        elif isinstance(command, Picture):
            self._draw_picture(canvas, page, command)
        else:
            raise TypeError(f"Unknown draw command: {type(command).__name__}")

    def _draw_text(self, canvas, page: Page, line: TextLine):
        baseline = page.height - (line.y + line.ascent)

        text = canvas.beginText(line.x, baseline)
        text.setWordSpace(line.word_space)
        for fragment in line.fragments:
            text.setFont(fragment.style.font_name, fragment.style.size)
            text.setFillColor(fragment.style.color)
            text.textOut(fragment.text)
        canvas.drawText(text)

        if not line.underline:
            return

        x = line.x
        for fragment in line.fragments:
            size = fragment.style.size
            width = fragment.width + fragment.text.count(" ") * line.word_space
            y = baseline - size * self.UNDERLINE_OFFSET
            canvas.setStrokeColor(fragment.style.color)
            canvas.setLineWidth(max(size * self.UNDERLINE_THICKNESS, 0.5))
            canvas.line(x, y, x + width, y)
            x += width

    def _draw_rule(self, canvas, page: Page, rule: Rule):
        canvas.setStrokeColor(HexColor(rule.color_hex))
        canvas.setLineCap(rule.cap.pdf_code)
        canvas.setLineWidth(rule.width)
        canvas.line(rule.x1, page.height - rule.y1, rule.x2, page.height - rule.y2)

    def _draw_picture(self, canvas, page: Page, picture: Picture):
        canvas.drawImage(
            ImageReader(io.BytesIO(picture.data)),
            picture.x,
            page.height - picture.y - picture.height,
            width=picture.width,
            height=picture.height,
            mask='auto',
        )
