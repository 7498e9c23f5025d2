"""
Document builder: ordered content operations → paginated PDF bytes.

Every operation resolves its style first, plans its layout on a copy of
the pagination tracker and commits only when planning succeeded. The
document's pages are therefore always the fold of the committed
operations.
"""

import logging
import threading
import uuid
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..exceptions import DeliveryFailure, InvalidState, InvalidStyle, RangeError
from ..utils.config import Settings, settings
from ..utils.payloads import decode_payload
from .layout import align_line, wrap_fragments
from .operations import (
    ContentOperation, DrawCommand, Fragment, OperationKind, Rule, TextLine
)
from .page import Page, PageSpec
from .pagination import ListLayout, PaginationTracker
from .renderer import CanvasRenderer
from .retrofit import FooterSpec, HeaderSpec, apply_footer, apply_header, measure_image
from .styles import Alignment, FontManager, ResolvedStyle, StyleResolver


logger = logging.getLogger(__name__)

PlannedCommands = List[Tuple[int, DrawCommand]]


class DocumentBuilder:
    """
    Page-oriented document builder.

    Owns one in-flight document: its page buffer, cursor and style
    context. Calls must come from one logical sequence; the builder does
    not lock.
    """

    DEFAULT_FONT = "Helvetica"
    DEFAULT_SIZE = 12

    def __init__(
        self,
        page_spec: Optional[PageSpec] = None,
        resolver: Optional[StyleResolver] = None,
        list_layout: Optional[ListLayout] = None,
        renderer: Optional[CanvasRenderer] = None,
        header_image_height: float = 24.0,
        header_image_offset: float = 10.0,
    ):
        """
        Create a new document with a single empty page.

        Args:
            page_spec: Page size and margins (US Letter, 72pt margins by default)
            resolver: Style resolver (standard fonts only by default)
            list_layout: Numbered list geometry
            renderer: PDF renderer used by finalize()
            header_image_height: Logo height in points
            header_image_offset: Logo offset above the header text
        """
        self.document_id = f"doc_{uuid.uuid4().hex[:12]}"
        self.page_spec = page_spec or PageSpec.us_letter()
        self.resolver = resolver or StyleResolver()
        self.list_layout = list_layout or ListLayout()
        self.renderer = renderer or CanvasRenderer(self.page_spec)
        self.header_image_height = header_image_height
        self.header_image_offset = header_image_offset

        self.pages: List[Page] = [Page.from_spec(0, self.page_spec)]
        self.operations: List[ContentOperation] = []
        self._tracker = PaginationTracker(self.page_spec)
        self._style = self.resolver.resolve(self.DEFAULT_FONT, self.DEFAULT_SIZE)
        self._finalized = False
        self._header_passes = 0
        self._footer_passes = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def cursor(self) -> Tuple[float, float]:
        return (self._tracker.x, self._tracker.y)

    @property
    def current_page_index(self) -> int:
        return self._tracker.page_index

    @property
    def style(self) -> ResolvedStyle:
        """Current style context"""
        return self._style

    def _ensure_open(self):
        if self._finalized:
            raise InvalidState(f"Document {self.document_id} is finalized")

    def _commit(
        self,
        kind: OperationKind,
        plan: PaginationTracker,
        commands: PlannedCommands,
        style: Optional[ResolvedStyle] = None,
        payload: Optional[Dict] = None,
    ) -> ContentOperation:
        for index in range(len(self.pages), plan.page_count):
            self.pages.append(Page.from_spec(index, self.page_spec))

        for page_index, command in commands:
            if isinstance(command, TextLine) and not command.fragments:
                continue
            self.pages[page_index].commands.append(command)

        start_page = commands[0][0] if commands else self._tracker.page_index
        self._tracker = plan
        if style is not None:
            self._style = style

        operation = ContentOperation(
            sequence=len(self.operations),
            kind=kind,
            page_index=start_page,
            style=style,
            payload=payload or {},
        )
        self.operations.append(operation)
        return operation

    def _flow(
        self,
        plan: PaginationTracker,
        fragments: Sequence[Fragment],
        x: float,
        width: float,
        alignment: Alignment,
        underline: bool = False,
    ) -> PlannedCommands:
        """Lay fragments out from the plan's cursor, breaking pages on overflow"""
        commands: PlannedCommands = []
        for line in wrap_fragments(fragments, width):
            plan.ensure_room(line.line_height)
            start_x, word_space = align_line(line, x, width, alignment)
            commands.append((plan.page_index, TextLine(
                x=start_x,
                y=plan.y,
                fragments=line.fragments,
                ascent=line.ascent,
                word_space=word_space,
                underline=underline,
            )))
            plan.move_down(line.line_height)
        return commands

    @staticmethod
    def _lines(value: float, what: str = "advance") -> float:
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise InvalidStyle(f"{what} must be a number: {value!r}", value) from e

    @staticmethod
    def _slice_bounds(split_index, total_length, text_length: int) -> Tuple[int, int]:
        try:
            split, total = int(split_index), int(total_length)
        except (TypeError, ValueError) as e:
            raise RangeError(split_index, total_length, text_length) from e
        if not (0 <= split <= total <= text_length):
            raise RangeError(split, total, text_length)
        return split, total

    # ------------------------------------------------------------------
    # Content operations
    # ------------------------------------------------------------------

    def add_content(
        self,
        text: str,
        size: float,
        font: str,
        alignment: str = "left",
        color: str = "black",
    ) -> ContentOperation:
        """Write word-wrapped text at the cursor across the content width"""
        self._ensure_open()
        style = self.resolver.resolve(font, size, color, alignment)

        plan = self._tracker.copy()
        plan.x = self.page_spec.left_margin
        commands = self._flow(
            plan, [Fragment(text, style)],
            x=self.page_spec.left_margin,
            width=plan.content_width,
            alignment=style.alignment,
        )
        return self._commit(OperationKind.TEXT, plan, commands, style, {"text": text})

    def add_content_at(
        self,
        text: str,
        size: float,
        font: str,
        alignment: str,
        color: str,
        x: float,
        y: float,
        advance_lines: float = 0,
    ) -> ContentOperation:
        """Write text at an absolute page position, then advance the cursor"""
        self._ensure_open()
        style = self.resolver.resolve(font, size, color, alignment)
        x = self._lines(x, "x")
        y = self._lines(y, "y")
        advance = self._lines(advance_lines)

        plan = self._tracker.copy()
        plan.x, plan.y = x, y
        width = self.page_spec.width - x - self.page_spec.right_margin
        commands = self._flow(plan, [Fragment(text, style)], x=x, width=width, alignment=style.alignment)
        plan.move_down(advance * style.line_height)
        plan.x = self.page_spec.left_margin
        return self._commit(
            OperationKind.POSITIONED_TEXT, plan, commands, style,
            {"text": text, "x": x, "y": y, "advance_lines": advance},
        )

    def add_line(
        self,
        cap_style: str,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: str = "black",
    ) -> ContentOperation:
        """Draw a ruled segment on the current page; the cursor does not move"""
        self._ensure_open()
        cap = self.resolver.resolve_line_cap(cap_style)
        color_hex = self.resolver.resolve_color(color)
        rule = Rule(
            x1=self._lines(x1, "x1"), y1=self._lines(y1, "y1"),
            x2=self._lines(x2, "x2"), y2=self._lines(y2, "y2"),
            color_hex=color_hex, cap=cap,
        )
        plan = self._tracker.copy()
        return self._commit(
            OperationKind.LINE, plan, [(plan.page_index, rule)],
            payload={"cap": cap.value, "color": color_hex},
        )

    def add_underlined_text(
        self,
        text: str,
        font: str,
        size: float,
        advance_lines: float = 0,
    ) -> ContentOperation:
        """Write underlined text at the cursor in the current colour, then advance"""
        self._ensure_open()
        style = self.resolver.resolve(font, size, self._style.color_hex, "left")
        advance = self._lines(advance_lines)

        plan = self._tracker.copy()
        plan.x = self.page_spec.left_margin
        commands = self._flow(
            plan, [Fragment(text, style)],
            x=self.page_spec.left_margin,
            width=plan.content_width,
            alignment=Alignment.LEFT,
            underline=True,
        )
        plan.move_down(advance * style.line_height)
        return self._commit(
            OperationKind.UNDERLINED_TEXT, plan, commands, style,
            {"text": text, "advance_lines": advance},
        )

    def add_sliced_text(
        self,
        text: str,
        split_index: int,
        total_length: int,
        font_a: str,
        font_b: str,
        color_a: str,
        color_b: str,
        advance_lines: float = 0,
    ) -> ContentOperation:
        """
        Write text[0:split_index] in (font_a, color_a) followed on the same
        line by text[split_index:total_length] in (font_b, color_b).

        Raises:
            RangeError: Unless 0 <= split_index <= total_length <= len(text)
        """
        self._ensure_open()
        split_index, total_length = self._slice_bounds(split_index, total_length, len(text))

        size = self._style.size
        style_a = self.resolver.resolve(font_a, size, color_a, "left")
        style_b = self.resolver.resolve(font_b, size, color_b, "left")
        advance = self._lines(advance_lines)

        fragments = [
            fragment for fragment in (
                Fragment(text[:split_index], style_a),
                Fragment(text[split_index:total_length], style_b),
            )
            if fragment.text
        ] or [Fragment("", style_b)]

        plan = self._tracker.copy()
        plan.x = self.page_spec.left_margin
        commands = self._flow(
            plan, fragments,
            x=self.page_spec.left_margin,
            width=plan.content_width,
            alignment=Alignment.LEFT,
        )
        plan.move_down(advance * style_b.line_height)
        return self._commit(
            OperationKind.SLICED_TEXT, plan, commands, style_b,
            {
                "text": text[:total_length],
                "split_index": split_index,
                "first_style": style_a,
                "advance_lines": advance,
            },
        )

    def add_numbered_list_item(self, number: int, text: str) -> ContentOperation:
        """
        Write "{number}." at the list indent and the text at the content
        indent on the same baseline.

        Once the cursor has crossed the overflow threshold the item starts a
        new page at the fixed top-of-page offset.
        """
        self._ensure_open()
        style = self._style.with_alignment(Alignment.LEFT)
        layout = self.list_layout

        plan = self._tracker.copy()
        overflow_break = plan.list_overflowed(layout)
        if overflow_break:
            plan.new_page(y=layout.top_of_page)
            logger.debug(f"List item {number} moved to page {plan.page_count}")

        width = self.page_spec.width - self.page_spec.right_margin - layout.text_x
        commands = self._flow(plan, [Fragment(text, style)], x=layout.text_x, width=width, alignment=Alignment.LEFT)

        first_page, first_line = commands[0]
        marker = TextLine(
            x=layout.number_x,
            y=first_line.y,
            fragments=(Fragment(f"{number}.", style),),
            ascent=max(style.ascent, first_line.ascent),
        )
        commands.insert(0, (first_page, marker))
        plan.x = self.page_spec.left_margin
        return self._commit(
            OperationKind.LIST_ITEM, plan, commands,
            payload={"number": number, "text": text, "overflow_break": overflow_break},
        )

    def add_numbered_list(self, items: Sequence[str], start: int = 1) -> List[ContentOperation]:
        """Add items numbered consecutively from start"""
        return [
            self.add_numbered_list_item(number, text)
            for number, text in enumerate(items, start=start)
        ]

    def add_page(self) -> ContentOperation:
        """Explicit page break"""
        self._ensure_open()
        plan = self._tracker.copy()
        plan.new_page()
        return self._commit(OperationKind.PAGE_BREAK, plan, [], payload={"page_index": plan.page_index})

    def set_font(self, font: str, size: float) -> ContentOperation:
        """Change the style context for operations that do not name their own"""
        self._ensure_open()
        style = self.resolver.resolve(font, size, self._style.color_hex, self._style.alignment.value)
        return self._commit(OperationKind.SET_FONT, self._tracker.copy(), [], style, {"font": font, "size": style.size})

    def move_down(self, lines: float = 1) -> ContentOperation:
        """Advance the cursor by whole or fractional line heights"""
        self._ensure_open()
        count = self._lines(lines, "lines")
        plan = self._tracker.copy()
        plan.move_down(count * self._style.line_height)
        return self._commit(OperationKind.MOVE_DOWN, plan, [], payload={"lines": count})

    def get_line_height(self) -> float:
        """Line height of the current style context"""
        self._ensure_open()
        return self._style.line_height

    # ------------------------------------------------------------------
    # Header / footer retrofit
    # ------------------------------------------------------------------

    def add_header(
        self,
        date_time_text: str,
        image_payload: str,
        font: str,
        color: str,
        size: float,
        horizontal_margin: float,
    ) -> ContentOperation:
        """
        Draw the header (date/time text left, logo right) on every page
        that exists now. Call once, after all body content.

        An empty image payload draws no logo.
        """
        self._ensure_open()
        style = self.resolver.resolve(font, size, color, "left")
        margin = self._lines(horizontal_margin, "horizontal margin")

        image = image_size = None
        if image_payload:
            image = decode_payload(image_payload, "header image")
            image_size = measure_image(image)

        spec = HeaderSpec(
            text=date_time_text,
            style=style,
            horizontal_margin=margin,
            image=image,
            image_size=image_size,
            image_height=self.header_image_height,
            image_offset=self.header_image_offset,
        )

        if self._header_passes:
            logger.warning(f"Header applied again to {self.document_id}; output will overlap")
        pages = apply_header(self.pages, spec)
        self._header_passes += 1

        operation = ContentOperation(
            sequence=len(self.operations),
            kind=OperationKind.HEADER,
            page_index=self._tracker.page_index,
            style=style,
            payload={"text": date_time_text, "pages": pages, "has_image": image is not None},
        )
        self.operations.append(operation)
        return operation

    def add_footer(
        self,
        text: str,
        left_font: str,
        left_size: float,
        left_color: str,
        right_font: str,
        right_size: float,
        right_color: str,
        horizontal_margin: float,
    ) -> ContentOperation:
        """
        Draw the footer (text left, "Page X of N" right) on every page that
        exists now. Call once, after all body content.
        """
        self._ensure_open()
        spec = FooterSpec(
            text=text,
            left_style=self.resolver.resolve(left_font, left_size, left_color, "left"),
            right_style=self.resolver.resolve(right_font, right_size, right_color, "right"),
            horizontal_margin=self._lines(horizontal_margin, "horizontal margin"),
        )

        if self._footer_passes:
            logger.warning(f"Footer applied again to {self.document_id}; output will overlap")
        pages = apply_footer(self.pages, spec)
        self._footer_passes += 1

        operation = ContentOperation(
            sequence=len(self.operations),
            kind=OperationKind.FOOTER,
            page_index=self._tracker.page_index,
            style=spec.left_style,
            payload={"text": text, "pages": pages},
        )
        self.operations.append(operation)
        return operation

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self) -> bytes:
        """
        Close the document and render the page buffer to PDF bytes.

        Raises:
            InvalidState: If already finalized
            DeliveryFailure: If rendering fails
        """
        self._ensure_open()
        self._finalized = True

        try:
            data = self.renderer.render(self.pages)
        except Exception as e:
            logger.error(f"Rendering {self.document_id} failed: {e}")
            raise DeliveryFailure(f"Could not render document {self.document_id}: {e}") from e

        logger.info(f"Document {self.document_id} finalized: {self.page_count} pages, {len(data)} bytes")
        return data


def create_document_builder(
    config: Settings = settings,
    font_manager: Optional[FontManager] = None,
    invariant: bool = False,
) -> DocumentBuilder:
    """
    Factory for a DocumentBuilder configured from settings.

    Args:
        config: Settings to read page, list and header geometry from
        font_manager: Shared font manager (extra fonts registered on it)
        invariant: Byte-identical PDF output for identical operations
    """
    page_spec = PageSpec.named(config.page_size, config.page_margin)
    return DocumentBuilder(
        page_spec=page_spec,
        resolver=StyleResolver(font_manager, line_gap=config.line_gap),
        list_layout=ListLayout(
            number_x=config.list_number_x,
            text_x=config.list_text_x,
            overflow_threshold=config.list_overflow_threshold,
            top_of_page=config.list_top_of_page,
        ),
        renderer=CanvasRenderer(
            page_spec,
            title=config.document_title,
            author=config.document_author,
            creator=config.document_creator,
            invariant=invariant,
        ),
        header_image_height=config.header_image_height,
        header_image_offset=config.header_image_offset,
    )


class DocumentStore:
    """In-memory store of live documents, keyed by document id"""

    def __init__(self, factory: Optional[Callable[[], DocumentBuilder]] = None):
        self._factory = factory or create_document_builder
        self._documents: Dict[str, DocumentBuilder] = {}
        self._lock = threading.Lock()

    def create(self) -> DocumentBuilder:
        """Create and register a new document"""
        document = self._factory()
        with self._lock:
            self._documents[document.document_id] = document
        logger.info(f"Document created: {document.document_id}")
        return document

    def get(self, document_id: str) -> DocumentBuilder:
        """
        Get a live document.

        Raises:
            InvalidState: If the id is unknown, finalized or discarded
        """
        document = self._documents.get(document_id)
        if document is None:
            raise InvalidState(f"No open document: {document_id}")
        return document

    def finalize(self, document_id: str) -> bytes:
        """Finalize a document and evict it; eviction happens even on failure"""
        document = self.get(document_id)
        try:
            return document.finalize()
        finally:
            self.discard(document_id)

    def discard(self, document_id: str) -> bool:
        """Drop a document without rendering it"""
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    def live_ids(self) -> List[str]:
        return list(self._documents)

    def __len__(self) -> int:
        return len(self._documents)
