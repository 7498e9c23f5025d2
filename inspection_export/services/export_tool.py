"""
Export tool - the host call surface for documents, archives and images.

The host drives one in-flight document at a time (create, write, retrofit
header/footer, download) and any number of archive sessions keyed by its
own identifiers. Finished buffers go to the configured delivery adapter
under a sanitised filename.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import Optional, Union

from ..archive import ArchiveSessionManager
from ..delivery import (
    Delivery, DeliveryAdapter, DirectoryDeliveryAdapter, InMemoryDeliveryAdapter, media_type_for
)
from ..exceptions import DeliveryFailure, ExportError, InvalidState
from ..pdf_engine import ContentOperation, DocumentBuilder, DocumentStore, FontManager, create_document_builder
from ..utils.config import Settings, settings
from ..utils.filenames import sanitize_filename


logger = logging.getLogger(__name__)


class ExportTool:
    """Document, archive and image export for the host application"""

    def __init__(
        self,
        delivery: Optional[DeliveryAdapter] = None,
        documents: Optional[DocumentStore] = None,
        archives: Optional[ArchiveSessionManager] = None,
        finalize_timeout: Optional[float] = None,
        config: Settings = settings,
    ):
        """
        Initialize export tool.

        Args:
            delivery: Where finished downloads go (kept in memory by default)
            documents: Live document store
            archives: Live archive session store
            finalize_timeout: Seconds to wait for a document to render
            config: Settings for page geometry, fonts and timeouts
        """
        self.config = config
        self.delivery = delivery or InMemoryDeliveryAdapter()

        self.font_manager = FontManager(config.font_dirs)
        if config.extra_fonts:
            self.font_manager.register_fonts(config.extra_fonts)

        self.documents = documents or DocumentStore(
            lambda: create_document_builder(config, self.font_manager)
        )
        self.archives = archives or ArchiveSessionManager()
        self.finalize_timeout = (
            config.finalize_timeout_seconds if finalize_timeout is None else finalize_timeout
        )

        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="export-finalize")
        self._current_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(self) -> DocumentBuilder:
        """Start a new document; an unfinished previous one is dropped"""
        if self._current_id and self.documents.discard(self._current_id):
            logger.warning(f"Unfinished document {self._current_id} replaced by a new one")

        document = self.documents.create()
        self._current_id = document.document_id
        return document

    @property
    def current_document(self) -> DocumentBuilder:
        """
        The in-flight document.

        Raises:
            InvalidState: Before create_document or after download_pdf
        """
        if not self._current_id:
            raise InvalidState("No document: call create_document first")
        return self.documents.get(self._current_id)

    def add_header(self, date_time_text: str, image_payload: str, font: str,
                   color: str, size: float, horizontal_margin: float) -> ContentOperation:
        return self.current_document.add_header(
            date_time_text, image_payload, font, color, size, horizontal_margin
        )

    def add_footer(self, text: str, left_font: str, left_size: float, left_color: str,
                   right_font: str, right_size: float, right_color: str,
                   horizontal_margin: float) -> ContentOperation:
        return self.current_document.add_footer(
            text, left_font, left_size, left_color,
            right_font, right_size, right_color, horizontal_margin
        )

    def add_content(self, text: str, size: float, font: str,
                    alignment: str = "left", color: str = "black") -> ContentOperation:
        return self.current_document.add_content(text, size, font, alignment, color)

    def add_content_at(self, text: str, size: float, font: str, alignment: str,
                       color: str, x: float, y: float, advance_lines: float = 0) -> ContentOperation:
        return self.current_document.add_content_at(text, size, font, alignment, color, x, y, advance_lines)

    def add_line(self, cap_style: str, x1: float, y1: float, x2: float, y2: float,
                 color: str = "black") -> ContentOperation:
        return self.current_document.add_line(cap_style, x1, y1, x2, y2, color)

    def add_underlined_text(self, text: str, font: str, size: float,
                            advance_lines: float = 0) -> ContentOperation:
        return self.current_document.add_underlined_text(text, font, size, advance_lines)

    def add_sliced_text(self, text: str, split_index: int, total_length: int,
                        font_a: str, font_b: str, color_a: str, color_b: str,
                        advance_lines: float = 0) -> ContentOperation:
        return self.current_document.add_sliced_text(
            text, split_index, total_length, font_a, font_b, color_a, color_b, advance_lines
        )

    def add_numbered_list_item(self, number: int, text: str) -> ContentOperation:
        return self.current_document.add_numbered_list_item(number, text)

    def add_page(self) -> ContentOperation:
        return self.current_document.add_page()

    def set_font(self, font: str, size: float) -> ContentOperation:
        return self.current_document.set_font(font, size)

    def move_down(self, lines: float = 1) -> ContentOperation:
        return self.current_document.move_down(lines)

    def get_line_height(self) -> float:
        return self.current_document.get_line_height()

    def download_pdf(self, filename: str, document_id: Optional[str] = None) -> Delivery:
        """
        Finalize a document (the in-flight one by default) and deliver it.

        Rendering runs on a worker thread and is awaited at most
        finalize_timeout seconds.

        Raises:
            InvalidState: If the document is not open
            DeliveryFailure: On render failure, timeout or hand-off failure
        """
        document_id = document_id or self._current_id
        if not document_id:
            raise InvalidState("No document: call create_document first")
        self.documents.get(document_id)

        if document_id == self._current_id:
            self._current_id = None

        future = self._executor.submit(self.documents.finalize, document_id)
        try:
            data = future.result(timeout=self.finalize_timeout)
        except FutureTimeout as e:
            logger.error(f"Document {document_id} did not finish within {self.finalize_timeout}s")
            raise DeliveryFailure(
                f"Document {document_id} did not finish within {self.finalize_timeout}s"
            ) from e

        return self._deliver(filename, data)

    # ------------------------------------------------------------------
    # Archives
    # ------------------------------------------------------------------

    def create_archive(self, session_id: str) -> None:
        self.archives.create(session_id)

    def add_entry_to_archive(self, session_id: str, entry_name: str, encoded: Union[str, bytes]) -> int:
        """Add a base64-encoded entry; returns the decoded size"""
        return self.archives.add_entry(session_id, entry_name, encoded)

    def add_bytes_to_archive(self, session_id: str, entry_name: str, data: bytes) -> int:
        return self.archives.add_entry_bytes(session_id, entry_name, data)

    def download_archive(self, session_id: str, archive_filename: str) -> Delivery:
        """Finalize an archive session (single use) and deliver the zip"""
        data = self.archives.finalize(session_id)
        return self._deliver(archive_filename, data)

    def discard_archive(self, session_id: str) -> bool:
        return self.archives.discard(session_id)

    # ------------------------------------------------------------------
    # Single files
    # ------------------------------------------------------------------

    def download_png(self, data: bytes, filename: str) -> Delivery:
        """Deliver one image buffer"""
        return self._deliver(filename, bytes(data))

    def _deliver(self, filename: str, data: bytes) -> Delivery:
        safe_name = sanitize_filename(filename)
        delivery = Delivery(filename=safe_name, data=data, media_type=media_type_for(safe_name))
        try:
            self.delivery.deliver(delivery)
        except ExportError:
            raise
        except Exception as e:
            logger.error(f"Delivery of {safe_name} failed: {e}")
            raise DeliveryFailure(f"Delivery of {safe_name} failed: {e}") from e

        logger.info(f"Delivered {safe_name} ({delivery.size_bytes} bytes)")
        return delivery

    def close(self):
        """Stop the finalize worker threads"""
        self._executor.shutdown(wait=False)


def create_export_tool(config: Settings = settings) -> ExportTool:
    """Export tool wired from settings (directory delivery when configured)"""
    delivery: DeliveryAdapter
    if config.delivery_dir:
        delivery = DirectoryDeliveryAdapter(Path(config.delivery_dir))
    else:
        delivery = InMemoryDeliveryAdapter()
    return ExportTool(delivery=delivery, config=config)
