"""
Inspection report composition and photo export.

The caller supplies already-computed values (summary rows, finding lists,
activity log); this module only lays them out and delivers them through
the export tool.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..delivery import Delivery
from ..utils.config import settings
from ..utils.filenames import sanitize_filename
from .export_tool import ExportTool


logger = logging.getLogger(__name__)


DEFAULT_LEARNER = "Instructor"
ACCENT_COLOR = "#44546a"


def normalize_learner_name(display_name: Optional[str]) -> str:
    """
    Turn a directory-style display name into reading order.

    >>> normalize_learner_name("Doe, Jane")
    'Jane Doe'
    >>> normalize_learner_name("  ")
    'Instructor'
    """
    name = (display_name or "").strip()
    if not name:
        return DEFAULT_LEARNER
    if "," in name:
        last, first = name.split(",", 1)
        name = f"{first.strip()} {last.strip()}".strip()
    return name or DEFAULT_LEARNER


def header_timestamp(moment: datetime, zone: str = "EST") -> str:
    """Header date/time, e.g. 'Tue Mar 5 2024 14:03:09 EST'"""
    return f"{moment:%a %b} {moment.day} {moment:%Y %H:%M:%S} {zone}"


def report_filename(prefix: str, learner: str, moment: datetime) -> str:
    """e.g. 'Inspection Summary_Jane Doe_05Mar2024 14H03M09S.pdf'"""
    return f"{prefix}_{learner}_{moment:%d%b%Y} {moment:%H}H{moment:%M}M{moment:%S}S.pdf"


@dataclass
class LogEntry:
    """One activity log line; primary entries are repeated in bold first"""
    message: str
    primary: bool = False


@dataclass
class ReportSection:
    """Titled numbered list, starting on its own page"""
    title: str
    items: List[str] = field(default_factory=list)
    empty_text: str = "None"


@dataclass
class SummaryReport:
    """Values for one inspection summary report"""
    title: str
    intro: str = ""
    subtitle: str = ""
    summary_title: str = "Summary"
    summary_rows: List[Tuple[str, str]] = field(default_factory=list)
    sections: List[ReportSection] = field(default_factory=list)
    log_title: str = "Activity Log"
    log_entries: List[LogEntry] = field(default_factory=list)
    learner_name: str = ""
    footer_text: str = "Centre for Virtual Reality Innovation"
    logo_payload: str = ""  # base64 image; empty for no logo
    generated_at: Optional[datetime] = None
    filename_prefix: str = "Inspection Summary"


class SummaryReportComposer:
    """Lays a SummaryReport out through the export tool's document surface"""

    BODY_FONT = "Times-Roman"
    BOLD_FONT = "Times-Bold"
    ITALIC_FONT = "Times-Italic"
    MARGIN = 72

    def __init__(self, tool: ExportTool):
        self.tool = tool

    def compose(self, report: SummaryReport) -> None:
        """Write the whole report into a fresh in-flight document"""
        tool = self.tool
        tool.create_document()

        self._title_block(report)
        self._summary(report)
        for section in report.sections:
            self._section(section)
        self._activity_log(report)

        moment = report.generated_at or datetime.now()
        tool.add_header(
            header_timestamp(moment), report.logo_payload,
            self.BODY_FONT, "black", 10, self.MARGIN,
        )
        tool.add_footer(
            report.footer_text,
            self.BODY_FONT, 9, "black",
            self.BODY_FONT, 10, "black",
            self.MARGIN,
        )

    def export(self, report: SummaryReport) -> Delivery:
        """Compose and deliver the report PDF"""
        self.compose(report)
        moment = report.generated_at or datetime.now()
        learner = normalize_learner_name(report.learner_name)
        delivery = self.tool.download_pdf(report_filename(report.filename_prefix, learner, moment))
        logger.info(f"Summary report exported for {learner}: {delivery.filename}")
        return delivery

    def _title_block(self, report: SummaryReport):
        tool = self.tool
        page_width = tool.current_document.page_spec.width
        right = page_width - self.MARGIN

        tool.add_line("round", self.MARGIN, 72, right, 72, ACCENT_COLOR)
        tool.add_content_at(report.title, 20, self.BODY_FONT, "center", ACCENT_COLOR, self.MARGIN, 87, 0.5)
        tool.add_line("round", self.MARGIN, 140, right, 140, ACCENT_COLOR)
        if report.subtitle:
            tool.add_content_at(report.subtitle, 10.5, self.BODY_FONT, "center", "black", self.MARGIN, 170, 0)
        if report.intro:
            tool.add_content_at(report.intro, 12, self.ITALIC_FONT, "center", "black", self.MARGIN, 195, 3.5)

    def _summary(self, report: SummaryReport):
        tool = self.tool
        tool.add_underlined_text(report.summary_title, self.BOLD_FONT, 16, 1.5)
        tool.set_font(self.BODY_FONT, 12)
        for label, value in report.summary_rows:
            text = f"{label} {value}"
            split = len(label) + 1
            tool.add_sliced_text(text, split, len(text), self.BOLD_FONT, self.BODY_FONT, "black", "black", 0.8)
        tool.add_page()

    def _section(self, section: ReportSection):
        tool = self.tool
        tool.add_underlined_text(section.title, self.BOLD_FONT, 16, 1)
        tool.set_font(self.BODY_FONT, 12)
        if section.items:
            for number, item in enumerate(section.items, start=1):
                tool.add_numbered_list_item(number, item)
        else:
            tool.add_content(section.empty_text, 12, self.ITALIC_FONT)
        tool.add_page()

    def _activity_log(self, report: SummaryReport):
        tool = self.tool
        tool.add_underlined_text(report.log_title, self.BOLD_FONT, 16, 0.8)
        for entry in report.log_entries:
            if entry.primary:
                tool.add_content(entry.message, 12, self.BOLD_FONT)
            tool.add_content(entry.message, 11, self.BODY_FONT)


@dataclass
class Photo:
    """Captured inspection photo"""
    photo_id: str
    timestamp: str
    data: bytes


def photo_entry_name(photo: Photo) -> str:
    return sanitize_filename(f"{photo.photo_id}_{photo.timestamp}.png")


def photo_archive_name(batch: int, batches: int) -> str:
    """Archive name for a 0-based batch index"""
    if batches == 1:
        return "Inspection_Photos.zip"
    return f"Inspection_Photos_{batch + 1}.zip"


def export_photo_batches(
    tool: ExportTool,
    photos: Sequence[Photo],
    batch_size: Optional[int] = None,
) -> List[Delivery]:
    """
    Deliver photos as one or more zip archives, oldest first.

    Each batch of at most batch_size photos gets its own archive session
    (zip_0, zip_1, ...). No photos, no deliveries.
    """
    batch_size = batch_size or settings.photo_batch_size
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive: {batch_size}")

    ordered = sorted(photos, key=lambda photo: photo.timestamp)
    batches = [ordered[i:i + batch_size] for i in range(0, len(ordered), batch_size)]

    deliveries: List[Delivery] = []
    for index, batch in enumerate(batches):
        session_id = f"zip_{index}"
        tool.create_archive(session_id)
        try:
            for photo in batch:
                tool.add_bytes_to_archive(session_id, photo_entry_name(photo), photo.data)
        except Exception:
            tool.discard_archive(session_id)
            raise
        deliveries.append(tool.download_archive(session_id, photo_archive_name(index, len(batches))))

    logger.info(f"Exported {len(ordered)} photos in {len(batches)} archives")
    return deliveries
