"""Tests for services/report_service.py - summary report and photo export."""

import io
import zipfile
from datetime import datetime

import pytest

from inspection_export.pdf_engine import OperationKind
from inspection_export.services import (
    LogEntry,
    Photo,
    ReportSection,
    SummaryReport,
    SummaryReportComposer,
    export_photo_batches,
    normalize_learner_name,
    report_filename,
)
from inspection_export.services.report_service import header_timestamp, photo_archive_name


MOMENT = datetime(2024, 3, 5, 14, 3, 9)


class TestNames:

    @pytest.mark.parametrize("raw,expected", [
        ("Doe, Jane", "Jane Doe"),
        ("  Doe ,  Jane  ", "Jane Doe"),
        ("Jane Doe", "Jane Doe"),
        ("", "Instructor"),
        (None, "Instructor"),
        ("   ", "Instructor"),
    ])
    def test_normalize_learner_name(self, raw, expected):
        assert normalize_learner_name(raw) == expected

    def test_report_filename(self):
        assert report_filename("Inspection Summary", "Jane Doe", MOMENT) == (
            "Inspection Summary_Jane Doe_05Mar2024 14H03M09S.pdf"
        )

    def test_header_timestamp(self):
        assert header_timestamp(MOMENT) == "Tue Mar 5 2024 14:03:09 EST"

    def test_photo_archive_names(self):
        assert photo_archive_name(0, 1) == "Inspection_Photos.zip"
        assert photo_archive_name(0, 3) == "Inspection_Photos_1.zip"
        assert photo_archive_name(2, 3) == "Inspection_Photos_3.zip"


@pytest.fixture
def report(png_payload):
    return SummaryReport(
        title="Site Inspection Summary",
        subtitle="Scenario #2",
        intro="Walkthrough of the east wing.",
        summary_rows=[("Inspector:", "Jane Doe"), ("Duration:", "12 minutes")],
        sections=[
            ReportSection("Compliances", ["Exit signs lit", "Extinguisher charged"]),
            ReportSection("Non-Compliances", []),
        ],
        log_entries=[LogEntry("Entered building", primary=True), LogEntry("Opened panel")],
        learner_name="Doe, Jane",
        logo_payload=png_payload,
        generated_at=MOMENT,
    )


class TestSummaryReport:

    def test_compose_layout(self, export_tool, report):
        SummaryReportComposer(export_tool).compose(report)
        document = export_tool.current_document
        kinds = [op.kind for op in document.operations]

        assert kinds[:2] == [OperationKind.LINE, OperationKind.POSITIONED_TEXT]
        assert kinds.count(OperationKind.SLICED_TEXT) == 2
        assert kinds.count(OperationKind.LIST_ITEM) == 2
        assert kinds[-2:] == [OperationKind.HEADER, OperationKind.FOOTER]
        # summary page, one page per section, activity log page
        assert document.page_count == 4

    def test_primary_log_entries_written_twice(self, export_tool, report):
        SummaryReportComposer(export_tool).compose(report)
        document = export_tool.current_document
        texts = [op.payload.get("text") for op in document.operations if op.kind == OperationKind.TEXT]
        assert texts.count("Entered building") == 2
        assert texts.count("Opened panel") == 1

    def test_export_delivers_named_pdf(self, export_tool, delivery, report):
        result = SummaryReportComposer(export_tool).export(report)

        assert result.filename == "Inspection Summary_Jane Doe_05Mar2024 14H03M09S.pdf"
        assert result.data.startswith(b"%PDF")
        assert delivery.last is result
        assert len(export_tool.documents) == 0


class TestPhotoExport:

    def test_single_batch(self, export_tool):
        photos = [
            Photo("p2", "2024-03-05T10:00:02", b"two"),
            Photo("p1", "2024-03-05T10:00:01", b"one"),
        ]
        results = export_photo_batches(export_tool, photos, batch_size=150)

        assert [r.filename for r in results] == ["Inspection_Photos.zip"]
        with zipfile.ZipFile(io.BytesIO(results[0].data)) as zf:
            assert zf.namelist() == ["p1_2024-03-05T10_00_01.png", "p2_2024-03-05T10_00_02.png"]

    def test_several_batches_oldest_first(self, export_tool):
        photos = [Photo(f"p{i}", f"t{i:03d}", bytes([i])) for i in range(5, 0, -1)]
        results = export_photo_batches(export_tool, photos, batch_size=2)

        assert [r.filename for r in results] == [
            "Inspection_Photos_1.zip", "Inspection_Photos_2.zip", "Inspection_Photos_3.zip",
        ]
        with zipfile.ZipFile(io.BytesIO(results[0].data)) as zf:
            assert zf.namelist() == ["p1_t001.png", "p2_t002.png"]
        assert len(export_tool.archives) == 0

    def test_no_photos(self, export_tool, delivery):
        assert export_photo_batches(export_tool, []) == []
        assert delivery.deliveries == []

    def test_invalid_batch_size(self, export_tool):
        with pytest.raises(ValueError):
            export_photo_batches(export_tool, [Photo("p", "t", b"x")], batch_size=-1)
