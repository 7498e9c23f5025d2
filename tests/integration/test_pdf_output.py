"""
Integration tests: rendered PDFs read back with pdfplumber.
"""

import io

import pdfplumber
import pytest

from inspection_export.pdf_engine import DocumentBuilder, PageSpec, create_document_builder
from inspection_export.utils.config import Settings


def add_footer(builder):
    builder.add_footer("Centre for Virtual Reality Innovation", "Times-Roman", 9, "black", "Times-Roman", 10, "black", 72)


class TestRenderedText:

    def test_body_text_present(self, builder, read_pdf_text):
        builder.add_content("Fire exits inspected", 12, "Times-Roman")
        builder.add_content("All clear", 12, "Helvetica-Bold", "center")

        text = read_pdf_text(builder.finalize())[0]

        assert "Fire exits inspected" in text
        assert "All clear" in text

    def test_footer_on_every_rendered_page(self, builder, read_pdf_text):
        builder.add_content("First page", 12, "Times-Roman")
        builder.add_page()
        builder.add_content("Second page", 12, "Times-Roman")
        builder.add_page()
        add_footer(builder)

        pages = read_pdf_text(builder.finalize())

        assert len(pages) == 3
        for index, text in enumerate(pages):
            assert f"Page {index + 1} of 3" in text
            assert "Centre for Virtual Reality Innovation" in text

    def test_sliced_text_fonts(self, builder):
        text = "Inspector: Jane Doe"
        builder.add_sliced_text(text, 11, len(text), "Times-Bold", "Times-Roman", "black", "black")

        with pdfplumber.open(io.BytesIO(builder.finalize())) as pdf:
            chars = pdf.pages[0].chars
        fonts = {char["text"]: char["fontname"] for char in chars}

        assert "Bold" in fonts["I"]
        assert "Bold" not in fonts["J"]

    def test_text_position_top_left_origin(self, builder):
        builder.add_content_at("Marker", 12, "Helvetica", "left", "black", 100, 200)

        with pdfplumber.open(io.BytesIO(builder.finalize())) as pdf:
            words = pdf.pages[0].extract_words()
        marker = next(word for word in words if word["text"] == "Marker")

        assert marker["x0"] == pytest.approx(100, abs=1)
        assert marker["top"] == pytest.approx(200, abs=3)

    def test_numbered_list_overflow_pages(self, builder, read_pdf_text):
        builder.set_font("Times-Roman", 12)
        builder.add_numbered_list([f"Finding number {n}" for n in range(1, 81)])
        add_footer(builder)

        pages = read_pdf_text(builder.finalize())

        assert len(pages) == builder.page_count
        assert len(pages) >= 2
        assert "1." in pages[0]
        assert "Finding number 80" in pages[-1]

    def test_ruled_line_drawn(self, builder):
        builder.add_line("round", 72, 72, 540, 72, "#44546a")

        with pdfplumber.open(io.BytesIO(builder.finalize())) as pdf:
            lines = pdf.pages[0].lines

        assert len(lines) == 1
        assert lines[0]["top"] == pytest.approx(72, abs=1)
        assert lines[0]["x0"] == pytest.approx(72, abs=1)
        assert lines[0]["x1"] == pytest.approx(540, abs=1)


class TestHeaderImage:

    def test_logo_embedded_on_every_page(self, builder, png_payload):
        builder.add_page()
        builder.add_header("Tue Mar 5 2024 14:03:09 EST", png_payload, "Times-Roman", "black", 10, 72)

        with pdfplumber.open(io.BytesIO(builder.finalize())) as pdf:
            assert len(pdf.pages) == 2
            for page in pdf.pages:
                assert len(page.images) == 1
                assert "14:03:09" in (page.extract_text() or "")


class TestConfiguredBuilder:

    def test_a4_from_settings(self):
        builder = create_document_builder(Settings(page_size="a4"), invariant=True)
        builder.add_content("A4 page", 12, "Times-Roman")

        with pdfplumber.open(io.BytesIO(builder.finalize())) as pdf:
            page = pdf.pages[0]
            assert page.width == pytest.approx(PageSpec.a4().width, abs=0.5)
            assert page.height == pytest.approx(PageSpec.a4().height, abs=0.5)
            assert pdf.metadata.get("Title") == "Inspection Summary"

    def test_invariant_output_is_reproducible(self):
        def build():
            builder = create_document_builder(Settings(), invariant=True)
            builder.add_content("Same content", 12, "Times-Roman")
            return builder.finalize()

        assert build() == build()

    def test_empty_document_renders_one_page(self, read_pdf_text):
        pages = read_pdf_text(DocumentBuilder().finalize())
        assert len(pages) == 1
