"""
Shared test fixtures.

Provides builders, export tools and small image payloads.
"""

import base64
import io

import pdfplumber
import pytest
from PIL import Image

from inspection_export.delivery import InMemoryDeliveryAdapter
from inspection_export.pdf_engine import DocumentBuilder, PageSpec
from inspection_export.services import ExportTool


# ============================================================
# Helper Functions
# ============================================================

def make_png(width: int = 40, height: int = 20, color=(30, 60, 120)) -> bytes:
    """Create a small solid PNG in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def pdf_pages_text(data: bytes):
    """Extract the text of every page of a PDF byte string."""
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_payload(png_bytes):
    """Base64 PNG as the host sends it."""
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def builder():
    """Fresh US Letter document with 72pt margins."""
    return DocumentBuilder(page_spec=PageSpec.us_letter())


@pytest.fixture
def delivery():
    return InMemoryDeliveryAdapter()


@pytest.fixture
def export_tool(delivery):
    tool = ExportTool(delivery=delivery)
    yield tool
    tool.close()


@pytest.fixture
def read_pdf_text():
    """Page texts of a rendered PDF."""
    return pdf_pages_text
