"""
PDF Engine - page-oriented document building on ReportLab.

This module provides:
- Style resolution (fonts, colours, alignment)
- A document builder that accepts an ordered stream of content
  operations and paginates them
- The header/footer retrofit pass over every buffered page
- Rendering of the page buffer to PDF bytes

Usage:
    from inspection_export.pdf_engine import DocumentBuilder

    builder = DocumentBuilder()
    builder.add_content("Hello", 12, "Times-Roman", "left", "black")
    builder.add_footer("Footer", "Times-Roman", 9, "black", "Times-Roman", 10, "black", 72)
    pdf_bytes = builder.finalize()
"""

from .builder import DocumentBuilder, DocumentStore, create_document_builder
from .layout import WrappedLine, align_line, wrap_fragments
from .operations import (
    ContentOperation,
    DrawCommand,
    Fragment,
    OperationKind,
    Picture,
    Rule,
    TextLine,
)
from .page import Margins, Page, PageSpec
from .pagination import ListLayout, PaginationTracker
from .renderer import CanvasRenderer
from .retrofit import FooterSpec, HeaderSpec, apply_footer, apply_header, page_indicator
from .styles import Alignment, FontManager, LineCap, ResolvedStyle, StyleResolver


__all__ = [
    # Builder
    'DocumentBuilder',
    'DocumentStore',
    'create_document_builder',

    # Styles
    'Alignment',
    'FontManager',
    'LineCap',
    'ResolvedStyle',
    'StyleResolver',

    # Page model
    'Margins',
    'Page',
    'PageSpec',
    'ListLayout',
    'PaginationTracker',

    # Operations
    'ContentOperation',
    'DrawCommand',
    'Fragment',
    'OperationKind',
    'Picture',
    'Rule',
    'TextLine',

    # Layout
    'WrappedLine',
    'align_line',
    'wrap_fragments',

    # Retrofit
    'FooterSpec',
    'HeaderSpec',
    'apply_footer',
    'apply_header',
    'page_indicator',

    # Rendering
    'CanvasRenderer',
]
