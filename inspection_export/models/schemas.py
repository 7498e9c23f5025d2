"""Pydantic schemas for the export API"""
from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime


# ============ Document Operations ============

class ContentOp(BaseModel):
    """Word-wrapped text at the cursor"""
    op: Literal["content"] = "content"
    text: str
    size: float
    font: str
    alignment: str = "left"
    color: str = "black"


class ContentAtOp(BaseModel):
    """Text at an absolute position"""
    op: Literal["content_at"] = "content_at"
    text: str
    size: float
    font: str
    alignment: str = "left"
    color: str = "black"
    x: float
    y: float
    advance_lines: float = 0


class LineOp(BaseModel):
    """Ruled segment on the current page"""
    op: Literal["line"] = "line"
    cap_style: str = "butt"
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "black"


class UnderlinedTextOp(BaseModel):
    op: Literal["underlined_text"] = "underlined_text"
    text: str
    font: str
    size: float
    advance_lines: float = 0


class SlicedTextOp(BaseModel):
    """Two-style text on one line"""
    op: Literal["sliced_text"] = "sliced_text"
    text: str
    split_index: int
    total_length: int
    font_a: str
    font_b: str
    color_a: str = "black"
    color_b: str = "black"
    advance_lines: float = 0


class ListItemOp(BaseModel):
    op: Literal["list_item"] = "list_item"
    number: int
    text: str


class PageBreakOp(BaseModel):
    op: Literal["page"] = "page"


class SetFontOp(BaseModel):
    op: Literal["set_font"] = "set_font"
    font: str
    size: float


class MoveDownOp(BaseModel):
    op: Literal["move_down"] = "move_down"
    lines: float = 1


DocumentOperation = Annotated[
    Union[
        ContentOp,
        ContentAtOp,
        LineOp,
        UnderlinedTextOp,
        SlicedTextOp,
        ListItemOp,
        PageBreakOp,
        SetFontOp,
        MoveDownOp,
    ],
    Field(discriminator="op"),
]


class OperationsRequest(BaseModel):
    """Ordered operations applied to one document"""
    operations: List[DocumentOperation] = Field(..., description="Applied in order")


class HeaderRequest(BaseModel):
    date_time_text: str
    image_payload: str = Field(default="", description="Base64 logo image; empty for none")
    font: str = "Times-Roman"
    color: str = "black"
    size: float = 10
    horizontal_margin: float = 72


class FooterRequest(BaseModel):
    text: str = ""
    left_font: str = "Times-Roman"
    left_size: float = 9
    left_color: str = "black"
    right_font: str = "Times-Roman"
    right_size: float = 10
    right_color: str = "black"
    horizontal_margin: float = 72


class DownloadRequest(BaseModel):
    filename: str = Field(..., description="Download name; sanitised before use")


# ============ Document Responses ============

class DocumentResponse(BaseModel):
    document_id: str
    page_count: int
    created_at: datetime = Field(default_factory=datetime.utcnow)


class OperationsResponse(BaseModel):
    """State after an operations batch"""
    document_id: str
    applied: int
    page_count: int
    cursor_x: float
    cursor_y: float


class RetrofitResponse(BaseModel):
    document_id: str
    pages: int


class LineHeightResponse(BaseModel):
    document_id: str
    line_height: float


# ============ Archive Models ============

class ArchiveEntryRequest(BaseModel):
    name: str = Field(..., description="Entry name inside the archive")
    data: str = Field(..., description="Base64 entry content")


class ArchiveResponse(BaseModel):
    session_id: str
    entries: int = 0
    total_bytes: int = 0


# ============ Health ============

class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    live_documents: int
    live_archives: int
    timestamp: datetime
