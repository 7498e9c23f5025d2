"""Document building routes"""
import io
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..deps import get_export_tool
from ..exceptions import ExportError
from ..models.schemas import (
    ContentAtOp,
    ContentOp,
    DocumentResponse,
    DownloadRequest,
    FooterRequest,
    HeaderRequest,
    LineHeightResponse,
    LineOp,
    ListItemOp,
    MoveDownOp,
    OperationsRequest,
    OperationsResponse,
    PageBreakOp,
    RetrofitResponse,
    SetFontOp,
    SlicedTextOp,
    UnderlinedTextOp,
)
from ..pdf_engine import DocumentBuilder
from ..services import ExportTool
from ..utils.filenames import content_disposition


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export/documents", tags=["Documents"])


def apply_operation(document: DocumentBuilder, op) -> None:
    """Dispatch one request operation onto the builder"""
    if isinstance(op, ContentOp):
        document.add_content(op.text, op.size, op.font, op.alignment, op.color)
    elif isinstance(op, ContentAtOp):
        document.add_content_at(op.text, op.size, op.font, op.alignment, op.color, op.x, op.y, op.advance_lines)
    elif isinstance(op, LineOp):
        document.add_line(op.cap_style, op.x1, op.y1, op.x2, op.y2, op.color)
    elif isinstance(op, UnderlinedTextOp):
        document.add_underlined_text(op.text, op.font, op.size, op.advance_lines)
    elif isinstance(op, SlicedTextOp):
        document.add_sliced_text(
            op.text, op.split_index, op.total_length,
            op.font_a, op.font_b, op.color_a, op.color_b, op.advance_lines,
        )
    elif isinstance(op, ListItemOp):
        document.add_numbered_list_item(op.number, op.text)
    elif isinstance(op, PageBreakOp):
        document.add_page()
    elif isinstance(op, SetFontOp):
        document.set_font(op.font, op.size)
    elif isinstance(op, MoveDownOp):
        document.move_down(op.lines)
    else:
        raise TypeError(f"Unsupported operation: {type(op).__name__}")


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(tool: ExportTool = Depends(get_export_tool)):
    """Open a new document with one empty page"""
    document = tool.documents.create()
    return DocumentResponse(document_id=document.document_id, page_count=document.page_count)


@router.post("/{document_id}/operations", response_model=OperationsResponse)
def apply_operations(
    document_id: str,
    request: OperationsRequest,
    tool: ExportTool = Depends(get_export_tool),
):
    """
    Apply content operations in order.

    Stops at the first failing operation; the ones before it stay applied.
    """
    document = tool.documents.get(document_id)
    for index, op in enumerate(request.operations):
        try:
            apply_operation(document, op)
        except ExportError:
            logger.warning(f"{document_id}: operation {index} ({op.op}) failed, {index} applied")
            raise

    x, y = document.cursor
    return OperationsResponse(
        document_id=document_id,
        applied=len(request.operations),
        page_count=document.page_count,
        cursor_x=x,
        cursor_y=y,
    )


@router.post("/{document_id}/header", response_model=RetrofitResponse)
def add_header(document_id: str, request: HeaderRequest, tool: ExportTool = Depends(get_export_tool)):
    """Draw the header on every existing page"""
    document = tool.documents.get(document_id)
    operation = document.add_header(
        request.date_time_text, request.image_payload, request.font,
        request.color, request.size, request.horizontal_margin,
    )
    return RetrofitResponse(document_id=document_id, pages=operation.payload["pages"])


@router.post("/{document_id}/footer", response_model=RetrofitResponse)
def add_footer(document_id: str, request: FooterRequest, tool: ExportTool = Depends(get_export_tool)):
    """Draw the footer with page indicators on every existing page"""
    document = tool.documents.get(document_id)
    operation = document.add_footer(
        request.text,
        request.left_font, request.left_size, request.left_color,
        request.right_font, request.right_size, request.right_color,
        request.horizontal_margin,
    )
    return RetrofitResponse(document_id=document_id, pages=operation.payload["pages"])


@router.get("/{document_id}/line-height", response_model=LineHeightResponse)
def get_line_height(document_id: str, tool: ExportTool = Depends(get_export_tool)):
    document = tool.documents.get(document_id)
    return LineHeightResponse(document_id=document_id, line_height=document.get_line_height())


@router.post("/{document_id}/download")
def download_document(document_id: str, request: DownloadRequest, tool: ExportTool = Depends(get_export_tool)):
    """Finalize the document and stream the PDF"""
    delivery = tool.download_pdf(request.filename, document_id=document_id)
    return StreamingResponse(
        io.BytesIO(delivery.data),
        media_type=delivery.media_type,
        headers={"Content-Disposition": content_disposition(delivery.filename)},
    )


@router.delete("/{document_id}")
def discard_document(document_id: str, tool: ExportTool = Depends(get_export_tool)):
    """Drop a document without rendering it"""
    return {"document_id": document_id, "discarded": tool.documents.discard(document_id)}
