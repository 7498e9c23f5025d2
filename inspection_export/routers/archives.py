"""Archive session routes"""
import io

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..deps import get_export_tool
from ..models.schemas import ArchiveEntryRequest, ArchiveResponse, DownloadRequest
from ..services import ExportTool
from ..utils.filenames import content_disposition


router = APIRouter(prefix="/api/export/archives", tags=["Archives"])


@router.post("/{session_id}", response_model=ArchiveResponse, status_code=201)
def create_archive(session_id: str, tool: ExportTool = Depends(get_export_tool)):
    """Open an empty archive session under the caller's id"""
    tool.create_archive(session_id)
    return ArchiveResponse(session_id=session_id)


@router.post("/{session_id}/entries", response_model=ArchiveResponse)
def add_entry(session_id: str, request: ArchiveEntryRequest, tool: ExportTool = Depends(get_export_tool)):
    """Add (or replace) one base64 entry"""
    tool.add_entry_to_archive(session_id, request.name, request.data)
    session = tool.archives.get(session_id)
    return ArchiveResponse(
        session_id=session_id,
        entries=len(session.entries),
        total_bytes=session.total_bytes,
    )


@router.post("/{session_id}/download")
def download_archive(session_id: str, request: DownloadRequest, tool: ExportTool = Depends(get_export_tool)):
    """Build the zip, close the session and stream the archive"""
    delivery = tool.download_archive(session_id, request.filename)
    return StreamingResponse(
        io.BytesIO(delivery.data),
        media_type=delivery.media_type,
        headers={"Content-Disposition": content_disposition(delivery.filename)},
    )


@router.delete("/{session_id}")
def discard_archive(session_id: str, tool: ExportTool = Depends(get_export_tool)):
    return {"session_id": session_id, "discarded": tool.discard_archive(session_id)}
