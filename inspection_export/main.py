"""
Inspection Export - Main Application

HTTP host for the document & archive assembly engine: build a paginated
PDF report operation by operation, bundle files into zip archives and
download both.

Usage:
    uvicorn inspection_export.main:app --host 0.0.0.0 --port 3004 --reload
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from . import deps
from .exceptions import (
    DeliveryFailure,
    DuplicateSession,
    ExportError,
    InvalidState,
    InvalidStyle,
    MalformedPayload,
    RangeError,
    UnknownSession,
)
from .models.schemas import HealthResponse
from .routers import archives_router, documents_router
from .services import ExportTool
from .utils.config import settings


logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


STATUS_CODES = {
    InvalidState: 409,
    InvalidStyle: 422,
    RangeError: 422,
    MalformedPayload: 422,
    UnknownSession: 404,
    DuplicateSession: 409,
    DeliveryFailure: 502,
}


def status_for(exc: ExportError) -> int:
    """HTTP status for an engine error (most specific class wins)"""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"{settings.app_name} v{settings.app_version} starting")
    logger.info(f"Page size: {settings.page_size}, margin {settings.page_margin}pt")
    yield
    tool = deps._export_tool
    if tool is not None:
        tool.close()
    logger.info("Shutting down")


app = FastAPI(
    title=settings.app_name,
    description="""
    ## Inspection Export

    Builds the inspection summary PDF and zip bundles for download.

    ### Documents:
    - `POST /api/export/documents` - Open a document
    - `POST /api/export/documents/{id}/operations` - Append content
    - `POST /api/export/documents/{id}/header` / `footer` - Retrofit every page
    - `POST /api/export/documents/{id}/download` - Finalize and download

    ### Archives:
    - `POST /api/export/archives/{session_id}` - Open a session
    - `POST /api/export/archives/{session_id}/entries` - Add a base64 entry
    - `POST /api/export/archives/{session_id}/download` - Finalize and download
    """,
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(documents_router)
app.include_router(archives_router)


@app.get("/")
def root():
    """Root endpoint with service info"""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse)
def health_check(tool: ExportTool = Depends(deps.get_export_tool)):
    """Service health and live resource counts"""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        live_documents=len(tool.documents),
        live_archives=len(tool.archives),
        timestamp=datetime.utcnow(),
    )


@app.exception_handler(ExportError)
async def export_error_handler(request: Request, exc: ExportError):
    """Map engine errors onto HTTP status codes"""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": str(exc),
            "type": type(exc).__name__,
            "path": str(request.url.path),
        },
    )


# For running with python -m
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "inspection_export.main:app",
        host="0.0.0.0",
        port=3004,
        reload=True,
    )
