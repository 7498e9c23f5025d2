"""API routers"""
from .archives import router as archives_router
from .documents import router as documents_router

__all__ = ["archives_router", "documents_router"]
