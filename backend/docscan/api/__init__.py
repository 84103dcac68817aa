# backend/docscan/api/__init__.py
from .documents import router as documents_router
from .pages import router as pages_router
from .scans import router as scans_router

__all__ = ["documents_router", "pages_router", "scans_router"]
