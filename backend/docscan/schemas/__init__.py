# backend/docscan/schemas/__init__.py
from .document import Document, DocumentUpdate, PageOrderUpdate
from .page import Page, PageCreate, PageFilterUpdate, PageMove
from .export import ExportSettings

__all__ = [
    "Document", "DocumentUpdate", "PageOrderUpdate",
    "Page", "PageCreate", "PageFilterUpdate", "PageMove",
    "ExportSettings"
]
