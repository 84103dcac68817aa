# backend/docscan/models/__init__.py
from ..database import Base
from .document import Document
from .page import Page, FilterName

__all__ = [
    "Base",
    "Document",
    "Page",
    "FilterName"
]
