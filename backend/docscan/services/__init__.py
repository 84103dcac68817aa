# backend/docscan/services/__init__.py
from .storage import StorageEngine
from .images import ImagePipeline
from .assembler import DocumentAssembler
from .export import ExportRenderer

__all__ = ["StorageEngine", "ImagePipeline", "DocumentAssembler", "ExportRenderer"]
