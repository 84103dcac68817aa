# backend/docscan/services/assembler.py
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import InvariantViolation, NotFoundError, ValidationError
from ..models.page import FilterName
from ..schemas.document import Document
from ..schemas.page import Page, PageCreate
from ..utils.logging import service_logger
from .images import ImagePipeline
from .storage import StorageEngine


def default_title(when: datetime | None = None) -> str:
    """Title given to a freshly saved scan, e.g. 'Scan 2024-03-05 4:07 PM'"""
    when = when or datetime.now()
    hour12 = when.hour % 12 or 12
    ampm = "PM" if when.hour >= 12 else "AM"
    return f"Scan {when:%Y-%m-%d} {hour12}:{when:%M} {ampm}"


class DocumentAssembler:
    """Entry point for every document and page mutation.

    Enforces the invariants a single row write cannot see: a document keeps at
    least one page, and page order stays contiguous after deletes and moves.
    """

    def __init__(self, storage: StorageEngine, images: ImagePipeline):
        self.storage = storage
        self.images = images

    # Reads

    def get_document(self, document_id: str) -> Document:
        return self.storage.get_document(document_id)

    def list_documents(self) -> List[Document]:
        return self.storage.get_all_documents()

    def get_page(self, page_id: str) -> Page:
        return self.storage.get_page(page_id)

    # Scan sessions

    def save_scan(
            self,
            capture_paths: Sequence[Path],
            filter_name: FilterName = FilterName.ORIGINAL,
            title: Optional[str] = None
    ) -> Optional[Document]:
        """Persist a capture session as a new document.

        Returns None when the session produced no captures. Files are written
        before the document rows; a failure on any capture aborts the session
        and leaves already written files unreferenced.
        """
        if not capture_paths:
            service_logger.info("Scan session produced no captures, nothing to save")
            return None

        filter_name = FilterName(filter_name)
        start_time = time.time()
        pages = []
        for index, capture_path in enumerate(capture_paths):
            try:
                original = self.images.persist_original(Path(capture_path))
                processed = self.images.apply_filter(original, filter_name)
            except Exception as e:
                service_logger.error("Aborting scan session", extra={
                    "capture_index": index,
                    "capture_path": str(capture_path),
                    "error": str(e)
                })
                raise
            pages.append(PageCreate(
                original_uri=str(original),
                processed_uri=str(processed),
                filter_name=filter_name,
                rotation=0
            ))

        document = self.storage.create_document(title or default_title(), pages)

        service_logger.info("Saved scan session", extra={
            "document_id": document.id,
            "page_count": document.page_count,
            "filter_name": filter_name.value,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return document

    # Document mutations

    def rename_document(self, document_id: str, title: str) -> Document:
        return self.storage.update_document(document_id, title)

    def delete_document(self, document_id: str) -> None:
        document = self.storage.get_document(document_id)
        self.storage.delete_document(document_id)

        for path in self._files_of(document.pages):
            self.images.delete_file(path)

        service_logger.info("Deleted document and its files", extra={
            "document_id": document_id,
            "page_count": document.page_count
        })

    # Page mutations

    def delete_page(self, document_id: str, page_id: str) -> Document:
        document = self.storage.get_document(document_id)
        if page_id not in document.page_ids:
            raise NotFoundError("Page not found in document", document_id=document_id, page_id=page_id)
        if document.page_count <= 1:
            service_logger.warning("Refusing to delete the last page", extra={
                "document_id": document_id,
                "page_id": page_id
            })
            raise InvariantViolation(
                "Document must have at least one page",
                document_id=document_id,
                page_id=page_id
            )

        removed = self.storage.delete_page(document_id, page_id)
        remaining = [pid for pid in document.page_ids if pid != page_id]
        document = self.storage.update_page_order(document_id, remaining)

        for path in self._files_of([removed]):
            self.images.delete_file(path)
        return document

    def reorder_pages(self, document_id: str, ordered_page_ids: Sequence[str]) -> Document:
        return self.storage.update_page_order(document_id, list(ordered_page_ids))

    def move_page(self, document_id: str, page_id: str, new_position: int) -> Document:
        """Move one page to a zero-based position, shifting its siblings"""
        document = self.storage.get_document(document_id)
        page_ids = document.page_ids
        if page_id not in page_ids:
            raise NotFoundError("Page not found in document", document_id=document_id, page_id=page_id)
        if not 0 <= new_position < len(page_ids):
            raise ValidationError(
                "Invalid page position",
                document_id=document_id,
                new_position=new_position,
                page_count=len(page_ids)
            )

        page_ids.remove(page_id)
        page_ids.insert(new_position, page_id)
        return self.storage.update_page_order(document_id, page_ids)

    def renormalize(self, document_id: str) -> Document:
        """Re-issue the current displayed order, e.g. after an interrupted reorder"""
        document = self.storage.get_document(document_id)
        return self.storage.update_page_order(document_id, document.page_ids)

    def reapply_filter(self, page_id: str, filter_name: FilterName) -> Page:
        filter_name = FilterName(filter_name)
        page = self.storage.get_page(page_id)

        processed = self.images.apply_filter(Path(page.original_uri), filter_name)
        updated = self.storage.update_page_filter(page_id, str(processed), filter_name)

        superseded = page.processed_uri
        if superseded not in (page.original_uri, updated.processed_uri):
            self.images.delete_file(superseded)
        return updated

    @staticmethod
    def _files_of(pages: Sequence[Page]) -> List[str]:
        paths = []
        for page in pages:
            for path in (page.original_uri, page.processed_uri):
                if path not in paths:
                    paths.append(path)
        return paths
