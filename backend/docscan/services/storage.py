# backend/docscan/services/storage.py
import time
from contextlib import contextmanager
from typing import Iterator, List, Sequence
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..database import Database
from ..errors import NotFoundError, StorageIOError, ValidationError
from ..models.document import Document
from ..models.page import FilterName, Page
from ..schemas.document import Document as DocumentSchema
from ..schemas.page import Page as PageSchema, PageCreate
from ..utils.logging import db_logger


def now_ms() -> int:
    return int(time.time() * 1000)


def _token() -> str:
    return uuid4().hex[:12]


def new_document_id() -> str:
    return f"doc_{now_ms()}_{_token()}"


def new_page_id(index: int) -> str:
    return f"page_{now_ms()}_{index}_{_token()}"


class StorageEngine:
    """Durable store for documents and their ordered pages.

    Every public operation runs in its own session; writes commit as a single
    transaction. Results are returned as read-only snapshots, never ORM rows.
    """

    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def _transaction(self, operation: str, **context) -> Iterator[Session]:
        with self.database.session() as db:
            try:
                yield db
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                db_logger.error(f"Storage failure during {operation}", extra={
                    "operation": operation,
                    "error": str(e),
                    **context
                }, exc_info=True)
                raise StorageIOError(f"{operation} failed: {e}", **context) from e
            except Exception:
                db.rollback()
                raise

    @staticmethod
    def _load_document(db: Session, document_id: str) -> Document:
        document = db.query(Document) \
            .options(selectinload(Document.pages)) \
            .filter(Document.id == document_id) \
            .first()
        if not document:
            db_logger.warning("Document not found", extra={"document_id": document_id})
            raise NotFoundError("Document not found", document_id=document_id)
        return document

    @staticmethod
    def _touch(document: Document) -> None:
        # updatedAt never moves backwards even if the wall clock does
        document.updated_at = max(now_ms(), document.updated_at or 0)

    @staticmethod
    def _clean_title(title: str) -> str:
        if title is None or not title.strip():
            raise ValidationError("Document title cannot be empty")
        return title.strip()

    def create_document(self, title: str, pages: Sequence[PageCreate]) -> DocumentSchema:
        if not pages:
            raise ValidationError("A document needs at least one page")
        title = self._clean_title(title)

        timestamp = now_ms()
        document_id = new_document_id()

        with self._transaction("create_document", document_id=document_id) as db:
            document = Document(
                id=document_id,
                title=title,
                created_at=timestamp,
                updated_at=timestamp
            )
            db.add(document)
            for index, page in enumerate(pages):
                db.add(Page(
                    id=new_page_id(index),
                    document_id=document_id,
                    original_uri=page.original_uri,
                    processed_uri=page.processed_uri,
                    filter_name=FilterName(page.filter_name).value,
                    rotation=page.rotation,
                    order=index
                ))

        db_logger.info("Created document", extra={
            "document_id": document_id,
            "page_count": len(pages)
        })
        return self.get_document(document_id)

    def get_document(self, document_id: str) -> DocumentSchema:
        with self.database.session() as db:
            try:
                document = self._load_document(db, document_id)
                return DocumentSchema.model_validate(document)
            except SQLAlchemyError as e:
                raise StorageIOError(f"get_document failed: {e}", document_id=document_id) from e

    def get_all_documents(self) -> List[DocumentSchema]:
        with self.database.session() as db:
            try:
                documents = db.query(Document) \
                    .options(selectinload(Document.pages)) \
                    .order_by(Document.created_at.desc()) \
                    .all()
                return [DocumentSchema.model_validate(doc) for doc in documents]
            except SQLAlchemyError as e:
                raise StorageIOError(f"get_all_documents failed: {e}") from e

    def get_page(self, page_id: str) -> PageSchema:
        with self.database.session() as db:
            try:
                page = db.query(Page).filter(Page.id == page_id).first()
            except SQLAlchemyError as e:
                raise StorageIOError(f"get_page failed: {e}", page_id=page_id) from e
            if not page:
                db_logger.warning("Page not found", extra={"page_id": page_id})
                raise NotFoundError("Page not found", page_id=page_id)
            return PageSchema.model_validate(page)

    def update_document(self, document_id: str, title: str) -> DocumentSchema:
        title = self._clean_title(title)
        with self._transaction("update_document", document_id=document_id) as db:
            document = self._load_document(db, document_id)
            document.title = title
            self._touch(document)

        db_logger.info("Renamed document", extra={"document_id": document_id})
        return self.get_document(document_id)

    def delete_document(self, document_id: str) -> None:
        with self._transaction("delete_document", document_id=document_id) as db:
            exists = db.query(Document.id).filter(Document.id == document_id).first()
            if not exists:
                raise NotFoundError("Document not found", document_id=document_id)

            # Pages first, then the document, inside the same transaction
            deleted_pages = db.query(Page) \
                .filter(Page.document_id == document_id) \
                .delete(synchronize_session=False)
            db.query(Document) \
                .filter(Document.id == document_id) \
                .delete(synchronize_session=False)

        db_logger.info("Deleted document", extra={
            "document_id": document_id,
            "deleted_pages": deleted_pages
        })

    def update_page_order(self, document_id: str, ordered_page_ids: Sequence[str]) -> DocumentSchema:
        ordered_page_ids = list(ordered_page_ids)

        with self._transaction("update_page_order", document_id=document_id) as db:
            document = self._load_document(db, document_id)
            pages_by_id = {page.id: page for page in document.pages}

            if len(set(ordered_page_ids)) != len(ordered_page_ids):
                raise ValidationError("Page order contains duplicate ids", document_id=document_id)
            if set(ordered_page_ids) != set(pages_by_id):
                raise ValidationError(
                    "Page order must list exactly the document's pages",
                    document_id=document_id,
                    missing=sorted(set(pages_by_id) - set(ordered_page_ids)),
                    unexpected=sorted(set(ordered_page_ids) - set(pages_by_id))
                )

            for index, page_id in enumerate(ordered_page_ids):
                pages_by_id[page_id].order = index
            self._touch(document)

        db_logger.info("Updated page order", extra={
            "document_id": document_id,
            "page_ids": ordered_page_ids
        })
        return self.get_document(document_id)

    def update_page_filter(self, page_id: str, processed_uri: str, filter_name: FilterName) -> PageSchema:
        with self._transaction("update_page_filter", page_id=page_id) as db:
            page = db.query(Page).filter(Page.id == page_id).first()
            if not page:
                raise NotFoundError("Page not found", page_id=page_id)

            page.processed_uri = str(processed_uri)
            page.filter_name = FilterName(filter_name).value
            self._touch(page.document)

        db_logger.info("Updated page filter", extra={
            "page_id": page_id,
            "filter_name": FilterName(filter_name).value
        })
        return self.get_page(page_id)

    def delete_page(self, document_id: str, page_id: str) -> PageSchema:
        """Remove one page row.

        Does not enforce the one-page minimum and does not close the order gap;
        callers do both.
        """
        with self._transaction("delete_page", document_id=document_id, page_id=page_id) as db:
            page = db.query(Page) \
                .filter(Page.id == page_id, Page.document_id == document_id) \
                .first()
            if not page:
                raise NotFoundError("Page not found in document", document_id=document_id, page_id=page_id)

            removed = PageSchema.model_validate(page)
            self._touch(page.document)
            db.delete(page)

        db_logger.info("Deleted page", extra={
            "document_id": document_id,
            "page_id": page_id
        })
        return removed
