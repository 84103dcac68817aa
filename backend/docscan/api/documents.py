# backend/docscan/api/documents.py
import time
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ..config import settings
from ..errors import DocScanError
from ..schemas.document import Document as DocumentSchema, DocumentUpdate, PageOrderUpdate
from ..schemas.export import ExportSettings
from ..services.assembler import DocumentAssembler
from ..services.export import ExportRenderer
from ..utils.logging import api_logger
from .deps import get_assembler, get_renderer

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=List[DocumentSchema])
async def list_documents(assembler: DocumentAssembler = Depends(get_assembler)):
    api_logger.info("Listing documents", extra={"operation": "list_documents"})

    start_time = time.time()
    documents = assembler.list_documents()

    api_logger.info("Successfully listed documents", extra={
        "document_count": len(documents),
        "execution_time_ms": round((time.time() - start_time) * 1000, 2)
    })
    return documents


@router.get("/{document_id}", response_model=DocumentSchema)
async def get_document(document_id: str, assembler: DocumentAssembler = Depends(get_assembler)):
    api_logger.info("Retrieving document details", extra={"document_id": document_id})
    return assembler.get_document(document_id)


@router.put("/{document_id}", response_model=DocumentSchema)
async def update_document(
        document_id: str,
        document: DocumentUpdate,
        assembler: DocumentAssembler = Depends(get_assembler)
):
    api_logger.info("Renaming document", extra={
        "document_id": document_id,
        "title": document.title
    })
    return assembler.rename_document(document_id, document.title)


@router.delete("/{document_id}")
async def delete_document(document_id: str, assembler: DocumentAssembler = Depends(get_assembler)):
    api_logger.info("Deleting document", extra={"document_id": document_id})

    try:
        assembler.delete_document(document_id)
    except DocScanError:
        raise
    except Exception as e:
        api_logger.error(f"Failed to delete document: {str(e)}", extra={
            "document_id": document_id
        }, exc_info=True)
        raise

    api_logger.info(f"Successfully deleted document {document_id}")
    return {"success": True}


@router.put("/{document_id}/pages/order", response_model=DocumentSchema)
async def update_page_order(
        document_id: str,
        order: PageOrderUpdate,
        assembler: DocumentAssembler = Depends(get_assembler)
):
    api_logger.info("Reordering pages", extra={
        "document_id": document_id,
        "page_ids": order.page_ids
    })
    return assembler.reorder_pages(document_id, order.page_ids)


@router.delete("/{document_id}/pages/{page_id}", response_model=DocumentSchema)
async def delete_page(
        document_id: str,
        page_id: str,
        assembler: DocumentAssembler = Depends(get_assembler)
):
    api_logger.info(f"Deleting page {page_id}", extra={
        "document_id": document_id,
        "page_id": page_id
    })
    return assembler.delete_page(document_id, page_id)


@router.get("/{document_id}/export")
async def export_document(
        document_id: str,
        page_size: str = settings.EXPORT_PAGE_SIZE,
        margins: int = settings.EXPORT_MARGINS,
        include_page_numbers: bool = settings.EXPORT_INCLUDE_PAGE_NUMBERS,
        renderer: ExportRenderer = Depends(get_renderer)
):
    export_settings = ExportSettings(
        page_size=page_size,
        margins=margins,
        include_page_numbers=include_page_numbers
    )
    api_logger.info("Starting document export", extra={
        "document_id": document_id,
        **export_settings.model_dump()
    })

    output = renderer.export(document_id, export_settings)

    return FileResponse(
        path=output,
        media_type="application/pdf",
        filename=output.name
    )
