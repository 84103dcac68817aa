# backend/docscan/api/pages.py
from fastapi import APIRouter, Depends

from ..schemas.document import Document as DocumentSchema
from ..schemas.page import Page as PageSchema, PageFilterUpdate, PageMove
from ..services.assembler import DocumentAssembler
from ..utils.logging import api_logger
from .deps import get_assembler

router = APIRouter(prefix="/api/pages", tags=["pages"])


@router.get("/{page_id}", response_model=PageSchema)
async def get_page(page_id: str, assembler: DocumentAssembler = Depends(get_assembler)):
    api_logger.debug(f"Fetching page {page_id}", extra={"page_id": page_id})
    return assembler.get_page(page_id)


@router.put("/{page_id}/filter", response_model=PageSchema)
async def update_page_filter(
        page_id: str,
        update: PageFilterUpdate,
        assembler: DocumentAssembler = Depends(get_assembler)
):
    api_logger.info(f"Re-applying filter to page {page_id}", extra={
        "page_id": page_id,
        "filter_name": update.filter_name.value
    })
    page = assembler.reapply_filter(page_id, update.filter_name)

    api_logger.info(f"Successfully updated page {page_id}", extra={
        "page_id": page_id,
        "processed_uri": page.processed_uri
    })
    return page


@router.put("/{page_id}/reorder", response_model=DocumentSchema)
async def reorder_page(
        page_id: str,
        move: PageMove,
        assembler: DocumentAssembler = Depends(get_assembler)
):
    """Move one page to a new zero-based position within its document"""
    page = assembler.get_page(page_id)
    api_logger.info(f"Moving page {page_id}", extra={
        "page_id": page_id,
        "document_id": page.document_id,
        "old_position": page.order,
        "new_position": move.new_position
    })
    return assembler.move_page(page.document_id, page_id, move.new_position)
