# backend/docscan/api/scans.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from ..config import settings
from ..models.page import FilterName
from ..schemas.document import Document as DocumentSchema
from ..services.assembler import DocumentAssembler
from ..utils.files import delete_file, save_upload_file
from ..utils.logging import api_logger
from .deps import get_assembler

router = APIRouter(prefix="/api/scans", tags=["scans"])


@router.post("", response_model=DocumentSchema, responses={204: {"description": "No captures to save"}})
async def save_scan(
        files: List[UploadFile] = File(default=[]),
        filter_name: FilterName = Form(FilterName.ORIGINAL),
        title: Optional[str] = Form(None),
        assembler: DocumentAssembler = Depends(get_assembler)
):
    """Save a capture session as a new document, one page per uploaded image"""
    api_logger.info(
        f"Saving scan session with {len(files)} captures",
        extra={
            "file_count": len(files),
            "file_names": [f.filename for f in files],
            "filter_name": filter_name.value
        }
    )

    if not files:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # Uploads are transient capture files; the pipeline keeps its own copies
    staged = []
    try:
        for file in files:
            staged.append(await save_upload_file(file, settings.UPLOADS_PATH))

        document = assembler.save_scan(staged, filter_name=filter_name, title=title)
    finally:
        for path in staged:
            delete_file(path)

    api_logger.info("Successfully saved scan session", extra={
        "document_id": document.id,
        "page_count": document.page_count
    })
    return document
