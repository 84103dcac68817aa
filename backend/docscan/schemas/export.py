# backend/docscan/schemas/export.py
from pydantic import BaseModel

from ..config import settings


class ExportSettings(BaseModel):
    # Checked by the export renderer so unknown sizes surface as ConfigurationError
    page_size: str = settings.EXPORT_PAGE_SIZE
    margins: int = settings.EXPORT_MARGINS
    include_page_numbers: bool = settings.EXPORT_INCLUDE_PAGE_NUMBERS
