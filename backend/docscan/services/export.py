# backend/docscan/services/export.py
import re
import time
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Dict, List, Protocol, Tuple

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate

from ..config import settings
from ..errors import ConfigurationError, StorageIOError
from ..schemas.document import Document
from ..schemas.export import ExportSettings
from ..utils.logging import export_logger
from .storage import StorageEngine


@dataclass(frozen=True)
class PageGeometry:
    name: str
    width: float  # points
    height: float  # points
    css_size: str


PAGE_SIZES: Dict[str, PageGeometry] = {
    "Letter": PageGeometry("Letter", letter[0], letter[1], "8.5in 11in"),
    "A4": PageGeometry("A4", A4[0], A4[1], "210mm 297mm"),
}

# Vertical room kept free under each image for the page caption
CAPTION_HEIGHT = 36
# SimpleDocTemplate frames pad their content by 6pt on every side
FRAME_PADDING = 12


@dataclass(frozen=True)
class PageUnit:
    """One physical output page"""
    number: int  # 1-based
    image_path: str
    margins: int
    caption: str | None = None


@dataclass(frozen=True)
class ExportJob:
    title: str
    geometry: PageGeometry
    margins: int
    units: Tuple[PageUnit, ...] = field(default_factory=tuple)

    def to_html(self) -> str:
        """Serialize to page-broken HTML for markup-driven render engines"""
        pages = []
        for unit in self.units:
            caption = ""
            if unit.caption:
                caption = (
                    '<p style="margin-top: 10px; font-size: 12px; color: #666;">'
                    f"{escape(unit.caption)}</p>"
                )
            pages.append(
                f'<div style="page-break-after: always; text-align: center; padding: {int(unit.margins)}px;">'
                f'<img src="{escape(unit.image_path, quote=True)}" style="max-width: 100%; height: auto;" />'
                f"{caption}</div>"
            )

        return (
            "<!DOCTYPE html><html><head>"
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
            f"<title>{escape(self.title)}</title>"
            "<style>body { margin: 0; padding: 0; font-family: sans-serif; } "
            f"@page {{ size: {self.geometry.css_size}; margin: 0; }}</style>"
            f"</head><body>{''.join(pages)}</body></html>"
        )


class RenderEngine(Protocol):
    def render(self, job: ExportJob) -> Path:
        ...


def export_filename(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9._-]+", "_", title).strip("._") or "document"
    return f"{slug[:80]}_{int(time.time() * 1000)}.pdf"


class ReportLabRenderEngine:
    """Draws one PDF page per unit: the image fitted to the padded box, caption below"""

    def __init__(self, output_dir: Path | None = None):
        self.output_dir = Path(output_dir or settings.EXPORTS_PATH)

    def render(self, job: ExportJob) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output = self.output_dir / export_filename(job.title)

        doc = SimpleDocTemplate(
            str(output),
            pagesize=(job.geometry.width, job.geometry.height),
            rightMargin=job.margins,
            leftMargin=job.margins,
            topMargin=job.margins,
            bottomMargin=job.margins,
            title=job.title
        )

        styles = getSampleStyleSheet()
        caption_style = ParagraphStyle(
            'PageCaption',
            parent=styles['Normal'],
            fontSize=12,
            textColor=colors.HexColor('#666666'),
            alignment=TA_CENTER,
            spaceBefore=10
        )

        box_width = doc.width - FRAME_PADDING
        box_height = doc.height - FRAME_PADDING - CAPTION_HEIGHT
        if box_width <= 0 or box_height <= 0:
            raise ConfigurationError("Margins leave no room for page content", margins=job.margins)

        content = []
        for unit in job.units:
            if content:
                content.append(PageBreak())
            try:
                image_width, image_height = ImageReader(unit.image_path).getSize()
            except OSError as e:
                raise StorageIOError(f"Cannot read page image {unit.image_path}: {e}",
                                     image_path=unit.image_path) from e

            scale = min(box_width / image_width, box_height / image_height, 1.0)
            content.append(Image(unit.image_path, width=image_width * scale, height=image_height * scale))
            if unit.caption:
                content.append(Paragraph(escape(unit.caption), caption_style))

        try:
            doc.build(content)
        except OSError as e:
            raise StorageIOError(f"PDF generation failed: {e}", output=str(output)) from e
        return output


class ExportRenderer:
    """Assembles a document snapshot into page units and hands them to a render engine"""

    def __init__(self, storage: StorageEngine, engine: RenderEngine | None = None):
        self.storage = storage
        self.engine = engine or ReportLabRenderEngine()

    @staticmethod
    def geometry_for(export_settings: ExportSettings) -> PageGeometry:
        geometry = PAGE_SIZES.get(export_settings.page_size)
        if geometry is None:
            raise ConfigurationError(
                f"Unsupported page size: {export_settings.page_size!r}",
                page_size=export_settings.page_size,
                supported=sorted(PAGE_SIZES)
            )
        if export_settings.margins < 0:
            raise ConfigurationError("Margins must be zero or positive", margins=export_settings.margins)
        return geometry

    def build_units(self, document: Document, export_settings: ExportSettings) -> List[PageUnit]:
        self.geometry_for(export_settings)

        pages = sorted(document.pages, key=lambda page: page.order)
        total = len(pages)
        return [
            PageUnit(
                number=index,
                image_path=page.processed_uri,
                margins=export_settings.margins,
                caption=f"Page {index} of {total}" if export_settings.include_page_numbers else None
            )
            for index, page in enumerate(pages, start=1)
        ]

    def build_job(self, document: Document, export_settings: ExportSettings) -> ExportJob:
        geometry = self.geometry_for(export_settings)
        return ExportJob(
            title=document.title,
            geometry=geometry,
            margins=export_settings.margins,
            units=tuple(self.build_units(document, export_settings))
        )

    def export_document(self, document: Document, export_settings: ExportSettings) -> Path:
        start_time = time.time()
        job = self.build_job(document, export_settings)

        export_logger.info("Starting document export", extra={
            "document_id": document.id,
            "page_count": len(job.units),
            "page_size": job.geometry.name,
            "margins": job.margins,
            "include_page_numbers": export_settings.include_page_numbers
        })

        output = self.engine.render(job)

        export_logger.info("Export successful", extra={
            "document_id": document.id,
            "output": str(output),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return output

    def export(self, document_id: str, export_settings: ExportSettings | None = None) -> Path:
        """Reload the document and export it; nothing is cached between calls"""
        document = self.storage.get_document(document_id)
        return self.export_document(document, export_settings or ExportSettings())
