# backend/docscan/services/images.py
from pathlib import Path
from typing import Dict, List, Tuple

from ..config import settings
from ..errors import StorageIOError
from ..models.page import FilterName
from ..utils.files import copy_into, delete_file
from ..utils.logging import service_logger
from .transform import (
    AutoContrast,
    Contrast,
    EncodingOptions,
    Grayscale,
    Operation,
    PillowTransformEngine,
    Resize,
    Saturation,
    Sharpen,
    Threshold,
    TransformEngine,
)

# Operations applied after the bounding-width resize, per filter
FILTER_OPERATIONS: Dict[FilterName, Tuple[Operation, ...]] = {
    FilterName.COLOR: (Saturation(1.3), Contrast(1.1)),
    FilterName.GRAYSCALE: (Grayscale(),),
    FilterName.BW: (Grayscale(), AutoContrast(), Threshold(140)),
    FilterName.ENHANCE: (AutoContrast(), Sharpen()),
}


class ImagePipeline:
    """Turns captured image files into durable originals and filtered renditions"""

    def __init__(
            self,
            scans_dir: Path | None = None,
            engine: TransformEngine | None = None,
            max_width: int | None = None,
            jpeg_quality: float | None = None
    ):
        self.scans_dir = Path(scans_dir or settings.SCANS_PATH)
        self.engine = engine or PillowTransformEngine()
        self.max_width = max_width or settings.FILTER_MAX_WIDTH
        self.encoding = EncodingOptions(
            compress=settings.JPEG_QUALITY if jpeg_quality is None else jpeg_quality,
            format="JPEG"
        )

    def operations_for(self, filter_name: FilterName) -> List[Operation]:
        filter_name = FilterName(filter_name)
        if filter_name is FilterName.ORIGINAL:
            return []
        return [Resize(self.max_width), *FILTER_OPERATIONS[filter_name]]

    def _store(self, source: Path, prefix: str) -> Path:
        try:
            return copy_into(Path(source), self.scans_dir, prefix)
        except OSError as e:
            service_logger.error("Failed to persist image", extra={
                "source": str(source),
                "error": str(e)
            })
            raise StorageIOError(f"Cannot persist {source}: {e}", source=str(source)) from e

    def persist_original(self, capture_path: Path) -> Path:
        stored = self._store(capture_path, "original")
        service_logger.info("Persisted original capture", extra={
            "capture_path": str(capture_path),
            "stored_path": str(stored)
        })
        return stored

    def apply_filter(self, source_path: Path, filter_name: FilterName) -> Path:
        filter_name = FilterName(filter_name)
        if filter_name is FilterName.ORIGINAL:
            return Path(source_path)

        transformed = self.engine.transform(Path(source_path), self.operations_for(filter_name), self.encoding)
        try:
            stored = self._store(transformed, "processed")
        finally:
            # Engine output is a scratch file
            delete_file(transformed)

        service_logger.info("Applied filter", extra={
            "source_path": str(source_path),
            "filter_name": filter_name.value,
            "stored_path": str(stored)
        })
        return stored

    def delete_file(self, path: Path | str) -> bool:
        return delete_file(Path(path))
