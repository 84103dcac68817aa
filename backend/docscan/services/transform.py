# backend/docscan/services/transform.py
"""Image transform engine.

Synchronous, pure Python (Pillow). Applies an ordered operation set to an image
file and encodes the result into a new temporary file. Persisting that file is
the image pipeline's job.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, Sequence, Union
from uuid import uuid4

from PIL import Image, ImageEnhance, ImageFilter, ImageOps, UnidentifiedImageError

from ..errors import StorageIOError


@dataclass(frozen=True)
class Resize:
    """Bound the width, keeping aspect ratio; never upscales"""
    width: int


@dataclass(frozen=True)
class Grayscale:
    pass


@dataclass(frozen=True)
class Threshold:
    level: int = 128


@dataclass(frozen=True)
class AutoContrast:
    cutoff: float = 1.0


@dataclass(frozen=True)
class Sharpen:
    pass


@dataclass(frozen=True)
class Saturation:
    factor: float


@dataclass(frozen=True)
class Contrast:
    factor: float


Operation = Union[Resize, Grayscale, Threshold, AutoContrast, Sharpen, Saturation, Contrast]


@dataclass(frozen=True)
class EncodingOptions:
    # Quality in 0..1, mapped onto the encoder's own scale
    compress: float = 0.9
    format: Literal["JPEG", "PNG"] = "JPEG"

    @property
    def suffix(self) -> str:
        return ".jpg" if self.format == "JPEG" else ".png"


class TransformEngine(Protocol):
    def transform(self, source: Path, operations: Sequence[Operation], encoding: EncodingOptions) -> Path:
        ...


def _apply(img: Image.Image, operation: Operation) -> Image.Image:
    if isinstance(operation, Resize):
        if img.width > operation.width:
            ratio = operation.width / img.width
            new_size = (operation.width, max(1, int(img.height * ratio)))
            img = img.resize(new_size, Image.LANCZOS)
        return img
    if isinstance(operation, Grayscale):
        return img.convert("L")
    if isinstance(operation, Threshold):
        level = operation.level
        return img.convert("L").point(lambda value: 255 if value >= level else 0)
    if isinstance(operation, AutoContrast):
        return ImageOps.autocontrast(img if img.mode in ("L", "RGB") else img.convert("RGB"), cutoff=operation.cutoff)
    if isinstance(operation, Sharpen):
        return img.filter(ImageFilter.SHARPEN)
    if isinstance(operation, Saturation):
        if img.mode == "L":
            return img
        return ImageEnhance.Color(img.convert("RGB")).enhance(operation.factor)
    if isinstance(operation, Contrast):
        return ImageEnhance.Contrast(img).enhance(operation.factor)
    raise TypeError(f"Unsupported image operation: {operation!r}")


class PillowTransformEngine:
    def __init__(self, work_dir: Path | None = None):
        self.work_dir = Path(work_dir) if work_dir else Path(tempfile.gettempdir())

    def transform(self, source: Path, operations: Sequence[Operation], encoding: EncodingOptions) -> Path:
        try:
            with Image.open(source) as opened:
                img = ImageOps.exif_transpose(opened) or opened
                img.load()
        except (OSError, UnidentifiedImageError) as e:
            raise StorageIOError(f"Cannot read image {source}: {e}", source=str(source)) from e

        for operation in operations:
            img = _apply(img, operation)

        # JPEG cannot hold alpha or palette images
        if encoding.format == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        self.work_dir.mkdir(parents=True, exist_ok=True)
        output = self.work_dir / f"transform_{uuid4().hex}{encoding.suffix}"
        save_kwargs = {}
        if encoding.format == "JPEG":
            save_kwargs["quality"] = max(1, min(95, round(encoding.compress * 100)))
        try:
            img.save(output, format=encoding.format, **save_kwargs)
        except OSError as e:
            raise StorageIOError(f"Cannot encode image {source}: {e}", source=str(source)) from e
        return output
