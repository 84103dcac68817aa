# backend/docscan/utils/files.py
import shutil
import time
from pathlib import Path
from uuid import uuid4
from fastapi import UploadFile
from .logging import service_logger

def unique_filename(prefix: str, suffix: str) -> str:
    """Collision-resistant flat filename, e.g. original_1700000000000_<hex>.jpg"""
    suffix = suffix if not suffix or suffix.startswith(".") else f".{suffix}"
    return f"{prefix}_{int(time.time() * 1000)}_{uuid4().hex}{suffix.lower()}"

def copy_into(source: Path, directory: Path, prefix: str) -> Path:
    """Copy a file into directory under a unique name and return the new path"""
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / unique_filename(prefix, Path(source).suffix or ".jpg")
    shutil.copyfile(source, destination)
    return destination

async def save_upload_file(upload_file: UploadFile, directory: Path) -> Path:
    """Save an uploaded file with a unique name and return the path"""
    directory.mkdir(parents=True, exist_ok=True)
    file_extension = Path(upload_file.filename or "").suffix or ".jpg"
    file_path = directory / unique_filename("capture", file_extension)

    with file_path.open("wb") as buffer:
        shutil.copyfileobj(upload_file.file, buffer)

    return file_path

def delete_file(file_path: Path) -> bool:
    """Best-effort delete; failures are logged, never raised"""
    file_path = Path(file_path)
    try:
        if not file_path.exists():
            service_logger.warning("File already absent", extra={"file_path": str(file_path)})
            return False
        file_path.unlink()
        service_logger.info("Deleted file", extra={"file_path": str(file_path)})
        return True
    except OSError as e:
        service_logger.error(f"Error deleting file {file_path}: {e}", extra={
            "file_path": str(file_path),
            "error": str(e)
        })
        return False
