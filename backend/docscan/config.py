# backend/docscan/config.py
from typing import Literal
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./docscan.db"  # Default if not in .env

    # Storage Paths
    STORAGE_PATH: Path = Path("storage")
    SCANS_PATH: Path | None = None  # Will be set based on STORAGE_PATH
    UPLOADS_PATH: Path | None = None  # Will be set based on STORAGE_PATH
    EXPORTS_PATH: Path | None = None  # Will be set based on STORAGE_PATH

    # Image pipeline
    FILTER_MAX_WIDTH: int = Field(default=2000, gt=0)
    JPEG_QUALITY: float = Field(default=0.9, ge=0.0, le=1.0)

    # Export defaults
    EXPORT_PAGE_SIZE: Literal["Letter", "A4"] = "Letter"
    EXPORT_MARGINS: int = Field(default=20, ge=0)
    EXPORT_INCLUDE_PAGE_NUMBERS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context) -> None:
        """Post initialization hook to set derived paths"""
        # Convert STORAGE_PATH to Path if it's a string
        if isinstance(self.STORAGE_PATH, str):
            self.STORAGE_PATH = Path(self.STORAGE_PATH)

        # Set derived paths if not explicitly provided
        self.SCANS_PATH = Path(self.SCANS_PATH) if self.SCANS_PATH else self.STORAGE_PATH / "scanned_docs"
        self.UPLOADS_PATH = Path(self.UPLOADS_PATH) if self.UPLOADS_PATH else self.STORAGE_PATH / "uploads"
        self.EXPORTS_PATH = Path(self.EXPORTS_PATH) if self.EXPORTS_PATH else self.STORAGE_PATH / "exports"

        # Create directories
        self.create_storage_dirs()

    def create_storage_dirs(self) -> None:
        """Create necessary storage directories if they don't exist"""
        for path in [self.STORAGE_PATH, self.SCANS_PATH, self.UPLOADS_PATH, self.EXPORTS_PATH]:
            path.mkdir(parents=True, exist_ok=True)

settings = Settings()
