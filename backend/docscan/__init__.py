# backend/docscan/__init__.py
from .config import settings
from .database import Base, Database
from .errors import (
    DocScanError,
    NotFoundError,
    ValidationError,
    InvariantViolation,
    ConfigurationError,
    StorageIOError,
)

__version__ = "0.1.0"
