# backend/docscan/errors.py
"""Error taxonomy shared by the storage, pipeline, assembler and export layers."""


class DocScanError(Exception):
    """Base class for every error raised by the docscan core."""

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(DocScanError):
    """Requested document or page does not exist."""


class ValidationError(DocScanError):
    """Input rejected before any write (empty page list, blank title, bad order)."""


class InvariantViolation(DocScanError):
    """Operation would break a cross-row invariant, e.g. removing the last page."""


class ConfigurationError(DocScanError):
    """Malformed export configuration."""


class StorageIOError(DocScanError):
    """Persistence or filesystem operation failed unexpectedly."""
