# backend/docscan/utils/logging.py
import logging
import sys
from logging.handlers import RotatingFileHandler
from ..config import settings

# Ensure logs directory exists
LOG_DIR = settings.STORAGE_PATH / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Create formatters
verbose_formatter = logging.Formatter(
    '\033[1;36m%(asctime)s\033[0m - \033[1;33m%(name)s\033[0m - \033[1;35m%(levelname)s\033[0m [\033[1;34m%(module)s:%(lineno)d\033[0m] - %(message)s'
)
file_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s [%(module)s:%(lineno)d] - %(message)s'
)

# Reserved LogRecord attributes that an `extra` dict must not overwrite
RESERVED_ATTRS = frozenset({
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName'
})


class DocScanLogger:
    """Logger wrapper that protects reserved LogRecord attributes"""
    def __init__(self, name: str):
        self.logger = logging.getLogger(f"docscan.{name}")
        self.logger.setLevel(logging.INFO)
        self.setup_handlers(name)

    def setup_handlers(self, name: str):
        """Set up file and console handlers"""
        if self.logger.handlers:
            return

        # File handler with rotation
        file_handler = RotatingFileHandler(
            LOG_DIR / f"{name}.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        # Console handler with colors
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(verbose_formatter)
        self.logger.addHandler(console_handler)

    @staticmethod
    def _sanitize_extra(extra):
        """Rename extra fields that collide with reserved attributes"""
        if extra is None:
            return None

        return {
            (f"extra_{key}" if key in RESERVED_ATTRS else key): value
            for key, value in extra.items()
        }

    def debug(self, msg, extra=None, exc_info=None):
        self.logger.debug(msg, extra=self._sanitize_extra(extra), exc_info=exc_info)

    def info(self, msg, extra=None, exc_info=None):
        self.logger.info(msg, extra=self._sanitize_extra(extra), exc_info=exc_info)

    def warning(self, msg, extra=None, exc_info=None):
        self.logger.warning(msg, extra=self._sanitize_extra(extra), exc_info=exc_info)

    def error(self, msg, extra=None, exc_info=None):
        self.logger.error(msg, extra=self._sanitize_extra(extra), exc_info=exc_info)


# Create loggers for different components
db_logger = DocScanLogger("database")
service_logger = DocScanLogger("service")
export_logger = DocScanLogger("export")
api_logger = DocScanLogger("api")

# Make loggers available at module level
__all__ = ["db_logger", "service_logger", "export_logger", "api_logger"]
