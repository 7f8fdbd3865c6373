"""
Structured Logging Configuration

Console output is colored; the optional log file gets the same layout without
escape codes. Records may carry a ``patient_id`` via ``extra=`` and it is
appended to the line, so lock / schedule decisions can be traced per patient.
"""
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """[timestamp] LEVEL [logger] message (patient=...)"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()

        line = f"[{timestamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"
        patient_id = getattr(record, "patient_id", None)
        if patient_id:
            line += f" (patient={patient_id})"

        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            line = f"{color}{line}{self.COLORS['RESET']}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging. Safe to call more than once.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file path; parent directories are created
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
