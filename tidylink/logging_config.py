"""
Logging setup for Tidylink.

Emits one JSON object per line on stdout and, when a path is configured,
mirrors the same lines into a file. Modules log through
`logging.getLogger(__name__)`; only the entry points call `setup_logging`.
"""

import json
import logging
import sys
from typing import Any, Dict, List, Optional

LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "funcName": record.funcName,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj)


def parse_level(name: Optional[str]) -> int:
    """Map a level name to its logging constant; unknown names mean INFO."""
    return LEVELS.get((name or "").strip().lower(), logging.INFO)


def setup_logging(level: Optional[str] = "info", log_path: Optional[str] = None) -> None:
    formatter = JSONFormatter()
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path:
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logger = logging.getLogger()
    logger.handlers = handlers
    logger.setLevel(parse_level(level))

    # Uvicorn loggers
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv = logging.getLogger(name)
        uv.handlers = []
        uv.propagate = True
