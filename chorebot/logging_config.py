"""
Log setup for chorebot: stdout plus a rotating file under LOGS_DIR.
Set JSON_LOGS=true to emit one JSON object per console line.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone

LOG_FILE_NAME = "chorebot.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

QUIET_LOGGERS = (
    "aiohttp.access",
    "apscheduler",
    "googleapiclient.discovery_cache",
    "httpcore",
    "httpx",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _console_handler(json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(logs_dir: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, LOG_FILE_NAME),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(log_level: str, logs_dir: str, json_logs: bool = False) -> None:
    """Replace any existing root handlers. Unknown level names fall back to INFO."""
    os.makedirs(logs_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers = [_console_handler(json_logs), _file_handler(logs_dir)]
    for handler in handlers:
        handler.setLevel(level)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
