import json
import logging
import logging.handlers
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from quizhub.core.config import settings

# Attributes every LogRecord carries; anything else arrived through `extra`
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying whatever context was passed via `extra`"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and value is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class PerformanceLogger:
    """Times a block of work; anything slower than slow_ms is logged as a warning"""

    def __init__(self, logger: logging.Logger, slow_ms: float = 1000.0):
        self.logger = logger
        self.slow_ms = slow_ms

    @contextmanager
    def measure_time(self, operation: str, **context: Any):
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            level = logging.WARNING if elapsed_ms > self.slow_ms else logging.DEBUG
            self.logger.log(
                level,
                "%s took %.2fms", operation, elapsed_ms,
                extra={"operation": operation, "execution_time_ms": round(elapsed_ms, 2), **context}
            )


def log_authentication(logger: logging.Logger, success: bool, email: str, user_id: Optional[int] = None):
    """Record a login outcome; failures go out at WARNING"""
    extra = {"event_type": "authentication", "success": success, "email": email, "user_id": user_id}
    if success:
        logger.info("Login succeeded for user %s", user_id, extra=extra)
    else:
        logger.warning("Login failed for %s", email, extra=extra)


def _rotating_file(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=50 * 1024 * 1024, backupCount=10, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging():
    """Console output plus a rotating JSON log and a separate error log under LOG_DIR"""
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    if settings.ENVIRONMENT == "development":
        console.setFormatter(logging.Formatter(settings.LOG_FORMAT))
    else:
        console.setFormatter(JSONFormatter())

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    root.addHandler(console)
    root.addHandler(_rotating_file(log_dir / "quizhub.log", logging.DEBUG))
    root.addHandler(_rotating_file(log_dir / "errors.log", logging.ERROR))

    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_performance_logger(name: str) -> PerformanceLogger:
    return PerformanceLogger(get_logger(name))
