"""
rangeswap - Structured Logging Configuration

Engine modules log through ``logging.getLogger(__name__)`` with structured
``extra`` fields (``event``, ``pool``, amounts). ``setup_logging`` renders
those records as JSON lines on the console and, optionally, a rotating file.
``create_engine(configure_logging=True)`` applies it from an ``EngineConfig``.

Token amounts, liquidity and Q64.96 prices routinely exceed the integer range
JSON consumers can represent exactly, so such values are written as strings.

Usage:
    from rangeswap.core.logging_config import setup_logging

    setup_logging(log_file="/var/log/rangeswap/engine.json", level="DEBUG")
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from .config import EngineConfig

# Largest integer a double-precision JSON reader keeps exact
MAX_SAFE_INTEGER = 2**53 - 1


class EngineJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping engine context onto every record."""

    def __init__(self, environment: str = "development", service_name: str = "rangeswap"):
        super().__init__(fmt="%(timestamp)s %(level)s %(name)s %(message)s")
        self.environment = environment
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        for key, value in log_record.items():
            if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
                log_record[key] = str(value)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")
        log_record["level"] = record.levelname.lower()
        log_record["environment"] = self.environment
        log_record["service"] = self.service_name
        log_record["source"] = f"{record.module}.{record.funcName}:{record.lineno}"


def setup_logging(
    name: str = "rangeswap",
    log_file: Optional[str] = None,
    level: str = "INFO",
    environment: str = "development",
    enable_console: bool = True,
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
    stream: Any = None,
) -> logging.Logger:
    """
    Attach JSON handlers to the ``name`` logger, replacing any it had.

    Args:
        name: Logger name; ``"rangeswap"`` covers every engine module
        log_file: Rotating JSON log file (optional)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        environment: Stamped onto each record
        enable_console: Whether to write to ``stream``
        max_bytes: File size that triggers rotation
        backup_count: Rotated files kept
        stream: Console stream (default: stdout)
    """
    numeric_level = logging.getLevelName(level.upper())
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.handlers = []

    formatter = EngineJsonFormatter(environment=environment, service_name=name.split(".")[0])

    if enable_console:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(config: EngineConfig, stream: Any = None) -> logging.Logger:
    """Configure the ``rangeswap`` logger from an ``EngineConfig``."""
    return setup_logging(
        log_file=config.log_file,
        level=config.log_level,
        environment=config.environment,
        stream=stream,
    )
