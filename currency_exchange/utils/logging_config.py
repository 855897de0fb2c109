"""
Structured logging configuration.

Console output plus an optional rotating log file, in text or JSON format.
JSON records carry the service name, the emitting component
(``registry``, ``pricing``, ``services``...) and any fields bound with
``LogContext``.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from currency_exchange.utils.config_loader import AppConfig

SERVICE_NAME = "currency-exchange"
DEFAULT_LOG_FILENAME = "currency_exchange.log"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("urllib3", "httpx", "uvicorn.access")


def component_for(logger_name: str) -> str:
    """Map a logger name to its component, e.g. ``currency_exchange.pricing.x`` -> ``pricing``."""
    parts = logger_name.split(".")
    if parts[0] == "currency_exchange" and len(parts) > 1:
        return parts[1]
    return parts[0]


class JSONFormatter(JsonFormatter):
    """One JSON object per record with service, component and context fields."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME
        log_record["component"] = component_for(record.name)
        log_record["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

        context = getattr(record, "context", None)
        if context:
            log_record.update(context)
        log_record.pop("context", None)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JSONFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure root logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "text" for human-readable, "json" for structured.
        log_file: Optional file path for log output.
        max_bytes: Max log file size before rotation.
        backup_count: Number of backup files to keep.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter = build_formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging configured: level={level}, format={log_format}")


def setup_logging_from_config(config: AppConfig, verbose: bool = False) -> Path:
    """
    Configure logging from the ``logging`` and ``paths`` config sections.

    Returns:
        Path: The log file written to (``<logs_dir>/currency_exchange.log``).
    """
    log_file = Path(config.paths.logs_dir) / DEFAULT_LOG_FILENAME
    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        log_format=config.logging.format,
        log_file=log_file,
    )
    return log_file


class LogContext:
    """
    Bind structured fields to every record created inside the block.

    Contexts nest: inner fields are merged over the outer ones.
    """

    def __init__(self, logger: logging.Logger, **fields):
        self.logger = logger
        self.fields = fields
        self.old_factory = None

    def __enter__(self):
        self.old_factory = logging.getLogRecordFactory()
        old_factory = self.old_factory
        fields = self.fields

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            record.context = {**getattr(record, "context", {}), **fields}
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self.old_factory)
        return False
