"""
Structured logging for tokenforge.

Log lines carry a trace_id, normally the address of the contract that wrote
them, so one token launch can be followed across the chain, the factories and
the token itself.

Environment Variables:
    TOKENFORGE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    TOKENFORGE_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from tokenforge.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id=token.address)
    logger.info("Token created")
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s [trace_id=%(trace_id)s]"


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(
            JSON_FIELDS,
            rename_fields={"asctime": "timestamp", "name": "logger", "levelname": "level"},
        )
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Replace the root logger's handlers with one stdout handler.

    Arguments override TOKENFORGE_LOG_LEVEL / TOKENFORGE_LOG_FORMAT; unknown
    levels fall back to INFO.
    """
    level_name = (level or os.getenv("TOKENFORGE_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("TOKENFORGE_LOG_FORMAT", "json")).lower()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(_build_formatter(log_format))
    handler.addFilter(TraceIDFilter())
    root_logger.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger adapter that stamps every record with trace_id ("N/A" if unset)."""
    return logging.LoggerAdapter(logging.getLogger(name), {"trace_id": trace_id or "N/A"})


class TraceIDFilter(logging.Filter):
    """Records logged without get_logger still get a trace_id field."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore[attr-defined]
        return True
