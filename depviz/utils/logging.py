"""Centralized logging configuration using Loguru.

Usage:
    from depviz.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if DEPVIZ_LOG_LEVEL=DEBUG

Environment Variables:
    DEPVIZ_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    DEPVIZ_LOG_JSON: 0|1 (default: 0, human-readable)
    DEPVIZ_LOG_FILE: path to an NDJSON log file (optional)
"""

import json
import os
import sys
import uuid

from loguru import logger

# Remove default handler
logger.remove()

_log_level = os.environ.get("DEPVIZ_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("DEPVIZ_LOG_JSON", "0") == "1"
_log_file = os.environ.get("DEPVIZ_LOG_FILE")
_process_run_id = uuid.uuid4().hex[:12]


def _to_record_dict(message) -> dict:
    """Flatten a loguru message into a single NDJSON-ready dict."""
    record = message.record

    entry = {
        "level": record["level"].name,
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "run_id": record["extra"].get("run_id", _process_run_id),
    }

    for key, value in record["extra"].items():
        if key != "run_id":
            entry[key] = value if isinstance(value, (str, int, float, bool)) else str(value)

    if record["exception"]:
        entry["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return entry


def json_sink(message):
    """Write one NDJSON record per log call to stderr.

    Never call logger.* inside a sink - causes infinite recursion.
    """
    sys.stderr.write(json.dumps(_to_record_dict(message)) + "\n")
    sys.stderr.flush()


# Human-readable format (ASCII only)
_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(json_sink, level=_log_level, colorize=False)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )

if _log_file:

    def _file_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_to_record_dict(message)) + "\n")

    logger.add(_file_sink, level="DEBUG")


def new_run_id() -> str:
    """Return a fresh correlation id for one analysis run."""
    return uuid.uuid4().hex[:12]


__all__ = ["logger", "new_run_id", "json_sink"]
