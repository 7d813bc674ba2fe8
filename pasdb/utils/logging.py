"""Loguru setup for pasdb.

Configured once, on first import. Human-readable records go to stderr so the
JSON that `pasdb extract --json` prints on stdout stays parseable.

Environment Variables:
    PASDB_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    PASDB_LOG_JSON: 1 to emit Pino-style NDJSON on stdout instead
    PASDB_LOG_FILE: also append NDJSON records (all levels) to this file
    PASDB_REQUEST_ID: correlation id stamped on NDJSON records
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

from .constants import ENV_PREFIX

# Pino numeric levels; SUCCESS has no Pino counterpart and maps to info
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(f"{ENV_PREFIX}_{name}", default)


_request_id = _env("REQUEST_ID") or str(uuid.uuid4())


def to_pino_record(record) -> dict:
    """Flatten a loguru record into a Pino log object.

    Bound extras become top-level keys; an attached exception becomes `err`.
    """
    extra = dict(record["extra"])
    pino = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": extra.pop("request_id", _request_id),
    }
    pino.update(extra)

    exception = record["exception"]
    if exception:
        pino["err"] = {
            "type": exception.type.__name__ if exception.type else "Error",
            "message": str(exception.value) if exception.value else "",
        }
    return pino


def _ndjson(record) -> str:
    return json.dumps(to_pino_record(record), default=str) + "\n"


def pino_compatible_sink(message) -> None:
    # Sinks must not log themselves
    sys.stdout.write(_ndjson(message.record))
    sys.stdout.flush()


def _ndjson_file_sink(path: str):
    def sink(message) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(_ndjson(message.record))

    return sink


def _configure() -> None:
    logger.remove()
    level = (_env("LOG_LEVEL", "INFO") or "INFO").upper()

    if _env("LOG_JSON", "0") == "1":
        logger.add(pino_compatible_sink, level=level, colorize=False)
    else:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=None)

    log_file = _env("LOG_FILE")
    if log_file:
        logger.add(_ndjson_file_sink(log_file), level="DEBUG")


_configure()


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add a rotating, human-readable `pasdb.log` handler under `log_dir`.

    Returns:
        The loguru handler id, for logger.remove()
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_dir / "pasdb.log",
        rotation="10 MB",
        retention="7 days",
        level=level,
        format=FILE_FORMAT,
    )


__all__ = [
    "logger",
    "configure_file_logging",
    "pino_compatible_sink",
    "to_pino_record",
]
