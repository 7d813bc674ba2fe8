"""Command error handling: log, record in .pasdb/error.log, report via click."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from pasdb.extraction.exceptions import PasdbError
from pasdb.utils.logging import logger

from .constants import ERROR_LOG_FILE, PASDB_DIR


def _record_failure(command: str, error: Exception) -> None:
    PASDB_DIR.mkdir(parents=True, exist_ok=True)
    lines = [
        f"[{datetime.now().isoformat()}] pasdb {command}",
        f"{type(error).__name__}: {error}",
    ]
    if isinstance(error, PasdbError):
        lines.extend(f"  {key}: {value}" for key, value in error.details.items())
    lines.append(traceback.format_exc())
    with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn unexpected failures of a command into a ClickException.

    Click's own exceptions pass through untouched so usage errors and
    `sys.exit` codes keep their meaning.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.Exit, click.ClickException):
            raise
        except Exception as e:
            command = func.__name__
            logger.opt(exception=True).error(f"pasdb {command} failed: {e}")
            _record_failure(command, e)
            message = e.message if isinstance(e, PasdbError) else f"{type(e).__name__}: {e}"
            raise click.ClickException(f"{message}\n\nDetails written to {ERROR_LOG_FILE}") from e

    return wrapper
