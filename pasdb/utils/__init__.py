"""pasdb utilities package."""

from .constants import CONFIG_FILE, DEFAULT_MAX_FILE_SIZE, ERROR_LOG_FILE, PASDB_DIR, UNIT_SUFFIXES
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .helpers import iter_unit_files, read_unit_source, save_json_file
from .logging import logger

__all__ = [
    "PASDB_DIR",
    "CONFIG_FILE",
    "ERROR_LOG_FILE",
    "DEFAULT_MAX_FILE_SIZE",
    "UNIT_SUFFIXES",
    "handle_exceptions",
    "ExitCodes",
    "iter_unit_files",
    "read_unit_source",
    "save_json_file",
    "logger",
]
