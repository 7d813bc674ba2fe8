"""Centralized constants for pasdb.

Single source of truth for paths, file-handling limits and environment
variable names used by the CLI layer.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Working directory for pasdb artifacts (config, logs)
PASDB_DIR = Path("./.pasdb")

CONFIG_FILE = PASDB_DIR / "config.json"
ERROR_LOG_FILE = PASDB_DIR / "error.log"

# ============================================================================
# UNIT FILES
# ============================================================================

# Pascal sources scanned when a directory is given
UNIT_SUFFIXES = (".pas", ".dpr")

# Encodings tried in order; legacy Delphi sources are mostly ANSI (cp1252)
UNIT_ENCODINGS = ("utf-8-sig", "cp1252")

# Maximum unit size to analyze (default: 2MB)
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "PASDB"
ENV_DEBUG = "PASDB_DEBUG"
