"""Runtime configuration for pasdb - layered configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from pasdb.extraction.exceptions import ConfigurationError
from pasdb.extraction.models import BlockTracking, DynamicSqlMode, ExtractionOptions
from pasdb.utils.constants import CONFIG_FILE, DEFAULT_MAX_FILE_SIZE, ENV_PREFIX
from pasdb.utils.logging import logger

DEFAULTS = {
    "extraction": {
        "dynamic_sql_mode": DynamicSqlMode.TEMPLATE.value,
        "block_tracking": BlockTracking.STACK.value,
        "quote_reserved_words": True,
    },
    "limits": {
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
    },
    "output": {
        "json_indent": 2,
        "include_source": False,
    },
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _coerce(value: str, default_value: Any) -> Any:
    """Convert an environment string to the type of the default."""
    if isinstance(default_value, bool):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got {value!r}")
    if isinstance(default_value, int):
        return int(value)
    if isinstance(default_value, float):
        return float(value)
    if isinstance(default_value, list):
        return [v.strip() for v in value.split(",")]
    return value


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .pasdb/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (PASDB_<SECTION>_<KEY>)
    2. .pasdb/config.json file
    3. Built-in defaults

    Values whose type does not match the default are ignored with a warning.

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / CONFIG_FILE
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key not in cfg[section]:
                                continue
                            if type(value) is type(cfg[section][key]):
                                cfg[section][key] = value
                            else:
                                logger.warning(f"Ignoring {section}.{key} in {path}: unexpected type")
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    logger.warning(f"Invalid value for environment variable {env_var}: '{value}' - {e}")
                    logger.info(f"Using value: {cfg[section][key]}")

    return cfg


def options_from_config(cfg: dict[str, Any]) -> ExtractionOptions:
    """Build ExtractionOptions from the `extraction` section of a config.

    Raises:
        ConfigurationError: If a mode is not one of the known values
    """
    section = cfg.get("extraction", {})

    mode = section.get("dynamic_sql_mode", DEFAULTS["extraction"]["dynamic_sql_mode"])
    tracking = section.get("block_tracking", DEFAULTS["extraction"]["block_tracking"])
    try:
        dynamic_sql_mode = DynamicSqlMode(str(mode).lower())
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown dynamic SQL mode: {mode}",
            details={"allowed": [m.value for m in DynamicSqlMode]},
        ) from e
    try:
        block_tracking = BlockTracking(str(tracking).lower())
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown block tracking strategy: {tracking}",
            details={"allowed": [t.value for t in BlockTracking]},
        ) from e

    return ExtractionOptions(
        dynamic_sql_mode=dynamic_sql_mode,
        block_tracking=block_tracking,
        quote_reserved_words=bool(section.get("quote_reserved_words", True)),
    )
