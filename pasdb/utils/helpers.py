"""Helper utility functions for pasdb.

Unit loading lives here rather than in the extraction engine: the engine
works on text only, the CLI decides where text comes from.
"""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from pasdb.extraction.exceptions import UnitReadError
from pasdb.utils.logging import logger

from .constants import UNIT_ENCODINGS, UNIT_SUFFIXES


def read_unit_source(file_path: Path) -> str:
    """Read a Pascal unit, trying UTF-8 (BOM-aware) before cp1252.

    Args:
        file_path: Path to a .pas / .dpr file

    Returns:
        Decoded unit text

    Raises:
        UnitReadError: If the file cannot be read or decoded
    """
    try:
        raw = Path(file_path).read_bytes()
    except OSError as e:
        raise UnitReadError(
            f"Cannot read unit {file_path}: {e.strerror or e}",
            details={"path": str(file_path)},
        ) from e

    for encoding in UNIT_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"{file_path} is not valid {encoding}")

    raise UnitReadError(
        f"Cannot decode unit {file_path}",
        details={"path": str(file_path), "encodings": list(UNIT_ENCODINGS)},
    )


def iter_unit_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand files and directories into unit files, each yielded once.

    Directories are searched recursively for UNIT_SUFFIXES, sorted by path.
    Explicit file arguments are yielded whatever their suffix.
    """
    seen: set[Path] = set()
    for path in paths:
        path = Path(path)
        if path.is_dir():
            candidates = sorted(
                p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in UNIT_SUFFIXES
            )
        else:
            candidates = [path]
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            yield candidate


def save_json_file(data: dict[str, Any], file_path: str | Path, indent: int = 2) -> None:
    """
    Save data as JSON to file.

    Args:
        data: Data to save
        file_path: Path to output file
        indent: JSON indentation
    """
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)
