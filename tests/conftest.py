"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from pasdb.extraction.models import ExtractionOptions

UNITS_DIR = Path(__file__).parent / "fixtures" / "units"


def make_unit(*methods: str, name: str = "TestUnit", declarations: str = "") -> str:
    """Wrap method implementations in a minimal Pascal unit."""
    implementation = "\n\n".join(m.strip("\n") for m in methods)
    return (
        f"unit {name};\n"
        "\n"
        "interface\n"
        "\n"
        "uses\n"
        "  SysUtils, Classes, DB;\n"
        "\n"
        f"{declarations}"
        "implementation\n"
        "\n"
        f"{implementation}\n"
        "\n"
        "end.\n"
    )


def line_of(source: str, needle: str) -> int:
    """1-based line of the first line containing `needle`."""
    for number, line in enumerate(source.splitlines(), start=1):
        if needle in line:
            return number
    raise AssertionError(f"{needle!r} not found in source")


@pytest.fixture
def units_dir() -> Path:
    return UNITS_DIR


@pytest.fixture
def customer_unit() -> str:
    """Sample data module with static, Add-built, transactional and helper SQL."""
    return (UNITS_DIR / "CustomerDM.pas").read_text(encoding="utf-8")


@pytest.fixture
def plain_options() -> ExtractionOptions:
    """Options without reserved-word quoting, for exact SQL comparisons."""
    return ExtractionOptions(quote_reserved_words=False)
