"""pasdb - recover the SQL operations embedded in Pascal/Delphi units."""

__version__ = "0.3.0"

from pasdb.extraction import (
    DatabaseOperation,
    ExtractionOptions,
    ExtractionResult,
    OperationType,
    UnitExtractor,
    extract_operations,
    extract_unit,
)

__all__ = [
    "__version__",
    "DatabaseOperation",
    "ExtractionOptions",
    "ExtractionResult",
    "OperationType",
    "UnitExtractor",
    "extract_operations",
    "extract_unit",
]
