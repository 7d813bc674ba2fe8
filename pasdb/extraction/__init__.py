"""pasdb extraction engine.

Recovers the SQL operations embedded in Pascal units: which method runs
which statement, against which table, with which bound parameters and inside
which transaction.

ARCHITECTURAL CONTRACT: Text In, Records Out
============================================
The engine is a pure function of its inputs. It:
- RECEIVES: unit source text, a unit name and (optionally) a variable ->
  component class map plus ExtractionOptions
- PERFORMS: no I/O, no global mutable state; pattern tables in config.py are
  compiled once at import and never mutated
- RETURNS: DatabaseOperation records in method-header order, then discovery
  order within each method
- NEVER RAISES on source text. Malformed or truncated units yield fewer
  operations, not exceptions.

Layers:
-------
1. scanner.py       comment removal, literal-aware lexical helpers
2. methods.py       method headers and their bodies
3. detector.py      database-activity gate per body
4. extractors/      statement shapes, one per module
5. concat.py        concatenation / Format() templates for dynamic SQL
6. normalizer.py    canonical SQL spelling, reserved-word quoting
7. classifier.py    operation kind and primary table
8. parameters.py    bound parameters and their types
9. transactions.py  transaction group ids
10. orchestrator.py ties the layers together per unit

Reading unit files, choosing unit names and rendering results belong to the
caller (see pasdb.commands).
"""

from .exceptions import ConfigurationError, PasdbError, UnitReadError
from .fields import extract_field_names, rewrite_select_star
from .methods import locate_methods
from .models import (
    BlockTracking,
    DatabaseOperation,
    DynamicSqlMode,
    ExtractionOptions,
    ExtractionResult,
    FieldAccess,
    MethodBody,
    OperationType,
    ScalarType,
    SqlParameter,
    TransactionGroup,
)
from .normalizer import normalize_sql, quote_reserved_words
from .orchestrator import UnitExtractor, extract_operations, extract_unit
from .transactions import group_by_transaction

__all__ = [
    "BlockTracking",
    "ConfigurationError",
    "DatabaseOperation",
    "DynamicSqlMode",
    "ExtractionOptions",
    "ExtractionResult",
    "FieldAccess",
    "MethodBody",
    "OperationType",
    "PasdbError",
    "ScalarType",
    "SqlParameter",
    "TransactionGroup",
    "UnitExtractor",
    "UnitReadError",
    "extract_field_names",
    "extract_operations",
    "extract_unit",
    "group_by_transaction",
    "locate_methods",
    "normalize_sql",
    "quote_reserved_words",
    "rewrite_select_star",
]
