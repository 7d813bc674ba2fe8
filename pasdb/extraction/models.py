"""Data model of the extraction engine.

Records produced by one extraction call:
- DatabaseOperation: one discovered SQL operation (the unit of output)
- SqlParameter: a bound parameter of an operation
- TransactionGroup: operations that ran under one transactional method call

Intermediate records that never leave the engine:
- MethodBody: a located method implementation
- StatementCandidate: raw text isolated by one statement shape

Everything is created fresh per call and held in memory only.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OperationType(str, Enum):
    """Kind of SQL operation, derived from the statement's first keyword."""

    SELECT = "Select"
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"
    DDL = "DDL"
    STORED_PROCEDURE = "StoredProcedure"
    UNKNOWN = "Unknown"


class ScalarType(str, Enum):
    """Semantic scalar kind inferred for a parameter or field."""

    INTEGER = "integer"
    TEXT = "text"
    BOOLEAN = "boolean"
    FLOATING = "floating"
    DECIMAL = "decimal"
    DATE_TIME = "date-time"
    BINARY = "binary"
    OPAQUE = "opaque"


class DynamicSqlMode(str, Enum):
    """What to store as the statement text of dynamically built SQL."""

    TEMPLATE = "template"
    SENTINEL = "sentinel"


class BlockTracking(str, Enum):
    """How the method locator finds the end of a body."""

    STACK = "stack"
    COUNTER = "counter"


@dataclass(frozen=True)
class SqlParameter:
    """A named bind parameter."""

    name: str
    source_type: str
    inferred_type: ScalarType = ScalarType.OPAQUE

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "source_type": self.source_type,
            "inferred_type": self.inferred_type.value,
        }


@dataclass
class DatabaseOperation:
    """One SQL operation recovered from a method body."""

    method_name: str
    containing_class: str
    unit_name: str
    sql_statement: str
    operation_type: OperationType = OperationType.UNKNOWN
    table_name: str | None = None
    parameters: list[SqlParameter] = field(default_factory=list)
    is_part_of_transaction: bool = False
    transaction_group_id: str | None = None
    original_source_text: str = ""
    source_line_number: int = 0
    is_dynamic: bool = False
    component_type: str = "TQuery"
    referenced_tables: list[str] = field(default_factory=list)

    def to_dict(self, include_source: bool = False) -> dict[str, Any]:
        """Serialize for JSON output.

        Args:
            include_source: Also emit the full original method body

        Returns:
            Plain dict with snake_case keys
        """
        data = {
            "unit_name": self.unit_name,
            "class_name": self.containing_class,
            "method_name": self.method_name,
            "operation_type": self.operation_type.value,
            "sql": self.sql_statement,
            "table_name": self.table_name,
            "referenced_tables": list(self.referenced_tables),
            "parameters": [p.to_dict() for p in self.parameters],
            "is_dynamic": self.is_dynamic,
            "is_transaction": self.is_part_of_transaction,
            "transaction_group_id": self.transaction_group_id,
            "component_type": self.component_type,
            "line": self.source_line_number,
        }
        if include_source:
            data["original_source_text"] = self.original_source_text
        return data


@dataclass
class TransactionGroup:
    """Operations sharing one transaction group id."""

    group_id: str
    method_name: str
    containing_class: str
    operations: list[DatabaseOperation] = field(default_factory=list)
    original_source_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "class_name": self.containing_class,
            "method_name": self.method_name,
            "operation_count": len(self.operations),
        }


@dataclass
class MethodBody:
    """A method implementation found in scanned unit text.

    `body` spans from the opening `begin` through the closing `end;` and is
    empty when the header has no reachable `begin` (forward or external
    declarations). Offsets index the scanned text.
    """

    kind: str
    class_name: str
    method_name: str
    header_line: int
    body: str = ""
    body_start: int = -1
    body_end: int = -1
    start_line: int = 0
    terminated: bool = True

    @property
    def qualified_name(self) -> str:
        return f"{self.class_name}.{self.method_name}"


@dataclass
class StatementCandidate:
    """Raw statement text isolated by one statement shape.

    Attributes:
        text: Literal contents (unescaped) or a parameterized template
        position: Character offset inside the method body
        is_dynamic: True when the text came from runtime concatenation
        target: Receiver the statement was assigned to, if known
        source: Name of the statement shape that found it
        fragment: Partial statement, dropped when contained in a full one
        hints: Placeholder name -> conversion function wrapping its value
    """

    text: str
    position: int
    is_dynamic: bool = False
    target: str | None = None
    source: str = ""
    fragment: bool = False
    hints: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldAccess:
    """A dataset field read, supplied by an external field-access analyzer."""

    field_name: str
    accessor: str = "Value"
    source_type: str = "Variant"
    inferred_type: ScalarType = ScalarType.OPAQUE
    is_nullable: bool = True


FieldAccessProvider = Callable[[MethodBody], Iterable[FieldAccess]]


@dataclass(frozen=True)
class ExtractionOptions:
    """Per-call extraction switches."""

    dynamic_sql_mode: DynamicSqlMode = DynamicSqlMode.TEMPLATE
    block_tracking: BlockTracking = BlockTracking.STACK
    quote_reserved_words: bool = True
    field_access_provider: FieldAccessProvider | None = None


@dataclass
class ExtractionResult:
    """Output of one unit: the ordered operations and their transaction groups."""

    unit_name: str
    operations: list[DatabaseOperation] = field(default_factory=list)
    transaction_groups: list[TransactionGroup] = field(default_factory=list)

    def to_dict(self, include_source: bool = False) -> dict[str, Any]:
        return {
            "unit_name": self.unit_name,
            "operations": [op.to_dict(include_source) for op in self.operations],
            "transaction_groups": [g.to_dict() for g in self.transaction_groups],
        }
