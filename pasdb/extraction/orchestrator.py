"""Per-unit extraction pipeline.

Runs the stages over one unit's text, leaves first:

    scan -> locate methods -> activity gate -> statement shapes
         -> de-duplicate -> normalize -> classify -> parameters
         -> transaction ids -> (optional) SELECT * rewrite

Never raises on source text. A statement shape that fails unexpectedly is
logged and contributes nothing for that method; the other shapes still run.
"""

from collections.abc import Mapping

from pasdb.utils.logging import logger

from .classifier import classify_operation, referenced_tables, resolve_table_name
from .config import DEFAULT_COMPONENT, DYNAMIC_SQL_SENTINEL
from .detector import component_types_in, is_database_active
from .extractors import StatementExtractorRegistry
from .fields import rewrite_select_star
from .methods import locate_methods
from .models import (
    DatabaseOperation,
    DynamicSqlMode,
    ExtractionOptions,
    ExtractionResult,
    FieldAccess,
    MethodBody,
    OperationType,
    StatementCandidate,
)
from .normalizer import normalize_sql
from .parameters import extract_parameters
from .scanner import ScannedSource, line_at, scan_source
from .transactions import TransactionIdFactory, group_by_transaction, is_transactional
from .variables import build_query_variable_map, normalize_variable_map, resolve_component


def deduplicate_candidates(candidates: list[StatementCandidate]) -> list[StatementCandidate]:
    """Drop repeated texts and fragments already contained in a full statement.

    Keeps the first candidate for each exact (trimmed) text, in the given
    order. A fragment survives only if no non-fragment candidate contains it.
    """
    seen: set[str] = set()
    unique: list[StatementCandidate] = []
    for candidate in candidates:
        key = candidate.text.strip()
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(candidate)

    complete = [c.text for c in unique if not c.fragment]
    return [c for c in unique if not c.fragment or not any(c.text in text for text in complete)]


class UnitExtractor:
    """Extracts database operations from Pascal units.

    One instance can process any number of units, concurrently too: all
    per-unit state lives in local variables of `extract`.
    """

    def __init__(self, options: ExtractionOptions | None = None):
        self.options = options or ExtractionOptions()
        self.registry = StatementExtractorRegistry()

    def extract(
        self,
        source: str,
        unit_name: str,
        query_variables: Mapping[str, str] | None = None,
    ) -> list[DatabaseOperation]:
        """Extract every operation of one unit.

        Args:
            source: Full unit source text
            unit_name: Unit name recorded on each operation
            query_variables: Optional variable -> component class map; derived
                from the unit when omitted

        Returns:
            Operations in method-header order, then discovery order
        """
        scanned = scan_source(source)
        text = scanned.text

        if query_variables is None:
            variables = build_query_variable_map(text)
        else:
            variables = normalize_variable_map(query_variables)
        default_component = next(iter(component_types_in(text)), DEFAULT_COMPONENT)
        transaction_ids = TransactionIdFactory(unit_name)

        operations: list[DatabaseOperation] = []
        for method in locate_methods(text, self.options.block_tracking):
            if not method.body:
                continue
            if not is_database_active(method.body):
                logger.debug(f"{unit_name}: {method.qualified_name} has no database activity")
                continue

            candidates = deduplicate_candidates(self._collect(method))
            if not candidates:
                continue
            logger.debug(f"{unit_name}: {method.qualified_name} yielded {len(candidates)} statement(s)")

            group_id = None
            if is_transactional(method.body):
                group_id = transaction_ids.next_id(method.class_name, method.method_name)

            fields = self._field_accesses(method)
            original_text = scanned.original_span(method.body_start, method.body_end)

            for candidate in candidates:
                op = self._build_operation(
                    candidate, method, unit_name, original_text, variables, default_component
                )
                op.is_part_of_transaction = group_id is not None
                op.transaction_group_id = group_id
                if fields and not op.is_dynamic and op.operation_type is OperationType.SELECT:
                    op.sql_statement = rewrite_select_star(op.sql_statement, fields)
                operations.append(op)

        return operations

    def extract_unit(
        self,
        source: str,
        unit_name: str,
        query_variables: Mapping[str, str] | None = None,
    ) -> ExtractionResult:
        """Extract operations and group them by transaction."""
        operations = self.extract(source, unit_name, query_variables)
        return ExtractionResult(
            unit_name=unit_name,
            operations=operations,
            transaction_groups=group_by_transaction(operations),
        )

    def _collect(self, method: MethodBody) -> list[StatementCandidate]:
        candidates: list[StatementCandidate] = []
        for extractor in self.registry:
            try:
                found = extractor.extract(method.body)
            except Exception:
                logger.opt(exception=True).warning(
                    f"Statement shape {extractor.name} failed on {method.qualified_name}"
                )
                continue
            candidates.extend(found)
        return candidates

    def _field_accesses(self, method: MethodBody) -> list[FieldAccess]:
        provider = self.options.field_access_provider
        if provider is None:
            return []
        return list(provider(method))

    def _build_operation(
        self,
        candidate: StatementCandidate,
        method: MethodBody,
        unit_name: str,
        original_text: str,
        variables: Mapping[str, str],
        default_component: str,
    ) -> DatabaseOperation:
        quote = self.options.quote_reserved_words
        normalized = normalize_sql(candidate.text, quote_reserved=quote)

        if candidate.is_dynamic and self.options.dynamic_sql_mode is DynamicSqlMode.SENTINEL:
            sql = DYNAMIC_SQL_SENTINEL
            operation_type = OperationType.UNKNOWN
        else:
            sql = normalized
            operation_type = classify_operation(normalized)

        table_name = None
        tables: list[str] = []
        if not candidate.is_dynamic:
            table_name = resolve_table_name(normalized)
            tables = referenced_tables(normalized)

        return DatabaseOperation(
            method_name=method.method_name,
            containing_class=method.class_name,
            unit_name=unit_name,
            sql_statement=sql,
            operation_type=operation_type,
            table_name=table_name,
            parameters=extract_parameters(normalized, method.body, candidate.hints),
            original_source_text=original_text,
            source_line_number=line_at(method.body, candidate.position, method.start_line),
            is_dynamic=candidate.is_dynamic,
            component_type=resolve_component(candidate.target, method.body, variables, default_component),
            referenced_tables=tables,
        )


def extract_operations(
    source: str,
    unit_name: str,
    query_variables: Mapping[str, str] | None = None,
    options: ExtractionOptions | None = None,
) -> list[DatabaseOperation]:
    """Extract the database operations of one unit (see UnitExtractor.extract)."""
    return UnitExtractor(options).extract(source, unit_name, query_variables)


def extract_unit(
    source: str,
    unit_name: str,
    query_variables: Mapping[str, str] | None = None,
    options: ExtractionOptions | None = None,
) -> ExtractionResult:
    """Extract operations and transaction groups of one unit."""
    return UnitExtractor(options).extract_unit(source, unit_name, query_variables)


__all__ = [
    "ScannedSource",
    "UnitExtractor",
    "deduplicate_candidates",
    "extract_operations",
    "extract_unit",
]
