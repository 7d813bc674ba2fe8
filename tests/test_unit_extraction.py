"""End-to-end tests for per-unit extraction."""

import re

import pytest

from conftest import line_of, make_unit
from pasdb.extraction import (
    DynamicSqlMode,
    ExtractionOptions,
    FieldAccess,
    OperationType,
    ScalarType,
    SqlParameter,
    UnitExtractor,
    extract_operations,
    extract_unit,
)
from pasdb.extraction.models import StatementCandidate
from pasdb.extraction.orchestrator import deduplicate_candidates


@pytest.fixture
def operations(customer_unit):
    return extract_operations(customer_unit, "CustomerDM")


def by_method(operations, method_name):
    return [op for op in operations if op.method_name == method_name]


# =============================================================================
# SAMPLE DATA MODULE
# =============================================================================
class TestCustomerDataModule:
    """CustomerDM.pas covers one statement shape per method."""

    def test_operations_in_header_order(self, operations):
        assert [op.method_name for op in operations] == [
            "GetCustomerName",
            "LoadOrders",
            "TransferCredit",
            "TransferCredit",
            "CountActive",
        ]
        assert all(op.containing_class == "TCustomerDM" for op in operations)
        assert all(op.unit_name == "CustomerDM" for op in operations)

    def test_static_lookup(self, operations, customer_unit):
        [op] = by_method(operations, "GetCustomerName")
        assert op.sql_statement == "SELECT NAME FROM CUSTOMERS WHERE CUSTOMER_ID = :CustomerId"
        assert op.operation_type is OperationType.SELECT
        assert op.table_name == "CUSTOMERS"
        assert op.referenced_tables == ["CUSTOMERS"]
        assert op.parameters == [
            SqlParameter(name="CustomerId", source_type="AsInteger", inferred_type=ScalarType.INTEGER)
        ]
        assert op.is_dynamic is False
        assert op.is_part_of_transaction is False
        assert op.transaction_group_id is None
        assert op.component_type == "TIBQuery"
        assert op.source_line_number == line_of(customer_unit, "qry.SQL.Text")

    def test_original_source_keeps_comments(self, operations):
        [op] = by_method(operations, "GetCustomerName")
        assert "// single static lookup" in op.original_source_text
        assert op.original_source_text.startswith("begin")
        assert op.original_source_text.endswith("end;")

    def test_add_sequence_is_dynamic(self, operations, customer_unit):
        [op] = by_method(operations, "LoadOrders")
        assert op.sql_statement == "SELECT ORDER_ID, TOTAL\nFROM ORDERS\nWHERE CUSTOMER_ID = :CustomerId"
        assert op.operation_type is OperationType.SELECT
        assert op.is_dynamic is True
        assert op.table_name is None
        assert op.referenced_tables == []
        assert op.parameters == [
            SqlParameter(name="CustomerId", source_type="IntToStr", inferred_type=ScalarType.INTEGER)
        ]
        assert op.component_type == "TIBQuery"
        assert op.source_line_number == line_of(customer_unit, "FQuery.SQL.Add('SELECT")

    def test_transaction_group(self, operations, customer_unit):
        first, second = by_method(operations, "TransferCredit")
        assert first.transaction_group_id == second.transaction_group_id
        assert re.fullmatch(r"tx-[0-9a-f]{8}-1", first.transaction_group_id)
        assert first.is_part_of_transaction and second.is_part_of_transaction

        assert first.sql_statement == "UPDATE ACCOUNTS SET CREDIT = CREDIT - :Amount WHERE ID = :FromId"
        assert second.sql_statement == "UPDATE ACCOUNTS SET CREDIT = CREDIT + :Amount WHERE ID = :ToId"
        assert {op.operation_type for op in (first, second)} == {OperationType.UPDATE}
        assert {op.table_name for op in (first, second)} == {"ACCOUNTS"}
        assert first.parameters[0] == SqlParameter(
            name="Amount", source_type="AsCurrency", inferred_type=ScalarType.DECIMAL
        )
        assert first.parameters[1].inferred_type is ScalarType.OPAQUE
        assert first.source_line_number == line_of(customer_unit, "CREDIT - :AMOUNT")
        assert second.source_line_number == line_of(customer_unit, "CREDIT + :AMOUNT")

    def test_inactive_method_skipped(self, operations):
        assert by_method(operations, "FormatCaption") == []

    def test_query_value_helper(self, operations, customer_unit):
        [op] = by_method(operations, "CountActive")
        assert op.sql_statement == 'SELECT COUNT(*) FROM CUSTOMERS WHERE "ACTIVE" = 1'
        assert op.table_name == "CUSTOMERS"
        assert op.component_type == "TIBQuery"
        assert op.source_line_number == line_of(customer_unit, "QueryValueAsInteger")

    def test_without_reserved_word_quoting(self, customer_unit, plain_options):
        ops = extract_operations(customer_unit, "CustomerDM", options=plain_options)
        [op] = by_method(ops, "CountActive")
        assert op.sql_statement == "SELECT COUNT(*) FROM CUSTOMERS WHERE ACTIVE = 1"

    def test_transaction_groups(self, customer_unit):
        result = extract_unit(customer_unit, "CustomerDM")
        assert len(result.operations) == 5
        [group] = result.transaction_groups
        assert group.method_name == "TransferCredit"
        assert len(group.operations) == 2

    def test_repeatable(self, customer_unit):
        first = extract_unit(customer_unit, "CustomerDM").to_dict(include_source=True)
        second = extract_unit(customer_unit, "CustomerDM").to_dict(include_source=True)
        assert first == second

    def test_caller_variable_map(self, customer_unit):
        ops = extract_operations(customer_unit, "CustomerDM", {"QRY": "tadoquery"})
        assert by_method(ops, "GetCustomerName")[0].component_type == "TADOQuery"


# =============================================================================
# OPTIONS
# =============================================================================
class TestDynamicSqlMode:
    def test_sentinel_replaces_dynamic_text(self, customer_unit):
        options = ExtractionOptions(dynamic_sql_mode=DynamicSqlMode.SENTINEL)
        ops = extract_operations(customer_unit, "CustomerDM", options=options)
        [dynamic] = by_method(ops, "LoadOrders")
        assert dynamic.sql_statement == "Dynamic SQL"
        assert dynamic.operation_type is OperationType.UNKNOWN
        assert [p.name for p in dynamic.parameters] == ["CustomerId"]

        [static] = by_method(ops, "GetCustomerName")
        assert static.sql_statement.startswith("SELECT NAME")


class TestFieldAccessProvider:
    def test_select_star_rewritten(self, plain_options):
        source = make_unit(
            """
procedure TDM.LoadAll;
begin
  qry.SQL.Text := 'SELECT * FROM CUSTOMERS';
  qry.Open;
end;
"""
        )

        def provider(method):
            return [FieldAccess("Id"), FieldAccess("Name")]

        options = ExtractionOptions(quote_reserved_words=False, field_access_provider=provider)
        [op] = extract_operations(source, "TestUnit", options=options)
        assert op.sql_statement == 'SELECT "ID", "NAME" FROM CUSTOMERS'

        [unchanged] = extract_operations(source, "TestUnit", options=plain_options)
        assert unchanged.sql_statement == "SELECT * FROM CUSTOMERS"


# =============================================================================
# EDGE CASES
# =============================================================================
class TestEdgeCases:
    def test_default_component_without_declarations(self):
        source = make_unit(
            """
procedure TLog.Purge;
begin
  sSQL := 'DELETE FROM AUDIT_LOG';
end;
"""
        )
        [op] = extract_operations(source, "Log")
        assert op.operation_type is OperationType.DELETE
        assert op.component_type == "TQuery"

    def test_same_statement_found_twice(self):
        source = make_unit(
            """
procedure TLog.Purge;
begin
  sSQL := 'DELETE FROM AUDIT_LOG';
  ExecSQL('DELETE FROM AUDIT_LOG');
end;
"""
        )
        assert len(extract_operations(source, "Log")) == 1

    def test_colon_inside_literal_is_not_a_parameter(self):
        source = make_unit(
            """
procedure TNotes.Find;
begin
  qry.SQL.Text := 'SELECT * FROM T WHERE NOTE = ''at :noon'' AND ID = :ID';
end;
"""
        )
        [op] = extract_operations(source, "Notes")
        assert op.sql_statement == "SELECT * FROM T WHERE NOTE = 'at :noon' AND ID = :Id"
        assert [p.name for p in op.parameters] == ["Id"]

    def test_unit_without_methods(self):
        assert extract_operations(make_unit(), "Empty") == []

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "procedure TX.Y;\nbegin\n  qry.SQL.Text := 'SELECT",
            "procedure TX.Y;\nbegin\n  qry.SQL.Add('SELECT ' + ;\n",
            "{ never closed",
            "end. end; begin begin",
        ],
    )
    def test_never_raises(self, source):
        assert isinstance(extract_operations(source, "Broken"), list)

    def test_failing_shape_is_isolated(self, customer_unit, monkeypatch):
        extractor = UnitExtractor()
        first_shape = extractor.registry.extractors[0]

        def boom(body):
            raise RuntimeError("shape failure")

        monkeypatch.setattr(first_shape, "extract", boom)
        ops = extractor.extract(customer_unit, "CustomerDM")
        assert [op.method_name for op in ops] == ["LoadOrders", "CountActive"]


class TestDeduplicateCandidates:
    def test_first_occurrence_kept(self):
        candidates = [
            StatementCandidate("SELECT 1 FROM T", 0, source="a"),
            StatementCandidate(" SELECT 1 FROM T ", 10, source="b"),
        ]
        assert [c.source for c in deduplicate_candidates(candidates)] == ["a"]

    def test_contained_fragment_dropped(self):
        candidates = [
            StatementCandidate("SELECT * FROM T\nWHERE ID = :ID", 0),
            StatementCandidate("WHERE ID = :ID", 5, fragment=True),
            StatementCandidate("WHERE CODE = :Code", 9, fragment=True),
        ]
        assert [c.text for c in deduplicate_candidates(candidates)] == [
            "SELECT * FROM T\nWHERE ID = :ID",
            "WHERE CODE = :Code",
        ]
