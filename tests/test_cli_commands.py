"""Tests for the pasdb command line."""

import json
import shutil

import pytest
from click.testing import CliRunner

from conftest import UNITS_DIR
from pasdb import __version__
from pasdb.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Empty working directory holding a copy of the sample unit."""
    monkeypatch.chdir(tmp_path)
    for name in ("PASDB_LOG_JSON", "PASDB_EXTRACTION_DYNAMIC_SQL_MODE", "PASDB_OUTPUT_JSON_INDENT"):
        monkeypatch.delenv(name, raising=False)
    shutil.copy(UNITS_DIR / "CustomerDM.pas", tmp_path / "CustomerDM.pas")
    return tmp_path


# =============================================================================
# GROUP
# =============================================================================
class TestCliGroup:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["-h"])
        assert result.exit_code == 0
        assert "extract" in result.output
        assert "methods" in result.output


# =============================================================================
# EXTRACT
# =============================================================================
class TestExtractCommand:
    def test_json_output(self, runner, workspace):
        result = runner.invoke(cli, ["extract", "CustomerDM.pas", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        [unit] = payload["units"]
        assert unit["unit_name"] == "CustomerDM"
        assert len(unit["operations"]) == 5
        assert unit["operations"][0]["sql"] == "SELECT NAME FROM CUSTOMERS WHERE CUSTOMER_ID = :CustomerId"
        assert unit["operations"][0]["parameters"] == [
            {"name": "CustomerId", "source_type": "AsInteger", "inferred_type": "integer"}
        ]
        assert "original_source_text" not in unit["operations"][0]
        assert unit["transaction_groups"][0]["operation_count"] == 2

    def test_directory_and_output_file(self, runner, workspace):
        result = runner.invoke(cli, ["extract", ".", "--output", "out/ops.json", "--include-source"])
        assert result.exit_code == 0, result.output
        payload = json.loads((workspace / "out" / "ops.json").read_text(encoding="utf-8"))
        [unit] = payload["units"]
        assert "// single static lookup" in unit["operations"][0]["original_source_text"]

    def test_table_output(self, runner, workspace):
        result = runner.invoke(cli, ["extract", "CustomerDM.pas"])
        assert result.exit_code == 0, result.output
        assert "DATABASE OPERATIONS (5)" in result.stdout
        assert "TransferCredit" in result.stdout

    def test_options_reach_the_engine(self, runner, workspace):
        result = runner.invoke(
            cli,
            ["extract", "CustomerDM.pas", "--json", "--dynamic-sql", "sentinel", "--no-quote-reserved",
             "--unit-name", "Customers"],
        )
        assert result.exit_code == 0, result.output
        [unit] = json.loads(result.stdout)["units"]
        assert unit["unit_name"] == "Customers"
        sqls = [op["sql"] for op in unit["operations"]]
        assert "Dynamic SQL" in sqls
        assert "SELECT COUNT(*) FROM CUSTOMERS WHERE ACTIVE = 1" in sqls

    def test_config_file_is_honoured(self, runner, workspace):
        (workspace / ".pasdb").mkdir()
        (workspace / ".pasdb" / "config.json").write_text(
            json.dumps({"extraction": {"dynamic_sql_mode": "sentinel"}}), encoding="utf-8"
        )
        result = runner.invoke(cli, ["extract", "CustomerDM.pas", "--json"])
        [unit] = json.loads(result.stdout)["units"]
        assert "Dynamic SQL" in [op["sql"] for op in unit["operations"]]

    def test_invalid_config_mode_is_usage_error(self, runner, workspace):
        (workspace / ".pasdb").mkdir()
        (workspace / ".pasdb" / "config.json").write_text(
            json.dumps({"extraction": {"block_tracking": "indent"}}), encoding="utf-8"
        )
        result = runner.invoke(cli, ["extract", "CustomerDM.pas"])
        assert result.exit_code == 2

    def test_unit_name_needs_single_file(self, runner, workspace):
        (workspace / "Other.pas").write_text("unit Other;\nend.\n", encoding="utf-8")
        result = runner.invoke(cli, ["extract", ".", "--unit-name", "X"])
        assert result.exit_code == 2

    def test_unreadable_input(self, runner, workspace):
        result = runner.invoke(cli, ["extract", "CustomerDM.pas", "Missing.pas", "-o", "ops.json"])
        assert result.exit_code == 3
        payload = json.loads((workspace / "ops.json").read_text(encoding="utf-8"))
        assert [unit["unit_name"] for unit in payload["units"]] == ["CustomerDM"]

    def test_fail_empty(self, runner, workspace):
        (workspace / "Empty.pas").write_text("unit Empty;\ninterface\nimplementation\nend.\n", encoding="utf-8")
        result = runner.invoke(cli, ["extract", "Empty.pas", "--fail-empty"])
        assert result.exit_code == 1

    def test_empty_without_flag_succeeds(self, runner, workspace):
        (workspace / "Empty.pas").write_text("unit Empty;\ninterface\nimplementation\nend.\n", encoding="utf-8")
        result = runner.invoke(cli, ["extract", "Empty.pas"])
        assert result.exit_code == 0
        assert "no database operations" in result.stdout


# =============================================================================
# METHODS
# =============================================================================
class TestMethodsCommand:
    def test_json(self, runner, workspace):
        result = runner.invoke(cli, ["methods", "CustomerDM.pas", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["unit"] == "CustomerDM"
        rows = {row["method_name"]: row for row in payload["methods"]}
        assert list(rows) == ["GetCustomerName", "LoadOrders", "TransferCredit", "FormatCaption", "CountActive"]
        assert rows["GetCustomerName"]["fields"] == ["NAME"]
        assert rows["GetCustomerName"]["body_line"] == 30
        assert rows["FormatCaption"]["database_active"] is False
        assert all(row["terminated"] for row in rows.values())

    def test_table(self, runner, workspace):
        result = runner.invoke(cli, ["methods", "CustomerDM.pas"])
        assert result.exit_code == 0, result.output
        assert "CustomerDM.pas" in result.stdout

    def test_missing_unit(self, runner, workspace):
        result = runner.invoke(cli, ["methods", "Missing.pas"])
        assert result.exit_code == 3


class TestFileLogging:
    def test_log_to_file(self, runner, workspace):
        result = runner.invoke(cli, ["--log-to-file", "extract", "CustomerDM.pas", "--json"])
        assert result.exit_code == 0, result.output
        log_text = (workspace / ".pasdb" / "pasdb.log").read_text(encoding="utf-8")
        assert "CustomerDM.pas: 5 operation(s)" in log_text
