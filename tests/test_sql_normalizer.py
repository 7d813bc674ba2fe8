"""Tests for SQL normalization and reserved-word quoting."""

import pytest

from pasdb.extraction.normalizer import normalize_sql, pascal_case, quote_reserved_words

CORPUS = [
    "select id, name from customers where id = :customer_id",
    "SELECT * FROM ORDERS WHERE ORDER_DATE >= :DATE_FROM ORDER BY ORDER_DATE DESC",
    'select "NAME", "DATE" from "CUSTOMERS"',
    "update users set status = :status where id = :ID",
    "insert into log (user, message) values (:user, :message)",
    "delete from t where note = 'select :x from y'",
    "select first 10 skip 5 distinct a.id from a join b on b.a_id = a.id",
    "update t set x = :p_value, y = :A_ID where z = :PatientID",
    "SELECT ID::TEXT FROM T",
    "",
]


# =============================================================================
# NORMALIZATION
# =============================================================================
class TestNormalizeSql:
    def test_keywords_upper_cased(self):
        assert (
            normalize_sql("select id, name from customers where id = :customer_id")
            == "SELECT id, name FROM customers WHERE id = :CustomerId"
        )

    @pytest.mark.parametrize("spelling", [":PATIENT_ID", ":patient_id", ":PatientID", ":PatientId"])
    def test_placeholder_spellings_converge(self, spelling):
        assert normalize_sql(f"SELECT * FROM PATIENTS WHERE ID = {spelling}") == (
            "SELECT * FROM PATIENTS WHERE ID = :PatientId"
        )

    def test_literals_untouched(self):
        assert (
            normalize_sql("delete from t where note = 'select :x from y'")
            == "DELETE FROM t WHERE note = 'select :x from y'"
        )

    def test_non_reserved_names_unquoted(self):
        assert normalize_sql('SELECT "NAME" FROM "CUSTOMERS"') == "SELECT NAME FROM CUSTOMERS"

    def test_reserved_names_stay_quoted(self):
        assert normalize_sql('SELECT "DATE" FROM T') == 'SELECT "DATE" FROM T'

    def test_keyword_inside_identifier_untouched(self):
        assert normalize_sql("select user_name from users") == "SELECT user_name FROM users"

    def test_cast_is_not_a_parameter(self):
        assert normalize_sql("SELECT ID::TEXT FROM T") == "SELECT ID::TEXT FROM T"

    def test_surrounding_whitespace_trimmed(self):
        assert normalize_sql("  select 1 from t \n") == "SELECT 1 FROM t"

    @pytest.mark.parametrize("quote", [False, True])
    @pytest.mark.parametrize("sql", CORPUS)
    def test_idempotent(self, sql, quote):
        once = normalize_sql(sql, quote_reserved=quote)
        assert normalize_sql(once, quote_reserved=quote) == once


class TestPascalCase:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("PATIENT_ID", "PatientId"),
            ("patient_id", "PatientId"),
            ("PatientID", "PatientId"),
            ("customerName", "CustomerName"),
            ("ID", "Id"),
            ("p_value", "Pvalue"),
        ],
    )
    def test_conversion(self, name, expected):
        assert pascal_case(name) == expected

    def test_stable_on_own_output(self):
        for name in ("A_ID", "p_value", "XMLData", "ORDER_NO_2"):
            assert pascal_case(pascal_case(name)) == pascal_case(name)


# =============================================================================
# RESERVED-WORD QUOTING
# =============================================================================
class TestReservedWordQuoting:
    def test_select_list_and_order_by(self):
        assert (
            normalize_sql("SELECT ID, DATE, USER AS U FROM ORDERS ORDER BY DATE", quote_reserved=True)
            == 'SELECT ID, "DATE", "USER" AS U FROM ORDERS ORDER BY "DATE"'
        )

    def test_predicate_column(self):
        assert (
            quote_reserved_words("SELECT NAME FROM CUSTOMERS WHERE ACTIVE = 1")
            == 'SELECT NAME FROM CUSTOMERS WHERE "ACTIVE" = 1'
        )

    def test_set_clause(self):
        assert (
            normalize_sql("update users set status = :status where id = :ID", quote_reserved=True)
            == 'UPDATE users SET "STATUS" = :Status WHERE id = :Id'
        )

    def test_insert_column_list(self):
        assert (
            normalize_sql("insert into log (user, message) values (:user, :message)", quote_reserved=True)
            == 'INSERT INTO log ("USER", message) VALUES (:User, :Message)'
        )

    def test_table_name(self):
        assert quote_reserved_words("SELECT * FROM USER WHERE ID = 1") == 'SELECT * FROM "USER" WHERE ID = 1'

    def test_literals_and_placeholders_untouched(self):
        sql = "SELECT ID FROM T WHERE NOTE = 'DATE = 1' AND ID = :Date"
        assert quote_reserved_words(sql) == sql

    def test_qualified_column(self):
        assert (
            quote_reserved_words("SELECT O.ID FROM ORDERS O WHERE O.DATE > :Since")
            == 'SELECT O.ID FROM ORDERS O WHERE O."DATE" > :Since'
        )

    def test_ordinary_identifiers_untouched(self):
        sql = "SELECT ID, NAME FROM CUSTOMERS WHERE CUSTOMER_ID = :CustomerId"
        assert quote_reserved_words(sql) == sql
