"""Classifier - operation kind and target table of a normalized statement."""

import sqlparse
from sqlparse import tokens as T

from pasdb.utils.logging import logger

from .config import (
    DDL_KEYWORDS,
    FIRST_WORD_PATTERN,
    SQL_KEYWORDS,
    STORED_PROCEDURE_KEYWORDS,
    TABLE_KEYWORDS,
    TABLE_NAME_PATTERNS,
)
from .models import OperationType

_DIRECT_KINDS = {
    "SELECT": OperationType.SELECT,
    "INSERT": OperationType.INSERT,
    "UPDATE": OperationType.UPDATE,
    "DELETE": OperationType.DELETE,
}

_NOT_TABLES = frozenset({"SELECT", "WHERE", "SET", "VALUES", "LATERAL", "ONLY"})


def classify_operation(sql: str) -> OperationType:
    """Operation kind from the first keyword of the statement."""
    match = FIRST_WORD_PATTERN.search(sql.strip())
    if not match:
        return OperationType.UNKNOWN
    keyword = match.group(0).upper()
    if keyword in _DIRECT_KINDS:
        return _DIRECT_KINDS[keyword]
    if keyword in DDL_KEYWORDS:
        return OperationType.DDL
    if keyword in STORED_PROCEDURE_KEYWORDS:
        return OperationType.STORED_PROCEDURE
    return OperationType.UNKNOWN


def resolve_table_name(sql: str) -> str | None:
    """Target table, upper-cased, or None when no clause names one.

    Clauses are tried in a fixed order: FROM, INTO, UPDATE (including
    UPDATE OR INSERT INTO), DELETE FROM, SET GENERATOR ... TO, TABLE, and
    ON <name> ( for CREATE INDEX.
    """
    for pattern in TABLE_NAME_PATTERNS:
        match = pattern.search(sql)
        if match:
            return match.group(1).upper()
    return None


def referenced_tables(sql: str) -> list[str]:
    """Every table named after FROM/JOIN/INTO/UPDATE/TABLE, in order.

    Uses sqlparse tokenization so joins and sub-selects are covered, which
    the single-table patterns of resolve_table_name are not.

    Args:
        sql: Normalized SQL statement

    Returns:
        Upper-cased, de-duplicated table names (empty when unparseable)
    """
    try:
        statements = sqlparse.parse(sql)
    except Exception as e:  # sqlparse raises assorted errors on garbage input
        logger.debug(f"sqlparse could not tokenize statement: {e}")
        return []

    tables: list[str] = []
    for statement in statements:
        tokens = [t for t in statement.flatten() if not t.is_whitespace]
        for i, token in enumerate(tokens):
            if not token.is_keyword:
                continue
            keyword = token.normalized.upper()
            if keyword not in TABLE_KEYWORDS and not keyword.endswith("JOIN"):
                continue
            name = _table_after(tokens, i + 1)
            if name and name not in tables:
                tables.append(name)
    return tables


def _table_after(tokens, index: int) -> str | None:
    """Read a (possibly schema-qualified, possibly quoted) name starting at tokens[index]."""
    name = None
    while index < len(tokens):
        token = tokens[index]
        if token.ttype in T.Name.Placeholder:
            return None
        if token.ttype in T.Name or token.ttype in T.String.Symbol:
            name = token.value.strip('"`[]')
        elif token.ttype in T.Keyword and token.normalized.upper() not in SQL_KEYWORDS:
            # Non-reserved words such as USERS that sqlparse tags as keywords
            name = token.value
        else:
            break
        if index + 2 < len(tokens) and tokens[index + 1].value == ".":
            index += 2
            continue
        break
    if not name or name.upper() in _NOT_TABLES:
        return None
    return name.upper()
