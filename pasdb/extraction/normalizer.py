"""SQL normalizer.

Fixed pipeline, applied in order:
1. unquote double-quoted identifiers unless they are reserved words
2. upper-case SQL keywords
3. rewrite `:param` names to PascalCase (`:PATIENT_ID` -> `:PatientId`)
4. optionally re-quote identifiers that collide with reserved words

Text inside single-quoted SQL string literals is never touched. The pipeline
is idempotent: normalize_sql(normalize_sql(s)) == normalize_sql(s).
"""

import re

from .config import (
    CASE_BOUNDARY_PATTERN,
    IDENTIFIER_PATTERN,
    INSERT_COLUMNS_PATTERN,
    MASK_TOKEN_PATTERN,
    ORDER_BY_PATTERN,
    PLACEHOLDER_PATTERN,
    PREDICATE_COLUMN_PATTERN,
    QUOTABLE_RESERVED_WORDS,
    QUOTED_IDENTIFIER_PATTERN,
    QUOTED_NAME_PATTERN,
    RESERVED_WORDS,
    SELECT_ITEM_PATTERN,
    SELECT_LIST_PATTERN,
    SQL_KEYWORD_PATTERN,
    SQL_STRING_PATTERN,
    TABLE_POSITION_PATTERN,
)
from .scanner import split_top_level


def _mask(text: str, pattern: re.Pattern, saved: list[str]) -> str:
    def keep(match):
        saved.append(match.group(0))
        return f"\x00{len(saved) - 1}\x00"

    return pattern.sub(keep, text)


def _unmask(text: str, saved: list[str]) -> str:
    while MASK_TOKEN_PATTERN.search(text):
        text = MASK_TOKEN_PATTERN.sub(lambda m: saved[int(m.group(1))], text)
    return text


def pascal_case(name: str) -> str:
    """PascalCase a parameter name.

    Splits on underscores and camel-case boundaries; runs of one-letter
    pieces are merged into the next piece so the result re-splits the same
    way (which keeps the normalizer idempotent).

    >>> pascal_case("PATIENT_ID"), pascal_case("patient_id"), pascal_case("PatientID")
    ('PatientId', 'PatientId', 'PatientId')
    """
    words: list[str] = []
    for part in name.split("_"):
        if part:
            words.extend(w for w in CASE_BOUNDARY_PATTERN.split(part) if w)
    if not words:
        return name

    merged: list[str] = []
    pending = ""
    for word in words:
        if len(word) == 1 and word.isalpha():
            pending += word
            continue
        merged.append(pending + word)
        pending = ""
    if pending:
        merged.append(pending)

    return "".join(w[:1].upper() + w[1:].lower() for w in merged)


def _unquote_unless_reserved(match) -> str:
    name = match.group(1)
    return match.group(0) if name.upper() in RESERVED_WORDS else name


def normalize_sql(sql: str, quote_reserved: bool = False) -> str:
    """Normalize one SQL statement.

    Args:
        sql: Statement or template text
        quote_reserved: Apply step 4 (reserved-word quoting)

    Returns:
        Normalized, whitespace-trimmed statement
    """
    saved: list[str] = []
    text = _mask(sql, SQL_STRING_PATTERN, saved)
    text = QUOTED_IDENTIFIER_PATTERN.sub(_unquote_unless_reserved, text)
    text = _mask(text, QUOTED_NAME_PATTERN, saved)
    text = SQL_KEYWORD_PATTERN.sub(lambda m: m.group(0).upper(), text)
    text = PLACEHOLDER_PATTERN.sub(lambda m: ":" + pascal_case(m.group("name")), text)
    text = _unmask(text, saved).strip()
    if quote_reserved:
        text = quote_reserved_words(text)
    return text


# =============================================================================
# RESERVED-WORD QUOTING
# =============================================================================

def _quote(word: str) -> str:
    return f'"{word.upper()}"'


def _is_quotable(word: str) -> bool:
    return word.upper() in QUOTABLE_RESERVED_WORDS


def _quote_select_item(item: str) -> str:
    stripped = item.strip()
    match = SELECT_ITEM_PATTERN.match(stripped)
    if not match:
        return item
    column = match.group("column")
    alias = match.group("alias") or ""
    if _is_quotable(column):
        column = _quote(column)
    if alias:
        alias_words = alias.split()
        if _is_quotable(alias_words[-1]):
            alias = alias[: alias.rindex(alias_words[-1])] + _quote(alias_words[-1])
    rebuilt = f"{match.group('qualifier') or ''}{column}{alias}"
    lead = item[: len(item) - len(item.lstrip())]
    trail = item[len(item.rstrip()) :]
    return f"{lead}{rebuilt}{trail}"


def _quote_select_list(match) -> str:
    columns = match.group("columns")
    quoted = ",".join(_quote_select_item(item) for item in split_top_level(columns, ","))
    start, end = match.span("columns")
    whole = match.group(0)
    offset = match.start()
    return whole[: start - offset] + quoted + whole[end - offset :]


def _quote_table(match) -> str:
    name = match.group("name")
    if not _is_quotable(name):
        return match.group(0)
    return match.group(0)[: match.start("name") - match.start()] + _quote(name)


def _quote_name_list(match) -> str:
    columns = match.group("columns")
    rebuilt = []
    for item in columns.split(","):
        word = item.strip()
        if word and _is_quotable(word) and IDENTIFIER_PATTERN.match(word):
            item = item.replace(word, _quote(word), 1)
        rebuilt.append(item)
    start, end = match.span("columns")
    whole = match.group(0)
    offset = match.start()
    return whole[: start - offset] + ",".join(rebuilt) + whole[end - offset :]


def _quote_order_items(match) -> str:
    columns = match.group("columns")
    rebuilt = []
    for item in columns.split(","):
        words = item.split()
        if words:
            head = words[0].split(".")[-1]
            if _is_quotable(head) and IDENTIFIER_PATTERN.match(head):
                index = item.index(words[0]) + len(words[0]) - len(head)
                item = item[:index] + _quote(head) + item[index + len(head) :]
        rebuilt.append(item)
    start, end = match.span("columns")
    whole = match.group(0)
    offset = match.start()
    return whole[: start - offset] + ",".join(rebuilt) + whole[end - offset :]


def _quote_predicate(match) -> str:
    word = match.group("word")
    if not _is_quotable(word):
        return match.group(0)
    return f"{match.group('lead')}{_quote(word)}{match.group('tail')}"


def quote_reserved_words(sql: str) -> str:
    """Double-quote identifiers that collide with reserved words.

    Expects normalized SQL (upper-case keywords). Covers select-list columns
    and aliases, table names after FROM/JOIN/INTO/UPDATE/TABLE, INSERT column
    lists, ORDER/GROUP BY items and columns compared in predicates or SET
    clauses. Literals and already-quoted names are left alone, so the step
    can be repeated without changing the result.
    """
    saved: list[str] = []
    text = _mask(sql, SQL_STRING_PATTERN, saved)
    text = _mask(text, QUOTED_NAME_PATTERN, saved)

    text = SELECT_LIST_PATTERN.sub(_quote_select_list, text)
    text = _mask(text, QUOTED_NAME_PATTERN, saved)
    text = TABLE_POSITION_PATTERN.sub(_quote_table, text)
    text = INSERT_COLUMNS_PATTERN.sub(_quote_name_list, text)
    text = ORDER_BY_PATTERN.sub(_quote_order_items, text)
    text = _mask(text, QUOTED_NAME_PATTERN, saved)
    text = PREDICATE_COLUMN_PATTERN.sub(_quote_predicate, text)

    return _unmask(text, saved)
