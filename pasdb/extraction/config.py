"""Extraction configuration - pattern tables and word lists.

Every pattern used by the extraction engine is compiled here, once, at import
time. The tables are module-level constants and are never mutated, so any
number of extraction calls (threads, worker processes) can share them.

Organized into sections that follow the pipeline order:
scanner -> method locator -> activity detector -> variable tracker ->
statement shapes -> concatenation -> normalizer -> classifier ->
parameters -> transactions.

CRITICAL: This file holds ONLY constants. No extraction logic.
"""

import re

_I = re.IGNORECASE
_IM = re.IGNORECASE | re.MULTILINE


def _alternation(words) -> str:
    """Build a regex alternation, longest words first so prefixes never win."""
    return "|".join(sorted((re.escape(w) for w in words), key=len, reverse=True))


# =============================================================================
# DATABASE COMPONENT CLASSES
# =============================================================================

# Query and dataset components (BDE, IBX, ADO, FireDAC, Zeos, dbExpress, DataSnap)
QUERY_COMPONENTS: tuple[str, ...] = (
    "TQuery",
    "TIBQuery",
    "TADOQuery",
    "TFDQuery",
    "TZQuery",
    "TSQLQuery",
    "TIBDataSet",
    "TADODataSet",
    "TFDMemTable",
    "TClientDataSet",
    "TSQLDataSet",
)

CONNECTION_COMPONENTS: tuple[str, ...] = (
    "TDatabase",
    "TIBDatabase",
    "TADOConnection",
    "TFDConnection",
    "TZConnection",
    "TSQLConnection",
)

STORED_PROC_COMPONENTS: tuple[str, ...] = (
    "TStoredProc",
    "TIBStoredProc",
    "TADOStoredProc",
    "TFDStoredProc",
    "TZStoredProc",
    "TSQLStoredProc",
)

# Components a statement can be attached to (query variable tracking)
STATEMENT_COMPONENTS: tuple[str, ...] = QUERY_COMPONENTS + STORED_PROC_COMPONENTS

# Lower-case name -> canonical spelling
CANONICAL_COMPONENTS: dict[str, str] = {name.lower(): name for name in STATEMENT_COMPONENTS}

DEFAULT_COMPONENT = "TQuery"

_COMPONENTS_ALT = _alternation(STATEMENT_COMPONENTS)

COMPONENT_TYPE_PATTERN = re.compile(rf"\b({_COMPONENTS_ALT})\b", _I)


# =============================================================================
# METHOD LOCATOR
# =============================================================================

# Implementation header: [class] procedure|function|constructor|destructor
# Class.Method[(params)][: ReturnType];
# Parameter defaults may hold one level of parentheses and string literals.
_HEADER_PARAM_ITEM = r"'(?:[^']|'')*'|[^()']"
METHOD_HEADER_PATTERN = re.compile(
    r"^[ \t]*(?:class[ \t]+)?"
    r"(?P<kind>procedure|function|constructor|destructor)[ \t]+"
    r"(?P<class_name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*?)\s*\.\s*(?P<method_name>[A-Za-z_]\w*)"
    rf"\s*(?:\((?P<params>(?:{_HEADER_PARAM_ITEM}|\((?:{_HEADER_PARAM_ITEM})*\))*)\))?"
    r"\s*(?::\s*(?P<return_type>[A-Za-z_][\w.]*(?:<[^>;]*>)?))?"
    r"\s*;",
    _IM,
)

BEGIN_KEYWORD = "begin"
END_KEYWORD = "end"

# Keywords whose block closes with a bare `end` (block-kind stack mode)
BLOCK_OPENERS: frozenset[str] = frozenset({"begin", "case", "try", "asm", "record"})


# =============================================================================
# SQL-CARRYING PROPERTIES
# =============================================================================

# TQuery.SQL plus the IBX dataset statement properties
SQL_PROPERTIES: tuple[str, ...] = (
    "SQL",
    "SelectSQL",
    "InsertSQL",
    "ModifySQL",
    "DeleteSQL",
    "RefreshSQL",
)

_SQL_PROP = rf"(?:{_alternation(SQL_PROPERTIES)})"

# Optional receiver: `qry.`, `Self.FQuery.`, or nothing inside a `with` block
_RECEIVER = r"(?:(?P<target>[A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)*?)\s*\.\s*)?"

SQL_TEXT_ASSIGN_PATTERN = re.compile(
    rf"(?<![\w.]){_RECEIVER}\b{_SQL_PROP}\s*\.\s*Text\s*:=", _I
)

SQL_ADD_CALL_PATTERN = re.compile(
    rf"(?<![\w.]){_RECEIVER}\b{_SQL_PROP}\s*\.\s*Add\s*\(", _I
)

SQL_CLEAR_CALL_PATTERN = re.compile(
    rf"(?<![\w.]){_RECEIVER}\b{_SQL_PROP}\s*\.\s*Clear\b", _I
)

# Receiver right before a helper call: `Conn.ExecSQL(` -> Conn
CALL_RECEIVER_PATTERN = re.compile(r"(?P<target>[A-Za-z_]\w*)\s*\.\s*$")

# First `.SQL.` receiver of a body (component fallback)
SQL_RECEIVER_PATTERN = re.compile(
    rf"\b(?P<target>[A-Za-z_]\w*)\s*\.\s*{_SQL_PROP}\s*\.\s*(?:Text|Add|Clear)\b", _I
)


# =============================================================================
# HELPER CALL SHAPES
# =============================================================================

DIRECT_EXECUTE_FUNCTIONS: tuple[str, ...] = (
    "ExecuteQuery",
    "ExecuteSQL",
    "ExecQuery",
    "ExecProc",
    "ExecSQL",
    "ExecuteDirect",
)

QUERY_VALUE_FUNCTIONS: tuple[str, ...] = (
    "QueryValueAsInteger",
    "QueryValueAsString",
    "QueryValueAsFloat",
    "QueryValueAsBoolean",
    "QueryValueAsDateTime",
    "QueryValueAsVariant",
    "QueryValueAsCurrency",
    "QueryValue",
    "GetFieldValue",
    "LookupValue",
)

DIRECT_EXECUTE_CALL_PATTERN = re.compile(
    rf"(?<![\w])(?P<function>{_alternation(DIRECT_EXECUTE_FUNCTIONS)})\s*\(", _I
)

QUERY_VALUE_CALL_PATTERN = re.compile(
    rf"(?<![\w])(?P<function>{_alternation(QUERY_VALUE_FUNCTIONS)})\s*\(", _I
)


# =============================================================================
# SQL LITERAL RECOGNITION
# =============================================================================

# Statement-leading keywords for variable-assignment detection
SQL_LEADING_KEYWORDS: tuple[str, ...] = (
    "SELECT",
    "INSERT",
    "UPDATE",
    "DELETE",
    "EXECUTE",
    "EXEC",
    "CALL",
    "CREATE",
    "RECREATE",
    "ALTER",
    "DROP",
    "MERGE",
    "WITH",
    "SET GENERATOR",
)

_LEADING_ALT = r"(?:" + "|".join(k.replace(" ", r"\s+") for k in SQL_LEADING_KEYWORDS) + r")"

# `Name := 'SELECT ...` or `Name := Format('SELECT ...`
VARIABLE_SQL_ASSIGN_PATTERN = re.compile(
    r"(?<![\w.])(?P<target>[A-Za-z_]\w*)\s*:=\s*"
    rf"(?=(?:Format\s*\(\s*)?'\s*{_LEADING_ALT}\b)",
    _I,
)

SQL_LITERAL_START_PATTERN = re.compile(rf"'\s*{_LEADING_ALT}\b", _I)

# One run element of a literal operand: 'text' or #13 / #$0D character code
LITERAL_RUN_PATTERN = re.compile(r"\s*(?:'(?P<literal>(?:[^'\n]|'')*)'|#(?P<char>\$[0-9A-Fa-f]+|\d+))")

NUMERIC_LITERAL_PATTERN = re.compile(r"[+-]?(?:\$[0-9A-Fa-f]+|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)")

LINE_BREAK_CONSTANTS: dict[str, str] = {
    "slinebreak": "\n",
    "crlf": "\r\n",
    "cr": "\r",
    "lf": "\n",
}


# =============================================================================
# ACTIVITY DETECTOR SIGNALS
# =============================================================================

TRANSACTION_PATTERN = re.compile(
    r"\b(?:StartTransaction|Commit(?:Retaining)?|Rollback(?:Retaining)?|InTransaction)\b", _I
)

DB_ACTIVITY_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(rf"\b(?:{_alternation(QUERY_COMPONENTS)})\b", _I),
    re.compile(rf"\b(?:{_alternation(CONNECTION_COMPONENTS)})\b", _I),
    re.compile(rf"\.\s*{_SQL_PROP}\s*\.\s*(?:Clear|Add|Text)\s*[(:=;]", _I),
    re.compile(rf"(?<![\w.]){_SQL_PROP}\s*\.\s*(?:Clear|Add|Text)\s*[(:=;]", _I),
    TRANSACTION_PATTERN,
    re.compile(rf"\b(?:{_alternation(STORED_PROC_COMPONENTS)})\b", _I),
    re.compile(
        rf"\b(?:{_alternation(DIRECT_EXECUTE_FUNCTIONS)})\s*\(\s*(?:[\w.]+\s*,\s*)?'", _I
    ),
    re.compile(rf"\b(?:{_alternation(QUERY_VALUE_FUNCTIONS)})\s*\(", _I),
    VARIABLE_SQL_ASSIGN_PATTERN,
    SQL_LITERAL_START_PATTERN,
)


# =============================================================================
# QUERY VARIABLE TRACKER
# =============================================================================

# `qryA, qryB: TIBQuery`
VARIABLE_DECLARATION_PATTERN = re.compile(
    rf"(?P<names>\b[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s*:\s*(?P<type>{_COMPONENTS_ALT})\b", _I
)

# `qry := TIBQuery.Create(nil)` / `Self.FQuery := TADOQuery.Create(Self)`
VARIABLE_CREATION_PATTERN = re.compile(
    rf"\b(?P<name>[A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)*)\s*:=\s*(?P<type>{_COMPONENTS_ALT})\s*\.\s*Create\b",
    _I,
)

# `  FQuery: TIBQuery;` inside a class declaration
FIELD_DECLARATION_PATTERN = re.compile(
    rf"^\s*(?P<name>F[A-Za-z_]\w*)\s*:\s*(?P<type>{_COMPONENTS_ALT})\s*;", _IM
)


# =============================================================================
# CONCATENATION
# =============================================================================

FORMAT_CALL_PATTERN = re.compile(r"^(?:SysUtils\s*\.\s*)?Format\s*\(", _I)

# %s, %d, %0:s, %-10.2f, %%
FORMAT_SPECIFIER_PATTERN = re.compile(
    r"%(?:(?P<index>\d+|\*):)?-?(?:\d+|\*)?(?:\.(?:\d+|\*))?(?P<conv>[sdfgnmxuepSDFGNMXUEP])|%%"
)

FUNCTION_CALL_PATTERN = re.compile(
    r"^(?P<function>[A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)*)\s*\((?P<args>.*)\)$", re.DOTALL
)

MEMBER_ACCESS_PATTERN = re.compile(r"^[A-Za-z_]\w*(?:\s*\.\s*[A-Za-z_]\w*)+$")

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_]\w*$")

NON_WORD_PATTERN = re.compile(r"\W+")

# Placeholder mark, optionally wrapped in the quotes of a quoted value slot
PLACEHOLDER_SLOT_PATTERN = re.compile("(')?\x01([^\x01]*)\x01(')?")

# Conversion wrapper -> scalar kind of the value it carries
CONVERSION_HINTS: dict[str, str] = {
    "inttostr": "integer",
    "int64tostr": "integer",
    "uinttostr": "integer",
    "floattostr": "floating",
    "floattostrf": "floating",
    "currtostr": "decimal",
    "currtostrf": "decimal",
    "datetostr": "date-time",
    "timetostr": "date-time",
    "datetimetostr": "date-time",
    "formatdatetime": "date-time",
    "booltostr": "boolean",
    "quotedstr": "text",
    "ansiquotedstr": "text",
    "trim": "text",
}


# =============================================================================
# NORMALIZER
# =============================================================================

# Upper-cased wherever they appear as whole words
SQL_KEYWORDS: frozenset[str] = frozenset("""
    SELECT FROM WHERE INSERT UPDATE DELETE INTO VALUES JOIN LEFT RIGHT INNER
    OUTER FULL CROSS ON USING AND OR NOT IN EXISTS BETWEEN LIKE IS NULL AS
    ORDER BY GROUP HAVING UNION ALL DISTINCT TOP CREATE ALTER DROP TABLE INDEX
    VIEW DATABASE SCHEMA SET DEFAULT PRIMARY KEY FOREIGN REFERENCES CONSTRAINT
    CHECK UNIQUE CASCADE RESTRICT NO ACTION BEGIN COMMIT ROLLBACK TRANSACTION
    SAVEPOINT CASE WHEN THEN ELSE END CAST CONVERT COALESCE NULLIF IIF COUNT
    SUM AVG MIN MAX FIRST LAST LIMIT OFFSET FETCH ROWS ONLY NEXT WITH RECURSIVE
    CTE OVER PARTITION WINDOW ROW_NUMBER RANK DENSE_RANK ASC DESC FOR EXECUTE
    PROCEDURE BLOCK RETURNS RETURNING
""".split())

# Identifiers that must stay double-quoted when they name a column or table
QUOTABLE_RESERVED_WORDS: frozenset[str] = frozenset("""
    USER CURRENT DATE TIME TIMESTAMP YEAR MONTH DAY HOUR MINUTE SECOND CHAR
    VARCHAR INTEGER DECIMAL NUMERIC FLOAT DOUBLE BOOLEAN BLOB TEXT VALUE
    POSITION SIZE LEVEL OPTION TYPE PASSWORD ROLE SECTION DOMAIN GENERATOR
    SEQUENCE TRIGGER COLUMN ROW KEYS COMMENT CONNECT ACTIVE GLOBAL LOCAL
    WEEKDAY YEARDAY PLAN SORT STATUS
""".split())

# Step 1 keeps these quoted; everything else is unquoted
RESERVED_WORDS: frozenset[str] = SQL_KEYWORDS | QUOTABLE_RESERVED_WORDS

SQL_KEYWORD_PATTERN = re.compile(rf"\b(?:{_alternation(SQL_KEYWORDS)})\b", _I)

QUOTED_IDENTIFIER_PATTERN = re.compile(r'"([A-Za-z_][A-Za-z0-9_$]*)"')

# Colon placeholder; `::` casts and `12:30` style times are not parameters
PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):(?P<name>[A-Za-z_]\w*)")

CASE_BOUNDARY_PATTERN = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# SQL string literal (single quotes, doubled-quote escapes) and double-quoted name
SQL_STRING_PATTERN = re.compile(r"'(?:[^']|'')*'")
QUOTED_NAME_PATTERN = re.compile(r'"[^"\n]*"')

# Literal / quoted-identifier masking tokens
MASK_TOKEN_PATTERN = re.compile("\x00(\\d+)\x00")

SELECT_LIST_PATTERN = re.compile(
    r"\bSELECT\s+(?P<prefix>(?:(?:DISTINCT|ALL)\s+|(?:FIRST|SKIP|TOP)\s+\S+\s+)*)"
    r"(?P<columns>.+?)\s+FROM\b",
    re.DOTALL,
)

TABLE_POSITION_PATTERN = re.compile(
    r"\b(?P<keyword>FROM|JOIN|INTO|UPDATE|TABLE)\s+(?P<name>[A-Za-z_][\w$]*)\b"
)

INSERT_COLUMNS_PATTERN = re.compile(r"\bINTO\s+\S+\s*\((?P<columns>[^()]*)\)")

PREDICATE_COLUMN_PATTERN = re.compile(
    r"(?P<lead>[\s(,.])(?P<word>[A-Za-z_]\w*)"
    r"(?P<tail>\s*(?:=|<>|!=|<=|>=|<|>)|\s+(?:IS|IN|LIKE|BETWEEN|STARTING|CONTAINING|NOT|ASC|DESC|NULLS)\b)"
)

ORDER_BY_PATTERN = re.compile(r"\b(?:ORDER|GROUP)\s+BY\s+(?P<columns>[^;]+?)(?=\s+(?:HAVING|ROWS|LIMIT|OFFSET|FETCH|UNION|PLAN|FOR)\b|\)|$)")

SELECT_ITEM_PATTERN = re.compile(
    r"^(?P<qualifier>[A-Za-z_]\w*\.)?(?P<column>[A-Za-z_]\w*)(?P<alias>\s+(?:AS\s+)?[A-Za-z_]\w*)?$"
)


# =============================================================================
# CLASSIFIER
# =============================================================================

FIRST_WORD_PATTERN = re.compile(r"[A-Za-z]+")

DDL_KEYWORDS: frozenset[str] = frozenset({"CREATE", "ALTER", "DROP", "RECREATE"})
STORED_PROCEDURE_KEYWORDS: frozenset[str] = frozenset({"EXEC", "EXECUTE", "CALL"})

_TABLE_IDENT = r'"?([A-Za-z_][\w$]*)"?'

# Tried in order; the first match names the table
TABLE_NAME_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(rf'\bFROM\s+(?:"?[\w$]+"?\.)?{_TABLE_IDENT}', _I),
    re.compile(rf"\bINTO\s+{_TABLE_IDENT}", _I),
    re.compile(rf"\bUPDATE\s+(?:OR\s+INSERT\s+INTO\s+)?{_TABLE_IDENT}", _I),
    re.compile(rf"\bDELETE\s+FROM\s+{_TABLE_IDENT}", _I),
    re.compile(rf"\bSET\s+GENERATOR\s+{_TABLE_IDENT}\s+TO\b", _I),
    re.compile(rf"\bTABLE\s+{_TABLE_IDENT}", _I),
    re.compile(rf"\bON\s+{_TABLE_IDENT}\s*\(", _I),
)

TABLE_KEYWORDS: frozenset[str] = frozenset({"FROM", "INTO", "UPDATE", "TABLE"})


# =============================================================================
# PARAMETERS
# =============================================================================

PARAM_BY_NAME_PATTERN = re.compile(r"\bParamByName\s*\(\s*'(?P<name>[^'\n]+)'\s*\)", _I)

PARAMS_INDEX_PATTERN = re.compile(r"\b(?:Params|ParamValues)\s*\[\s*'(?P<name>[^'\n]+)'\s*\]", _I)

TYPED_PARAM_ACCESS_PATTERN = re.compile(
    r"(?:\bParamByName\s*\(\s*'(?P<by_name>[^'\n]+)'\s*\)"
    r"|\b(?:Params|ParamValues)\s*\[\s*'(?P<by_index>[^'\n]+)'\s*\])"
    r"\s*\.\s*(?P<accessor>As[A-Za-z]+|Value)\b",
    _I,
)

# Accessor suffix -> scalar kind (parameters and dataset fields alike)
ACCESSOR_TYPES: dict[str, str] = {
    "asstring": "text",
    "aswidestring": "text",
    "asansistring": "text",
    "asmemo": "text",
    "aswidememo": "text",
    "asinteger": "integer",
    "assmallint": "integer",
    "aslargeint": "integer",
    "aslongint": "integer",
    "asword": "integer",
    "asbyte": "integer",
    "asshortint": "integer",
    "ascardinal": "integer",
    "asfloat": "floating",
    "assingle": "floating",
    "asextended": "decimal",
    "ascurrency": "decimal",
    "asbcd": "decimal",
    "asfmtbcd": "decimal",
    "asdatetime": "date-time",
    "asdate": "date-time",
    "astime": "date-time",
    "assqltimestamp": "date-time",
    "asboolean": "boolean",
    "asbytes": "binary",
    "asblob": "binary",
    "asblobref": "binary",
    "asguid": "text",
    "asvariant": "opaque",
    "value": "opaque",
}

DEFAULT_SOURCE_TYPE = "Variant"


# =============================================================================
# FIELD ACCESS
# =============================================================================

SELECT_STAR_PATTERN = re.compile(r"^(?P<head>\s*SELECT\s+)\*(?P<tail>\s+FROM\b)", _I)

FIELD_BY_NAME_PATTERN = re.compile(r"\bFieldByName\s*\(\s*'(?P<name>[^'\n]+)'\s*\)", _I)


# =============================================================================
# SENTINELS
# =============================================================================

DYNAMIC_SQL_SENTINEL = "Dynamic SQL"
