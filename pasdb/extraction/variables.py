"""Query-variable tracker.

Maps variable names to the database component class they hold so an
extracted statement can be attributed to a TIBQuery, a TADOQuery, and so on.
Pascal identifiers are case-insensitive; keys are stored lower-cased.

Sources, in order of precedence (later sources do not overwrite earlier ones):
1. declarations: `qryA, qryB: TIBQuery`
2. creations: `qry := TADOQuery.Create(nil)`
3. class fields: `FQuery: TFDQuery;` (mapped as both `fquery` and `query`)
"""

from collections.abc import Mapping

from .config import (
    CANONICAL_COMPONENTS,
    DEFAULT_COMPONENT,
    FIELD_DECLARATION_PATTERN,
    SQL_RECEIVER_PATTERN,
    VARIABLE_CREATION_PATTERN,
    VARIABLE_DECLARATION_PATTERN,
)

QueryVariableMap = dict[str, str]


def _canonical(type_name: str) -> str:
    return CANONICAL_COMPONENTS.get(type_name.lower(), type_name)


def _last_member(name: str) -> str:
    return name.split(".")[-1].strip().lower()


def build_query_variable_map(text: str) -> QueryVariableMap:
    """Build the variable -> component map for one unit's scanned text."""
    variables: QueryVariableMap = {}

    for match in VARIABLE_DECLARATION_PATTERN.finditer(text):
        component = _canonical(match.group("type"))
        for name in match.group("names").split(","):
            variables.setdefault(name.strip().lower(), component)

    for match in VARIABLE_CREATION_PATTERN.finditer(text):
        variables.setdefault(_last_member(match.group("name")), _canonical(match.group("type")))

    for match in FIELD_DECLARATION_PATTERN.finditer(text):
        component = _canonical(match.group("type"))
        name = match.group("name").lower()
        variables.setdefault(name, component)
        variables.setdefault(name[1:], component)

    return variables


def normalize_variable_map(variables: Mapping[str, str]) -> QueryVariableMap:
    """Lower-case keys and canonicalize component names of a caller-supplied map."""
    return {name.lower(): _canonical(component) for name, component in variables.items()}


def lookup_component(target: str | None, variables: Mapping[str, str]) -> str | None:
    """Component of a receiver expression such as `qry` or `Self.FQuery`."""
    if not target:
        return None
    name = _last_member(target)
    if name in variables:
        return variables[name]
    if name.startswith("f") and name[1:] in variables:
        return variables[name[1:]]
    return None


def resolve_component(
    target: str | None,
    body: str,
    variables: Mapping[str, str],
    default: str = DEFAULT_COMPONENT,
) -> str:
    """Decide which component class a statement belongs to.

    Order: the statement's own receiver, the first mapped `.SQL.` receiver in
    the body, the only mapped variable of the unit, then `default`.
    """
    component = lookup_component(target, variables)
    if component:
        return component

    for match in SQL_RECEIVER_PATTERN.finditer(body):
        component = lookup_component(match.group("target"), variables)
        if component:
            return component

    if len(set(variables.values())) == 1:
        return next(iter(variables.values()))

    return default
