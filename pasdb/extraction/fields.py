"""Field-access boundary.

Column data (names, nullability, types) comes from a separate field-access
analyzer. pasdb only consumes it: a `SELECT *` projection is rewritten into
an explicit, quoted column list once the fields read from the dataset are
known.
"""

from collections.abc import Iterable

from .config import FIELD_BY_NAME_PATTERN, SELECT_STAR_PATTERN
from .models import FieldAccess


def rewrite_select_star(sql: str, fields: Iterable[FieldAccess]) -> str:
    """Replace a leading `SELECT *` with the given field names.

    Field names are upper-cased and double-quoted, first occurrence wins.
    Statements that do not start with `SELECT * FROM`, or an empty field
    list, are returned unchanged.
    """
    names: list[str] = []
    for access in fields:
        name = access.field_name.strip().upper()
        if name and name not in names:
            names.append(name)
    if not names:
        return sql
    columns = ", ".join(f'"{name}"' for name in names)
    return SELECT_STAR_PATTERN.sub(lambda m: f"{m.group('head')}{columns}{m.group('tail')}", sql, count=1)


def extract_field_names(body: str) -> list[str]:
    """Distinct `FieldByName('...')` names in a method body, first spelling kept."""
    names: dict[str, str] = {}
    for match in FIELD_BY_NAME_PATTERN.finditer(body):
        name = match.group("name").strip()
        if name:
            names.setdefault(name.lower(), name)
    return list(names.values())
