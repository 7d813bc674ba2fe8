"""Activity detector - cheap gate run before the statement shapes.

The signal set is deliberately broad. A false positive costs one pass of the
shape battery that finds nothing; a false negative silently drops real
operations.
"""

from .config import CANONICAL_COMPONENTS, COMPONENT_TYPE_PATTERN, DB_ACTIVITY_PATTERNS


def is_database_active(body: str) -> bool:
    """Return True if the method body plausibly touches a database.

    Signals: query/dataset, connection or stored-procedure component types,
    `.SQL.` mutations, transaction control, execute helpers with an inline
    literal, query-value helpers, and SQL string literals.
    """
    if not body:
        return False
    return any(pattern.search(body) for pattern in DB_ACTIVITY_PATTERNS)


def component_types_in(text: str) -> list[str]:
    """Known statement component classes mentioned in `text`, canonical spelling, in order."""
    seen: list[str] = []
    for match in COMPONENT_TYPE_PATTERN.finditer(text):
        name = CANONICAL_COMPONENTS[match.group(1).lower()]
        if name not in seen:
            seen.append(name)
    return seen
