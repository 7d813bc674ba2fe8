"""Multi-line statements built with `qry.SQL.Add(...)`.

Add calls accumulate into windows. Each `.SQL.Clear` starts a new window
that runs to the next one or to the end of the method; Add calls before
the first Clear form their own window, and without any Clear every Add in
the method joins into one statement. A window joins its arguments with
newlines. Concatenated arguments are expanded by the concatenation parser and
make the window dynamic.
"""

from dataclasses import dataclass

from ..concat import template_from_expression
from ..config import SQL_ADD_CALL_PATTERN, SQL_CLEAR_CALL_PATTERN
from ..models import StatementCandidate
from ..scanner import read_call_arguments
from . import BaseStatementExtractor


@dataclass
class _AddCall:
    position: int
    target: str | None
    argument: str


class AddSequenceExtractor(BaseStatementExtractor):
    """One statement per Clear-delimited window of Add calls."""

    name = "sql_add_sequence"
    priority = 30

    def extract(self, body: str) -> list[StatementCandidate]:
        boundaries = [m.start() for m in SQL_CLEAR_CALL_PATTERN.finditer(body)]

        adds = []
        for match in SQL_ADD_CALL_PATTERN.finditer(body):
            parsed = read_call_arguments(body, match.end() - 1)
            if parsed is None or len(parsed[0]) != 1:
                continue
            adds.append(_AddCall(match.start(), match.group("target"), parsed[0][0]))

        windows: dict[int, list[_AddCall]] = {}
        for call in adds:
            window = sum(1 for boundary in boundaries if boundary < call.position)
            windows.setdefault(window, []).append(call)

        candidates = []
        for window in sorted(windows):
            candidate = self._join(windows[window])
            if candidate:
                candidates.append(candidate)
        return candidates

    def _join(self, calls: list[_AddCall]) -> StatementCandidate | None:
        lines = []
        hints: dict[str, str] = {}
        dynamic = False
        literal_parts = 0
        for call in calls:
            template = template_from_expression(call.argument, allow_bare=True)
            if template is None:
                continue
            lines.append(template.text)
            literal_parts += template.literal_parts
            dynamic = dynamic or template.is_dynamic
            for name, wrapper in template.hints.items():
                hints.setdefault(name, wrapper)

        text = "\n".join(lines).strip()
        # A window of bare variables carries no SQL of its own
        if not text or not literal_parts:
            return None
        return StatementCandidate(
            text=text,
            position=calls[0].position,
            is_dynamic=dynamic,
            target=next((c.target for c in calls if c.target), None),
            source=self.name,
            hints=hints,
        )
