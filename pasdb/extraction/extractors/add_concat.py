"""`qry.SQL.Add('WHERE ID = ' + IntToStr(ID))` on its own.

The concatenated argument is also part of its Add window (add_sequence.py),
so the candidate is a fragment: it only survives when no complete statement
of the method already contains it.
"""

from ..config import SQL_ADD_CALL_PATTERN
from ..models import StatementCandidate
from ..scanner import read_call_arguments
from . import BaseStatementExtractor


class ConcatenatedAddExtractor(BaseStatementExtractor):
    """Concatenated Add-call arguments, as fragments."""

    name = "sql_add_concat"
    priority = 40

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in SQL_ADD_CALL_PATTERN.finditer(body):
            parsed = read_call_arguments(body, match.end() - 1)
            if parsed is None or len(parsed[0]) != 1:
                continue
            argument = parsed[0][0]
            if not self.is_concatenated(argument):
                continue
            candidate = self.candidate_from_expression(
                argument, match.start(), match.group("target"), fragment=True
            )
            if candidate:
                candidates.append(candidate)
        return candidates
