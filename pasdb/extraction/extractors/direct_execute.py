"""Execute helpers with inline SQL.

    ExecSQL('DELETE FROM LOG');
    ExecuteQuery(Connection, 'UPDATE ...' + IntToStr(ID));
    FDConnection1.ExecSQL('INSERT ...');
"""

from ..config import CALL_RECEIVER_PATTERN, DIRECT_EXECUTE_CALL_PATTERN
from ..models import StatementCandidate
from ..scanner import read_call_arguments
from . import BaseStatementExtractor


def _receiver(body: str, call_start: int) -> str | None:
    match = CALL_RECEIVER_PATTERN.search(body, max(0, call_start - 80), call_start)
    return match.group("target") if match else None


class DirectExecuteExtractor(BaseStatementExtractor):
    """SQL passed straight to an execute helper, optionally after a connection."""

    name = "direct_execute"
    priority = 60

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in DIRECT_EXECUTE_CALL_PATTERN.finditer(body):
            parsed = read_call_arguments(body, match.end() - 1)
            if not parsed or not parsed[0]:
                continue
            args = parsed[0]
            target = _receiver(body, match.start())
            candidate = self.candidate_from_expression(args[0], match.start(), target)
            if candidate is None and len(args) >= 2:
                candidate = self.candidate_from_expression(args[1], match.start(), target)
            if candidate:
                candidates.append(candidate)
        return candidates
