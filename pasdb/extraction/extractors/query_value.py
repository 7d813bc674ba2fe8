"""Scalar lookup helpers: `QueryValueAsInteger('SELECT COUNT(*) FROM T')`, `LookupValue(...)`."""

from ..config import QUERY_VALUE_CALL_PATTERN
from ..models import StatementCandidate
from ..scanner import read_call_arguments
from . import BaseStatementExtractor


class QueryValueExtractor(BaseStatementExtractor):
    """Inline SQL in the first or second argument of a query-value helper."""

    name = "query_value"
    priority = 70

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in QUERY_VALUE_CALL_PATTERN.finditer(body):
            parsed = read_call_arguments(body, match.end() - 1)
            if not parsed or not parsed[0]:
                continue
            for argument in parsed[0][:2]:
                candidate = self.candidate_from_expression(argument, match.start())
                if candidate:
                    candidates.append(candidate)
                    break
        return candidates
