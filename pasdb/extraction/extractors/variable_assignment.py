"""`sSQL := 'SELECT ...';`, with or without trailing concatenation."""

from ..config import VARIABLE_SQL_ASSIGN_PATTERN
from ..models import StatementCandidate
from ..scanner import read_expression
from . import BaseStatementExtractor


class VariableAssignmentExtractor(BaseStatementExtractor):
    """String variables assigned a literal that starts with a SQL keyword."""

    name = "variable_assignment"
    priority = 50

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in VARIABLE_SQL_ASSIGN_PATTERN.finditer(body):
            expression, _end = read_expression(body, match.end())
            candidate = self.candidate_from_expression(expression, match.start())
            if candidate:
                candidates.append(candidate)
        return candidates
