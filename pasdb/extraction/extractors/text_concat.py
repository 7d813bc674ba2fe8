"""`qry.SQL.Text := 'SELECT ... ' + IntToStr(ID);` and Format() right-hand sides."""

from ..config import SQL_TEXT_ASSIGN_PATTERN
from ..models import StatementCandidate
from ..scanner import read_expression
from . import BaseStatementExtractor


class ConcatenatedTextAssignmentExtractor(BaseStatementExtractor):
    """SQL property assigned from a runtime concatenation."""

    name = "sql_text_concat"
    priority = 20

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in SQL_TEXT_ASSIGN_PATTERN.finditer(body):
            expression, _end = read_expression(body, match.end())
            if not self.is_concatenated(expression):
                continue
            candidate = self.candidate_from_expression(expression, match.start(), match.group("target"))
            if candidate:
                candidates.append(candidate)
        return candidates
