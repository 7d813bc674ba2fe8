"""`qry.SQL.Text := '<literal>';`"""

from ..config import SQL_TEXT_ASSIGN_PATTERN
from ..models import StatementCandidate
from ..scanner import parse_literal_run, read_expression
from . import BaseStatementExtractor


class LiteralTextAssignmentExtractor(BaseStatementExtractor):
    """Static statement assigned to a SQL property in one literal."""

    name = "sql_text_literal"
    priority = 10

    def extract(self, body: str) -> list[StatementCandidate]:
        candidates = []
        for match in SQL_TEXT_ASSIGN_PATTERN.finditer(body):
            expression, _end = read_expression(body, match.end())
            if self.is_concatenated(expression):
                continue
            literal = parse_literal_run(expression)
            if literal is None or not literal.strip():
                continue
            candidates.append(
                StatementCandidate(
                    text=literal.strip(),
                    position=match.start(),
                    target=match.group("target"),
                    source=self.name,
                )
            )
        return candidates
