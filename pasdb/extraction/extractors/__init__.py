"""Statement extractor framework.

Each module in this package holds exactly one statement shape: a
BaseStatementExtractor subclass whose `extract` turns one method body into
zero or more StatementCandidates. Shapes are independent; every shape runs on
every database-active body and the orchestrator unions and de-duplicates the
results.

Design:
- One shape per file (text_literal.py -> LiteralTextAssignmentExtractor)
- Shapes are discovered, not listed: dropping a new module in this directory
  registers it
- `priority` only orders the candidates of a method, so that when two shapes
  isolate the same text the earlier shape's candidate is kept
"""

import importlib
import os
from abc import ABC, abstractmethod
from pathlib import Path

from pasdb.utils.constants import ENV_DEBUG
from pasdb.utils.logging import logger

from ..concat import has_concatenation, template_from_expression
from ..models import StatementCandidate


class BaseStatementExtractor(ABC):
    """Abstract base class for statement shapes."""

    name: str = "base"
    priority: int = 100

    @abstractmethod
    def extract(self, body: str) -> list[StatementCandidate]:
        """Find every occurrence of this shape in a method body.

        Args:
            body: Comment-free method body

        Returns:
            Candidates with positions relative to the start of `body`
        """

    def candidate_from_expression(
        self,
        expression: str,
        position: int,
        target: str | None = None,
        allow_bare: bool = False,
        fragment: bool = False,
    ) -> StatementCandidate | None:
        """Turn a literal or concatenated right-hand side into a candidate."""
        template = template_from_expression(expression, allow_bare=allow_bare)
        if template is None or not template.text.strip():
            return None
        return StatementCandidate(
            text=template.text.strip(),
            position=position,
            is_dynamic=template.is_dynamic,
            target=target,
            source=self.name,
            fragment=fragment,
            hints=dict(template.hints),
        )

    @staticmethod
    def is_concatenated(expression: str) -> bool:
        return has_concatenation(expression)


class StatementExtractorRegistry:
    """Discovers and holds the statement shapes.

    Automatically imports every module in the extractors/ directory and
    registers the BaseStatementExtractor subclass it defines.
    """

    def __init__(self):
        self.extractors: list[BaseStatementExtractor] = []
        self._discover()

    def _discover(self):
        """Import shape modules and register one extractor per module."""
        extractor_dir = Path(__file__).parent

        for file_path in sorted(extractor_dir.glob("*.py")):
            if file_path.name.startswith("_"):
                continue

            module_name = file_path.stem

            try:
                module = importlib.import_module(f".{module_name}", package=__name__)
            except ImportError as e:
                logger.warning(f"Failed to load statement extractor {module_name}: {e}")
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, BaseStatementExtractor)
                    and attr is not BaseStatementExtractor
                    and attr.__module__ == module.__name__
                ):
                    self.extractors.append(attr())
                    break

        self.extractors.sort(key=lambda extractor: (extractor.priority, extractor.name))
        if os.environ.get(ENV_DEBUG):
            logger.debug(f"Statement shapes: {[e.name for e in self.extractors]}")

    def __iter__(self):
        return iter(self.extractors)

    def __len__(self) -> int:
        return len(self.extractors)

    def names(self) -> list[str]:
        return [extractor.name for extractor in self.extractors]
