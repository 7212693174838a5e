"""Per-invocation state shared by the generation pipeline."""

import logging
from collections import defaultdict
from itertools import count
from typing import Dict, Iterator, List

from .models import GenerationWarning, WarningKind

logger = logging.getLogger(__name__)


class GenerationContext:
    """Identifier counters and collected warnings for one generation run.

    A fresh context is created for every call, so repeated or concurrent
    runs never share ids or warnings.
    """

    def __init__(self):
        self._counters: Dict[str, Iterator[int]] = defaultdict(lambda: count(1))
        self.warnings: List[GenerationWarning] = []

    def next_id(self, prefix: str = "cell") -> str:
        """Return the next identifier for ``prefix`` (``cell-1``, ``cell-2``...)."""
        return f"{prefix}-{next(self._counters[prefix])}"

    def warn(self, kind: WarningKind, message: str) -> None:
        """Record a recoverable problem."""
        logger.warning(f"{kind.value}: {message}")
        self.warnings.append(GenerationWarning(kind=kind, message=message))

    def warnings_of(self, kind: WarningKind) -> List[GenerationWarning]:
        return [w for w in self.warnings if w.kind == kind]
