import logging
import threading
from dataclasses import dataclass
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryTicket:
    generation: "QueryGeneration"
    number: int

    @property
    def is_current(self) -> bool:
        return self.generation.current == self.number


class QueryGeneration:
    """
    Request-generation counter for overlapping queries.

    Each ``issue()`` supersedes every ticket issued before it; a result that
    comes back under a superseded ticket must not be applied.
    """

    def __init__(self):
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._current

    def issue(self) -> QueryTicket:
        with self._lock:
            self._current += 1
            return QueryTicket(self, self._current)

    def deliver(self, ticket: QueryTicket, result: T, apply: Callable[[T], None]) -> bool:
        """Call ``apply(result)`` only if ``ticket`` is still the latest. Returns whether it was applied."""
        if not ticket.is_current:
            logger.info(f"Discarding result of superseded query #{ticket.number} (current #{self._current})")
            return False
        apply(result)
        return True
