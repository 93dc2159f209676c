"""In-memory answer store for generated challenges."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class AnswerStore:
    """Maps challenge ids to canonical solution SQL.

    One instance per tutoring session. Every operation holds a single lock, so
    an id is inserted once and consumed at most once even when generation and
    validation run on different threads.
    """

    def __init__(self) -> None:
        self._solutions: dict[str, str] = {}
        self._lock = threading.Lock()

    def add(self, challenge_id: str, solution: str) -> None:
        """Store the solution for a new challenge id.

        Raises:
            ValueError: If the id is already stored
        """
        with self._lock:
            if challenge_id in self._solutions:
                raise ValueError(f"Challenge id '{challenge_id}' is already stored")
            self._solutions[challenge_id] = solution
        logger.debug(f"Stored answer for challenge {challenge_id}")

    def get(self, challenge_id: str) -> str | None:
        with self._lock:
            return self._solutions.get(challenge_id)

    def consume(self, challenge_id: str) -> str | None:
        """Remove an entry if present and return its solution.

        Returns None if the id is unknown or another caller consumed it first.
        """
        with self._lock:
            solution = self._solutions.pop(challenge_id, None)
        if solution is not None:
            logger.debug(f"Consumed answer for challenge {challenge_id}")
        return solution

    def discard(self, challenge_id: str) -> None:
        with self._lock:
            self._solutions.pop(challenge_id, None)

    def clear(self) -> int:
        """Drop every stored answer.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._solutions)
            self._solutions.clear()
        return count

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._solutions)

    def __contains__(self, challenge_id: object) -> bool:
        with self._lock:
            return challenge_id in self._solutions

    def __len__(self) -> int:
        with self._lock:
            return len(self._solutions)
