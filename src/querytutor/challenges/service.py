"""Session-scoped challenge service.

Owns one answer store and wires the generator and validator to it. Create
one service per tutoring session; sessions never share answers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from querytutor.challenges.generator import ChallengeGenerator, RandomSource
from querytutor.challenges.store import AnswerStore
from querytutor.challenges.validator import AnswerValidator
from querytutor.core.types import Challenge, ChallengeAnswer, ChallengeVerdict, Difficulty
from querytutor.exceptions import MissingChallengeIdError, UnknownChallengeIdError

if TYPE_CHECKING:
    from querytutor.schema.provider import SchemaProvider

logger = logging.getLogger(__name__)


class ChallengeService:
    """Generate challenges and validate answers for one session.

    Example:
        service = ChallengeService(provider)
        challenge = service.generate_challenge("beginner")
        verdict = service.validate_challenge_answer(challenge.id, "SELECT ...")
    """

    def __init__(
        self,
        provider: SchemaProvider,
        store: AnswerStore | None = None,
        rng: RandomSource | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            provider: Schema provider challenges are generated from
            store: Answer store (a fresh one if omitted)
            rng: Random source for the generator
            id_factory: Challenge id factory for the generator
        """
        self._provider = provider
        self._store = store if store is not None else AnswerStore()
        self._rng = rng
        self._id_factory = id_factory
        self._generator = ChallengeGenerator(provider, self._store, rng=rng, id_factory=id_factory)
        self._validator = AnswerValidator(self._store)

    @property
    def provider(self) -> SchemaProvider:
        return self._provider

    @property
    def store(self) -> AnswerStore:
        return self._store

    def for_provider(self, provider: SchemaProvider) -> ChallengeService:
        """Service for another schema sharing this one's store, rng and id factory."""
        return ChallengeService(
            provider, store=self._store, rng=self._rng, id_factory=self._id_factory
        )

    def generate_challenge(self, difficulty: str | Difficulty | None) -> Challenge:
        """Generate a challenge; its solution stays in the store."""
        return self._generator.generate(difficulty)

    def validate_challenge_answer(
        self, challenge_id: str | None, sql: str | None
    ) -> ChallengeVerdict:
        """Validate an answer and retire the challenge when it passes.

        A passed challenge is consumed: validating the same id again raises
        UnknownChallengeIdError.

        Raises:
            MissingChallengeIdError: If the id is blank
            UnknownChallengeIdError: If the id was never issued or is already solved
            MissingSqlError: If the SQL is blank
        """
        verdict = self._validator.validate(challenge_id, sql)
        if verdict.passed and self._store.consume(verdict.id) is None:
            # Another caller solved it between our read and our removal
            raise UnknownChallengeIdError(verdict.id)
        if verdict.passed:
            logger.info(f"Challenge {verdict.id} solved")
        return verdict

    def reveal_challenge_answer(self, challenge_id: str | None) -> ChallengeAnswer:
        """Return the stored solution for a student who gives up.

        The challenge stays live, so the student can still submit it.
        """
        key = (challenge_id or "").strip()
        if not key:
            raise MissingChallengeIdError()
        solution = self._store.get(key)
        if solution is None:
            raise UnknownChallengeIdError(key)
        logger.info(f"Revealed answer for challenge {key}")
        return ChallengeAnswer(id=key, solution=solution)

    def is_live(self, challenge_id: str | None) -> bool:
        return bool(challenge_id) and challenge_id in self._store

    def reset(self) -> int:
        """Forget every outstanding challenge.

        Returns:
            Number of challenges dropped
        """
        dropped = self._store.clear()
        if dropped:
            logger.info(f"Dropped {dropped} outstanding challenges")
        return dropped
