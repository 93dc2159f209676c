"""Tests for ChallengeService."""

import threading

import pytest

from querytutor.challenges.service import ChallengeService
from querytutor.challenges.store import AnswerStore
from querytutor.challenges.validator import FAILURE_MESSAGE, SUCCESS_MESSAGE
from querytutor.exceptions import (
    MissingChallengeIdError,
    NoForeignKeysError,
    UnknownChallengeIdError,
)
from querytutor.schema.provider import SchemaProvider

ORDERS_YAML = """\
databaseId: tiny
catalogs:
  - name: main
    schemas:
      - name: public
        tables:
          - name: orders
            columns:
              - {name: id, type: int}
              - {name: status, type: varchar(20)}
              - {name: customer_id, type: int}
            samples:
              - {id: 1, status: Pending, customer_id: 7}
"""


class TestSolveFlow:
    """End-to-end generate and validate within one session."""

    def test_beginner_round_trip(self, scripted_rng, id_factory):
        """Orders status challenge passes with the expected query."""
        provider = SchemaProvider.from_yaml_string(ORDERS_YAML)
        service = ChallengeService(provider, rng=scripted_rng(0, 1), id_factory=id_factory)

        challenge = service.generate_challenge("beginner")
        assert service.is_live(challenge.id)
        assert "status" in challenge.task

        verdict = service.validate_challenge_answer(
            challenge.id, "SELECT id, status FROM orders WHERE status = 'Pending';"
        )
        assert verdict.passed
        assert verdict.message == SUCCESS_MESSAGE
        assert not service.is_live(challenge.id)

    def test_solved_challenge_cannot_be_resubmitted(self, service):
        """Solved challenge ids are retired."""
        challenge = service.generate_challenge("intermediate")
        solution = service.reveal_challenge_answer(challenge.id).solution

        assert service.validate_challenge_answer(challenge.id, solution).passed
        with pytest.raises(UnknownChallengeIdError):
            service.validate_challenge_answer(challenge.id, solution)

    def test_failed_attempt_keeps_challenge_live(self, service):
        """Failed attempts keep the challenge live."""
        challenge = service.generate_challenge("beginner")

        verdict = service.validate_challenge_answer(challenge.id, "SELECT 1")
        assert not verdict.passed
        assert verdict.message == FAILURE_MESSAGE
        assert service.is_live(challenge.id)

    def test_advanced_round_trip(self, events_provider, id_factory):
        """Advanced challenge accepts an aliased answer."""
        service = ChallengeService(events_provider, id_factory=id_factory)
        challenge = service.generate_challenge("advanced")

        verdict = service.validate_challenge_answer(
            challenge.id,
            "select category, count(*) as c from events "
            "group by category having count(*) > 1 order by c desc;",
        )
        assert verdict.passed

    def test_intermediate_without_foreign_keys(self, events_provider):
        """No foreign keys stores nothing."""
        service = ChallengeService(events_provider)
        with pytest.raises(NoForeignKeysError):
            service.generate_challenge("intermediate")
        assert len(service.store) == 0


class TestReveal:
    """Tests for giving up on a challenge."""

    def test_reveal_returns_solution_and_keeps_challenge(self, service):
        """Reveal returns the solution and keeps the challenge."""
        challenge = service.generate_challenge("beginner")
        answer = service.reveal_challenge_answer(challenge.id)

        assert answer.id == challenge.id
        assert answer.solution.startswith("SELECT * FROM ")
        assert service.is_live(challenge.id)

    def test_reveal_errors(self, service):
        """Reveal checks the id like validation does."""
        with pytest.raises(MissingChallengeIdError):
            service.reveal_challenge_answer(" ")
        with pytest.raises(UnknownChallengeIdError):
            service.reveal_challenge_answer("00000000-0000-0000-0000-000000000000")


class TestSessions:
    """Tests for session isolation and reset."""

    def test_sessions_do_not_share_answers(self, provider):
        """Sessions keep separate answers."""
        first = ChallengeService(provider)
        second = ChallengeService(provider)
        challenge = first.generate_challenge("beginner")

        assert not second.is_live(challenge.id)
        with pytest.raises(UnknownChallengeIdError):
            second.validate_challenge_answer(challenge.id, "SELECT * FROM orders")

    def test_reset_drops_outstanding_challenges(self, service):
        """Reset drops every outstanding challenge."""
        ids = [service.generate_challenge("beginner").id for _ in range(3)]

        assert service.reset() == 3
        assert not any(service.is_live(i) for i in ids)
        assert service.reset() == 0

    def test_is_live_handles_blank(self, service):
        """Blank ids are never live."""
        assert not service.is_live(None)
        assert not service.is_live("")

    def test_for_provider_shares_state(self, service, events_provider):
        """A service for another schema keeps the store and id factory."""
        challenge = service.generate_challenge("beginner")
        other = service.for_provider(events_provider)

        assert other.provider is events_provider
        assert other.store is service.store
        assert other.is_live(challenge.id)
        assert other.generate_challenge("advanced").id == "00000000-0000-4000-8000-000000000002"


class LosingStore(AnswerStore):
    """Store whose answers are taken by another session right before each consume."""

    def consume(self, challenge_id: str) -> str | None:
        super().consume(challenge_id)
        return None


class TestConcurrentSolve:
    """Tests for two sessions racing to solve the same challenge."""

    def test_losing_the_consume_race_raises(self, provider, id_factory):
        """A passing answer whose store entry was already consumed is rejected."""
        service = ChallengeService(provider, store=LosingStore(), id_factory=id_factory)
        challenge = service.generate_challenge("beginner")
        solution = service.reveal_challenge_answer(challenge.id).solution

        with pytest.raises(UnknownChallengeIdError):
            service.validate_challenge_answer(challenge.id, solution)
        assert not service.is_live(challenge.id)

    def test_only_one_thread_solves(self, service):
        """Exactly one of several simultaneous correct answers passes."""
        challenge = service.generate_challenge("beginner")
        solution = service.reveal_challenge_answer(challenge.id).solution
        workers = 8
        barrier = threading.Barrier(workers)
        passed = []
        rejected = []
        lock = threading.Lock()

        def submit():
            barrier.wait()
            try:
                verdict = service.validate_challenge_answer(challenge.id, solution)
            except UnknownChallengeIdError:
                with lock:
                    rejected.append(challenge.id)
            else:
                with lock:
                    passed.append(verdict)

        threads = [threading.Thread(target=submit) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(passed) == 1
        assert passed[0].passed
        assert len(rejected) == workers - 1
        assert not service.is_live(challenge.id)
