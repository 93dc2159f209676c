"""Tests for TutorController."""

import json
import re

import pytest

from querytutor.agent.controller import (
    MAX_HISTORY_TURNS,
    TutorController,
    looks_like_sql,
)
from querytutor.challenges.service import ChallengeService
from querytutor.exceptions import AgentError

ANSWER_INPUT = re.compile(r"challenge_answer\nid: (\S+)\nsql:\n(.*)", re.DOTALL)


class FakeAgent:
    """Agent client that behaves like a well-mannered model.

    ``challenge <level>`` generates a challenge through the tools and ends
    with the CHALLENGE_ID line; ``challenge_answer`` input is validated
    through the tools; anything else gets a canned reply.
    """

    def __init__(self, replies=None, error=None):
        self.calls = []
        self._replies = list(replies or [])
        self._error = error

    def run(self, messages, registry):
        self.calls.append(messages)
        if self._error is not None:
            raise self._error

        text = messages[-1]["content"]
        answer = ANSWER_INPUT.match(text)
        if answer:
            return registry.call(
                "validate_challenge_answer",
                {"challenge_id": answer.group(1), "sql": answer.group(2)},
            )
        if text.startswith("challenge "):
            raw = registry.call("generate_challenge", {"difficulty": text.split()[1]})
            challenge = json.loads(raw)
            return f"🎯 {challenge['task']}\nCHALLENGE_ID: {challenge['id'].upper()}"
        if self._replies:
            return self._replies.pop(0)
        return "TL;DR: looks fine"


@pytest.fixture
def agent():
    return FakeAgent()


@pytest.fixture
def controller(provider, agent, scripted_rng, id_factory):
    service = ChallengeService(provider, rng=scripted_rng(1, 2), id_factory=id_factory)
    return TutorController(provider, agent, service=service)


class TestLooksLikeSql:
    """Tests for routing heuristics."""

    @pytest.mark.parametrize("text", ["SELECT 1", "with x as (select 1) select * from x"])
    def test_sql(self, text):
        """SQL statements are recognized."""
        assert looks_like_sql(text)

    @pytest.mark.parametrize("text", ["schema orders", "challenge beginner", "why is SELECT slow"])
    def test_not_sql(self, text):
        """Commands and prose are not SQL."""
        assert not looks_like_sql(text)


class TestAsk:
    """Tests for ordinary questions."""

    def test_blank_input(self, controller, agent):
        """Blank input is ignored."""
        assert controller.send_input("   ") is None
        assert agent.calls == []

    def test_plain_question(self, controller, agent):
        """Questions go to the agent under the main prompt."""
        reply = controller.send_input("schema orders")

        assert reply.ok
        assert reply.response == "TL;DR: looks fine"
        assert reply.info == ["📋 Getting schema..."]
        system = agent.calls[0][0]
        assert system["role"] == "system"
        assert "DB: shop | Tables: customers, orders" in system["content"]
        assert agent.calls[0][-1] == {"role": "user", "content": "schema orders"}

    def test_history_is_replayed(self, controller, agent):
        """Earlier turns are replayed as context."""
        controller.send_input("analyze: SELECT * FROM orders")
        controller.send_input("what next?")

        messages = agent.calls[1]
        assert len(messages) == 3
        context = messages[1]["content"]
        assert context.startswith("Previous conversation context:")
        assert "User previously asked: analyze: SELECT * FROM orders" in context
        assert "You responded: TL;DR: looks fine..." in context
        assert context.endswith("Current question:")

    def test_history_is_bounded(self, controller):
        """History keeps only the latest turns."""
        for i in range(MAX_HISTORY_TURNS + 3):
            controller.send_input(f"question {i}")
        history = controller.history
        assert len(history) == MAX_HISTORY_TURNS
        assert history[0].user_input == "question 3"

    def test_agent_error(self, provider):
        """Agent errors come back as an error reply."""
        controller = TutorController(provider, FakeAgent(error=AgentError("rate limited")))
        reply = controller.send_input("hello")

        assert not reply.ok
        assert reply.error == "❌ ERROR: rate limited"
        assert controller.history == []


class TestChallengeFlow:
    """Tests for challenge tracking and answer routing."""

    def test_challenge_id_is_captured(self, controller):
        """CHALLENGE_ID in a reply starts a challenge."""
        reply = controller.send_input("challenge beginner")

        assert reply.challenge_started == "00000000-0000-4000-8000-000000000001"
        assert controller.active_challenge_id == reply.challenge_started
        assert reply.info[0] == "🎓 Generating challenge..."
        assert reply.info[1].startswith("🆔 Challenge started.")

    def test_sql_is_routed_to_validation(self, controller, agent):
        """SQL during a challenge is validated."""
        controller.send_input("challenge beginner")
        reply = controller.send_input("SELECT * FROM orders WHERE status = 'Pending'")

        assert reply.response.startswith("✅")
        assert reply.challenge_completed
        assert reply.info[-1].startswith("🎉 Challenge completed!")
        assert controller.active_challenge_id is None
        assert agent.calls[-1][-1]["content"].startswith(
            "challenge_answer\nid: 00000000-0000-4000-8000-000000000001\nsql:\n"
        )

    def test_wrong_answer_keeps_challenge_open(self, controller):
        """Wrong answers keep the challenge active."""
        controller.send_input("challenge beginner")
        reply = controller.send_input("SELECT * FROM customers")

        assert reply.response.startswith("❌")
        assert not reply.challenge_completed
        assert controller.active_challenge_id is not None

    def test_commands_are_not_answers(self, controller, agent):
        """Commands are not treated as answers."""
        controller.send_input("challenge beginner")
        controller.send_input("schema orders")
        assert not agent.calls[-1][-1]["content"].startswith("challenge_answer")

    def test_sql_without_challenge_is_a_question(self, controller, agent):
        """SQL without a challenge is a question."""
        reply = controller.send_input("SELECT 1")
        assert reply.response == "TL;DR: looks fine"
        assert agent.calls[-1][-1]["content"] == "SELECT 1"

    def test_validation_error(self, provider):
        """Validation errors keep the challenge active."""
        agent = FakeAgent()
        controller = TutorController(provider, agent)
        controller.send_input("challenge beginner")
        agent._error = AgentError("timeout")

        reply = controller.send_input("SELECT 1")
        assert reply.error == "❌ Validation failed: timeout"
        assert controller.active_challenge_id is not None


class TestSchemaChange:
    """Tests for switching schemas mid-session."""

    def test_change_schema_resets_session(self, controller, events_provider):
        """Switching schema drops challenges and history."""
        controller.send_input("challenge beginner")
        old_id = controller.active_challenge_id
        store = controller.service.store

        controller.change_schema(events_provider)

        assert controller.provider is events_provider
        assert controller.current_db_info() == "DB: analytics | Tables: events"
        assert controller.active_challenge_id is None
        assert controller.history == []
        assert old_id not in store
        assert controller.service.store is store
        assert controller.registry.call("get_table_schema", {"table_name": "events"}).startswith(
            "📋 TABLE: events"
        )

    def test_change_schema_keeps_random_source_and_ids(
        self, provider, events_provider, scripted_rng, id_factory
    ):
        """Injected rng and id factory survive a schema switch."""
        service = ChallengeService(provider, rng=scripted_rng(1, 2, 0, 1), id_factory=id_factory)
        controller = TutorController(provider, FakeAgent(), service=service)
        controller.send_input("challenge beginner")

        controller.change_schema(events_provider)
        reply = controller.send_input("challenge beginner")

        assert reply.challenge_started == "00000000-0000-4000-8000-000000000002"
        answer = controller.service.reveal_challenge_answer(reply.challenge_started)
        assert answer.solution == "SELECT * FROM events WHERE category = 'click';"
