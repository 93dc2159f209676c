"""Tests for AnswerStore."""

import threading

import pytest

from querytutor.challenges.store import AnswerStore


class TestAnswerStore:
    """Tests for the in-memory answer store."""

    def test_add_and_get(self):
        """Can add and read an answer."""
        store = AnswerStore()
        store.add("a", "SELECT 1;")
        assert store.get("a") == "SELECT 1;"
        assert store.get("b") is None
        assert "a" in store
        assert len(store) == 1

    def test_duplicate_id_rejected(self):
        """Duplicate ids raise ValueError."""
        store = AnswerStore()
        store.add("a", "SELECT 1;")
        with pytest.raises(ValueError, match="already stored"):
            store.add("a", "SELECT 2;")
        assert store.get("a") == "SELECT 1;"

    def test_consume_removes_once(self):
        """Consume returns the answer only once."""
        store = AnswerStore()
        store.add("a", "SELECT 1;")
        assert store.consume("a") == "SELECT 1;"
        assert store.consume("a") is None
        assert "a" not in store

    def test_discard_and_clear(self):
        """Can discard one answer or clear all."""
        store = AnswerStore()
        store.add("a", "x")
        store.add("b", "y")
        store.discard("a")
        store.discard("missing")
        assert store.ids() == ["b"]
        assert store.clear() == 1
        assert len(store) == 0

    def test_concurrent_consume_has_one_winner(self):
        """Only one of many racing callers gets the solution."""
        store = AnswerStore()
        store.add("a", "SELECT 1;")
        barrier = threading.Barrier(8)
        results = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            value = store.consume("a")
            with results_lock:
                results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("SELECT 1;") == 1
        assert results.count(None) == 7
