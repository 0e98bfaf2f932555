"""Tests for logging context propagation."""

import threading

import pytest

from lostfound.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


def test_empty_context():
    assert get_log_context() == {}


def test_push_and_pop():
    token = push_log_context(run_id="abc123", item_id="lost-1")
    assert get_log_context() == {"run_id": "abc123", "item_id": "lost-1"}
    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_context():
    """Inner pushes add to and then restore the outer context."""
    outer = push_log_context(run_id="abc123")
    inner = push_log_context(campus_id="C1")
    assert get_log_context() == {"run_id": "abc123", "campus_id": "C1"}

    pop_log_context(inner)
    assert get_log_context() == {"run_id": "abc123"}
    pop_log_context(outer)
    assert get_log_context() == {}


def test_inner_value_overrides_outer():
    with log_context(item_type="lost"):
        with log_context(item_type="found"):
            assert get_log_context()["item_type"] == "found"
        assert get_log_context()["item_type"] == "lost"


def test_get_log_context_returns_copy():
    with log_context(run_id="abc123"):
        context = get_log_context()
        context["run_id"] = "tampered"
        assert get_log_context()["run_id"] == "abc123"


def test_context_manager_restores_on_exception():
    with pytest.raises(RuntimeError):
        with log_context(run_id="abc123"):
            raise RuntimeError("boom")

    assert get_log_context() == {}


def test_clear_log_context():
    push_log_context(run_id="abc123")
    clear_log_context()
    assert get_log_context() == {}


def test_threads_do_not_share_context():
    """A matching run on one worker thread never sees another run's fields."""
    seen = {}

    def worker(name):
        with log_context(run_id=name):
            seen[name] = get_log_context()

    with log_context(run_id="main"):
        threads = [threading.Thread(target=worker, args=(n,)) for n in ("t1", "t2")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert get_log_context() == {"run_id": "main"}

    assert seen == {"t1": {"run_id": "t1"}, "t2": {"run_id": "t2"}}
