"""Tests for candidate retrieval."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from helpers.fakes import BASE_TIME, InMemoryItemStore, make_item
from lostfound.domain.models import ItemStatus, ItemType
from lostfound.matching.retriever import CandidateRetriever
from lostfound.persistence.exceptions import PersistenceError


@pytest.fixture
def store():
    return InMemoryItemStore()


class TestCandidateRetriever:
    def test_returns_opposite_type_same_campus(self, store, source_item):
        found = store.add(make_item(id="f1", posted_by="U2"), ItemType.FOUND)
        store.add(make_item(id="l2", posted_by="U2"), ItemType.LOST)

        candidates = CandidateRetriever(store).retrieve(source_item, ItemType.LOST)

        assert candidates == [found]
        assert store.calls[0]["item_type"] == ItemType.FOUND
        assert store.calls[0]["campus_id"] == "C1"
        assert store.calls[0]["status"] == ItemStatus.ACTIVE

    def test_found_item_retrieves_lost_items(self, store):
        lost = store.add(make_item(id="l1", posted_by="U2"), ItemType.LOST)
        new_found = make_item(id="f-new", posted_by="U1")

        assert CandidateRetriever(store).retrieve(new_found, "found") == [lost]

    def test_other_campus_excluded(self, store, source_item):
        store.add(make_item(id="f-other", campus_id="C2", posted_by="U2"), ItemType.FOUND)

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []

    @pytest.mark.parametrize("status", [ItemStatus.RESOLVED, ItemStatus.ARCHIVED, ItemStatus.LOCKED])
    def test_inactive_items_excluded(self, store, source_item, status):
        store.add(make_item(id="f-inactive", status=status, posted_by="U2"), ItemType.FOUND)

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []

    def test_own_items_excluded(self, store, source_item):
        store.add(make_item(id="f-mine", posted_by="U1"), ItemType.FOUND)

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []
        assert store.calls[0]["exclude_posted_by"] == "U1"

    def test_newest_first(self, store, source_item):
        old = store.add(make_item(id="old", posted_by="U2", created_at=BASE_TIME - timedelta(days=3)), ItemType.FOUND)
        new = store.add(make_item(id="new", posted_by="U3", created_at=BASE_TIME), ItemType.FOUND)

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == [new, old]

    def test_limit_passed_to_store(self, store, source_item):
        for i in range(60):
            store.add(make_item(id=f"f{i}", posted_by="U2", created_at=BASE_TIME + timedelta(minutes=i)), ItemType.FOUND)

        candidates = CandidateRetriever(store).retrieve(source_item, ItemType.LOST)

        assert len(candidates) == 50
        assert store.calls[0]["limit"] == 50
        assert candidates[0].id == "f59"

    def test_custom_limit(self, store, source_item):
        for i in range(10):
            store.add(make_item(id=f"f{i}", posted_by="U2"), ItemType.FOUND)

        assert len(CandidateRetriever(store, fetch_limit=3).retrieve(source_item, ItemType.LOST)) == 3

    def test_store_results_are_filtered_again(self, source_item):
        """A store that ignores filters must not leak ineligible items."""
        eligible = make_item(id="ok", posted_by="U2")
        store = Mock()
        store.find_items.return_value = [
            make_item(id="other-campus", campus_id="C2", posted_by="U2"),
            make_item(id="resolved", status=ItemStatus.RESOLVED, posted_by="U2"),
            make_item(id="mine", posted_by="U1"),
            make_item(id=source_item.id, posted_by="U2"),
            eligible,
        ]

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == [eligible]

    def test_store_failure_returns_empty_list(self, source_item, caplog):
        store = Mock()
        store.find_items.side_effect = PersistenceError("database is locked")

        with caplog.at_level("ERROR"):
            assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []

        assert any(getattr(r, "event", None) == "retrieval.failed" for r in caplog.records)

    def test_unexpected_store_exception_returns_empty_list(self, source_item):
        store = Mock()
        store.find_items.side_effect = RuntimeError("boom")

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []

    def test_item_without_campus_skips_store(self, store):
        item = make_item(campus_id=None)

        assert CandidateRetriever(store).retrieve(item, ItemType.LOST) == []
        assert store.calls == []

    def test_store_returning_none(self, source_item):
        store = Mock()
        store.find_items.return_value = None

        assert CandidateRetriever(store).retrieve(source_item, ItemType.LOST) == []
