"""Tests for notification payload builders."""

import pytest

from helpers.fakes import make_item
from lostfound.domain.models import ItemType, NotificationCreate, NotificationType
from lostfound.matching.models import FactorScore, MatchCandidate
from lostfound.notifications.payloads import (
    build_email_context,
    build_match_notification,
    build_notification_data,
)


@pytest.fixture
def match(matching_candidate):
    return MatchCandidate(
        item=matching_candidate,
        score=75,
        factors={
            "category": FactorScore(30.0, 30, reason="Same category"),
            "keywords": FactorScore(15.0, 30, reason="Shared keywords: black"),
            "distance": FactorScore(0.0, 10),
        },
    )


class TestBuildNotificationData:
    def test_fields(self, matching_candidate, match):
        data = build_notification_data(matching_candidate, ItemType.FOUND, match)

        assert data["item_id"] == matching_candidate.id
        assert data["item_type"] == "found"
        assert data["match_score"] == 75
        assert set(data["factors"]) == {"category", "keywords", "distance"}
        assert data["factors"]["category"]["points"] == 30.0


class TestBuildMatchNotification:
    def test_new_item_owner(self, matching_candidate, match):
        notification = build_match_notification("U1", matching_candidate, ItemType.FOUND, match, True)

        assert isinstance(notification, NotificationCreate)
        assert notification.user_id == "U1"
        assert notification.title == "Potential Match Found!"
        assert notification.type == NotificationType.MATCH
        assert "Black Bag Found Near Library" in notification.message
        assert "Central Library" in notification.message
        assert "75%" in notification.message
        assert "Why: Same category; Shared keywords: black." in notification.message

    def test_existing_item_owner(self, source_item, match):
        notification = build_match_notification("U2", source_item, ItemType.LOST, match, False)

        assert notification.title == "New Match for your Item!"
        assert "A new lost item" in notification.message
        assert notification.data["item_id"] == source_item.id

    def test_placeholders_for_missing_text(self, match):
        bare = make_item(title=None, location=None)

        notification = build_match_notification("U1", bare, ItemType.FOUND, match, True)

        assert "Untitled item" in notification.message
        assert "an unknown location" in notification.message

    def test_no_reasons_no_why(self, matching_candidate):
        match = MatchCandidate(item=matching_candidate, score=30, factors={})

        notification = build_match_notification("U1", matching_candidate, ItemType.FOUND, match, True)

        assert "Why:" not in notification.message

    def test_long_title_truncated_to_limit(self, match):
        long_item = make_item(title="Backpack " * 200)

        notification = build_match_notification("U1", long_item, ItemType.FOUND, match, True)

        assert len(notification.message) <= 1000
        assert notification.message.endswith("...")


class TestBuildEmailContext:
    def test_lost_recipient_sees_found_label(self):
        context = build_email_context(ItemType.LOST, "Black Bag", 75, "Lost & Found Campus")

        assert context == {
            "app_name": "Lost & Found Campus",
            "item_title": "Black Bag",
            "item_type": "lost",
            "matched_item_label": "Found item",
            "match_percentage": 75,
        }

    def test_found_recipient_sees_lost_label(self):
        context = build_email_context("found", "Black Backpack", 60, "App")
        assert context["matched_item_label"] == "Lost item"
