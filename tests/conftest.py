"""Shared fixtures for the matching tests."""

from datetime import timedelta

import pytest

from helpers.fakes import (
    BASE_TIME,
    DictUserDirectory,
    RecordingEmailSender,
    RecordingNotificationStore,
    make_item,
)
from lostfound.logging.context import clear_log_context


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def source_item():
    """The lost Black Backpack from the reference scenario."""
    return make_item(id="lost-1", posted_by="U1")


@pytest.fixture
def matching_candidate():
    """A found bag an hour later at the same location, posted by U2."""
    return make_item(
        id="found-1",
        title="Black Bag Found Near Library",
        posted_by="U2",
        created_at=BASE_TIME + timedelta(hours=1),
    )


@pytest.fixture
def notification_store():
    return RecordingNotificationStore()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def user_directory():
    return DictUserDirectory({
        "U1": "u1@campus.edu",
        "U2": "u2@campus.edu",
        "U3": "u3@campus.edu",
    })


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Clear matching-related environment variables and set a valid baseline."""
    for name in (
        "DATABASE_URL", "SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASS",
        "SMTP_SENDER_NAME", "SMTP_SENDER_EMAIL", "LOG_LEVEL", "ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    return monkeypatch
