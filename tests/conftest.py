"""
Shared pytest fixtures for Birthday Thread Bot tests.
"""

import pytest
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytz
from slack_sdk.errors import SlackApiError

from tests.factories import make_member


LONDON = pytz.timezone("Europe/London")


class FakeClock:
    """Controllable clock for BirthdayStore timestamps"""

    def __init__(self, moment):
        self.moment = moment

    def __call__(self):
        return self.moment

    def advance(self, **kwargs):
        self.moment = self.moment + timedelta(**kwargs)


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic testing: June 1, 2024"""
    return date(2024, 6, 1)


@pytest.fixture
def reference_moment():
    """09:00 Europe/London on June 1, 2024"""
    return LONDON.localize(datetime(2024, 6, 1, 9, 0, 0))


@pytest.fixture
def clock(reference_moment):
    return FakeClock(reference_moment)


@pytest.fixture
def store(clock):
    """In-memory BirthdayStore driven by the fake clock"""
    from storage.birthdays import BirthdayStore

    birthday_store = BirthdayStore(":memory:", clock=clock)
    yield birthday_store
    birthday_store.close()


@pytest.fixture
def mock_slack_client():
    """Slack WebClient mock with successful default responses"""
    client = MagicMock()
    client.chat_postMessage.return_value = {"ok": True, "ts": "1717232400.000100"}
    client.conversations_open.return_value = {"ok": True, "channel": {"id": "D123456"}}
    client.chat_delete.return_value = {"ok": True}
    client.users_info.return_value = {
        "ok": True,
        "user": {
            "id": "U123456",
            "name": "testuser",
            "real_name": "Test User",
            "profile": {"real_name": "Test User", "first_name": "Test"},
        },
    }
    client.users_list.return_value = {"ok": True, "members": [], "response_metadata": {}}
    return client


@pytest.fixture
def mock_slack_app(mock_slack_client):
    """Slack app mock exposing the client mock"""
    app = MagicMock()
    app.client = mock_slack_client
    return app


@pytest.fixture
def slack_api_error():
    """Factory for SlackApiError instances"""

    def make_error(error="internal_error"):
        return SlackApiError(message=error, response={"ok": False, "error": error})

    return make_error


@pytest.fixture
def member_factory():
    return make_member


@pytest.fixture
def static_directory():
    """Factory for a MemberDirectory stand-in returning a fixed member list"""

    def build(members, truncated=False):
        directory = MagicMock()
        directory.list_all_members.return_value = list(members)
        directory.truncated = truncated
        return directory

    return build
