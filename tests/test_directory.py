"""
Tests for member listing and name resolution in workspace/directory.py

- MemberDirectory: cursor pagination and the page cap
- NameResolver: stage priority, ambiguity, excluded accounts, TTL caching
- is_eligible_colleague(): fan-out filter
"""

from unittest.mock import MagicMock

from tests.factories import make_member
from utils.cache import MISSING, IdentityCache
from workspace.directory import (
    MemberDirectory,
    NameResolver,
    is_eligible_colleague,
    member_first_name,
    member_full_name,
)


def paged_client(pages):
    """Client whose users_list returns the given member pages in order"""
    client = MagicMock()
    responses = []
    for index, members in enumerate(pages):
        cursor = f"cursor-{index + 1}" if index < len(pages) - 1 else ""
        responses.append({"ok": True, "members": members, "response_metadata": {"next_cursor": cursor}})
    client.users_list.side_effect = responses
    return client


class FakeTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestMemberDirectory:
    def test_follows_cursor(self):
        client = paged_client([[{"id": "U1"}], [{"id": "U2"}], [{"id": "U3"}]])
        directory = MemberDirectory(client)

        members = directory.list_all_members()

        assert [m["id"] for m in members] == ["U1", "U2", "U3"]
        assert client.users_list.call_count == 3
        assert client.users_list.call_args_list[1].kwargs["cursor"] == "cursor-1"
        assert directory.truncated is False

    def test_first_call_has_no_cursor(self):
        client = paged_client([[{"id": "U1"}]])
        MemberDirectory(client).list_all_members()
        assert "cursor" not in client.users_list.call_args.kwargs

    def test_stops_at_page_cap(self):
        client = MagicMock()
        client.users_list.return_value = {
            "ok": True,
            "members": [{"id": "U1"}],
            "response_metadata": {"next_cursor": "more"},
        }
        directory = MemberDirectory(client, max_pages=3)

        members = directory.list_all_members()

        assert len(members) == 3
        assert client.users_list.call_count == 3
        assert directory.truncated is True

    def test_pages_is_restartable(self):
        client = MagicMock()
        client.users_list.return_value = {"ok": True, "members": [{"id": "U1"}], "response_metadata": {}}
        directory = MemberDirectory(client)

        assert list(directory.pages()) == [[{"id": "U1"}]]
        assert list(directory.pages()) == [[{"id": "U1"}]]


class TestNameResolver:
    def build(self, members, timer=None):
        directory = MagicMock()
        directory.list_all_members.return_value = members
        cache = IdentityCache(ttl=300, maxsize=32, timer=timer or FakeTimer())
        return NameResolver(directory, cache), directory, cache

    def test_real_name_match(self):
        jane = make_member("U1", "Jane Doe", "Jane", "Doe")
        resolver, _, _ = self.build([make_member("U2", "John Smith", "John", "Smith"), jane])

        assert resolver.resolve("Jane", "Doe")["id"] == "U1"

    def test_case_and_whitespace_insensitive(self):
        resolver, _, _ = self.build([make_member("U1", "Jane Doe", "Jane", "Doe")])
        assert resolver.resolve("  jANE ", "doe ")["id"] == "U1"

    def test_display_name_stage(self):
        member = make_member("U1", "J. Doe", display_name="Jane Doe")
        resolver, _, _ = self.build([member])
        assert resolver.resolve("Jane", "Doe")["id"] == "U1"

    def test_full_name_beats_unique_first_name(self):
        """Earlier stages win even when a later stage would also match"""
        by_first = make_member("U1", "Jane Roe", "Jane", "Roe")
        by_full = make_member("U2", "Jane Doe", "Janet", "Doe")
        resolver, _, _ = self.build([by_first, by_full])

        assert resolver.resolve("Jane", "Doe")["id"] == "U2"

    def test_unique_first_name_fallback(self):
        member = make_member("U1", "Jane Q. Public", "Jane", "Public")
        resolver, _, _ = self.build([member, make_member("U2", "John Smith", "John", "Smith")])

        assert resolver.resolve("Jane", "Nobody")["id"] == "U1"

    def test_ambiguous_first_name_falls_through_to_last_name(self):
        members = [
            make_member("U1", "Jane Alpha", "Jane", "Alpha"),
            make_member("U2", "Jane Beta", "Jane", "Beta"),
            make_member("U3", "Sam Gamma", "Sam", "Gamma"),
        ]
        resolver, _, _ = self.build(members)

        assert resolver.resolve("Jane", "Gamma")["id"] == "U3"

    def test_ambiguous_everywhere_returns_none(self):
        members = [
            make_member("U1", "Jane Alpha", "Jane", "Doe"),
            make_member("U2", "Jane Beta", "Jane", "Doe"),
        ]
        resolver, _, _ = self.build(members)

        assert resolver.resolve("Jane", "Doe") is None

    def test_deleted_and_slackbot_never_match(self):
        members = [
            make_member("U1", "Jane Doe", "Jane", "Doe", deleted=True),
            make_member("USLACKBOT", "Jane Doe", "Jane", "Doe"),
        ]
        resolver, _, _ = self.build(members)

        assert resolver.resolve("Jane", "Doe") is None

    def test_result_cached(self):
        resolver, directory, _ = self.build([make_member("U1", "Jane Doe", "Jane", "Doe")])

        resolver.resolve("Jane", "Doe")
        resolver.resolve("jane", "DOE")

        assert directory.list_all_members.call_count == 1

    def test_not_found_cached(self):
        resolver, directory, cache = self.build([])

        assert resolver.resolve("Nobody", "Here") is None
        assert resolver.resolve("Nobody", "Here") is None

        assert directory.list_all_members.call_count == 1
        assert cache.get(cache.make_key("Nobody", "Here")) is None

    def test_cache_expires_after_ttl(self):
        timer = FakeTimer()
        resolver, directory, _ = self.build([make_member("U1", "Jane Doe", "Jane", "Doe")], timer)

        resolver.resolve("Jane", "Doe")
        timer.now += 301
        resolver.resolve("Jane", "Doe")

        assert directory.list_all_members.call_count == 2


class TestIdentityCache:
    def test_missing_sentinel(self):
        cache = IdentityCache(ttl=300, maxsize=4, timer=FakeTimer())
        assert cache.get("jane-doe") is MISSING

    def test_make_key_normalises(self):
        assert IdentityCache.make_key(" Jane ", "DOE") == "jane-doe"


class TestEligibleColleague:
    def test_regular_member_eligible(self):
        assert is_eligible_colleague(make_member("U2", "Sam Lee"), "U1") is True

    def test_excluded_accounts(self):
        assert is_eligible_colleague(make_member("U1", "Jane Doe"), "U1") is False
        assert is_eligible_colleague(make_member("U2", "Bot", is_bot=True), "U1") is False
        assert is_eligible_colleague(make_member("U2", "Gone", deleted=True), "U1") is False
        assert is_eligible_colleague(make_member("U2", "Guest", is_restricted=True), "U1") is False
        assert is_eligible_colleague(make_member("U2", "Guest", is_ultra_restricted=True), "U1") is False
        assert is_eligible_colleague(make_member("USLACKBOT", "Slackbot"), "U1") is False

    def test_celebrant_matched_by_id_only(self):
        member = make_member("U2", "Sam Lee")
        member["name"] = "U1"
        assert is_eligible_colleague(member, "U1") is True


class TestMemberNames:
    def test_full_name_prefers_normalized(self):
        assert member_full_name(make_member("U1", "Jane Doe")) == "Jane Doe"

    def test_first_name_from_profile(self):
        assert member_first_name(make_member("U1", "Jane Doe", "Janie")) == "Janie"

    def test_first_name_from_real_name(self):
        assert member_first_name(make_member("U1", "Jane Doe")) == "Jane"
