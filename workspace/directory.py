"""
Workspace member directory for Birthday Thread Bot.

One paginated users.list reader shared by cleanup, collection fan-out, the
birthday calendar and name resolution, plus the name -> member resolver.

Key classes: MemberDirectory, NameResolver.
Key functions: is_eligible_colleague(), is_matchable_member(), member_full_name().
"""

from dataclasses import dataclass
from typing import Callable, Optional

from config import MAX_DIRECTORY_PAGES, SYSTEM_ACCOUNT_ID, get_logger
from utils.cache import MISSING

logger = get_logger("directory")

USERS_LIST_PAGE_SIZE = 200


class MemberDirectory:
    """
    Lazy, restartable reader over users.list.

    Each call to pages() starts from the first page and follows
    response_metadata.next_cursor until it is empty or max_pages pages have
    been read. After a capped read, `truncated` is True.

    SlackApiError from users.list propagates to the caller.
    """

    def __init__(self, client, max_pages=MAX_DIRECTORY_PAGES, page_size=USERS_LIST_PAGE_SIZE):
        self.client = client
        self.max_pages = max_pages
        self.page_size = page_size
        self.truncated = False

    def pages(self):
        """Yield member lists, one per users.list page."""
        self.truncated = False
        cursor = None

        for _ in range(self.max_pages):
            params = {"limit": self.page_size}
            if cursor:
                params["cursor"] = cursor

            response = self.client.users_list(**params)
            yield response.get("members") or []

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return

        self.truncated = True
        logger.warning(
            f"DIRECTORY: Max pages ({self.max_pages}) reached, stopping users.list pagination"
        )

    def __iter__(self):
        return self.pages()

    def list_all_members(self):
        """Return every member gathered across pages (possibly partial, see `truncated`)."""
        members = []
        for page in self.pages():
            members.extend(page)
        logger.info(
            f"DIRECTORY: Fetched {len(members)} members{' (truncated)' if self.truncated else ''}"
        )
        return members


def is_matchable_member(member):
    """Deleted accounts and Slackbot never take part in name matching or fan-out"""
    return not member.get("deleted") and member.get("id") != SYSTEM_ACCOUNT_ID


def is_eligible_colleague(member, celebrant_id):
    """
    Whether a member should receive the collection form for celebrant_id.

    Excludes bots, deactivated and guest accounts, the celebrant and Slackbot.
    """
    return (
        is_matchable_member(member)
        and not member.get("is_bot")
        and not member.get("is_restricted")
        and not member.get("is_ultra_restricted")
        and member.get("id") != celebrant_id
    )


def member_full_name(member):
    """Name used in the birthday calendar"""
    profile = member.get("profile") or {}
    return profile.get("real_name_normalized") or member.get("real_name") or member.get("name")


def member_first_name(member):
    """First name for short confirmations"""
    profile = member.get("profile") or {}
    if profile.get("first_name"):
        return profile["first_name"]
    full_name = member_full_name(member) or ""
    return full_name.split(" ")[0] if full_name else f"<@{member.get('id')}>"


def _normalize(value):
    return value.strip().lower() if isinstance(value, str) else ""


def _profile_field(field):
    return lambda member: (member.get("profile") or {}).get(field)


@dataclass(frozen=True)
class MatchStage:
    """
    One step of the name resolution cascade.

    Attributes:
        name: Label used in logs
        field: Extracts the compared value from a member dict
        target: Which part of the query to compare against ("full", "first", "last")
        require_unique: Skip the stage when more than one member matches
    """

    name: str
    field: Callable[[dict], Optional[str]]
    target: str
    require_unique: bool = False


# Evaluated in order; the first stage with an acceptable hit wins
MATCH_STAGES = (
    MatchStage("real_name", lambda member: member.get("real_name"), "full"),
    MatchStage("real_name_normalized", _profile_field("real_name_normalized"), "full"),
    MatchStage("display_name_normalized", _profile_field("display_name_normalized"), "full"),
    MatchStage("first_name", _profile_field("first_name"), "first", require_unique=True),
    MatchStage("last_name", _profile_field("last_name"), "last", require_unique=True),
)


class NameResolver:
    """
    Resolve a free-text first/last name to a workspace member.

    Results, including "not found", are cached in the IdentityCache passed in.
    """

    def __init__(self, directory, cache, stages=MATCH_STAGES):
        self.directory = directory
        self.cache = cache
        self.stages = stages

    def resolve(self, first_name, last_name):
        """
        Find the member called first_name last_name.

        Returns:
            Member dict, or None when no stage produced an unambiguous match
        """
        key = self.cache.make_key(first_name, last_name)
        cached = self.cache.get(key)
        if cached is not MISSING:
            logger.info(f"DIRECTORY: Cache hit for '{first_name} {last_name}'")
            return cached

        logger.info(f"DIRECTORY: Searching for user: {first_name} {last_name}")
        members = [m for m in self.directory.list_all_members() if is_matchable_member(m)]
        member = self.match(members, first_name, last_name)

        self.cache.set(key, member)
        return member

    def match(self, members, first_name, last_name):
        """Run the stage cascade over an already-fetched member list."""
        targets = {
            "full": _normalize(f"{first_name.strip()} {last_name.strip()}"),
            "first": _normalize(first_name),
            "last": _normalize(last_name),
        }

        for stage in self.stages:
            target = targets[stage.target]
            if not target:
                continue

            candidates = [m for m in members if _normalize(stage.field(m)) == target]
            if not candidates:
                continue
            if stage.require_unique and len(candidates) > 1:
                logger.info(
                    f"DIRECTORY: {len(candidates)} members match on {stage.name}, skipping ambiguous stage"
                )
                continue

            member = candidates[0]
            logger.info(
                f"DIRECTORY: Found user {member_full_name(member)} ({member.get('id')}) via {stage.name}"
            )
            return member

        logger.info(f"DIRECTORY: No match for '{first_name} {last_name}'")
        return None
