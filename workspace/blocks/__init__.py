"""
Slack Block Kit builder utilities for Birthday Thread Bot.

Re-exports all block builders from domain-specific submodules so callers can
use `from workspace.blocks import ...`.
"""

from workspace.blocks.admin import build_cleanup_summary_text, build_digest_text
from workspace.blocks.birthday import (
    build_announcement_blocks,
    build_birthday_calendar_blocks,
    build_birthday_set_blocks,
    build_descriptions_text,
    build_poem_text,
    build_simple_blocks,
    build_tribute_text,
    build_user_not_found_blocks,
)
from workspace.blocks.collection import (
    SUBMIT_ACTION_ID,
    build_collection_blocks,
    build_submission_confirmation,
)

__all__ = [
    # Birthday
    "build_announcement_blocks",
    "build_poem_text",
    "build_descriptions_text",
    "build_tribute_text",
    "build_birthday_calendar_blocks",
    "build_birthday_set_blocks",
    "build_user_not_found_blocks",
    "build_simple_blocks",
    # Collection
    "SUBMIT_ACTION_ID",
    "build_collection_blocks",
    "build_submission_confirmation",
    # Admin
    "build_digest_text",
    "build_cleanup_summary_text",
]
