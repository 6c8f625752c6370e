"""
Slack user lookups and mention helpers for Birthday Thread Bot.

Key functions: get_user_info(), get_sender_name(), parse_user_mention(),
open_direct_message().
"""

import re

from slack_sdk.errors import SlackApiError

from config import get_logger

logger = get_logger("slack")

# Escaped slash-command mentions look like <@U1234|username> or <@U1234>
USER_MENTION_PATTERN = re.compile(r"^<@([A-Z0-9]+)(?:\|[^>]*)?>$")
BARE_USER_ID_PATTERN = re.compile(r"^[UW][A-Z0-9]+$")


def get_user_mention(user_id):
    """Format a user ID as a Slack mention"""
    return f"<@{user_id}>" if user_id else "Unknown User"


def parse_user_mention(text):
    """
    Extract a user ID from slash command text.

    Accepts an escaped mention (<@U123|name>, <@U123>) or a bare user ID.

    Returns:
        User ID string, or None if the text is not a user reference
    """
    if not text:
        return None
    text = text.strip()

    match = USER_MENTION_PATTERN.match(text)
    if match:
        return match.group(1)
    if BARE_USER_ID_PATTERN.match(text):
        return text
    return None


def get_user_info(client, user_id):
    """
    Fetch a user object via users.info

    Args:
        client: Slack WebClient
        user_id: User ID to look up

    Returns:
        User dict, or None if the lookup failed
    """
    try:
        response = client.users_info(user=user_id)
        if response.get("ok"):
            return response.get("user")
        logger.error(f"API_ERROR: users.info returned not ok for {user_id}")
    except SlackApiError as e:
        logger.error(f"API_ERROR: Slack error when getting user info for {user_id}: {e}")
    return None


def get_sender_name(client, user_id):
    """
    Name stored alongside a tribute: real name, else handle, else a mention.

    The value is a snapshot taken at submission time.
    """
    user = get_user_info(client, user_id)
    if user:
        name = user.get("real_name") or user.get("profile", {}).get("real_name") or user.get("name")
        if name:
            return name
    return get_user_mention(user_id)


def open_direct_message(client, user_id):
    """
    Open (or reuse) a DM channel with a user.

    Returns:
        Channel ID, or None if the conversation could not be opened
    """
    try:
        response = client.conversations_open(users=user_id)
    except SlackApiError as e:
        logger.warning(f"DM_ERROR: Error opening DM with user {user_id}: {e}")
        return None

    if not response.get("ok"):
        logger.warning(f"DM_ERROR: Cannot open DM with user {user_id}")
        return None
    return response.get("channel", {}).get("id") or user_id
