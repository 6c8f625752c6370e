"""
Slack messaging utilities for Birthday Thread Bot.

send_message() is best-effort and reports failure in its return value;
post_thread_reply() lets SlackApiError propagate so a caller can abort a
multi-step sequence.
"""

from slack_sdk.errors import SlackApiError

from config import get_logger

logger = get_logger("slack")


def send_message(client, channel: str, text: str, blocks=None):
    """
    Send a message to a Slack channel or user with error handling.

    Args:
        client: Slack WebClient
        channel: Channel ID or user ID (for DMs)
        text: Message text (fallback text when blocks are given)
        blocks: Optional blocks for rich formatting

    Returns:
        dict: {"success": bool, "ts": str or None} - ts can be used as a thread root
    """
    try:
        if blocks:
            response = client.chat_postMessage(channel=channel, text=text, blocks=blocks)
        else:
            response = client.chat_postMessage(channel=channel, text=text)

        message_ts = response.get("ts") if response.get("ok") else None

        if channel.startswith("U"):
            logger.info(f"MESSAGE: Sent DM to {channel}")
        else:
            logger.info(f"MESSAGE: Sent message to channel {channel}")

        return {"success": True, "ts": message_ts}

    except SlackApiError as e:
        logger.error(f"API_ERROR: Failed to send message to {channel}: {e}")
        return {"success": False, "ts": None}


def post_message(client, channel: str, text: str, blocks=None, thread_ts=None):
    """
    Post a message and return its timestamp.

    Raises:
        SlackApiError: If Slack rejects the post
    """
    params = {"channel": channel, "text": text}
    if blocks:
        params["blocks"] = blocks
    if thread_ts:
        params["thread_ts"] = thread_ts

    try:
        response = client.chat_postMessage(**params)
    except SlackApiError as e:
        where = f"thread {thread_ts} in {channel}" if thread_ts else channel
        logger.error(f"API_ERROR: Failed to post to {where}: {e}")
        raise

    return response.get("ts")


def post_thread_reply(client, channel: str, thread_ts: str, text: str, blocks=None):
    """Post a reply under thread_ts; SlackApiError propagates."""
    return post_message(client, channel, text, blocks=blocks, thread_ts=thread_ts)


def delete_message(client, channel: str, ts: str):
    """
    Delete a message the bot posted.

    Returns:
        bool: True if deleted, False otherwise (failures are logged, not raised)
    """
    try:
        client.chat_delete(channel=channel, ts=ts)
        return True
    except SlackApiError as e:
        logger.info(f"MESSAGE: Could not delete message {ts} in {channel} (this is okay): {e}")
        return False
