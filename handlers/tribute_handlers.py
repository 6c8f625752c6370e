"""
Collection form submission handler.

Reads the message, media and description boxes of a submitted form, stores
what was filled in and replaces the form with a confirmation DM.
"""

import re
import sqlite3

from config import get_logger
from storage.birthdays import BirthdayStoreError, CelebrantNotFoundError
from workspace.blocks import SUBMIT_ACTION_ID, build_submission_confirmation
from workspace.blocks.collection import (
    DESCRIPTION_ACTION_ID,
    DESCRIPTION_BLOCK_ID,
    MEDIA_ACTION_ID,
    MEDIA_BLOCK_ID,
    MESSAGE_ACTION_ID,
    MESSAGE_BLOCK_ID,
)
from workspace.client import get_sender_name
from workspace.messaging import delete_message, send_message

logger = get_logger("tributes")

MENTION_IN_TEXT_PATTERN = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")


def register_tribute_handlers(app, store):
    """Register the collection form's Submit action."""

    @app.action(SUBMIT_ACTION_ID)
    def handle_submit_birthday_content(ack, body, client):
        ack()
        try:
            handle_tribute_submission(body, client, store)
        except Exception as e:
            logger.error(f"TRIBUTES_ERROR: Unexpected error handling submission: {e}")
            send_message(
                client,
                body["user"]["id"],
                "Sorry, something went wrong with your submission. Please try again.",
            )

    logger.info("TRIBUTES: Tribute handlers registered")


def _input_value(state_values, block_id, action_id):
    value = (state_values.get(block_id) or {}).get(action_id, {}).get("value")
    return value.strip() if value else ""


def extract_submission(body):
    """
    Pull the submitted fields out of a block_actions payload.

    Returns:
        dict: celebrant_id, message, media_url, description (empty strings when blank)
    """
    state_values = (body.get("state") or {}).get("values") or {}

    celebrant_id = None
    actions = body.get("actions") or []
    if actions and actions[0].get("value"):
        celebrant_id = actions[0]["value"]
    else:
        match = MENTION_IN_TEXT_PATTERN.search((body.get("message") or {}).get("text", ""))
        if match:
            celebrant_id = match.group(1)

    return {
        "celebrant_id": celebrant_id,
        "message": _input_value(state_values, MESSAGE_BLOCK_ID, MESSAGE_ACTION_ID),
        "media_url": _input_value(state_values, MEDIA_BLOCK_ID, MEDIA_ACTION_ID),
        "description": _input_value(state_values, DESCRIPTION_BLOCK_ID, DESCRIPTION_ACTION_ID),
    }


def handle_tribute_submission(body, client, store):
    """
    Store a submitted tribute and/or description.

    Returns:
        bool: True if the submission was stored
    """
    user_id = body["user"]["id"]
    channel_id = (body.get("channel") or {}).get("id") or (body.get("container") or {}).get(
        "channel_id"
    )
    message_ts = (body.get("message") or {}).get("ts") or (body.get("container") or {}).get(
        "message_ts"
    )

    submission = extract_submission(body)
    celebrant_id = submission["celebrant_id"]

    if not celebrant_id:
        logger.error(f"TRIBUTES_ERROR: Could not determine celebrant for submission from {user_id}")
        send_message(client, user_id, "Sorry, I couldn't tell whose birthday this form was for.")
        return False

    if not submission["message"] and not submission["description"]:
        send_message(
            client,
            user_id,
            "Please enter a birthday message or a description before submitting.",
        )
        return False

    sender_name = get_sender_name(client, user_id)

    try:
        if submission["message"]:
            store.add_tribute(
                celebrant_id,
                user_id,
                sender_name,
                submission["message"],
                submission["media_url"] or None,
            )
        if submission["description"]:
            store.add_description(celebrant_id, user_id, sender_name, submission["description"])
    except CelebrantNotFoundError:
        logger.error(
            f"TRIBUTES_ERROR: Submission from {user_id} for unknown celebrant {celebrant_id}"
        )
        send_message(
            client,
            user_id,
            "Sorry, there was an error saving your submission: that birthday is no longer registered.",
        )
        return False
    except (BirthdayStoreError, sqlite3.Error) as e:
        logger.error(f"TRIBUTES_ERROR: Failed to store submission from {user_id}: {e}")
        send_message(client, user_id, "Sorry, there was an error saving your submission. Please try again.")
        return False

    logger.info(
        f"TRIBUTES: Stored submission from {user_id} for {celebrant_id} "
        f"(message={bool(submission['message'])}, description={bool(submission['description'])})"
    )

    if channel_id and message_ts:
        delete_message(client, channel_id, message_ts)

    send_message(
        client,
        user_id,
        build_submission_confirmation(
            celebrant_id,
            has_message=bool(submission["message"]),
            has_description=bool(submission["description"]),
            has_media=bool(submission["media_url"]),
        ),
    )
    return True
