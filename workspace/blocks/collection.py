"""
Collection form Block Kit builders.

The form is sent by DM to every eligible colleague seven days before a
birthday. Block and action IDs here are read back by handlers/tribute_handlers.py.
"""

import random
from typing import Any, Dict, List, Optional

from config import COLLECTION_LEAD_DAYS, DESCRIPTION_PROMPTS

SUBMIT_ACTION_ID = "submit_birthday_content"

MESSAGE_BLOCK_ID = "message_input_block"
MESSAGE_ACTION_ID = "message_input"
MEDIA_BLOCK_ID = "media_input_block"
MEDIA_ACTION_ID = "media_input"
DESCRIPTION_BLOCK_ID = "description_input_block"
DESCRIPTION_ACTION_ID = "description_input"
SUBMIT_BLOCK_ID = "submit_block"


def get_random_description_prompt(rng=random):
    return rng.choice(DESCRIPTION_PROMPTS)


def build_collection_blocks(
    celebrant_id: str, description_prompt: Optional[str] = None
) -> tuple[List[Dict[str, Any]], str]:
    """
    Build the tribute collection form for one celebrant.

    Args:
        celebrant_id: Slack user ID of the upcoming birthday person
        description_prompt: Placeholder for the description box (random if omitted)

    Returns:
        Tuple of (blocks list, fallback_text string)
    """
    prompt = description_prompt or get_random_description_prompt()

    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"Hey! :birthday: *<@{celebrant_id}>* has a birthday coming up in {COLLECTION_LEAD_DAYS} days!",
            },
        },
        {
            "type": "input",
            "block_id": MESSAGE_BLOCK_ID,
            "element": {
                "type": "plain_text_input",
                "action_id": MESSAGE_ACTION_ID,
                "multiline": True,
                "placeholder": {"type": "plain_text", "text": "Type your birthday message here..."},
            },
            "label": {"type": "plain_text", "text": "Your Birthday Message"},
            "optional": True,
        },
        {
            "type": "input",
            "block_id": MEDIA_BLOCK_ID,
            "element": {
                "type": "plain_text_input",
                "action_id": MEDIA_ACTION_ID,
                "placeholder": {"type": "plain_text", "text": "Paste a URL to a GIF or image..."},
            },
            "label": {
                "type": "plain_text",
                "text": "Optional: Add Media (Hint: Use /giphy to search for a GIF and copy the URL)",
            },
            "optional": True,
        },
        {"type": "divider"},
        {
            "type": "input",
            "block_id": DESCRIPTION_BLOCK_ID,
            "element": {
                "type": "plain_text_input",
                "action_id": DESCRIPTION_ACTION_ID,
                "multiline": True,
                "placeholder": {"type": "plain_text", "text": prompt},
            },
            "label": {"type": "plain_text", "text": "Describe Them"},
            "optional": True,
        },
        {
            "type": "actions",
            "block_id": SUBMIT_BLOCK_ID,
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Submit", "emoji": True},
                    "action_id": SUBMIT_ACTION_ID,
                    "value": celebrant_id,
                    "style": "primary",
                }
            ],
        },
    ]

    fallback_text = f"Birthday message collection for <@{celebrant_id}>"
    return blocks, fallback_text


def build_submission_confirmation(
    celebrant_id: str, has_message: bool, has_description: bool, has_media: bool
) -> str:
    """Confirmation DM naming exactly what was stored"""
    if has_message and has_description:
        what = "birthday message and description"
    elif has_message:
        what = "birthday message"
    else:
        what = "description"
    if has_media and has_message:
        what += " with media"
    return f"Thanks for submitting your {what} for <@{celebrant_id}>! :tada:"
