"""
Birthday-related Block Kit builders and thread texts.

Handles the celebration announcement, thread replies (poem, descriptions,
tributes), the birthday calendar and slash command results.
"""

from calendar import month_name
from typing import Any, Dict, List

from utils.date import date_to_words, is_placeholder_date, parse_day_month


def build_announcement_blocks(celebrant_id: str) -> tuple[List[Dict[str, Any]], str]:
    """
    Build the public announcement that becomes the thread root.

    Returns:
        Tuple of (blocks list, fallback_text string)
    """
    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f":birthday: *Happy Birthday <@{celebrant_id}>!* :balloon:\n\n"
                    "Your colleagues have some special messages for you! "
                    "Check out the thread below. :arrow_down:"
                ),
            },
        }
    ]
    return blocks, f"Happy Birthday <@{celebrant_id}>! 🎂"


def build_poem_text(poem: str) -> str:
    return f"*A special birthday poem for you:*\n\n{poem}\n\n:birthday: :sparkles: :cake:"


def build_descriptions_text(descriptions: List[Dict[str, Any]]) -> str:
    """One reply listing every description with its sender"""
    text = "*Here's what your colleagues say about you:*\n\n"
    for desc in descriptions:
        text += f"• {desc['message']} _- {desc['sender_name']}_\n\n"
    return text


def build_tribute_text(tribute: Dict[str, Any]) -> str:
    """One reply per tribute; media renders as a trailing link"""
    text = f"{tribute['sender_name']} says:\n{tribute['message']}"
    if tribute.get("media_url"):
        text += f"<{tribute['media_url']}|.>"
    return text


def build_birthday_calendar_blocks(
    birthdays: List[Dict[str, Any]], names: Dict[str, str]
) -> tuple[List[Dict[str, Any]], str]:
    """
    Build the /see-birthdays calendar, grouped by month and sorted by day.

    Placeholder records are skipped.

    Args:
        birthdays: Store records (user_id, birth_date)
        names: user_id -> display name; missing IDs are shown as mentions

    Returns:
        Tuple of (blocks list, fallback_text string)
    """
    by_month = {}
    for record in birthdays:
        if is_placeholder_date(record["birth_date"]):
            continue
        try:
            day, month = parse_day_month(record["birth_date"])
        except ValueError:
            continue
        name = names.get(record["user_id"]) or f"<@{record['user_id']}>"
        by_month.setdefault(month, []).append((day, name))

    if not by_month:
        return [], "No birthdays have been set yet!"

    message = "*🎂 Birthday Calendar*\n\n"
    for month in sorted(by_month):
        message += f"*{month_name[month]}*\n"
        for day, name in sorted(by_month[month], key=lambda entry: entry[0]):
            message += f"• {day} - {name}\n"
        message += "\n"

    blocks = [{"type": "section", "text": {"type": "mrkdwn", "text": message}}]
    return blocks, "Birthday Calendar"


def build_birthday_set_blocks(first_name: str, date_str: str) -> tuple[List[Dict[str, Any]], str]:
    """Confirmation after a birthday is stored"""
    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"✅ {first_name}'s birthday set for *{date_to_words(date_str)}*",
            },
        }
    ]
    return blocks, "Birthday set"


def build_user_not_found_blocks(first_name: str, last_name: str) -> tuple[List[Dict[str, Any]], str]:
    """Failed name lookup with suggestions and the manual command"""
    blocks = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f"❌ Could not find user: *{first_name} {last_name}*\n\n"
                    "Please try:\n"
                    "• Check the spelling of the name\n"
                    "• Use the `/set-birthday @username DD-MM` command instead\n"
                    "• Make sure the user exists in your Slack workspace"
                ),
            },
        }
    ]
    return blocks, "User not found"


def build_simple_blocks(text: str, fallback: str = None) -> tuple[List[Dict[str, Any]], str]:
    """Single mrkdwn section; used for short command results and usage errors"""
    blocks = [{"type": "section", "text": {"type": "mrkdwn", "text": text}}]
    return blocks, fallback or text
