"""
Daily birthday run for Birthday Thread Bot.

Each run first removes birthdays of members who have left the workspace, then
walks the remaining records and acts on the day offset to each birthday:
collection a week ahead, an admin digest the day before and the thread on
the day.

Main functions: daily_birthday_check(), cleanup_departed_members(), dispatch_birthday().
"""

from config import (
    ADMIN_CHANNEL,
    CELEBRATION_DAY_OFFSET,
    COLLECTION_LEAD_DAYS,
    DIGEST_LEAD_DAYS,
    get_logger,
)
from services.collection import trigger_birthday_collection
from services.thread import post_birthday_thread
from utils.date import (
    calculate_days_until_birthday,
    is_placeholder_date,
    today_in_scheduler_timezone,
)
from workspace.blocks import build_cleanup_summary_text, build_digest_text
from workspace.directory import MemberDirectory
from workspace.messaging import send_message

logger = get_logger("birthday")


def notify_admins(client, text):
    """Post a short status line to the admin channel if one is configured"""
    if not ADMIN_CHANNEL:
        logger.warning(f"BIRTHDAY: ADMIN_CHANNEL not configured, dropping admin note: {text}")
        return False
    return send_message(client, ADMIN_CHANNEL, text)["success"]


def cleanup_departed_members(client, store, directory):
    """
    Delete stored birthdays whose member is gone or deactivated.

    Nothing is deleted when the member listing was cut short by the page cap,
    since absent members cannot be told apart from unread pages.

    Returns:
        int: Number of members removed

    Raises:
        SlackApiError: If users.list fails
    """
    members = directory.list_all_members()
    if directory.truncated:
        logger.warning(
            "CLEANUP: Member listing truncated, skipping departed member cleanup this run"
        )
        return 0

    active_ids = {m.get("id") for m in members if not m.get("deleted")}

    removed = 0
    for record in store.list_birthdays():
        if record["user_id"] in active_ids:
            continue
        store.delete_member(record["user_id"])
        logger.info(f"CLEANUP: Removed departed member {record['user_id']}")
        removed += 1

    if removed:
        notify_admins(client, build_cleanup_summary_text(removed))
    logger.info(f"CLEANUP: Removed {removed} departed member(s)")
    return removed


def dispatch_birthday(client, store, record, today, directory=None):
    """
    Act on one birthday record for today.

    Returns:
        str or None: "collection", "digest" or "thread" when something was done
    """
    user_id = record["user_id"]
    days_until = calculate_days_until_birthday(record["birth_date"], today)
    if days_until is None:
        return None

    if days_until == COLLECTION_LEAD_DAYS:
        logger.info(f"BIRTHDAY: {user_id} has a birthday in {days_until} days, collecting messages")
        trigger_birthday_collection(client, store, user_id, directory)
        action = "collection"
    elif days_until == DIGEST_LEAD_DAYS:
        count = store.count_undelivered(user_id)
        logger.info(f"BIRTHDAY: {user_id} has a birthday tomorrow, {count} message(s) waiting")
        notify_admins(client, build_digest_text(user_id, count))
        action = "digest"
    elif days_until == CELEBRATION_DAY_OFFSET:
        logger.info(f"BIRTHDAY: {user_id} has a birthday today, posting thread")
        post_birthday_thread(client, store, user_id, today=today)
        action = "thread"
    else:
        return None

    store.record_notification(user_id, today)
    return action


def daily_birthday_check(client, store, directory=None, moment=None):
    """
    Run the daily birthday check.

    Cleanup failures abort the run. After cleanup every record is handled on
    its own: an exception is logged and the next record is processed.

    Args:
        client: Slack WebClient
        store: BirthdayStore
        directory: MemberDirectory (built from client if omitted)
        moment: Aware datetime of the run; defaults to now

    Returns:
        dict: Counts per action plus "removed", "errors" and "aborted"
    """
    today = today_in_scheduler_timezone(moment)
    directory = directory or MemberDirectory(client)
    summary = {
        "removed": 0,
        "collection": 0,
        "digest": 0,
        "thread": 0,
        "errors": 0,
        "aborted": False,
    }

    logger.info(f"BIRTHDAY: Running daily birthday check for {today.isoformat()}")

    try:
        summary["removed"] = cleanup_departed_members(client, store, directory)
    except Exception as e:
        logger.error(f"BIRTHDAY_ERROR: Cleanup failed, aborting daily check: {e}")
        summary["aborted"] = True
        return summary

    for record in store.list_birthdays():
        user_id = record["user_id"]

        if is_placeholder_date(record["birth_date"]):
            continue
        if record.get("last_notification_date") == today.isoformat():
            logger.debug(f"BIRTHDAY: Skipping {user_id}, already handled today")
            continue

        try:
            action = dispatch_birthday(client, store, record, today, directory)
        except Exception as e:
            summary["errors"] += 1
            logger.error(f"BIRTHDAY_ERROR: Failed to process birthday for {user_id}: {e}")
            continue

        if action:
            summary[action] += 1

    logger.info(
        f"BIRTHDAY: Daily check complete: {summary['collection']} collections, "
        f"{summary['digest']} digests, {summary['thread']} threads, {summary['errors']} errors"
    )
    return summary
