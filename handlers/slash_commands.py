"""
Slash command handlers for Birthday Thread Bot.

Handles /set-birthday, /set-birthday-auto, /see-birthdays,
/collect-birthday-messages and /post-birthday-thread with immediate ack()
responses. Input is validated before any write; each handler catches its own
errors and answers with an ephemeral message.
"""

from config import get_logger
from services.collection import trigger_birthday_collection
from services.thread import post_birthday_thread
from utils.date import is_valid_day_month
from workspace.blocks import (
    build_birthday_calendar_blocks,
    build_birthday_set_blocks,
    build_simple_blocks,
    build_user_not_found_blocks,
)
from workspace.client import get_user_info, parse_user_mention
from workspace.directory import member_first_name, member_full_name

logger = get_logger("commands")

SET_BIRTHDAY_USAGE = "Please use the format: `/set-birthday @user DD-MM`"
SET_BIRTHDAY_AUTO_USAGE = "Please use the format: `/set-birthday-auto FirstName LastName DD-MM`"
INVALID_DATE_TEXT = "Invalid date. Please use the format DD-MM (e.g. 08-06) with a real day of the month."
COLLECT_USAGE = "Please use the format: `/collect-birthday-messages @user`"
POST_THREAD_USAGE = "Please use the format: `/post-birthday-thread @user`"


def register_slash_commands(app, store, resolver, directory):
    """
    Register slash command handlers with the Slack app.

    Args:
        app: Slack Bolt app
        store: BirthdayStore
        resolver: NameResolver for /set-birthday-auto
        directory: MemberDirectory for listing and fan-out
    """

    @app.command("/set-birthday")
    def handle_set_birthday(ack, body, client, respond):
        ack()  # Must respond within 3 seconds
        logger.info(f"SLASH: /set-birthday from {body.get('user_id')}: '{body.get('text', '')}'")
        try:
            handle_set_birthday_command(body.get("text", ""), client, store, respond)
        except Exception as e:
            logger.error(f"COMMAND_ERROR: /set-birthday failed: {e}")
            respond(text="Sorry, there was an error setting the birthday. Please try again.")

    @app.command("/set-birthday-auto")
    def handle_set_birthday_auto(ack, body, respond):
        ack()
        logger.info(f"SLASH: /set-birthday-auto from {body.get('user_id')}: '{body.get('text', '')}'")
        try:
            handle_set_birthday_auto_command(body.get("text", ""), store, resolver, respond)
        except Exception as e:
            logger.error(f"COMMAND_ERROR: /set-birthday-auto failed: {e}")
            respond(text="Sorry, there was an error setting the birthday. Please try again.")

    @app.command("/see-birthdays")
    def handle_see_birthdays(ack, body, respond):
        ack()
        logger.info(f"SLASH: /see-birthdays from {body.get('user_id')}")
        try:
            handle_see_birthdays_command(store, directory, respond)
        except Exception as e:
            logger.error(f"COMMAND_ERROR: /see-birthdays failed: {e}")
            respond(text="Sorry, there was an error fetching birthdays.")

    @app.command("/collect-birthday-messages")
    def handle_collect_messages(ack, body, client, respond):
        ack()
        logger.info(
            f"SLASH: /collect-birthday-messages from {body.get('user_id')}: '{body.get('text', '')}'"
        )
        try:
            handle_collect_messages_command(body.get("text", ""), client, store, directory, respond)
        except Exception as e:
            logger.error(f"COMMAND_ERROR: /collect-birthday-messages failed: {e}")
            respond(text="Sorry, there was an error starting message collection.")

    @app.command("/post-birthday-thread")
    def handle_post_thread(ack, body, client, respond):
        ack()
        logger.info(
            f"SLASH: /post-birthday-thread from {body.get('user_id')}: '{body.get('text', '')}'"
        )
        try:
            handle_post_thread_command(body.get("text", ""), client, store, respond)
        except Exception as e:
            logger.error(f"COMMAND_ERROR: /post-birthday-thread failed: {e}")
            respond(text="Sorry, there was an error posting the birthday thread.")

    logger.info("SLASH: Slash command handlers registered")


def handle_set_birthday_command(text, client, store, respond):
    """/set-birthday @user DD-MM"""
    parts = (text or "").split()
    if len(parts) != 2:
        respond(text=SET_BIRTHDAY_USAGE)
        return

    user_id = parse_user_mention(parts[0])
    date_str = parts[1]
    if not user_id:
        respond(text=SET_BIRTHDAY_USAGE)
        return
    if not is_valid_day_month(date_str):
        respond(text=INVALID_DATE_TEXT)
        return

    store.upsert_birthday(user_id, date_str)

    user = get_user_info(client, user_id)
    first_name = member_first_name(user) if user else f"<@{user_id}>"
    blocks, fallback = build_birthday_set_blocks(first_name, date_str)
    respond(blocks=blocks, text=fallback)


def handle_set_birthday_auto_command(text, store, resolver, respond):
    """/set-birthday-auto FirstName LastName DD-MM"""
    parts = (text or "").split()
    if len(parts) != 3:
        respond(text=SET_BIRTHDAY_AUTO_USAGE)
        return

    first_name, last_name, date_str = parts
    if not is_valid_day_month(date_str):
        respond(text=INVALID_DATE_TEXT)
        return

    member = resolver.resolve(first_name, last_name)
    if not member:
        blocks, fallback = build_user_not_found_blocks(first_name, last_name)
        respond(blocks=blocks, text=fallback)
        return

    store.upsert_birthday(member["id"], date_str)
    blocks, fallback = build_birthday_set_blocks(member_first_name(member), date_str)
    respond(blocks=blocks, text=fallback)


def handle_see_birthdays_command(store, directory, respond):
    """/see-birthdays - calendar of every known birthday"""
    birthdays = store.list_birthdays()
    names = {}
    if birthdays:
        names = {m.get("id"): member_full_name(m) for m in directory.list_all_members()}

    blocks, fallback = build_birthday_calendar_blocks(birthdays, names)
    if blocks:
        respond(blocks=blocks, text=fallback)
    else:
        respond(text=fallback)


def handle_collect_messages_command(text, client, store, directory, respond):
    """/collect-birthday-messages @user - start the tribute fan-out now"""
    celebrant_id = parse_user_mention(text)
    if not celebrant_id:
        respond(text=COLLECT_USAGE)
        return

    respond(text=f"Starting birthday message collection for <@{celebrant_id}>...")
    result = trigger_birthday_collection(client, store, celebrant_id, directory)
    blocks, fallback = build_simple_blocks(
        f"✅ Sent collection requests for <@{celebrant_id}> to {result['sent']} colleague(s)"
        + (f" ({result['skipped']} skipped)" if result["skipped"] else "")
    )
    respond(blocks=blocks, text=fallback)


def handle_post_thread_command(text, client, store, respond):
    """/post-birthday-thread @user - post the celebration thread now"""
    celebrant_id = parse_user_mention(text)
    if not celebrant_id:
        respond(text=POST_THREAD_USAGE)
        return

    result = post_birthday_thread(client, store, celebrant_id)
    if result["posted"]:
        respond(text=f"✅ Birthday thread posted for <@{celebrant_id}>")
    else:
        respond(text=f"Birthday thread for <@{celebrant_id}> was already posted today.")
