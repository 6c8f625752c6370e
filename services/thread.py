"""
Birthday thread posting.

post_birthday_thread() posts the public announcement, then threads the poem,
the collected descriptions and every undelivered tribute under it. Rows are
marked delivered right after the replies that carry them, so a failure part
way through never re-posts what already went out.
"""

from config import BIRTHDAY_CHANNEL, get_logger
from services.poem import generate_birthday_poem
from storage.birthdays import DESCRIPTION_KIND, MESSAGE_KIND
from utils.date import today_in_scheduler_timezone
from workspace.blocks import (
    build_announcement_blocks,
    build_descriptions_text,
    build_poem_text,
    build_tribute_text,
)
from workspace.messaging import post_message, post_thread_reply

logger = get_logger("thread")


def already_posted_today(store, celebrant_id, today):
    """True if the celebrant was announced today and nothing new is waiting"""
    record = store.get_birthday(celebrant_id)
    if not record or record.get("thread_posted_date") != today.isoformat():
        return False
    return not store.list_undelivered(
        celebrant_id, DESCRIPTION_KIND
    ) and not store.list_undelivered(celebrant_id, MESSAGE_KIND)


def post_birthday_thread(
    client,
    store,
    celebrant_id,
    channel=None,
    poem_generator=None,
    today=None,
):
    """
    Post the celebration thread for celebrant_id.

    Args:
        client: Slack WebClient
        store: BirthdayStore
        celebrant_id: Slack user ID of the birthday person
        channel: Celebration channel (defaults to BIRTHDAY_CHANNEL)
        poem_generator: Callable turning description rows into poem text
                        (defaults to generate_birthday_poem)
        today: date used for notification bookkeeping

    Returns:
        dict: {"posted", "thread_ts", "poem", "descriptions", "messages"}

    Raises:
        SlackApiError: If any post fails; rows marked before the failure stay delivered
    """
    channel = channel or BIRTHDAY_CHANNEL
    poem_generator = poem_generator or generate_birthday_poem
    today = today or today_in_scheduler_timezone()
    summary = {"posted": False, "thread_ts": None, "poem": False, "descriptions": 0, "messages": 0}

    if already_posted_today(store, celebrant_id, today):
        logger.info(f"THREAD: Birthday thread for {celebrant_id} already posted today, skipping")
        return summary

    blocks, fallback_text = build_announcement_blocks(celebrant_id)
    thread_ts = post_message(client, channel, fallback_text, blocks=blocks)
    summary["posted"] = True
    summary["thread_ts"] = thread_ts
    logger.info(f"THREAD: Posted birthday announcement for {celebrant_id} in {channel}")

    descriptions = store.list_undelivered(celebrant_id, DESCRIPTION_KIND)
    if descriptions:
        poem = poem_generator(descriptions)
        post_thread_reply(client, channel, thread_ts, build_poem_text(poem))
        summary["poem"] = True

        post_thread_reply(client, channel, thread_ts, build_descriptions_text(descriptions))
        store.mark_delivered(celebrant_id, DESCRIPTION_KIND)
        summary["descriptions"] = len(descriptions)

    messages = store.list_undelivered(celebrant_id, MESSAGE_KIND)
    for tribute in messages:
        post_thread_reply(client, channel, thread_ts, build_tribute_text(tribute))
    if messages:
        store.mark_delivered(celebrant_id, MESSAGE_KIND)
        summary["messages"] = len(messages)

    store.record_notification(celebrant_id, today)
    store.record_thread_posted(celebrant_id, today)

    logger.info(
        f"THREAD: Birthday thread complete for {celebrant_id}: "
        f"{summary['descriptions']} descriptions, {summary['messages']} messages"
    )
    return summary
