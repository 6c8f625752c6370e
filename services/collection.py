"""
Tribute collection fan-out.

trigger_birthday_collection() DMs the collection form to every eligible
colleague of a celebrant, in fixed-size batches with a pause between batches.
A failure for one colleague is logged and skipped.
"""

import time

from config import COLLECTION_BATCH_DELAY_SECONDS, COLLECTION_BATCH_SIZE, get_logger
from workspace.blocks import build_collection_blocks
from workspace.client import open_direct_message
from workspace.messaging import send_message
from workspace.directory import MemberDirectory, is_eligible_colleague

logger = get_logger("collection")


def chunk(items, size):
    """Split a list into consecutive batches of at most size items"""
    size = max(1, int(size))
    return [items[i : i + size] for i in range(0, len(items), size)]


def ensure_celebrant_record(store, celebrant_id):
    """
    Make sure tributes can be attached to the celebrant.

    Creates a placeholder record if none exists; an existing date is kept.

    Returns:
        bool: True if a placeholder was created
    """
    if store.member_has_record(celebrant_id):
        return False
    store.upsert_birthday(celebrant_id, None)
    logger.info(f"COLLECTION: Created placeholder birthday record for {celebrant_id}")
    return True


def send_collection_form(client, member_id, celebrant_id):
    """
    DM the collection form to one colleague.

    Returns:
        bool: True if the form was posted
    """
    channel = open_direct_message(client, member_id)
    if not channel:
        return False

    blocks, fallback_text = build_collection_blocks(celebrant_id)
    result = send_message(client, channel, fallback_text, blocks=blocks)
    if not result["success"]:
        logger.error(f"COLLECTION_ERROR: Error sending collection form to {member_id}")
        return False

    logger.info(f"COLLECTION: Sent birthday message collection to {member_id}")
    return True


def trigger_birthday_collection(
    client,
    store,
    celebrant_id,
    directory=None,
    batch_size=COLLECTION_BATCH_SIZE,
    batch_delay=COLLECTION_BATCH_DELAY_SECONDS,
    sleep=None,
):
    """
    Ask every eligible colleague for a tribute for celebrant_id.

    Args:
        client: Slack WebClient
        store: BirthdayStore
        celebrant_id: Slack user ID of the upcoming birthday person
        directory: MemberDirectory (one is built from client if omitted)
        batch_size: Forms sent per batch
        batch_delay: Seconds to pause between batches
        sleep: Pause function (defaults to time.sleep)

    Returns:
        dict: {"eligible", "sent", "skipped", "batches"}
    """
    sleep = sleep or time.sleep
    ensure_celebrant_record(store, celebrant_id)

    directory = directory or MemberDirectory(client)
    members = [m for m in directory.list_all_members() if is_eligible_colleague(m, celebrant_id)]
    batches = chunk(members, batch_size)

    logger.info(
        f"COLLECTION: Attempting to send messages to {len(members)} users in {len(batches)} batches"
    )

    sent = 0
    skipped = 0
    for index, batch in enumerate(batches):
        for member in batch:
            try:
                if send_collection_form(client, member["id"], celebrant_id):
                    sent += 1
                else:
                    skipped += 1
            except Exception as e:
                skipped += 1
                logger.error(
                    f"COLLECTION_ERROR: Unexpected error sending to {member.get('id')}: {e}"
                )

        # Pause between batches to stay under Slack rate limits
        if index < len(batches) - 1:
            sleep(batch_delay)

    logger.info(
        f"COLLECTION: Finished for {celebrant_id}: {sent} sent, {skipped} skipped"
    )
    return {"eligible": len(members), "sent": sent, "skipped": skipped, "batches": len(batches)}
