"""
Admin channel texts posted by the daily run.
"""


def build_digest_text(celebrant_id: str, message_count: int) -> str:
    """Heads-up the day before a birthday"""
    return f"{message_count} messages collected for upcoming birthday of <@{celebrant_id}>"


def build_cleanup_summary_text(deleted_count: int) -> str:
    return f":broom: Cleaned up {deleted_count} deactivated user(s) from the birthday database"
