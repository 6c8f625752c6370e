"""
Date and timezone utilities for Birthday Thread Bot.

Handles DD-MM validation, human-readable formatting, and day-offset
calculations relative to the scheduler's fixed timezone.

Key functions: is_valid_day_month(), date_to_words(), calculate_days_until_birthday(),
today_in_scheduler_timezone().
"""

import re
from calendar import month_name
from datetime import date, datetime

import pytz

from config import (
    DAY_MONTH_FORMAT,
    DAY_MONTH_PATTERN,
    PLACEHOLDER_DATE,
    REFERENCE_LEAP_YEAR,
    SCHEDULER_TIMEZONE,
    get_logger,
)

logger = get_logger("date")


def is_valid_day_month(date_str) -> bool:
    """
    Validate a DD-MM string against the real number of days in the month.

    Uses a leap reference year so 29-02 is accepted.

    Args:
        date_str: Candidate date, e.g. "11-02"

    Returns:
        True if the string is exactly two digits, hyphen, two digits and names a real day
    """
    if not isinstance(date_str, str) or not re.match(DAY_MONTH_PATTERN, date_str):
        return False

    try:
        datetime.strptime(f"{date_str}-{REFERENCE_LEAP_YEAR}", f"{DAY_MONTH_FORMAT}-%Y")
    except ValueError:
        return False
    return True


def is_placeholder_date(date_str) -> bool:
    """True if the stored date is the "registered but unknown" sentinel"""
    return not date_str or date_str == PLACEHOLDER_DATE


def parse_day_month(date_str):
    """
    Split a DD-MM string into (day, month) integers.

    Raises:
        ValueError: If the string is not a valid day-month
    """
    if not is_valid_day_month(date_str):
        raise ValueError(f"Invalid day-month: {date_str!r}")
    day, month = date_str.split("-")
    return int(day), int(month)


def date_to_words(date_str: str) -> str:
    """
    Convert date in DD-MM to readable format

    Args:
        date_str: Date in DD-MM format

    Returns:
        Date in words (e.g., "5th of July")
    """
    day, month = parse_day_month(date_str)

    if 11 <= day <= 13:
        day_str = f"{day}th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
        day_str = f"{day}{suffix}"

    return f"{day_str} of {month_name[month]}"


def get_scheduler_timezone():
    """Return the pytz timezone all day offsets are computed in"""
    return pytz.timezone(SCHEDULER_TIMEZONE)


def today_in_scheduler_timezone(moment=None) -> date:
    """
    Current calendar date in the scheduler timezone.

    Args:
        moment: Optional aware datetime to convert instead of "now"
    """
    tz = get_scheduler_timezone()
    if moment is None:
        return datetime.now(tz).date()
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(tz).date()


def calculate_days_until_birthday(date_str, reference_date=None):
    """
    Calculate whole days until the next occurrence of a DD-MM birthday

    If this year's occurrence has already passed, next year's is used, so the
    result is never negative. 29-02 rolls forward to the next leap year.

    Args:
        date_str: Date in DD-MM format
        reference_date: date or datetime for "today"; defaults to today in the scheduler timezone

    Returns:
        Number of days until the next birthday, or None for placeholder/invalid dates
    """
    if is_placeholder_date(date_str):
        return None

    if reference_date is None:
        reference_date = today_in_scheduler_timezone()
    elif isinstance(reference_date, datetime):
        reference_date = reference_date.date()

    try:
        day, month = parse_day_month(date_str)
    except ValueError as e:
        logger.error(f"DATE_ERROR: Invalid date in calculate_days_until_birthday: {e}")
        return None

    year = reference_date.year
    while True:
        try:
            birthday_date = date(year, month, day)
        except ValueError:
            # 29-02 outside a leap year
            year += 1
            continue
        if birthday_date < reference_date:
            year += 1
            continue
        break

    return (birthday_date - reference_date).days
