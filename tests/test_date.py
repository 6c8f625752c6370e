"""
Tests for date utility functions in utils/date.py

- is_valid_day_month(): Strict DD-MM validation with leap reference year
- calculate_days_until_birthday(): Day offsets and year roll-over
- date_to_words(): Ordinal suffix formatting
- today_in_scheduler_timezone(): Timezone conversion
"""

from datetime import date, datetime

import pytest
import pytz

from utils.date import (
    calculate_days_until_birthday,
    date_to_words,
    is_placeholder_date,
    is_valid_day_month,
    parse_day_month,
    today_in_scheduler_timezone,
)


class TestIsValidDayMonth:
    """Tests for is_valid_day_month()"""

    def test_valid_date(self):
        assert is_valid_day_month("08-06") is True

    def test_leap_day_accepted(self):
        """29-02 validates against the leap reference year"""
        assert is_valid_day_month("29-02") is True

    def test_impossible_day_rejected(self):
        assert is_valid_day_month("31-04") is False
        assert is_valid_day_month("30-02") is False

    def test_month_out_of_range(self):
        assert is_valid_day_month("01-13") is False

    @pytest.mark.parametrize("value", ["8-6", "08/06", "08-06-2024", " 08-06", "ab-cd", "", None])
    def test_wrong_shape_rejected(self, value):
        assert is_valid_day_month(value) is False


class TestParseDayMonth:
    def test_returns_integers(self):
        assert parse_day_month("05-07") == (5, 7)

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_day_month("32-01")


class TestPlaceholder:
    def test_placeholder_sentinel(self):
        assert is_placeholder_date("1900-01-01") is True

    def test_missing_date_is_placeholder(self):
        assert is_placeholder_date(None) is True

    def test_real_date_is_not_placeholder(self):
        assert is_placeholder_date("08-06") is False


class TestCalculateDaysUntilBirthday:
    """Offsets relative to June 1, 2024"""

    def test_one_week_ahead(self, reference_date):
        assert calculate_days_until_birthday("08-06", reference_date) == 7

    def test_tomorrow(self, reference_date):
        assert calculate_days_until_birthday("02-06", reference_date) == 1

    def test_today(self, reference_date):
        assert calculate_days_until_birthday("01-06", reference_date) == 0

    def test_later_this_year(self, reference_date):
        assert calculate_days_until_birthday("25-12", reference_date) == 207

    def test_passed_birthday_rolls_to_next_year(self, reference_date):
        """31 May already passed, so next occurrence is 2025-05-31"""
        assert calculate_days_until_birthday("31-05", reference_date) == 364

    def test_leap_day_rolls_to_next_leap_year(self):
        """From March 2024 the next 29 Feb is in 2028"""
        result = calculate_days_until_birthday("29-02", date(2024, 3, 1))
        assert result == (date(2028, 2, 29) - date(2024, 3, 1)).days

    def test_leap_day_in_leap_year(self):
        assert calculate_days_until_birthday("29-02", date(2024, 2, 28)) == 1

    def test_accepts_datetime(self, reference_moment):
        assert calculate_days_until_birthday("08-06", reference_moment) == 7

    def test_placeholder_returns_none(self, reference_date):
        assert calculate_days_until_birthday("1900-01-01", reference_date) is None

    def test_invalid_returns_none(self, reference_date):
        assert calculate_days_until_birthday("31-02", reference_date) is None


class TestDateToWords:
    """Tests for date_to_words() ordinal formatting"""

    def test_first_suffix(self):
        assert date_to_words("01-03") == "1st of March"

    def test_second_suffix(self):
        assert date_to_words("02-04") == "2nd of April"

    def test_third_suffix(self):
        assert date_to_words("23-05") == "23rd of May"

    def test_teens_use_th(self):
        assert date_to_words("11-06") == "11th of June"
        assert date_to_words("12-06") == "12th of June"
        assert date_to_words("13-06") == "13th of June"

    def test_default_th(self):
        assert date_to_words("08-06") == "8th of June"


class TestTodayInSchedulerTimezone:
    def test_late_utc_evening_is_next_day_in_london(self):
        """23:30 UTC in summer is 00:30 BST the next day"""
        moment = pytz.utc.localize(datetime(2024, 6, 1, 23, 30))
        assert today_in_scheduler_timezone(moment) == date(2024, 6, 2)

    def test_naive_moment_treated_as_utc(self):
        assert today_in_scheduler_timezone(datetime(2024, 6, 1, 12, 0)) == date(2024, 6, 1)
