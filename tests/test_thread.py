"""
Tests for the celebration thread in services/thread.py
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from slack_sdk.errors import SlackApiError

from storage.birthdays import DESCRIPTION_KIND, MESSAGE_KIND

ROOT_TS = "1717232400.000100"


def posted_texts(client):
    return [c.kwargs["text"] for c in client.chat_postMessage.call_args_list]


@pytest.fixture
def poem_generator():
    return MagicMock(return_value="Roses are red")


class TestPostBirthdayThread:
    def test_full_thread_order(self, mock_slack_client, store, clock, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_description("U1", "U2", "Sam", "Kind")
        store.add_tribute("U1", "U2", "Sam", "Happy birthday!")
        clock.advance(minutes=1)
        store.add_tribute("U1", "U3", "Alex", "Cheers", "https://example.com/cake.gif")

        summary = post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        texts = posted_texts(mock_slack_client)
        assert len(texts) == 5
        assert texts[0] == "Happy Birthday <@U1>! 🎂"
        assert "Roses are red" in texts[1]
        assert "• Kind _- Sam_" in texts[2]
        assert texts[3] == "Sam says:\nHappy birthday!"
        assert texts[4] == "Alex says:\nCheers<https://example.com/cake.gif|.>"

        for call in mock_slack_client.chat_postMessage.call_args_list[1:]:
            assert call.kwargs["thread_ts"] == ROOT_TS
            assert call.kwargs["channel"] == "C1"
        assert "thread_ts" not in mock_slack_client.chat_postMessage.call_args_list[0].kwargs

        assert summary == {
            "posted": True,
            "thread_ts": ROOT_TS,
            "poem": True,
            "descriptions": 1,
            "messages": 2,
        }
        assert store.list_undelivered("U1", MESSAGE_KIND) == []
        assert store.list_undelivered("U1", DESCRIPTION_KIND) == []

    def test_poem_uses_descriptions(self, mock_slack_client, store, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_description("U1", "U2", "Sam", "Kind")

        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        descriptions = poem_generator.call_args.args[0]
        assert [d["message"] for d in descriptions] == ["Kind"]

    def test_no_descriptions_skips_poem(self, mock_slack_client, store, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_tribute("U1", "U2", "Sam", "Happy birthday!")

        summary = post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        poem_generator.assert_not_called()
        assert len(posted_texts(mock_slack_client)) == 2
        assert summary["poem"] is False

    def test_announcement_only_when_nothing_collected(
        self, mock_slack_client, store, poem_generator, reference_date
    ):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")

        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        assert len(posted_texts(mock_slack_client)) == 1

    def test_records_notification(self, mock_slack_client, store, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        record = store.get_birthday("U1")
        assert record["notification_sent"] is True
        assert record["last_notification_date"] == "2024-06-01"
        assert record["thread_posted_date"] == "2024-06-01"

    def test_posts_after_other_notification_same_day(
        self, mock_slack_client, store, poem_generator, reference_date
    ):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "08-06")
        store.record_notification("U1", reference_date)

        summary = post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        assert summary["posted"] is True
        assert mock_slack_client.chat_postMessage.call_count == 1

    def test_rerun_posts_nothing(self, mock_slack_client, store, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_tribute("U1", "U2", "Sam", "Happy birthday!")
        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )
        mock_slack_client.chat_postMessage.reset_mock()

        summary = post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )

        mock_slack_client.chat_postMessage.assert_not_called()
        assert summary["posted"] is False

    def test_rerun_next_day_posts_announcement(self, mock_slack_client, store, poem_generator, reference_date):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
        )
        mock_slack_client.chat_postMessage.reset_mock()

        post_birthday_thread(
            mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=date(2024, 6, 2)
        )

        assert mock_slack_client.chat_postMessage.call_count == 1

    def test_failure_keeps_earlier_marks(
        self, mock_slack_client, store, poem_generator, reference_date, slack_api_error
    ):
        """Descriptions posted before a failed tribute reply stay delivered"""
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_description("U1", "U2", "Sam", "Kind")
        store.add_tribute("U1", "U2", "Sam", "Happy birthday!")

        ok = {"ok": True, "ts": ROOT_TS}
        mock_slack_client.chat_postMessage.side_effect = [ok, ok, ok, slack_api_error("rate_limited")]

        with pytest.raises(SlackApiError):
            post_birthday_thread(
                mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
            )

        assert store.list_undelivered("U1", DESCRIPTION_KIND) == []
        assert len(store.list_undelivered("U1", MESSAGE_KIND)) == 1

    def test_announcement_failure_propagates(
        self, mock_slack_client, store, poem_generator, reference_date, slack_api_error
    ):
        from services.thread import post_birthday_thread

        store.upsert_birthday("U1", "01-06")
        store.add_tribute("U1", "U2", "Sam", "Happy birthday!")
        mock_slack_client.chat_postMessage.side_effect = slack_api_error("channel_not_found")

        with pytest.raises(SlackApiError):
            post_birthday_thread(
                mock_slack_client, store, "U1", channel="C1", poem_generator=poem_generator, today=reference_date
            )

        assert store.count_undelivered("U1") == 1
        assert store.get_birthday("U1")["notification_sent"] is False
