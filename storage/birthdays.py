"""
SQLite-backed storage for birthdays, tribute messages and descriptions.

Three tables, all owned by BirthdayStore:

  birthdays             one row per member (user_id primary key)
  birthday_messages     tribute messages, unique per (celebrant, sender, message, day)
  description_messages  "describe them" entries, same uniqueness rule

The unique constraints are the only duplicate-submission defense: a repeated
identical submission on the same calendar day is an INSERT OR IGNORE no-op and
is reported as zero rows changed.

Key class: BirthdayStore. Callers receive a store instance explicitly.
"""

import sqlite3
import threading
from datetime import datetime, timezone

from config import PLACEHOLDER_DATE, get_logger
from utils.date import get_scheduler_timezone

logger = get_logger("storage")

MESSAGE_KIND = "message"
DESCRIPTION_KIND = "description"

# kind -> table name; table names are never taken from user input
KIND_TABLES = {
    MESSAGE_KIND: "birthday_messages",
    DESCRIPTION_KIND: "description_messages",
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS birthdays (
    user_id TEXT PRIMARY KEY,
    birth_date TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    notification_sent INTEGER NOT NULL DEFAULT 0,
    last_notification_date TEXT,
    thread_posted_date TEXT
);

CREATE TABLE IF NOT EXISTS birthday_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    celebrant_id TEXT NOT NULL,
    sender_id TEXT NOT NULL,
    sender_name TEXT NOT NULL,
    message TEXT NOT NULL,
    media_url TEXT,
    created_at TEXT NOT NULL,
    created_on TEXT NOT NULL,
    sent_in_thread INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (celebrant_id) REFERENCES birthdays(user_id)
);

CREATE TABLE IF NOT EXISTS description_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    celebrant_id TEXT NOT NULL,
    sender_id TEXT NOT NULL,
    sender_name TEXT NOT NULL,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL,
    created_on TEXT NOT NULL,
    sent_in_thread INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (celebrant_id) REFERENCES birthdays(user_id)
);

CREATE INDEX IF NOT EXISTS idx_birth_date ON birthdays(birth_date);
CREATE INDEX IF NOT EXISTS idx_celebrant_messages ON birthday_messages(celebrant_id);
CREATE INDEX IF NOT EXISTS idx_description_messages ON description_messages(celebrant_id);
"""


class BirthdayStoreError(Exception):
    """Base class for storage errors"""


class CelebrantNotFoundError(BirthdayStoreError):
    """Raised when a tribute is attached to a member without a birthday record"""

    def __init__(self, celebrant_id):
        self.celebrant_id = celebrant_id
        super().__init__(f"No birthday record for celebrant {celebrant_id}")


def _default_clock():
    return datetime.now(get_scheduler_timezone())


class BirthdayStore:
    """
    Explicit handle to the birthday database.

    The connection is shared between the scheduler thread and Bolt's handler
    threads; every statement runs under one lock.

    Args:
        db_path: SQLite file path, or ":memory:" for tests
        clock: Callable returning the current aware datetime (used for
               timestamps and the per-day dedup key)
    """

    def __init__(self, db_path, clock=None):
        self.db_path = db_path
        self.clock = clock or _default_clock
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode = WAL")
        self._initialize_schema()
        logger.info(f"STORE: Opened birthday database at {db_path}")

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _initialize_schema(self):
        with self._lock, self._conn:
            self._conn.executescript(SCHEMA)
        self._ensure_column("birthdays", "thread_posted_date", "TEXT")
        for table in KIND_TABLES.values():
            self._ensure_unique_index(table)

    def _ensure_column(self, table, column, column_type):
        """Add a column missing from a database created by an older schema."""
        with self._lock:
            columns = {row["name"] for row in self._conn.execute(f"PRAGMA table_info({table})")}
            if column in columns:
                return
            with self._conn:
                self._conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        logger.info(f"STORE: Added column {column} to {table}")

    def _ensure_unique_index(self, table):
        """Create the per-day dedup index, removing legacy duplicates if they block it."""
        index_sql = (
            f"CREATE UNIQUE INDEX IF NOT EXISTS unique_{table} "
            f"ON {table}(celebrant_id, sender_id, message, created_on)"
        )
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(index_sql)
            except sqlite3.IntegrityError as e:
                logger.warning(
                    f"STORE: Could not create unique index for {table} (duplicates present): {e}"
                )
                with self._conn:
                    self._conn.execute(
                        f"DELETE FROM {table} WHERE id NOT IN ("
                        f"SELECT MIN(id) FROM {table} "
                        f"GROUP BY celebrant_id, sender_id, message, created_on)"
                    )
                    self._conn.execute(index_sql)
                logger.info(f"STORE: Removed duplicates and created unique index for {table}")

    def check_connection(self):
        """Run a trivial query; True if the database answers."""
        try:
            with self._lock:
                row = self._conn.execute("SELECT 1").fetchone()
            return row[0] == 1
        except sqlite3.Error as e:
            logger.error(f"STORE_ERROR: Database connection failed: {e}")
            return False

    def close(self):
        with self._lock:
            self._conn.close()

    def _now(self):
        moment = self.clock()
        # Timestamps sort as UTC; the dedup day is the local calendar day
        return moment.astimezone(timezone.utc).isoformat(), moment.date().isoformat()

    # ------------------------------------------------------------------
    # Birthdays
    # ------------------------------------------------------------------

    def upsert_birthday(self, member_id, birth_date=None):
        """
        Insert or update a member's birthday.

        A missing date stores the placeholder. Notification bookkeeping is
        reset on every call.

        Args:
            member_id: Slack user ID
            birth_date: DD-MM string or None

        Returns:
            bool: True if an existing record was updated, False if newly created
        """
        timestamp, _ = self._now()
        stored_date = birth_date or PLACEHOLDER_DATE

        with self._lock, self._conn:
            existed = self._member_exists(member_id)
            self._conn.execute(
                """
                INSERT INTO birthdays (
                    user_id, birth_date, created_at, updated_at,
                    notification_sent, last_notification_date
                )
                VALUES (?, ?, ?, ?, 0, NULL)
                ON CONFLICT(user_id) DO UPDATE SET
                    birth_date = excluded.birth_date,
                    updated_at = excluded.updated_at,
                    notification_sent = 0,
                    last_notification_date = NULL,
                    thread_posted_date = NULL
                """,
                (member_id, stored_date, timestamp, timestamp),
            )

        logger.info(
            f"STORE: {'Updated' if existed else 'Created'} birthday for {member_id}: {stored_date}"
        )
        return existed

    def get_birthday(self, member_id):
        """Return the birthday record as a dict, or None."""
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM birthdays WHERE user_id = ?", (member_id,)
            ).fetchone()
        return _birthday_row_to_dict(row) if row else None

    def list_birthdays(self):
        """Return every birthday record, placeholders included."""
        with self._lock:
            rows = self._conn.execute("SELECT * FROM birthdays ORDER BY user_id").fetchall()
        return [_birthday_row_to_dict(row) for row in rows]

    def member_has_record(self, member_id):
        with self._lock:
            return self._member_exists(member_id)

    def _member_exists(self, member_id):
        row = self._conn.execute(
            "SELECT COUNT(*) FROM birthdays WHERE user_id = ?", (member_id,)
        ).fetchone()
        return row[0] > 0

    def record_notification(self, member_id, day):
        """
        Update notification bookkeeping after the scheduler acted on a member.

        Args:
            member_id: Slack user ID
            day: datetime.date of the run
        """
        with self._lock, self._conn:
            self._conn.execute(
                """
                UPDATE birthdays
                SET notification_sent = 1, last_notification_date = ?
                WHERE user_id = ?
                """,
                (day.isoformat(), member_id),
            )

    def record_thread_posted(self, member_id, day):
        """Remember that the celebration thread went out for member_id on day."""
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE birthdays SET thread_posted_date = ? WHERE user_id = ?",
                (day.isoformat(), member_id),
            )

    def delete_member(self, member_id):
        """
        Remove a member's tributes, descriptions and birthday record.

        Returns:
            dict: Rows deleted per table
        """
        with self._lock, self._conn:
            messages = self._conn.execute(
                "DELETE FROM birthday_messages WHERE celebrant_id = ?", (member_id,)
            ).rowcount
            descriptions = self._conn.execute(
                "DELETE FROM description_messages WHERE celebrant_id = ?", (member_id,)
            ).rowcount
            birthdays = self._conn.execute(
                "DELETE FROM birthdays WHERE user_id = ?", (member_id,)
            ).rowcount

        logger.info(
            f"STORE: Deleted member {member_id} "
            f"({messages} messages, {descriptions} descriptions, {birthdays} birthday)"
        )
        return {"messages": messages, "descriptions": descriptions, "birthdays": birthdays}

    # ------------------------------------------------------------------
    # Tributes and descriptions
    # ------------------------------------------------------------------

    def add_tribute(self, celebrant_id, sender_id, sender_name, message, media_url=None):
        """
        Store a tribute message for a celebrant.

        Returns:
            int: Rows changed (0 means an identical submission already exists today)

        Raises:
            CelebrantNotFoundError: If the celebrant has no birthday record
            BirthdayStoreError: If the database rejects the write
        """
        timestamp, day = self._now()
        try:
            with self._lock, self._conn:
                if not self._member_exists(celebrant_id):
                    raise CelebrantNotFoundError(celebrant_id)
                changes = self._conn.execute(
                    """
                    INSERT OR IGNORE INTO birthday_messages (
                        celebrant_id, sender_id, sender_name, message, media_url,
                        created_at, created_on
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (celebrant_id, sender_id, sender_name, message, media_url or None, timestamp, day),
                ).rowcount
        except sqlite3.Error as e:
            logger.error(f"STORE_ERROR: Failed to store submission for {celebrant_id}: {e}")
            raise BirthdayStoreError(f"Could not store submission for {celebrant_id}") from e

        if changes == 0:
            logger.info(f"STORE: Duplicate birthday message prevented for {sender_id} -> {celebrant_id}")
        return changes

    def add_description(self, celebrant_id, sender_id, sender_name, message):
        """
        Store a description entry for a celebrant.

        Returns:
            int: Rows changed (0 means an identical submission already exists today)

        Raises:
            CelebrantNotFoundError: If the celebrant has no birthday record
            BirthdayStoreError: If the database rejects the write
        """
        timestamp, day = self._now()
        try:
            with self._lock, self._conn:
                if not self._member_exists(celebrant_id):
                    raise CelebrantNotFoundError(celebrant_id)
                changes = self._conn.execute(
                    """
                    INSERT OR IGNORE INTO description_messages (
                        celebrant_id, sender_id, sender_name, message,
                        created_at, created_on
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (celebrant_id, sender_id, sender_name, message, timestamp, day),
                ).rowcount
        except sqlite3.Error as e:
            logger.error(f"STORE_ERROR: Failed to store submission for {celebrant_id}: {e}")
            raise BirthdayStoreError(f"Could not store submission for {celebrant_id}") from e

        if changes == 0:
            logger.info(
                f"STORE: Duplicate description message prevented for {sender_id} -> {celebrant_id}"
            )
        return changes

    def list_undelivered(self, celebrant_id, kind):
        """
        Undelivered rows of one kind for a celebrant, oldest first.

        Args:
            celebrant_id: Slack user ID
            kind: MESSAGE_KIND or DESCRIPTION_KIND
        """
        table = _table_for(kind)
        with self._lock:
            rows = self._conn.execute(
                f"SELECT * FROM {table} "
                f"WHERE celebrant_id = ? AND sent_in_thread = 0 "
                f"ORDER BY created_at ASC, id ASC",
                (celebrant_id,),
            ).fetchall()
        return [_tribute_row_to_dict(row) for row in rows]

    def mark_delivered(self, celebrant_id, kind):
        """
        Flag every undelivered row of one kind as posted.

        Returns:
            int: Rows affected (0 on a repeated call)
        """
        table = _table_for(kind)
        with self._lock, self._conn:
            changes = self._conn.execute(
                f"UPDATE {table} SET sent_in_thread = 1 "
                f"WHERE celebrant_id = ? AND sent_in_thread = 0",
                (celebrant_id,),
            ).rowcount
        logger.info(f"STORE: Marked {changes} {kind} row(s) delivered for {celebrant_id}")
        return changes

    def count_undelivered(self, celebrant_id):
        """Number of tribute messages still waiting to be posted for a celebrant."""
        with self._lock:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM birthday_messages "
                "WHERE celebrant_id = ? AND sent_in_thread = 0",
                (celebrant_id,),
            ).fetchone()
        return row[0] or 0


def _table_for(kind):
    try:
        return KIND_TABLES[kind]
    except KeyError:
        raise ValueError(f"Unknown tribute kind: {kind!r}") from None


def _birthday_row_to_dict(row):
    data = dict(row)
    data["notification_sent"] = bool(data["notification_sent"])
    return data


def _tribute_row_to_dict(row):
    data = dict(row)
    data["sent_in_thread"] = bool(data["sent_in_thread"])
    return data
