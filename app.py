"""
Birthday Thread Bot - Slack birthday tribute collection and celebration threads

Main application entry point that opens the birthday database, registers the
slash commands and the collection form handler, and starts the daily
background check.

Uses Slack Bolt (Socket Mode), SQLite, OpenAI API, and background scheduling.
"""

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

# Import configuration
from config import (
    DATABASE_FILE,
    IDENTITY_CACHE_MAX_SIZE,
    IDENTITY_CACHE_TTL_SECONDS,
    logger,
)

# Import storage and services
from storage.birthdays import BirthdayStore
from services.scheduler import setup_scheduler, run_now
from utils.cache import IdentityCache
from workspace.directory import MemberDirectory, NameResolver

# Import handlers
from handlers.slash_commands import register_slash_commands
from handlers.tribute_handlers import register_tribute_handlers

# Initialize Slack app (reads SLACK_BOT_TOKEN from the environment)
app = App()
logger.info("INIT: App initialized")

# Shared state, passed explicitly to every consumer
store = BirthdayStore(DATABASE_FILE)
directory = MemberDirectory(app.client)
resolver = NameResolver(
    directory, IdentityCache(ttl=IDENTITY_CACHE_TTL_SECONDS, maxsize=IDENTITY_CACHE_MAX_SIZE)
)

# Register slash commands and interactive components
register_slash_commands(app, store, resolver, directory)
register_tribute_handlers(app, store)

# Start the app
if __name__ == "__main__":
    handler = SocketModeHandler(app)
    logger.info("INIT: Handler initialized, starting app")
    try:
        if not store.check_connection():
            logger.critical("CRITICAL: Birthday database is not reachable")

        # Daily check at DAILY_CHECK_TIME on a background thread
        setup_scheduler(app, store, directory)

        # Catch up on anything due today
        run_now()

        # Start the app
        handler.start()
    except Exception as e:
        logger.critical(f"CRITICAL: Error starting app: {e}")
