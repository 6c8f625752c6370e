"""
Birthday Thread Bot Configuration - Core Settings and Constants

Centralized configuration including environment variables, file paths,
scheduling windows, Slack limits and OpenAI parameters.

Key modules: storage/birthdays.py, utils/log_setup.py
"""

import os
from datetime import time

from dotenv import load_dotenv

# Load environment variables first - this should be at the very top
# Project root is one level up from the config/ package directory
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
# Load .env from the project root
load_dotenv(os.path.join(BASE_DIR, ".env"), override=True)

# ----- FILE STRUCTURE CONFIGURATION -----

# Directory structure definitions
DATA_DIR = os.getenv("DATA_DIR", "data")
LOGS_DIR = os.path.join(DATA_DIR, "logs")
STORAGE_DIR = os.path.join(DATA_DIR, "storage")

# SQLite database holding birthdays, tribute messages and descriptions
DATABASE_FILE = os.getenv("DATABASE_FILE", os.path.join(STORAGE_DIR, "birthdays.db"))

# ----- APPLICATION CONFIGURATION -----

# Channel configuration
BIRTHDAY_CHANNEL = os.getenv("BIRTHDAY_CHANNEL_ID")
ADMIN_CHANNEL = os.getenv("ADMIN_CHANNEL_ID")

# Date format constants
DAY_MONTH_FORMAT = "%d-%m"  # User-facing and stored format (DD-MM)
DAY_MONTH_PATTERN = r"^\d{2}-\d{2}$"
REFERENCE_LEAP_YEAR = 2000  # Lets 29-02 validate as a real date

# Sentinel stored when a member is registered before their date is known
PLACEHOLDER_DATE = "1900-01-01"

# Slackbot never receives collection forms and never matches name lookups
SYSTEM_ACCOUNT_ID = "USLACKBOT"

# ----- SCHEDULING CONFIGURATION -----

# Daily run time, interpreted in SCHEDULER_TIMEZONE (not server local time)
DAILY_CHECK_TIME = time(9, 0)
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "Europe/London")

# Day offsets that trigger an action in the daily run
COLLECTION_LEAD_DAYS = 7  # Ask colleagues for tributes
DIGEST_LEAD_DAYS = 1  # Tell admins how many tributes are waiting
CELEBRATION_DAY_OFFSET = 0  # Post the birthday thread

# Scheduler timing constants
SCHEDULER_CHECK_INTERVAL_SECONDS = 60  # How often the scheduler thread wakes up
HEARTBEAT_STALE_THRESHOLD_SECONDS = 120  # When to consider scheduler unhealthy (2 min)

# ----- COLLECTION FAN-OUT -----

# Collection forms are sent in small batches with a pause in between
COLLECTION_BATCH_SIZE = int(os.getenv("COLLECTION_BATCH_SIZE", "1"))
COLLECTION_BATCH_DELAY_SECONDS = float(os.getenv("COLLECTION_BATCH_DELAY_SECONDS", "2.5"))

# Prompts shown as placeholder in the "Describe Them" box (one picked at random)
DESCRIPTION_PROMPTS = (
    "What makes them unique and essential?",
    "What's something you admire about them?",
    "What's their defining feature?",
    "What makes them amazing to work with?",
    "How would you describe them in one word?",
    "What's their superpower?",
)

# ----- DIRECTORY LOOKUPS -----

# users.list pagination safety cap
MAX_DIRECTORY_PAGES = 10

# Name -> member resolution cache
IDENTITY_CACHE_TTL_SECONDS = 5 * 60
IDENTITY_CACHE_MAX_SIZE = 512

# ----- OPENAI CONFIGURATION -----

DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"
OPENAI_MODEL = os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)

# Token limits for different completion use cases
TOKEN_LIMITS = {
    "birthday_poem": 150,  # Short celebratory poem from colleague descriptions
}

# Temperature settings for creativity control
TEMPERATURE_SETTINGS = {
    "default": 0.7,  # Standard temperature for poems
}

# Timeout values in seconds
TIMEOUTS = {
    "http_request": 30,  # OpenAI request timeout
}

# Returned whenever poem generation fails for any reason
FALLBACK_POEM = (
    "Here's to another year of joy and cheer,\n"
    "With colleagues who hold you ever so dear.\n"
    "Your presence makes our workplace bright,\n"
    "Happy birthday, may your day be just right!"
)

# ----- TEAM AND BOT IDENTITY -----

BOT_NAME = "Birthday Thread Bot"

# ----- INITIALIZATION -----

# Initialize logging system
from utils.log_setup import setup_logging

setup_logging(LOGS_DIR)

# Get the main logger
from utils.log_setup import get_logger

logger = get_logger("main")

# Create directory structure
for directory in [DATA_DIR, LOGS_DIR, STORAGE_DIR]:
    if not os.path.exists(directory):
        os.makedirs(directory)
        logger.info(f"CONFIG: Created directory {directory}")

# Log any configuration issues
if not BIRTHDAY_CHANNEL:
    logger.error("CONFIG_ERROR: BIRTHDAY_CHANNEL_ID not found in .env file")
if not ADMIN_CHANNEL:
    logger.error("CONFIG_ERROR: ADMIN_CHANNEL_ID not found in .env file")
