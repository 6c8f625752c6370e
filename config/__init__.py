"""
Birthday Thread Bot Configuration Package

Re-exports all settings.
Usage: from config import BIRTHDAY_CHANNEL, get_logger, ...

Modules:
    config.settings - Core settings, constants, scheduling windows
"""

from config.settings import *  # noqa: F401, F403
