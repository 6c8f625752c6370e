"""
Multi-component logging configuration for Birthday Thread Bot.

Sets up component-specific log files with automatic rotation to organize
logs by functionality: commands, birthday pipeline, AI, Slack API, storage.

Key functions: setup_logging(), get_logger().
"""

import os
import logging
import logging.handlers

# Use relative paths to avoid circular import, construct full paths when needed
LOG_FILES = {
    "main": "main.log",  # Core application
    "commands": "commands.log",  # Slash commands and form submissions
    "birthday": "birthday.log",  # Collection, thread posting, daily run
    "ai": "ai.log",  # OpenAI interactions
    "slack": "slack.log",  # Slack API interactions
    "storage": "storage.log",  # Database operations
    "system": "system.log",  # Utilities
    "scheduler": "scheduler.log",  # Timer thread
}

# Component to log file mapping
COMPONENT_LOG_MAPPING = {
    # Core
    "main": "main",
    "config": "main",
    "app": "main",
    # Commands (handlers/)
    "commands": "commands",
    "tributes": "commands",
    # Birthday pipeline (services/)
    "birthday": "birthday",
    "collection": "birthday",
    "thread": "birthday",
    # AI
    "ai": "ai",
    "poem": "ai",
    "openai": "ai",
    # Slack (workspace/)
    "slack": "slack",
    "directory": "slack",
    # Storage (storage/)
    "storage": "storage",
    # System (utils/)
    "date": "system",
    "cache": "system",
    # Scheduler (services/)
    "scheduler": "scheduler",
}

# Global variables for logging system
log_handlers = {}
_logging_initialized = False


def setup_logging(logs_dir):
    """
    Set up the logging system with component-specific file routing

    Args:
        logs_dir: Directory where log files should be stored
    """
    global _logging_initialized

    if _logging_initialized:
        return  # Already initialized

    os.makedirs(logs_dir, exist_ok=True)

    log_formatter = logging.Formatter(
        "%(asctime)s - [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    for log_type, log_file in LOG_FILES.items():
        full_log_path = os.path.join(logs_dir, log_file)
        # Use RotatingFileHandler to prevent files from getting too large
        handler = logging.handlers.RotatingFileHandler(
            full_log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB per file
            backupCount=5,  # Keep 5 backup files
            encoding="utf-8",
        )
        handler.setFormatter(log_formatter)
        log_handlers[log_type] = handler

    root_logger = logging.getLogger("birthday_bot")
    root_logger.setLevel(logging.INFO)

    _logging_initialized = True


def get_logger(name):
    """
    Get a logger routed to the log file of its component.

    Args:
        name: Logger name/component (e.g., 'commands', 'slack', 'birthday')

    Returns:
        Configured logger instance with appropriate file routing
    """
    if not _logging_initialized:
        raise RuntimeError("Logging system not initialized. Call setup_logging() first.")

    if not name.startswith("birthday_bot."):
        full_name = f"birthday_bot.{name}"
    else:
        full_name = name
        name = name.replace("birthday_bot.", "")

    logger = logging.getLogger(full_name)

    # Prevent duplicate handlers
    if logger.hasHandlers():
        return logger

    log_type = COMPONENT_LOG_MAPPING.get(name, "system")  # Default to system.log

    if log_type in log_handlers:
        logger.addHandler(log_handlers[log_type])
        logger.setLevel(logging.INFO)
        logger.propagate = False  # Don't propagate to parent to avoid duplicate logs

    return logger
