"""
Background scheduler for the daily birthday check.

Runs daily_birthday_check() once a day at DAILY_CHECK_TIME in
SCHEDULER_TIMEZONE on a daemon thread, with heartbeat-based health reporting.

Key functions:
- setup_scheduler(), run_now(): Scheduler initialization and startup check
- daily_task(): The scheduled job
- get_scheduler_health(), get_scheduler_summary(): Monitoring

Uses schedule library and threading for non-blocking execution.
"""

import schedule
import time
import threading
from datetime import datetime

from config import (
    DAILY_CHECK_TIME,
    HEARTBEAT_STALE_THRESHOLD_SECONDS,
    SCHEDULER_CHECK_INTERVAL_SECONDS,
    SCHEDULER_TIMEZONE,
    get_logger,
)
from services.birthday import daily_birthday_check
from utils.date import get_scheduler_timezone

logger = get_logger("scheduler")

# Registered at setup
_app_instance = None
_store = None
_directory = None

# Scheduler health monitoring
_scheduler_thread = None
_last_heartbeat = None
_total_executions = 0
_failed_executions = 0
_scheduler_running = False


def daily_task():
    """Daily task - runs the birthday check for every stored birthday"""
    current_time = datetime.now(get_scheduler_timezone())
    logger.info(
        f"SCHEDULER: Running daily check at {current_time.strftime('%H:%M:%S')} ({SCHEDULER_TIMEZONE})"
    )

    if _app_instance and _store:
        daily_birthday_check(_app_instance.client, _store, _directory, current_time)
    else:
        logger.error("SCHEDULER: No app instance or store registered")


def run_scheduler():
    """Run the scheduler in a separate thread with health monitoring"""
    global _last_heartbeat, _total_executions, _failed_executions, _scheduler_running

    _scheduler_running = True
    logger.info("SCHEDULER_HEALTH: Scheduler thread started and running")

    while True:
        try:
            _last_heartbeat = datetime.now()

            if schedule.jobs:
                _total_executions += 1

            schedule.run_pending()
            time.sleep(SCHEDULER_CHECK_INTERVAL_SECONDS)

        except Exception as e:
            _failed_executions += 1
            logger.error(f"SCHEDULER_HEALTH: Error in scheduler loop: {e}")
            time.sleep(SCHEDULER_CHECK_INTERVAL_SECONDS)


def register(app, store, directory=None):
    """Register what the daily job runs against, without starting a thread"""
    global _app_instance, _store, _directory
    _app_instance = app
    _store = store
    _directory = directory


def setup_scheduler(app, store, directory=None):
    """
    Schedule the daily check and start the scheduler thread

    Args:
        app: Slack app instance
        store: BirthdayStore shared with the command handlers
        directory: MemberDirectory (built from app.client if omitted)
    """
    global _scheduler_thread
    register(app, store, directory)

    check_time = DAILY_CHECK_TIME.strftime("%H:%M")
    schedule.every().day.at(check_time, SCHEDULER_TIMEZONE).do(daily_task)
    logger.info(f"SCHEDULER: Daily birthday check scheduled for {check_time} ({SCHEDULER_TIMEZONE})")

    _scheduler_thread = threading.Thread(target=run_scheduler)
    _scheduler_thread.daemon = True  # Exit with the main program
    _scheduler_thread.start()
    logger.info("SCHEDULER: Background scheduler thread started")


def run_now():
    """
    Run the birthday check immediately (startup catch-up).

    Records already handled today are skipped, so this never repeats the
    timed run's work.
    """
    if not _app_instance or not _store:
        logger.error("SCHEDULER: No app instance or store registered")
        return None

    current_time = datetime.now(get_scheduler_timezone())
    logger.info(
        f"STARTUP: Running startup birthday check at {current_time.strftime('%H:%M:%S')} ({SCHEDULER_TIMEZONE})"
    )
    return daily_birthday_check(_app_instance.client, _store, _directory, current_time)


def get_scheduler_health():
    """
    Get scheduler health status for monitoring

    Returns:
        dict: Scheduler health information
    """
    now = datetime.now()

    thread_alive = _scheduler_thread is not None and _scheduler_thread.is_alive()

    heartbeat_fresh = False
    heartbeat_age_seconds = None
    if _last_heartbeat:
        heartbeat_age_seconds = (now - _last_heartbeat).total_seconds()
        heartbeat_fresh = heartbeat_age_seconds < HEARTBEAT_STALE_THRESHOLD_SECONDS

    success_rate = None
    if _total_executions > 0:
        success_rate = ((_total_executions - _failed_executions) / _total_executions) * 100

    health_status = "ok" if (thread_alive and heartbeat_fresh and _scheduler_running) else "error"

    return {
        "status": health_status,
        "thread_alive": thread_alive,
        "scheduler_running": _scheduler_running,
        "last_heartbeat": _last_heartbeat.isoformat() if _last_heartbeat else None,
        "heartbeat_age_seconds": heartbeat_age_seconds,
        "heartbeat_fresh": heartbeat_fresh,
        "total_executions": _total_executions,
        "failed_executions": _failed_executions,
        "success_rate_percent": success_rate,
        "scheduled_jobs": len(schedule.jobs),
        "timezone": SCHEDULER_TIMEZONE,
    }


def get_scheduler_summary():
    """
    Get human-readable scheduler health summary

    Returns:
        str: Human-readable scheduler status
    """
    health = get_scheduler_health()

    if health["status"] == "ok":
        rate = health["success_rate_percent"]
        rate_text = f"{rate:.1f}% success rate" if rate is not None else "no runs yet"
        return f"✅ Scheduler healthy - {health['scheduled_jobs']} jobs, {rate_text}"

    issues = []
    if not health["thread_alive"]:
        issues.append("thread not running")
    if not health["heartbeat_fresh"]:
        if health["heartbeat_age_seconds"] is None:
            issues.append("no heartbeat yet")
        else:
            issues.append(f"heartbeat stale ({health['heartbeat_age_seconds']:.0f}s ago)")
    if not health["scheduler_running"]:
        issues.append("not initialized")

    return f"❌ Scheduler issues: {', '.join(issues)}"
