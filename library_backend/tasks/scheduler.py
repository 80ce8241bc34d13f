from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from library_backend.tasks.jobs import run_reminder_job, run_reservation_cleanup_job


def start_scheduler(app):
    """
    Starts the periodic jobs in a BackgroundScheduler.
    - Skipped when SCHEDULER_ENABLED is false (tests, one-off CLI runs).
    - Skipped in the debug reloader's watcher process so jobs do not run twice.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] disabled by configuration.")
        return None

    # Werkzeug's reloader runs the real app in the process with WERKZEUG_RUN_MAIN=true
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    minutes = app.config.get("SCHEDULER_INTERVAL_MINUTES", 10)
    scheduler = BackgroundScheduler(timezone="UTC")

    for job_id, func in (
        ("loan_reminder_job", run_reminder_job),
        ("reservation_cleanup_job", run_reservation_cleanup_job),
    ):
        scheduler.add_job(
            func=func,
            args=[app],
            trigger=IntervalTrigger(minutes=minutes),
            id=job_id,
            replace_existing=True,
            max_instances=1,        # never overlap with itself
            coalesce=True,          # collapse missed runs into one
            misfire_grace_time=120
        )

    scheduler.start()
    app.logger.info(f"[scheduler] jobs started (every {minutes} minutes).")

    app.extensions["apscheduler"] = scheduler
    atexit.register(shutdown_scheduler, app)
    return scheduler


def shutdown_scheduler(app):
    sch = app.extensions.get("apscheduler")
    if sch and getattr(sch, "running", False):
        sch.shutdown(wait=False)
        app.logger.info("[scheduler] Scheduler shutdown.")
