# appstore_charts/scheduler.py
"""
Daily sweep trigger.

A daemon thread sleeps until the configured UTC time (22:00 by default,
07:00 in Japan) and runs fetch_all(). Sweeps never overlap: run_sweep()
holds a lock for the whole pass, and a second caller is turned away.
Status is kept in memory so the API can report progress.
"""
import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from appstore_charts import config
from appstore_charts.db import ChartStore
from appstore_charts.ingest import fetch_all
from appstore_charts.models import SweepResult

logger = logging.getLogger(__name__)

_status_lock = threading.Lock()
_status = {
    "running": False,
    "started_at": None,
    "last_completed_at": None,
    "last_summary": None,
    "error": None,
}

_sweep_lock = threading.Lock()


def get_status() -> dict:
    """Return a snapshot of the current sweep status."""
    with _status_lock:
        return dict(_status)


def _update_status(**kwargs):
    with _status_lock:
        _status.update(kwargs)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def seconds_until_next_run(
    now: datetime,
    hour: int = config.SCHEDULE_HOUR_UTC,
    minute: int = config.SCHEDULE_MINUTE_UTC,
) -> float:
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def run_sweep(store: ChartStore) -> Optional[SweepResult]:
    """Run one sweep unless another one is in progress (then return None)."""
    if not _sweep_lock.acquire(blocking=False):
        logger.warning("Sweep already running; skipping this trigger.")
        return None
    try:
        _update_status(running=True, started_at=_now().isoformat(), error=None)
        sweep = fetch_all(store)
        totals = sweep.to_dict()["totals"]
        _update_status(last_completed_at=_now().isoformat(), last_summary=totals)
        return sweep
    except Exception as e:
        logger.error("Sweep failed: %s", e)
        _update_status(error=str(e))
        raise
    finally:
        _update_status(running=False)
        _sweep_lock.release()


def _scheduler_loop(store: ChartStore):
    while True:
        wait = seconds_until_next_run(_now())
        logger.info("Next ranking sweep in %.0fs", wait)
        time.sleep(wait)
        try:
            run_sweep(store)
        except Exception as e:
            logger.error("Scheduler error: %s", e)


_scheduler_started = False
_scheduler_lock = threading.Lock()


def start_scheduler(store: ChartStore) -> bool:
    """Start the background thread once per process. Returns True if started now."""
    global _scheduler_started
    with _scheduler_lock:
        if _scheduler_started:
            return False
        _scheduler_started = True

    thread = threading.Thread(
        target=_scheduler_loop, args=(store,), daemon=True, name="ranking-sweep"
    )
    thread.start()
    logger.info(
        "Scheduled daily ranking sweep at %02d:%02d UTC",
        config.SCHEDULE_HOUR_UTC, config.SCHEDULE_MINUTE_UTC,
    )
    return True
