from datetime import datetime, timezone

import pytest

from appstore_charts import scheduler
from appstore_charts.models import SweepEntry, SweepResult


def _utc(hour, minute=0):
    return datetime(2024, 1, 1, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize("now,expected", [
    (_utc(21), 3600),
    (_utc(22), 24 * 3600),
    (_utc(23, 30), 22.5 * 3600),
    (_utc(0), 22 * 3600),
])
def test_seconds_until_next_run(now, expected):
    assert scheduler.seconds_until_next_run(now, 22, 0) == expected


def test_run_sweep_records_summary(store, monkeypatch):
    sweep = SweepResult(results=[SweepEntry("US", "topfree", "all", True, 100)], elapsed_seconds=2.04)
    monkeypatch.setattr(scheduler, "fetch_all", lambda s: sweep)

    assert scheduler.run_sweep(store) is sweep

    status = scheduler.get_status()
    assert status["running"] is False
    assert status["error"] is None
    assert status["last_summary"] == {
        "elapsed_seconds": 2.0, "success_count": 1, "total_count": 1, "total_apps": 100,
    }
    assert status["last_completed_at"]


def test_overlapping_sweep_is_turned_away(store, monkeypatch):
    monkeypatch.setattr(scheduler, "fetch_all", lambda s: pytest.fail("should not run"))
    scheduler._sweep_lock.acquire()
    try:
        assert scheduler.run_sweep(store) is None
    finally:
        scheduler._sweep_lock.release()


def test_failed_sweep_reraises_and_releases_lock(store, monkeypatch):
    def boom(s):
        raise RuntimeError("boom")

    monkeypatch.setattr(scheduler, "fetch_all", boom)
    with pytest.raises(RuntimeError):
        scheduler.run_sweep(store)

    status = scheduler.get_status()
    assert status["error"] == "boom"
    assert status["running"] is False

    monkeypatch.setattr(scheduler, "fetch_all", lambda s: SweepResult())
    assert scheduler.run_sweep(store) is not None
