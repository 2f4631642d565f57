# appstore_charts/ingest.py
"""
Ingestion orchestrator.

fetch_one() runs one (country, ranking type, category) task:
fetch the feed -> enrich via lookup -> upsert app + ranking, app by app.
fetch_all() sweeps every country x ranking type for the default category,
one task at a time with a pause in between.
"""
import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from appstore_charts import config
from appstore_charts.db import ChartStore
from appstore_charts.feeds import fetch_ranking_feed
from appstore_charts.lookup import fetch_many_app_details
from appstore_charts.models import (
    SUMMARY_MAX_LENGTH, AppDetail, AppRecord, RankingRecord, RawFetchedApp,
    SweepEntry, SweepResult, TaskResult,
)
from appstore_charts.rankings import DEFAULT_CATEGORY, CategoryType, Country, RankingType
from appstore_charts.retry import with_retry

logger = logging.getLogger(__name__)


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _release_date(value: Optional[str]) -> Optional[str]:
    # lookup gives '2020-06-01T07:00:00Z', the feeds already give 'YYYY-MM-DD'
    return value[:10] if value else None


def merge_app(fetched: RawFetchedApp, detail: Optional[AppDetail], country: str) -> AppRecord:
    """Lookup fields win when present, then feed fields, then defaults."""
    d = detail or AppDetail(track_id=fetched.app_store_id)

    summary = d.description or fetched.summary
    genre_id = str(d.primary_genre_id) if d.primary_genre_id is not None else None

    return AppRecord(
        app_store_id=fetched.app_store_id,
        country=country,
        bundle_id=d.bundle_id or fetched.bundle_id,
        name=d.track_name or fetched.name,
        artist_name=d.artist_name or fetched.artist_name,
        artwork_url_100=d.artwork_url_100 or fetched.artwork_url_100,
        artwork_url_512=d.artwork_url_512 or fetched.artwork_url_512,
        summary=summary[:SUMMARY_MAX_LENGTH] if summary else None,
        category_id=fetched.category_id or genre_id,
        price=d.price if d.price is not None else (fetched.price or Decimal("0")),
        currency=d.currency or fetched.currency or "USD",
        release_date=_release_date(d.release_date) or _release_date(fetched.release_date),
        average_rating=d.average_user_rating,
        rating_count=d.user_rating_count or 0,
    )


def fetch_one(
    store: ChartStore,
    country: Country,
    ranking_type: RankingType,
    category_type: CategoryType = DEFAULT_CATEGORY,
    limit: int = config.FEED_LIMIT,
    rank_date: Optional[str] = None,
) -> TaskResult:
    country = Country(country)
    ranking_type = RankingType(ranking_type)
    category_type = CategoryType(category_type)
    rank_date = rank_date or today_utc()
    label = f"{country.value}/{ranking_type.value}/{category_type.value}"

    try:
        fetched = with_retry(
            lambda: fetch_ranking_feed(country, ranking_type, category_type, limit)
        )
        if not fetched:
            logger.warning("No apps fetched for %s", label)
            return TaskResult(success=False, count=0, message="No data fetched from Apple RSS")

        details = with_retry(
            lambda: fetch_many_app_details([a.app_store_id for a in fetched], country)
        )
        logger.info("%s: %s apps in feed, %s enriched", label, len(fetched), len(details))

        persisted = 0
        for app in fetched:
            try:
                record = merge_app(app, details.get(app.app_store_id), country.value)
                app_id = store.upsert_app(record)
                if app_id is None:
                    logger.warning("%s: app %s not persisted", label, app.app_store_id)
                    continue
                store.upsert_ranking(RankingRecord(
                    app_id=app_id,
                    country=country.value,
                    ranking_type=ranking_type.value,
                    category_type=category_type.value,
                    rank=app.rank,
                    rank_date=rank_date,
                ))
                persisted += 1
            except Exception as e:
                logger.error("%s: failed to persist app %s: %s", label, app.app_store_id, e)

        return TaskResult(
            success=True,
            count=len(fetched),
            message="Rankings fetched successfully",
            persisted=persisted,
        )
    except Exception as e:
        logger.error("Failed to fetch rankings for %s: %s", label, e)
        return TaskResult(success=False, count=0, message="Failed to fetch rankings")


def fetch_all(store: ChartStore, delay: float = config.TASK_DELAY) -> SweepResult:
    """Run every country x ranking type for the default category, in order."""
    logger.info("Starting ranking sweep...")
    started = time.monotonic()
    sweep = SweepResult()
    category_type = DEFAULT_CATEGORY

    tasks = [(c, r) for c in Country for r in RankingType]
    for i, (country, ranking_type) in enumerate(tasks):
        if i > 0:
            time.sleep(delay)  # rate limit

        logger.info("Fetching %s/%s/%s...", country.value, ranking_type.value, category_type.value)
        try:
            result = fetch_one(store, country, ranking_type, category_type)
        except Exception as e:
            logger.error("Task %s/%s crashed: %s", country.value, ranking_type.value, e)
            result = TaskResult(success=False, count=0)

        sweep.results.append(SweepEntry(
            country=country.value,
            ranking_type=ranking_type.value,
            category_type=category_type.value,
            success=result.success,
            count=result.count,
        ))

    sweep.elapsed_seconds = time.monotonic() - started
    logger.info(
        "Completed sweep in %.1fs: %s/%s successful, %s total apps",
        sweep.elapsed_seconds, sweep.success_count, sweep.total_count, sweep.total_apps,
    )
    return sweep
