# appstore_charts/db.py
"""
SQLite store for apps and daily ranking snapshots.

A ChartStore is created once per process and handed to the orchestrator,
the query layer and the API. Connections are opened per operation, so the
API worker threads and the scheduler thread never share one.
"""
import logging
import os
import sqlite3
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from appstore_charts.models import AppRecord, RankingRecord

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS apps (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    app_store_id    TEXT    NOT NULL,
    bundle_id       TEXT,
    name            TEXT    NOT NULL,
    artist_name     TEXT,
    artwork_url_100 TEXT,
    artwork_url_512 TEXT,
    summary         TEXT,
    category_id     TEXT,
    price           NUMERIC DEFAULT 0,
    currency        TEXT    DEFAULT 'USD',
    release_date    TEXT,                            -- 'YYYY-MM-DD'
    average_rating  NUMERIC,
    rating_count    INTEGER DEFAULT 0,
    country         TEXT    NOT NULL,
    created_at      TEXT    DEFAULT (datetime('now')),
    updated_at      TEXT    DEFAULT (datetime('now'))
);

-- the same store id in two countries is two rows
CREATE UNIQUE INDEX IF NOT EXISTS apps_store_country_idx ON apps (app_store_id, country);
CREATE INDEX IF NOT EXISTS apps_category_idx ON apps (category_id);

CREATE TABLE IF NOT EXISTS rankings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    app_id          INTEGER NOT NULL REFERENCES apps (id),
    country         TEXT    NOT NULL,
    ranking_type    TEXT    NOT NULL CHECK (ranking_type IN ('topgrossing', 'topfree', 'toppaid')),
    category_type   TEXT    NOT NULL DEFAULT 'all',
    rank            INTEGER NOT NULL CHECK (rank > 0),
    rank_date       TEXT    NOT NULL,                -- 'YYYY-MM-DD'
    created_at      TEXT    DEFAULT (datetime('now'))
);

-- one snapshot per app/context/day
CREATE UNIQUE INDEX IF NOT EXISTS rankings_unique_idx
ON rankings (app_id, country, ranking_type, category_type, rank_date);
CREATE INDEX IF NOT EXISTS rankings_app_idx ON rankings (app_id);
CREATE INDEX IF NOT EXISTS rankings_date_idx ON rankings (rank_date);
CREATE INDEX IF NOT EXISTS rankings_country_type_date_idx ON rankings (country, ranking_type, rank_date);
"""


def _num(value: Optional[Decimal]) -> Optional[str]:
    # sqlite3 has no Decimal adapter; NUMERIC affinity converts the text back
    return str(value) if value is not None else None


class ChartStore:

    def __init__(self, db_path: str):
        self.db_path = str(db_path)

    def __repr__(self):
        return f"ChartStore({self.db_path!r})"

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        con = sqlite3.connect(self.db_path, timeout=30)
        con.row_factory = sqlite3.Row
        try:
            yield con
            con.commit()
        except BaseException:
            con.rollback()
            raise
        finally:
            con.close()

    def available(self) -> bool:
        try:
            with self.connect() as con:
                con.execute("SELECT 1")
            return True
        except sqlite3.Error as e:
            logger.warning("Database not available at %s: %s", self.db_path, e)
            return False

    def ensure_schema(self) -> None:
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self.connect() as con:
            con.executescript(SCHEMA)
        logger.info("Schema ready at %s", self.db_path)

    # ---------- Upserts ----------

    def upsert_app(self, app: AppRecord) -> Optional[int]:
        """Insert or update by (app_store_id, country); returns apps.id or None on error.

        One statement, so concurrent upserts of the same app resolve in SQLite
        instead of racing between a lookup and an insert.
        """
        try:
            with self.connect() as con:
                con.execute("""
                    INSERT INTO apps (
                        app_store_id, bundle_id, name, artist_name, artwork_url_100,
                        artwork_url_512, summary, category_id, price, currency,
                        release_date, average_rating, rating_count, country
                    ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)
                    ON CONFLICT (app_store_id, country) DO UPDATE SET
                        name=excluded.name,
                        artist_name=excluded.artist_name,
                        artwork_url_100=excluded.artwork_url_100,
                        artwork_url_512=excluded.artwork_url_512,
                        summary=excluded.summary,
                        category_id=excluded.category_id,
                        price=excluded.price,
                        currency=excluded.currency,
                        release_date=excluded.release_date,
                        average_rating=excluded.average_rating,
                        rating_count=excluded.rating_count,
                        bundle_id=COALESCE(apps.bundle_id, excluded.bundle_id),
                        updated_at=datetime('now')
                """, (
                    app.app_store_id, app.bundle_id, app.name, app.artist_name,
                    app.artwork_url_100, app.artwork_url_512, app.summary, app.category_id,
                    _num(app.price), app.currency, app.release_date,
                    _num(app.average_rating), app.rating_count, app.country,
                ))
                # lastrowid is not reliable after DO UPDATE
                row = con.execute(
                    "SELECT id FROM apps WHERE app_store_id=? AND country=?",
                    (app.app_store_id, app.country),
                ).fetchone()
                return row["id"] if row else None
        except sqlite3.Error as e:
            logger.error("Failed to upsert app %s/%s: %s", app.country, app.app_store_id, e)
            return None

    def upsert_ranking(self, ranking: RankingRecord) -> None:
        """Insert a snapshot; on a same-day duplicate only the rank is updated."""
        if int(ranking.rank) < 1:
            logger.error("Refusing ranking with non-positive rank: %s", ranking)
            return
        try:
            with self.connect() as con:
                con.execute("""
                    INSERT INTO rankings (app_id, country, ranking_type, category_type, rank, rank_date)
                    VALUES (?,?,?,?,?,?)
                    ON CONFLICT (app_id, country, ranking_type, category_type, rank_date)
                    DO UPDATE SET rank = excluded.rank
                """, (
                    ranking.app_id, ranking.country, ranking.ranking_type,
                    ranking.category_type, int(ranking.rank), ranking.rank_date,
                ))
        except sqlite3.Error as e:
            logger.error(
                "Failed to upsert ranking app=%s %s/%s/%s %s: %s",
                ranking.app_id, ranking.country, ranking.ranking_type,
                ranking.category_type, ranking.rank_date, e,
            )
