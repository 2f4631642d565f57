# appstore_charts/queries.py
"""
Read side: ranking lists, app history, search and cross-country lookups.

Every function degrades to an empty result (and a log line) when the store
cannot be read. Dates are compared with date() so a stored time-of-day
component never hides a row.
"""
import logging
import sqlite3
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from appstore_charts.db import ChartStore
from appstore_charts.rankings import category_name

logger = logging.getLogger(__name__)

PERIODS = ("week", "month", "year")

RANKING_COLUMNS = """
    r.id AS ranking_id, r.country, r.ranking_type, r.category_type, r.rank,
    date(r.rank_date) AS rank_date,
    a.id AS app_id, a.app_store_id, a.bundle_id, a.name, a.artist_name,
    a.artwork_url_100, a.artwork_url_512, a.category_id, a.price, a.currency,
    a.average_rating, a.rating_count
"""


def _v(value):
    # accepts enum members or plain strings
    return getattr(value, "value", value)


def _values(items: Sequence) -> List[str]:
    return [_v(i) for i in items]


def _placeholders(items: Sequence) -> str:
    return ",".join(["?"] * len(items))


def list_rankings(
    store: ChartStore,
    countries: Sequence[str],
    ranking_type: str,
    category_type: str,
    rank_date: str,
    limit: int = 20,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    """Snapshot rows for one context/day, ordered by rank, plus the total count."""
    countries = _values(countries)
    if not countries:
        return [], 0
    where = f"""
        r.country IN ({_placeholders(countries)})
        AND r.ranking_type=? AND r.category_type=? AND date(r.rank_date)=?
    """
    params = (*countries, _v(ranking_type), _v(category_type), rank_date)
    try:
        with store.connect() as con:
            rows = con.execute(f"""
                SELECT {RANKING_COLUMNS}
                FROM rankings r JOIN apps a ON a.id = r.app_id
                WHERE {where}
                ORDER BY r.rank ASC, r.country ASC
                LIMIT ? OFFSET ?
            """, (*params, limit, offset)).fetchall()
            total = con.execute(
                f"SELECT COUNT(*) FROM rankings r WHERE {where}", params
            ).fetchone()[0]
    except sqlite3.Error as e:
        logger.error("Failed to get rankings: %s", e)
        return [], 0
    return [dict(r) for r in rows], total


def group_by_app(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Collapse per-country rows into one entry per store id: {app, rankings: {country: rank}}."""
    grouped: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        entry = grouped.setdefault(row["app_store_id"], {
            "app": {
                "id": row["app_id"],
                "app_store_id": row["app_store_id"],
                "name": row["name"],
                "artist_name": row["artist_name"],
                "artwork_url_100": row["artwork_url_100"],
                "category_id": row["category_id"],
                "category_name": category_name(row["category_id"]),
                "category_name_ja": category_name(row["category_id"], "name_ja"),
            },
            "rankings": {},
        })
        entry["rankings"][row["country"]] = row["rank"]
    return sorted(grouped.values(), key=lambda e: min(e["rankings"].values()))


def latest_ranking_date(store: ChartStore, country: str) -> Optional[str]:
    try:
        with store.connect() as con:
            row = con.execute(
                "SELECT MAX(date(rank_date)) FROM rankings WHERE country=?",
                (_v(country),),
            ).fetchone()
    except sqlite3.Error as e:
        logger.error("Failed to get latest ranking date: %s", e)
        return None
    return row[0] if row else None


def get_app(store: ChartStore, app_id: int) -> Optional[Dict[str, Any]]:
    try:
        with store.connect() as con:
            row = con.execute("SELECT * FROM apps WHERE id=?", (app_id,)).fetchone()
    except sqlite3.Error as e:
        logger.error("Failed to get app %s: %s", app_id, e)
        return None
    if not row:
        return None
    app = dict(row)
    app["category_name"] = category_name(app["category_id"])
    app["category_name_ja"] = category_name(app["category_id"], "name_ja")
    return app


def period_start(period: str, today: date) -> date:
    if period == "week":
        return today - timedelta(days=7)
    if period == "month":
        month = today.month - 1 or 12
        year = today.year - (1 if today.month == 1 else 0)
        day = min(today.day, _days_in_month(year, month))
        return date(year, month, day)
    if period == "year":
        try:
            return today.replace(year=today.year - 1)
        except ValueError:
            # 29 February
            return today.replace(year=today.year - 1, day=28)
    raise ValueError(f"Unknown period: {period}")


def _days_in_month(year: int, month: int) -> int:
    nxt = date(year + (month == 12), month % 12 + 1, 1)
    return (nxt - timedelta(days=1)).day


def app_ranking_history(
    store: ChartStore,
    app_id: int,
    country: str,
    ranking_type: str,
    category_type: str,
    start_date: str,
    end_date: str,
) -> List[Dict[str, Any]]:
    try:
        with store.connect() as con:
            rows = con.execute("""
                SELECT date(rank_date) AS date, rank
                FROM rankings
                WHERE app_id=? AND country=? AND ranking_type=? AND category_type=?
                  AND date(rank_date) BETWEEN ? AND ?
                ORDER BY date(rank_date) ASC
            """, (
                app_id, _v(country), _v(ranking_type), _v(category_type),
                start_date, end_date,
            )).fetchall()
    except sqlite3.Error as e:
        logger.error("Failed to get ranking history for app %s: %s", app_id, e)
        return []
    return [dict(r) for r in rows]


def history_stats(history: List[Dict[str, Any]]) -> Dict[str, Any]:
    ranks = [h["rank"] for h in history]
    if not ranks:
        return {"highest_rank": None, "lowest_rank": None, "average_rank": None}
    return {
        "highest_rank": min(ranks),
        "lowest_rank": max(ranks),
        "average_rank": round(sum(ranks) / len(ranks), 1),
    }


def search_apps(
    store: ChartStore, query: str, countries: Sequence[str], limit: int = 50
) -> List[Dict[str, Any]]:
    countries = _values(countries)
    if not query or not countries:
        return []
    try:
        with store.connect() as con:
            rows = con.execute(f"""
                SELECT * FROM apps
                WHERE name LIKE ? AND country IN ({_placeholders(countries)})
                ORDER BY name ASC
                LIMIT ?
            """, (f"%{query}%", *countries, limit)).fetchall()
    except sqlite3.Error as e:
        logger.error("Failed to search apps for %r: %s", query, e)
        return []
    return [dict(r) for r in rows]


def rankings_across_countries(
    store: ChartStore,
    app_store_id: str,
    countries: Sequence[str],
    ranking_type: str,
    category_type: str,
    rank_date: str,
) -> Dict[str, Any]:
    """{app, rankings: {country: rank}} for one store id on one day."""
    countries = _values(countries)
    empty = {"app": None, "rankings": {}}
    if not countries:
        return empty
    try:
        with store.connect() as con:
            app = con.execute(
                "SELECT * FROM apps WHERE app_store_id=? ORDER BY id LIMIT 1", (app_store_id,)
            ).fetchone()
            if not app:
                return empty
            rows = con.execute(f"""
                SELECT r.country, r.rank
                FROM rankings r JOIN apps a ON a.id = r.app_id
                WHERE a.app_store_id=? AND r.country IN ({_placeholders(countries)})
                  AND r.ranking_type=? AND r.category_type=? AND date(r.rank_date)=?
            """, (
                app_store_id, *countries,
                _v(ranking_type), _v(category_type),
                rank_date,
            )).fetchall()
    except sqlite3.Error as e:
        logger.error("Failed to get rankings across countries for %s: %s", app_store_id, e)
        return empty
    return {"app": dict(app), "rankings": {r["country"]: r["rank"] for r in rows}}


def app_rankings_on_date(
    store: ChartStore,
    app_id: int,
    countries: Sequence[str],
    ranking_type: str,
    category_type: str,
    rank_date: str,
) -> List[Dict[str, Any]]:
    countries = _values(countries)
    if not countries:
        return []
    try:
        with store.connect() as con:
            rows = con.execute(f"""
                SELECT country, rank FROM rankings
                WHERE app_id=? AND country IN ({_placeholders(countries)})
                  AND ranking_type=? AND category_type=? AND date(rank_date)=?
                ORDER BY rank ASC
            """, (
                app_id, *countries,
                _v(ranking_type), _v(category_type),
                rank_date,
            )).fetchall()
    except sqlite3.Error as e:
        logger.error("Failed to get rankings for app %s: %s", app_id, e)
        return []
    return [dict(r) for r in rows]


def snapshot_rows(store: ChartStore, rank_date: Optional[str] = None) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """All snapshot rows of one day (latest day when not given), for export."""
    try:
        with store.connect() as con:
            if not rank_date:
                rank_date = con.execute("SELECT MAX(date(rank_date)) FROM rankings").fetchone()[0]
            if not rank_date:
                return None, []
            rows = con.execute(f"""
                SELECT {RANKING_COLUMNS}
                FROM rankings r JOIN apps a ON a.id = r.app_id
                WHERE date(r.rank_date)=?
                ORDER BY r.country, r.ranking_type, r.category_type, r.rank
            """, (rank_date,)).fetchall()
    except sqlite3.Error as e:
        logger.error("Failed to read snapshot %s: %s", rank_date, e)
        return rank_date, []
    return rank_date, [dict(r) for r in rows]
