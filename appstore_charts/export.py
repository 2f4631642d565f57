# appstore_charts/export.py
import csv
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from appstore_charts.db import ChartStore
from appstore_charts.queries import snapshot_rows

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "rank_date", "country", "ranking_type", "category_type", "rank",
    "app_store_id", "bundle_id", "name", "artist_name", "category_id",
    "price", "currency", "average_rating", "rating_count",
]


def rows_to_csv(rows: Iterable[Dict]) -> str:
    out = io.StringIO()
    w = csv.writer(out)
    w.writerow(CSV_HEADER)
    for r in rows:
        w.writerow(["" if r.get(col) is None else r.get(col) for col in CSV_HEADER])
    return out.getvalue()


def export_snapshot_csv(
    store: ChartStore,
    out_dir: Union[str, Path, None] = None,
    rank_date: Optional[str] = None,
) -> Path:
    """Write one day's snapshot (latest by default) to rankings_<date>.csv."""
    out_dir = Path(out_dir or Path(store.db_path).parent)
    snap, rows = snapshot_rows(store, rank_date)
    if not snap or not rows:
        raise RuntimeError("No snapshots in DB; nothing to export.")

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"rankings_{snap}.csv"
    with out_path.open("w", encoding="utf-8", newline="") as f:
        f.write(rows_to_csv(rows))

    logger.info("Exported %s rows -> %s", len(rows), out_path)
    return out_path
