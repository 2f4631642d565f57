# appstore_charts/cli.py
import argparse
import json
import logging
import sys
from dataclasses import asdict

from appstore_charts import config
from appstore_charts.db import ChartStore
from appstore_charts.export import export_snapshot_csv
from appstore_charts.ingest import fetch_all, fetch_one
from appstore_charts.rankings import CategoryType, Country, RankingType


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(asctime)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="appstore-charts", description="App Store ranking snapshots")
    ap.add_argument("--db", default=config.DB_PATH, help="SQLite database to create/update")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and indexes")

    one = sub.add_parser("fetch", help="Fetch one country/ranking/category chart")
    one.add_argument("--country", required=True, choices=[c.value for c in Country])
    one.add_argument("--ranking-type", required=True, choices=[r.value for r in RankingType])
    one.add_argument("--category-type", default=CategoryType.ALL.value,
                     choices=[c.value for c in CategoryType])
    one.add_argument("--limit", type=int, default=config.FEED_LIMIT)

    sub.add_parser("fetch-all", help="Sweep every country x ranking type")

    exp = sub.add_parser("export-csv", help="Export one day's snapshot to CSV")
    exp.add_argument("--date", default=None, help="YYYY-MM-DD (latest by default)")
    exp.add_argument("--out-dir", default=None)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "serve":
        import uvicorn

        config.DB_PATH = args.db
        uvicorn.run("appstore_charts.api:app", host=args.host, port=args.port)
        return 0

    store = ChartStore(args.db)
    store.ensure_schema()

    if args.command == "init-db":
        return 0

    if args.command == "fetch":
        result = fetch_one(
            store, args.country, args.ranking_type, args.category_type, limit=args.limit
        )
        print(json.dumps(asdict(result), indent=2))
        return 0 if result.success else 1

    if args.command == "fetch-all":
        sweep = fetch_all(store)
        print(json.dumps(sweep.to_dict(), indent=2))
        return 0 if sweep.success_count else 1

    if args.command == "export-csv":
        try:
            path = export_snapshot_csv(store, args.out_dir, rank_date=args.date)
        except RuntimeError as e:
            logging.getLogger(__name__).error("%s", e)
            return 1
        print(path)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
