from datetime import date

import pytest

from appstore_charts import queries
from appstore_charts.db import ChartStore
from appstore_charts.rankings import Country, RankingType
from conftest import seed


@pytest.fixture
def charts(store):
    seed(store, "100", "US", 1, name="Alpha Chat")
    seed(store, "200", "US", 2, name="Beta Photos")
    seed(store, "300", "US", 3, name="Gamma Maps", category_id="6010")
    seed(store, "100", "JP", 3, name="Alpha Chat")
    seed(store, "200", "JP", 1, name="Beta Photos")
    seed(store, "100", "US", 9, rank_date="2023-12-31", name="Alpha Chat")
    seed(store, "100", "US", 4, ranking_type="toppaid", name="Alpha Chat")
    return store


def test_list_rankings_orders_by_rank_and_counts(charts):
    rows, total = queries.list_rankings(charts, [Country.US], RankingType.TOP_FREE, "all", "2024-01-01")
    assert total == 3
    assert [r["rank"] for r in rows] == [1, 2, 3]
    assert rows[0]["name"] == "Alpha Chat"


def test_list_rankings_pages(charts):
    rows, total = queries.list_rankings(charts, ["US", "JP"], "topfree", "all", "2024-01-01", limit=2, offset=2)
    assert total == 5
    assert [(r["country"], r["rank"]) for r in rows] == [("US", 2), ("JP", 3)]


def test_list_rankings_without_countries(charts):
    assert queries.list_rankings(charts, [], "topfree", "all", "2024-01-01") == ([], 0)


def test_group_by_app_collects_countries(charts):
    rows, _ = queries.list_rankings(charts, ["US", "JP"], "topfree", "all", "2024-01-01")
    grouped = queries.group_by_app(rows)

    # ties on best rank keep the order of first appearance
    assert [g["app"]["app_store_id"] for g in grouped] == ["200", "100", "300"]
    assert grouped[0]["rankings"] == {"JP": 1, "US": 2}
    assert grouped[1]["rankings"] == {"US": 1, "JP": 3}
    assert grouped[0]["app"]["category_name"] == "Games"
    assert grouped[2]["app"]["category_name"] == "Navigation"


def test_latest_ranking_date(charts):
    assert queries.latest_ranking_date(charts, "US") == "2024-01-01"
    assert queries.latest_ranking_date(charts, "KR") is None


def test_get_app(charts):
    app_id = seed(charts, "100", "US", 1)
    app = queries.get_app(charts, app_id)
    assert app["app_store_id"] == "100"
    assert app["category_name"] == "Games"
    assert app["category_name_ja"] == "ゲーム"
    assert queries.get_app(charts, 99999) is None


@pytest.mark.parametrize("period,today,expected", [
    ("week", date(2024, 3, 10), date(2024, 3, 3)),
    ("month", date(2024, 3, 31), date(2024, 2, 29)),
    ("month", date(2024, 1, 15), date(2023, 12, 15)),
    ("year", date(2024, 2, 29), date(2023, 2, 28)),
])
def test_period_start(period, today, expected):
    assert queries.period_start(period, today) == expected


def test_period_start_rejects_unknown_period():
    with pytest.raises(ValueError):
        queries.period_start("decade", date(2024, 1, 1))


def test_history_and_stats(charts):
    app_id = seed(charts, "100", "US", 5, rank_date="2024-01-02")
    history = queries.app_ranking_history(
        charts, app_id, "US", "topfree", "all", "2023-12-31", "2024-01-02"
    )
    assert history == [
        {"date": "2023-12-31", "rank": 9},
        {"date": "2024-01-01", "rank": 1},
        {"date": "2024-01-02", "rank": 5},
    ]
    assert queries.history_stats(history) == {"highest_rank": 1, "lowest_rank": 9, "average_rank": 5.0}
    assert queries.history_stats([]) == {"highest_rank": None, "lowest_rank": None, "average_rank": None}


def test_search_apps_filters_by_name_and_country(charts):
    found = queries.search_apps(charts, "beta", ["JP"])
    assert [(a["app_store_id"], a["country"]) for a in found] == [("200", "JP")]
    assert queries.search_apps(charts, "", ["US"]) == []


def test_rankings_across_countries(charts):
    data = queries.rankings_across_countries(charts, "100", ["US", "JP", "KR"], "topfree", "all", "2024-01-01")
    assert data["app"]["name"] == "Alpha Chat"
    assert data["rankings"] == {"US": 1, "JP": 3}
    missing = queries.rankings_across_countries(charts, "nope", ["US"], "topfree", "all", "2024-01-01")
    assert missing == {"app": None, "rankings": {}}


def test_app_rankings_on_date(charts):
    app_id = seed(charts, "200", "JP", 1, name="Beta Photos")
    rows = queries.app_rankings_on_date(charts, app_id, ["US", "JP"], "topfree", "all", "2024-01-01")
    assert rows == [{"country": "JP", "rank": 1}]


def test_snapshot_rows_defaults_to_latest_day(charts):
    day, rows = queries.snapshot_rows(charts)
    assert day == "2024-01-01"
    assert len(rows) == 6
    day, rows = queries.snapshot_rows(charts, "2023-12-31")
    assert [r["rank"] for r in rows] == [9]


def test_reads_degrade_on_unavailable_store(tmp_path):
    broken = ChartStore(str(tmp_path / "missing" / "charts.db"))
    assert queries.list_rankings(broken, ["US"], "topfree", "all", "2024-01-01") == ([], 0)
    assert queries.get_app(broken, 1) is None
    assert queries.search_apps(broken, "a", ["US"]) == []
    assert queries.snapshot_rows(broken) == (None, [])
