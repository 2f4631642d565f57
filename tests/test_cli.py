import json
import os

from appstore_charts import cli
from appstore_charts.db import ChartStore
from appstore_charts.models import SweepResult, TaskResult
from conftest import seed


def test_init_db_creates_database(tmp_path):
    db = tmp_path / "nested" / "charts.db"
    assert cli.main(["--db", str(db), "init-db"]) == 0
    assert os.path.exists(db)


def test_fetch_prints_result(tmp_path, monkeypatch, capsys):
    seen = []

    def fake_fetch_one(store, country, ranking_type, category_type, limit):
        seen.append((country, ranking_type, category_type, limit))
        return TaskResult(True, 5, "Rankings fetched successfully", 5)

    monkeypatch.setattr(cli, "fetch_one", fake_fetch_one)
    code = cli.main([
        "--db", str(tmp_path / "c.db"), "fetch",
        "--country", "JP", "--ranking-type", "topfree", "--limit", "5",
    ])

    assert code == 0
    assert seen == [("JP", "topfree", "all", 5)]
    assert json.loads(capsys.readouterr().out)["count"] == 5


def test_fetch_all_exit_code_reflects_success(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "fetch_all", lambda store: SweepResult())
    assert cli.main(["--db", str(tmp_path / "c.db"), "fetch-all"]) == 1


def test_export_csv(tmp_path, capsys):
    db = tmp_path / "c.db"
    cli.main(["--db", str(db), "init-db"])
    assert cli.main(["--db", str(db), "export-csv", "--out-dir", str(tmp_path)]) == 1

    seed(ChartStore(str(db)), "1", "US", 1)
    capsys.readouterr()
    assert cli.main(["--db", str(db), "export-csv", "--out-dir", str(tmp_path)]) == 0
    assert capsys.readouterr().out.strip().endswith("rankings_2024-01-01.csv")
