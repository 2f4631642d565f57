# appstore_charts/api.py
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from appstore_charts import analysis, config, queries
from appstore_charts.db import ChartStore
from appstore_charts.export import rows_to_csv
from appstore_charts.ingest import fetch_one
from appstore_charts.rankings import (
    APP_CATEGORIES, CATEGORY_TYPES, COUNTRIES, RANKING_TYPES,
    CategoryType, Country, RankingType,
)
from appstore_charts.scheduler import get_status, run_sweep, start_scheduler

logger = logging.getLogger(__name__)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# ------------------------- Bootstrap store & scheduler -------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    store = ChartStore(config.DB_PATH)
    store.ensure_schema()
    app.state.store = store
    logger.info("Using DB: %s", store.db_path)
    if config.SCHEDULER_ENABLED:
        start_scheduler(store)
    yield


app = FastAPI(title="AppStore Charts API", version="2.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def get_store(request: Request) -> ChartStore:
    return request.app.state.store


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


# ------------------------- Request bodies ---------------------------------------------------
class FetchRequest(BaseModel):
    country: Country
    ranking_type: RankingType
    category_type: CategoryType = CategoryType.ALL


class TrendRequest(BaseModel):
    countries: List[Country] = Field(min_length=1)
    ranking_type: RankingType
    category_type: CategoryType = CategoryType.ALL
    date: str = Field(pattern=DATE_PATTERN)


class ComparisonRequest(BaseModel):
    app_id: int
    countries: List[Country] = Field(min_length=2)
    ranking_type: RankingType
    category_type: CategoryType = CategoryType.ALL
    date: str = Field(pattern=DATE_PATTERN)


# ------------------------- META (filters) ---------------------------------------------------
@app.get("/meta")
def get_meta():
    return {
        "countries": {c.value: info for c, info in COUNTRIES.items()},
        "ranking_types": {
            r.value: {"name": info["name"], "name_ja": info["name_ja"]}
            for r, info in RANKING_TYPES.items()
        },
        "category_types": {c.value: info for c, info in CATEGORY_TYPES.items()},
        "categories": APP_CATEGORIES,
    }


# ------------------------- Rankings ---------------------------------------------------------
@app.get("/rankings")
def list_rankings(
    countries: List[Country] = Query(...),
    ranking_type: RankingType = RankingType.TOP_FREE,
    category_type: CategoryType = CategoryType.ALL,
    date: str = Query(..., pattern=DATE_PATTERN),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    format: Optional[str] = None,
    store: ChartStore = Depends(get_store),
):
    rows, total = queries.list_rankings(
        store, countries, ranking_type, category_type, date,
        limit=page_size, offset=(page - 1) * page_size,
    )
    if (format or "").lower() == "csv":
        return Response(content=rows_to_csv(rows), media_type="text/csv")

    return {
        "rankings": queries.group_by_app(rows),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": -(-total // page_size),
    }


@app.get("/rankings/latest-date")
def latest_date(country: Country, store: ChartStore = Depends(get_store)):
    return {"date": queries.latest_ranking_date(store, country) or _today()}


@app.post("/rankings/fetch")
def fetch_rankings(body: FetchRequest, store: ChartStore = Depends(get_store)):
    result = fetch_one(store, body.country, body.ranking_type, body.category_type)
    return asdict(result)


@app.post("/rankings/fetch-all")
def fetch_all_rankings(store: ChartStore = Depends(get_store)):
    sweep = run_sweep(store)
    if sweep is None:
        raise HTTPException(status_code=409, detail="A ranking sweep is already running.")
    return sweep.to_dict()


# ------------------------- Apps -------------------------------------------------------------
@app.get("/apps/search")
def search_apps(
    q: str = Query(..., min_length=1, max_length=100),
    countries: List[Country] = Query(...),
    ranking_type: RankingType = RankingType.TOP_FREE,
    category_type: CategoryType = CategoryType.ALL,
    date: str = Query(..., pattern=DATE_PATTERN),
    store: ChartStore = Depends(get_store),
):
    found = queries.search_apps(store, q, countries, limit=50)
    store_ids = list(dict.fromkeys(a["app_store_id"] for a in found))[:20]

    results = []
    for app_store_id in store_ids:
        data = queries.rankings_across_countries(
            store, app_store_id, countries, ranking_type, category_type, date
        )
        if data["app"] is not None:
            results.append(data)
    return {"results": results}


@app.get("/apps/{app_id}")
def get_app(app_id: int, store: ChartStore = Depends(get_store)):
    app_row = queries.get_app(store, app_id)
    if not app_row:
        raise HTTPException(status_code=404, detail="App not found.")
    return app_row


@app.get("/apps/{app_id}/history")
def app_history(
    app_id: int,
    country: Country,
    ranking_type: RankingType = RankingType.TOP_FREE,
    category_type: CategoryType = CategoryType.ALL,
    period: Literal["week", "month", "year"] = "week",
    store: ChartStore = Depends(get_store),
):
    end = datetime.now(timezone.utc).date()
    start = queries.period_start(period, end)
    history = queries.app_ranking_history(
        store, app_id, country, ranking_type, category_type,
        start.isoformat(), end.isoformat(),
    )
    return {"history": history, "stats": queries.history_stats(history)}


# ------------------------- Analysis (LLM) ---------------------------------------------------
@app.post("/analysis/trends")
def trend_analysis(body: TrendRequest, store: ChartStore = Depends(get_store)):
    text = analysis.summarize_trends(
        store, body.countries, body.ranking_type, body.category_type, body.date
    )
    return {"analysis": text}


@app.post("/analysis/comparison")
def comparison_analysis(body: ComparisonRequest, store: ChartStore = Depends(get_store)):
    text = analysis.compare_countries(
        store, body.app_id, body.countries, body.ranking_type, body.category_type, body.date
    )
    return {"analysis": text}


# ------------------------- Admin ------------------------------------------------------------
@app.get("/admin/status")
def scheduler_status():
    return get_status()
