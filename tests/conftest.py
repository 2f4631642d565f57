import time
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from appstore_charts import net
from appstore_charts.db import ChartStore
from appstore_charts.models import AppRecord, RankingRecord


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class Router:
    """Stand-in for requests.get: first route whose fragment is in the URL answers."""

    def __init__(self):
        self.routes = []
        self.calls = []

    def add(self, fragment, handler):
        self.routes.append((fragment, handler))
        return self

    def __call__(self, url, **kwargs):
        self.calls.append(url)
        for fragment, handler in self.routes:
            if fragment not in url:
                continue
            if callable(handler):
                handler = handler(url)
            if isinstance(handler, Exception):
                raise handler
            if isinstance(handler, FakeResponse):
                return handler
            return FakeResponse(handler)
        raise requests.ConnectionError(f"no route for {url}")


@pytest.fixture
def http(monkeypatch):
    router = Router()
    monkeypatch.setattr(net.requests, "get", router)
    return router


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(time, "sleep", lambda seconds: calls.append(seconds))
    return calls


@pytest.fixture
def store(tmp_path):
    s = ChartStore(str(tmp_path / "charts.db"))
    s.ensure_schema()
    return s


def lookup_ids(url):
    return parse_qs(urlparse(url).query)["id"][0].split(",")


def marketing_payload(ids, **extra):
    return {"feed": {"results": [
        {
            "id": str(i),
            "name": f"App {i}",
            "artistName": f"Dev {i}",
            "artworkUrl100": f"https://img.example/{i}/100x100.png",
            "releaseDate": "2020-06-01",
            "genres": [{"genreId": "6014", "name": "Games"}],
            "rank": 999,
            **extra,
        }
        for i in ids
    ]}}


def lookup_payload(ids):
    return {"resultCount": len(ids), "results": [
        {
            "trackId": int(i),
            "trackName": f"Looked Up {i}",
            "bundleId": f"com.example.app{i}",
            "artistName": f"Dev {i}",
            "artworkUrl100": f"https://img.example/{i}/100.png",
            "artworkUrl512": f"https://img.example/{i}/512.png",
            "description": "A fine app.",
            "primaryGenreName": "Games",
            "primaryGenreId": 6014,
            "price": 1.99,
            "currency": "USD",
            "formattedPrice": "$1.99",
            "releaseDate": "2020-06-01T07:00:00Z",
            "averageUserRating": 4.5,
            "userRatingCount": 1200,
        }
        for i in ids
    ]}


def seed(store, app_store_id, country, rank, *, ranking_type="topfree", category_type="all",
         rank_date="2024-01-01", name=None, category_id="6014", bundle_id=None):
    app_id = store.upsert_app(AppRecord(
        app_store_id=app_store_id,
        name=name or f"App {app_store_id}",
        country=country,
        artist_name="Example Dev",
        bundle_id=bundle_id,
        category_id=category_id,
        summary="Summary text",
    ))
    store.upsert_ranking(RankingRecord(
        app_id=app_id,
        country=country,
        ranking_type=ranking_type,
        category_type=category_type,
        rank=rank,
        rank_date=rank_date,
    ))
    return app_id
