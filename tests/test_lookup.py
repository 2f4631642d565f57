from decimal import Decimal

import requests

from appstore_charts.lookup import fetch_app_details, fetch_many_app_details, parse_lookup_result
from appstore_charts.rankings import Country
from conftest import lookup_ids, lookup_payload


def test_batches_of_200_with_pause_between(http, sleeps):
    http.add("/lookup", lambda url: lookup_payload(lookup_ids(url)))
    ids = [str(i) for i in range(1, 451)]

    details = fetch_many_app_details(ids, Country.US)

    assert [len(lookup_ids(u)) for u in http.calls] == [200, 200, 50]
    assert sleeps == [0.5, 0.5]
    assert len(details) == 450
    assert details["450"].bundle_id == "com.example.app450"


def test_single_batch_does_not_pause(http, sleeps):
    http.add("/lookup", lambda url: lookup_payload(lookup_ids(url)))
    fetch_many_app_details(["1", "2"], Country.JP)
    assert sleeps == []
    assert "country=jp" in http.calls[0]


def test_failed_batch_is_skipped(http, sleeps):
    def handler(url):
        ids = lookup_ids(url)
        if ids[0] == "201":
            return requests.ConnectionError("reset")
        return lookup_payload(ids)

    http.add("/lookup", handler)
    details = fetch_many_app_details([str(i) for i in range(1, 451)], Country.US)

    assert len(details) == 250
    assert "1" in details and "401" in details
    assert "201" not in details and "400" not in details
    assert len(http.calls) == 3


def test_no_ids_no_requests(http, sleeps):
    assert fetch_many_app_details([], Country.US) == {}
    assert http.calls == []


def test_parse_lookup_result():
    detail = parse_lookup_result(lookup_payload(["12"])["results"][0])
    assert detail.track_id == "12"
    assert detail.price == Decimal("1.99")
    assert detail.average_user_rating == Decimal("4.5")
    assert detail.user_rating_count == 1200
    assert detail.primary_genre_id == 6014
    assert parse_lookup_result({"trackName": "no id"}) is None


def test_single_lookup(http):
    http.add("/lookup", lambda url: lookup_payload(lookup_ids(url)))
    assert fetch_app_details("12", Country.US).track_name == "Looked Up 12"


def test_single_lookup_not_found(http):
    http.add("/lookup", {"resultCount": 0, "results": []})
    assert fetch_app_details("12", Country.US) is None


def test_single_lookup_error_returns_none(http):
    http.add("/lookup", requests.Timeout("slow"))
    assert fetch_app_details("12", Country.US) is None
