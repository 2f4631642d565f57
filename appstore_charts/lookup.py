# appstore_charts/lookup.py
"""
iTunes Lookup enrichment (bundle id, price, rating, description, ...).
"""
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

import requests

from appstore_charts import config, net
from appstore_charts.models import AppDetail, to_decimal
from appstore_charts.rankings import Country

logger = logging.getLogger(__name__)

LOOKUP_URL = "https://itunes.apple.com/lookup?id={ids}&country={cc}"
# the lookup API accepts up to 200 ids per request
LOOKUP_BATCH_SIZE = 200


def parse_lookup_result(r: Dict[str, Any]) -> Optional[AppDetail]:
    track_id = str(r.get("trackId") or "")
    if not track_id:
        return None
    count = r.get("userRatingCount")
    return AppDetail(
        track_id=track_id,
        track_name=r.get("trackName"),
        bundle_id=r.get("bundleId"),
        artist_name=r.get("artistName"),
        artwork_url_100=r.get("artworkUrl100"),
        artwork_url_512=r.get("artworkUrl512"),
        description=r.get("description"),
        primary_genre_name=r.get("primaryGenreName"),
        primary_genre_id=r.get("primaryGenreId"),
        price=to_decimal(r.get("price")),
        currency=r.get("currency"),
        release_date=r.get("releaseDate"),
        average_user_rating=to_decimal(r.get("averageUserRating")),
        user_rating_count=int(count) if count is not None else None,
        formatted_price=r.get("formattedPrice"),
    )


def _lookup(ids: List[str], country: Country, timeout: float) -> List[AppDetail]:
    url = LOOKUP_URL.format(ids=",".join(ids), cc=Country(country).apple_code)
    data = net.get_json(url, timeout=timeout) or {}
    details = [parse_lookup_result(r) for r in data.get("results") or []]
    return [d for d in details if d]


def fetch_app_details(app_store_id: str, country: Country) -> Optional[AppDetail]:
    """Lookup one app; None when not found or on any error."""
    try:
        details = _lookup([str(app_store_id)], country, config.LOOKUP_TIMEOUT)
    except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
        logger.error("Failed to fetch app details for %s: %s", app_store_id, e)
        return None
    return details[0] if details else None


def fetch_many_app_details(
    app_store_ids: Iterable[str],
    country: Country,
    batch_size: int = LOOKUP_BATCH_SIZE,
) -> Dict[str, AppDetail]:
    """
    Lookup many apps in batches of ``batch_size`` with a pause between batches.
    A failed batch is logged and simply contributes no entries.
    """
    ids = [str(i) for i in app_store_ids if i]
    out: Dict[str, AppDetail] = {}

    for start in range(0, len(ids), batch_size):
        chunk = ids[start:start + batch_size]
        try:
            for detail in _lookup(chunk, country, config.HTTP_TIMEOUT):
                out[detail.track_id] = detail
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            logger.error(
                "Failed to fetch batch app details (%s ids from %s): %s", len(chunk), chunk[0], e
            )

        if start + batch_size < len(ids):
            time.sleep(config.BATCH_DELAY)

    return out
