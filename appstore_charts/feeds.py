# appstore_charts/feeds.py
"""
Ranking feed client.

Two upstream shapes sit behind fetch_ranking_feed():

* the Apple Marketing Tools feed (flat ``feed.results`` array), used for the
  "all" category. It only has top-free and top-paid charts, so top-grossing
  is served from top-free there (see resolve_feed);
* the legacy iTunes RSS feed (``feed.entry`` with label/attribute wrappers),
  used whenever a genre filter is needed. It has all three charts.

Ranks are always the 1-based position in the returned list.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from appstore_charts import config, net
from appstore_charts.models import RawFetchedApp, to_decimal
from appstore_charts.rankings import CategoryType, Country, RankingType, RANKING_TYPES

logger = logging.getLogger(__name__)

MARKETING_FEED = "marketing"
ITUNES_FEED = "itunes"

MARKETING_MAX_LIMIT = 100
ITUNES_MAX_LIMIT = 200

MARKETING_URL = "https://rss.marketingtools.apple.com/api/v2/{cc}/apps/{path}/{limit}/apps.json"
ITUNES_URL = "https://itunes.apple.com/{cc}/rss/{feed}/limit={limit}{genre}/json"


@dataclass(frozen=True)
class FeedSource:
    """Which upstream feed serves a (ranking type, category) pair."""
    variant: str
    path: str
    genre_id: Optional[int] = None
    substituted_from: Optional[RankingType] = None

    @property
    def substituted(self) -> bool:
        return self.substituted_from is not None


def resolve_feed(ranking_type: RankingType, category_type: CategoryType) -> FeedSource:
    ranking_type = RankingType(ranking_type)
    category_type = CategoryType(category_type)
    info = RANKING_TYPES[ranking_type]

    if category_type is CategoryType.ALL:
        if info["marketing_path"]:
            return FeedSource(MARKETING_FEED, info["marketing_path"])
        # no grossing chart on this feed: nearest available is top-free
        fallback = RANKING_TYPES[RankingType.TOP_FREE]["marketing_path"]
        return FeedSource(MARKETING_FEED, fallback, substituted_from=ranking_type)

    return FeedSource(ITUNES_FEED, info["itunes_feed"], genre_id=category_type.genre_id)


def feed_url(country: Country, source: FeedSource, limit: int) -> str:
    cc = Country(country).apple_code
    if source.variant == MARKETING_FEED:
        return MARKETING_URL.format(cc=cc, path=source.path, limit=limit)
    genre = f"/genre={source.genre_id}" if source.genre_id else ""
    return ITUNES_URL.format(cc=cc, feed=source.path, limit=limit, genre=genre)


def _clamp_limit(limit: int, maximum: int) -> int:
    clamped = max(1, min(int(limit), maximum))
    if clamped != limit:
        logger.info("Feed limit %s clamped to %s", limit, clamped)
    return clamped


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _iso_date(value: Optional[str]) -> Optional[str]:
    """Normalize '2020-06-01T00:00:00-07:00' or 'June 1, 2020' to '2020-06-01'."""
    if not value:
        return None
    value = str(value).strip()
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date().isoformat()
    except ValueError:
        pass
    for fmt in ("%B %d, %Y", "%b %d, %Y"):
        try:
            return datetime.strptime(value, fmt).date().isoformat()
        except ValueError:
            continue
    return None


# ---------- Flat "results" feed ----------

def parse_marketing_feed(data: Dict[str, Any]) -> List[RawFetchedApp]:
    out = []
    results = [r for r in (data.get("feed") or {}).get("results") or [] if r.get("id")]
    for i, item in enumerate(results, start=1):
        genres = item.get("genres") or []
        genre = genres[0] if genres else {}
        out.append(RawFetchedApp(
            app_store_id=str(item["id"]),
            name=item.get("name") or "",
            artist_name=item.get("artistName") or "",
            artwork_url_100=item.get("artworkUrl100") or "",
            category_id=str(genre["genreId"]) if genre.get("genreId") else None,
            category_name=genre.get("name"),
            # the marketing feed carries no price
            price=Decimal("0"),
            currency="USD",
            release_date=_iso_date(item.get("releaseDate")) or _today(),
            rank=i,
        ))
    return out


# ---------- Nested "entry" feed ----------

def _label(entry: Dict[str, Any], key: str) -> Optional[str]:
    return (entry.get(key) or {}).get("label")


def _attr(entry: Dict[str, Any], key: str, name: str) -> Optional[str]:
    return ((entry.get(key) or {}).get("attributes") or {}).get(name)


def _images(entry: Dict[str, Any]):
    """Return (small, large): the ~100px image and the last (largest) one."""
    images = [i for i in entry.get("im:image") or [] if i.get("label")]
    if not images:
        return "", None

    def height(img):
        try:
            return int((img.get("attributes") or {}).get("height", 0))
        except (TypeError, ValueError):
            return 0

    small = min(images, key=lambda img: abs(height(img) - 100))
    return small["label"], images[-1]["label"]


def _entry_release_date(entry: Dict[str, Any]) -> str:
    return (
        _iso_date(_attr(entry, "im:releaseDate", "label"))
        or _iso_date(_label(entry, "im:releaseDate"))
        or _today()
    )


def _entry_id(entry: Dict[str, Any]) -> Optional[str]:
    app_id = _attr(entry, "id", "im:id")
    if app_id:
        return str(app_id)
    # fall back to the numeric tail of the store URL
    id_url = _label(entry, "id") or ""
    if "/id" in id_url:
        return id_url.split("/id")[-1].split("?")[0] or None
    return None


def parse_itunes_feed(data: Dict[str, Any]) -> List[RawFetchedApp]:
    entries = (data.get("feed") or {}).get("entry") or []
    if isinstance(entries, dict):
        # a single-entry feed is not wrapped in a list
        entries = [entries]

    out = []
    for entry in entries:
        app_id = _entry_id(entry)
        if not app_id:
            continue
        small, large = _images(entry)
        out.append(RawFetchedApp(
            app_store_id=app_id,
            name=_label(entry, "im:name") or _label(entry, "title") or "",
            artist_name=_label(entry, "im:artist") or "",
            artwork_url_100=small,
            artwork_url_512=large,
            bundle_id=_attr(entry, "id", "im:bundleId"),
            category_id=_attr(entry, "category", "im:id"),
            category_name=_attr(entry, "category", "label"),
            summary=_label(entry, "summary"),
            price=to_decimal(_attr(entry, "im:price", "amount")) or Decimal("0"),
            currency=_attr(entry, "im:price", "currency") or "USD",
            release_date=_entry_release_date(entry),
            rank=len(out) + 1,
        ))
    return out


# ---------- Public entry point ----------

def fetch_ranking_feed(
    country: Country,
    ranking_type: RankingType,
    category_type: CategoryType = CategoryType.ALL,
    limit: int = 100,
) -> List[RawFetchedApp]:
    """Fetch one chart. Returns [] on any error (logged), never raises."""
    country = Country(country)
    ranking_type, category_type = RankingType(ranking_type), CategoryType(category_type)
    source = resolve_feed(ranking_type, category_type)
    if source.substituted:
        logger.warning(
            "No %s chart on the %s feed; serving %s/%s from %s",
            ranking_type.value, source.variant, country.value, category_type.value, source.path,
        )

    if source.variant == MARKETING_FEED:
        limit, parse = _clamp_limit(limit, MARKETING_MAX_LIMIT), parse_marketing_feed
    else:
        limit, parse = _clamp_limit(limit, ITUNES_MAX_LIMIT), parse_itunes_feed
    url = feed_url(country, source, limit)

    try:
        data = net.get_json(url, timeout=config.HTTP_TIMEOUT)
        apps = parse(data)
    except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error("Failed to fetch ranking feed %s: %s", url, e)
        return []

    if not apps:
        logger.info(
            "Empty feed for %s/%s/%s (%s)",
            country.value, ranking_type.value, category_type.value, url,
        )
    return apps
