# appstore_charts/models.py
"""
Record shapes passed between the feed clients, the orchestrator and the store.
Upstream field names stop at feeds.py / lookup.py; everything here is ours.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

SUMMARY_MAX_LENGTH = 500


def to_decimal(value: Any) -> Optional[Decimal]:
    """Best-effort Decimal conversion; None for missing or garbage values."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


@dataclass
class RawFetchedApp:
    """One entry of a ranking feed, normalized from either feed shape."""
    app_store_id: str
    name: str
    artist_name: str
    artwork_url_100: str
    rank: int                           # 1-based list position
    release_date: str                   # ISO date
    artwork_url_512: Optional[str] = None
    bundle_id: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    summary: Optional[str] = None
    price: Decimal = Decimal("0")
    currency: str = "USD"


@dataclass
class AppDetail:
    """iTunes lookup result for one app."""
    track_id: str
    track_name: Optional[str] = None
    bundle_id: Optional[str] = None
    artist_name: Optional[str] = None
    artwork_url_100: Optional[str] = None
    artwork_url_512: Optional[str] = None
    description: Optional[str] = None
    primary_genre_name: Optional[str] = None
    primary_genre_id: Optional[int] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    release_date: Optional[str] = None
    average_user_rating: Optional[Decimal] = None
    user_rating_count: Optional[int] = None
    formatted_price: Optional[str] = None


@dataclass
class AppRecord:
    """Row of the apps table, keyed by (app_store_id, country)."""
    app_store_id: str
    name: str
    country: str
    artist_name: Optional[str] = None
    bundle_id: Optional[str] = None
    artwork_url_100: Optional[str] = None
    artwork_url_512: Optional[str] = None
    summary: Optional[str] = None
    category_id: Optional[str] = None
    price: Decimal = Decimal("0")
    currency: str = "USD"
    release_date: Optional[str] = None
    average_rating: Optional[Decimal] = None
    rating_count: int = 0


@dataclass
class RankingRecord:
    """Row of the rankings table, keyed by (app_id, country, ranking_type, category_type, rank_date)."""
    app_id: int
    country: str
    ranking_type: str
    rank: int
    rank_date: str
    category_type: str = "all"


@dataclass
class TaskResult:
    success: bool
    count: int
    message: Optional[str] = None
    persisted: int = 0


@dataclass
class SweepEntry:
    country: str
    ranking_type: str
    category_type: str
    success: bool
    count: int


@dataclass
class SweepResult:
    results: List[SweepEntry] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def total_apps(self) -> int:
        return sum(r.count for r in self.results)

    def to_dict(self) -> dict:
        return {
            "results": [vars(r).copy() for r in self.results],
            "totals": {
                "elapsed_seconds": round(self.elapsed_seconds, 1),
                "success_count": self.success_count,
                "total_count": self.total_count,
                "total_apps": self.total_apps,
            },
        }
