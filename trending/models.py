"""
Data shapes for the trending scan.

No database tables: a summary is built once per scan, handed to the
caller and never persisted.  Everything here is immutable once built.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

from django.db import models

from .countries import Country, ScanBreadth

# app id → 1-based rank within one (country, chart) snapshot
RankMap = dict[str, int]


class ChartCategory(models.TextChoices):
    TOP_FREE = "top-free", "Top Free"
    TOP_PAID = "top-paid", "Top Paid"


CHART_CATEGORIES = list(ChartCategory)


class ChartKey(NamedTuple):
    """Identifies one chart snapshot: a storefront and a chart category."""

    country: str
    category: ChartCategory


@dataclass(frozen=True)
class TrendingHit:
    """One place an app ranks: storefront, chart and position."""

    country: str
    category: ChartCategory
    rank: int

    def to_dict(self) -> dict:
        return {
            "country": self.country,
            "chart_category": str(self.category),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class AppTrending:
    """
    Every chart position held by a single app.

    ``hits`` is sorted ascending by rank; the ``best_*`` projections are
    derived from its head and are None when the app ranks nowhere.
    """

    app_id: str
    hits: tuple[TrendingHit, ...] = ()

    @property
    def best_rank(self) -> int | None:
        return self.hits[0].rank if self.hits else None

    @property
    def best_country(self) -> str | None:
        return self.hits[0].country if self.hits else None

    @property
    def best_category(self) -> ChartCategory | None:
        return self.hits[0].category if self.hits else None

    @property
    def trending_countries(self) -> int:
        """Number of distinct storefronts the app charts in."""
        return len({hit.country for hit in self.hits})

    @property
    def is_trending(self) -> bool:
        return bool(self.hits)

    def to_dict(self) -> dict:
        return {
            "app_id": self.app_id,
            "trending_in": [hit.to_dict() for hit in self.hits],
            "trending_countries": self.trending_countries,
            "best_rank": self.best_rank,
            "best_country": self.best_country,
            "best_chart_category": str(self.best_category) if self.best_category else None,
            "is_trending": self.is_trending,
        }


@dataclass(frozen=True)
class CountryTrending:
    """Best position reached by any of the requested apps in one storefront."""

    country: Country
    best_rank: int
    app_id: str
    category: ChartCategory

    def to_dict(self) -> dict:
        return {
            "country_code": self.country.code,
            "country_name": self.country.name,
            "flag": self.country.flag,
            "best_rank": self.best_rank,
            "chart_category": str(self.category),
            "app_id": self.app_id,
        }


@dataclass(frozen=True)
class TrendingSummary:
    """Aggregate result of one scan."""

    has_trending: bool
    total_trending_countries: int
    countries: tuple[CountryTrending, ...] = ()
    per_app: tuple[AppTrending, ...] = ()
    breadth: ScanBreadth = ScanBreadth.QUICK
    countries_scanned: int = 0
    generated_at: str = field(default="", compare=False)

    @classmethod
    def empty(cls, breadth=ScanBreadth.QUICK, countries_scanned: int = 0):
        return cls(
            has_trending=False,
            total_trending_countries=0,
            countries=(),
            per_app=(),
            breadth=breadth,
            countries_scanned=countries_scanned,
        )

    def for_app(self, app_id) -> AppTrending | None:
        app_id = str(app_id)
        for record in self.per_app:
            if record.app_id == app_id:
                return record
        return None

    def to_dict(self) -> dict:
        return {
            "has_trending": self.has_trending,
            "total_trending_countries": self.total_trending_countries,
            "countries": [c.to_dict() for c in self.countries],
            "per_app_trending": [a.to_dict() for a in self.per_app],
            "scan_breadth": str(self.breadth),
            "countries_scanned": self.countries_scanned,
            "generated_at": self.generated_at,
        }
