"""
Service classes for the App Store chart scan: fetching top charts,
batching those fetches across storefronts, and reducing the results
into a trending summary for a set of apps.

Chart data comes from the public iTunes RSS feeds.  No authentication
is required; the feeds are treated as a best-effort source that may be
slow, stale, empty or unreachable.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import NamedTuple

import requests
from django.conf import settings

from .cache import ChartCache, default_cache
from .countries import lookup, normalize_breadth, resolve_breadth
from .models import (
    CHART_CATEGORIES,
    AppTrending,
    ChartCategory,
    ChartKey,
    CountryTrending,
    RankMap,
    TrendingHit,
    TrendingSummary,
)

logger = logging.getLogger(__name__)


class ChartFeedError(Exception):
    """A chart feed answered with something that is not a chart."""


# --------------------------------------------------------------------------- #
# iTunes Top Charts
# --------------------------------------------------------------------------- #


class ITunesChartService:
    """
    Fetches top-chart rankings from the legacy iTunes RSS feeds.

    ``fetch_chart`` never raises: any transport or parsing failure is
    logged and reported as an empty chart, so one unreachable storefront
    cannot abort a multi-country scan.  Successful fetches are memoized
    per (country, category); failures are not, so they are retried on
    the next scan.
    """

    FEED_URL = "https://itunes.apple.com/{country}/rss/{feed}/limit={limit}/json"

    FEED_NAMES = {
        ChartCategory.TOP_FREE: "topfreeapplications",
        ChartCategory.TOP_PAID: "toppaidapplications",
    }

    def __init__(
        self,
        cache: ChartCache | None = None,
        session=None,
        timeout: float | None = None,
        limit: int | None = None,
        ttl: int | None = None,
    ):
        self.cache = cache if cache is not None else default_cache()
        # Anything with a requests-compatible ``get``; the module itself by default
        self.session = session if session is not None else requests
        self.timeout = timeout if timeout is not None else settings.TRENDING_REQUEST_TIMEOUT
        self.limit = limit if limit is not None else settings.TRENDING_CHART_LIMIT
        self.ttl = ttl if ttl is not None else settings.TRENDING_CACHE_TTL

    @staticmethod
    def cache_key(country: str, category) -> str:
        return f"chart:{country.upper()}:{ChartCategory(category).value}"

    def fetch_chart(self, country: str, category) -> RankMap:
        """
        Return the app id → rank map for one storefront chart.

        Returns an empty dict when the feed fails or has no entries.
        """
        try:
            key = self.cache_key(country, category)
            return self.cache.get_or_compute(
                key,
                lambda: self._download_chart(country, ChartCategory(category)),
                self.ttl,
            )
        except Exception as e:
            logger.warning(f"Top chart fetch failed for {country} {category}: {e}")
            return {}

    def _download_chart(self, country: str, category: ChartCategory) -> RankMap:
        url = self.FEED_URL.format(
            country=country.lower(),
            feed=self.FEED_NAMES[category],
            limit=self.limit,
        )
        response = self.session.get(
            url,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return self.parse_feed(response.json())

    @staticmethod
    def parse_feed(payload) -> RankMap:
        """
        Turn an RSS JSON payload into an app id → rank map.

        Ranks are positional among entries that carry an app id: the
        first identified entry is rank 1.  Entries without an id are
        skipped and do not consume a rank.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("feed"), dict):
            raise ChartFeedError("payload has no feed object")

        entries = payload["feed"].get("entry") or []
        # The feed inlines a lone entry instead of wrapping it in a list
        if isinstance(entries, dict):
            entries = [entries]
        if not isinstance(entries, list):
            raise ChartFeedError(f"unexpected entry type {type(entries).__name__}")

        chart = {}
        rank = 0
        for entry in entries:
            app_id = ITunesChartService._entry_app_id(entry)
            if not app_id or app_id in chart:
                continue
            rank += 1
            chart[app_id] = rank
        return chart

    @staticmethod
    def _entry_app_id(entry) -> str | None:
        try:
            app_id = entry["id"]["attributes"]["im:id"]
        except (KeyError, TypeError):
            return None
        return str(app_id).strip() or None


# --------------------------------------------------------------------------- #
# Batch Fetching
# --------------------------------------------------------------------------- #


class FetchProgress(NamedTuple):
    """Emitted once per settled chart fetch."""

    key: ChartKey
    chart: RankMap
    completed: int
    total: int


class ChartBatchFetcher:
    """
    Fetches every (country, category) chart under a bounded schedule.

    Tasks run ``max_concurrent`` at a time on a thread pool with a short
    pause between batches to stay under the feed's rate limits.  A task
    that fails settles as an empty chart and never holds up its batch.
    """

    def __init__(
        self,
        chart_service: ITunesChartService | None = None,
        max_concurrent: int | None = None,
        batch_delay: float | None = None,
        sleep=time.sleep,
    ):
        self.chart_service = chart_service if chart_service is not None else ITunesChartService()
        self.max_concurrent = max(
            1,
            max_concurrent if max_concurrent is not None else settings.TRENDING_MAX_CONCURRENT,
        )
        self.batch_delay = batch_delay if batch_delay is not None else settings.TRENDING_BATCH_DELAY
        self._sleep = sleep

    @staticmethod
    def build_tasks(countries, categories=CHART_CATEGORIES) -> list[ChartKey]:
        """Cross product of storefronts and chart categories, country-major."""
        codes = [str(getattr(c, "code", c)).strip().upper() for c in countries]
        return [
            ChartKey(code, ChartCategory(category))
            for code in codes
            for category in categories
        ]

    def iter_fetch(self, countries, categories=CHART_CATEGORIES):
        """
        Yield a FetchProgress for each chart as it settles.

        Completion order within a batch is whatever order the fetches
        finish in; batches themselves run one after another.
        """
        tasks = self.build_tasks(countries, categories)
        total = len(tasks)
        if not total:
            return

        completed = 0
        with ThreadPoolExecutor(
            max_workers=min(self.max_concurrent, total),
            thread_name_prefix="chart-fetch",
        ) as executor:
            for start in range(0, total, self.max_concurrent):
                if start > 0 and self.batch_delay > 0:
                    self._sleep(self.batch_delay)

                batch = tasks[start : start + self.max_concurrent]
                future_to_key = {executor.submit(self._fetch_one, key): key for key in batch}
                for future in as_completed(future_to_key):
                    completed += 1
                    yield FetchProgress(future_to_key[future], future.result(), completed, total)

    def fetch_all(self, countries, categories=CHART_CATEGORIES, on_progress=None) -> dict[ChartKey, RankMap]:
        """
        Fetch every chart and return them keyed by ChartKey.

        ``on_progress(completed, total)`` is called after each chart settles.
        """
        results = {}
        for event in self.iter_fetch(countries, categories):
            results[event.key] = event.chart
            if on_progress is not None:
                on_progress(event.completed, event.total)
        return results

    def _fetch_one(self, key: ChartKey) -> RankMap:
        try:
            return self.chart_service.fetch_chart(key.country, key.category)
        except Exception as e:
            logger.warning(f"Chart task {key.country} {key.category} failed: {e}")
            return {}


# --------------------------------------------------------------------------- #
# Trending Reduction
# --------------------------------------------------------------------------- #


class TrendingReduction(NamedTuple):
    per_app: dict[str, AppTrending]
    per_country: dict[str, CountryTrending]


class TrendingReducer:
    """
    Reduces raw chart snapshots into per-app and per-country views.

    Charts are always visited in one canonical order (country code
    ascending, then category in declaration order, then app ids in the
    order requested), so the result depends only on the charts' content
    and never on the order they were fetched in.  Within a country the
    first app seen at the best rank keeps it; later ties do not replace it.
    """

    @staticmethod
    def normalize_app_ids(app_ids) -> list[str]:
        """String ids, de-duplicated, first occurrence wins."""
        return list(dict.fromkeys(str(app_id).strip() for app_id in app_ids if str(app_id).strip()))

    @staticmethod
    def canonical_order(charts: dict) -> list[tuple[ChartKey, RankMap]]:
        """
        Charts as (key, chart) pairs in processing order.

        Country codes are upper-cased, so "us" and "US" are one storefront.
        The key as given breaks ties between such spellings.
        """
        category_index = {category: i for i, category in enumerate(CHART_CATEGORIES)}
        ordered = []
        for raw_key, chart in charts.items():
            country, category = str(raw_key[0]).strip(), ChartCategory(raw_key[1])
            key = ChartKey(country.upper(), category)
            ordered.append(((key.country, category_index[category], country), key, chart))
        ordered.sort(key=lambda item: item[0])
        return [(key, chart) for _, key, chart in ordered]

    def reduce(self, app_ids, charts: dict) -> TrendingReduction:
        app_ids = self.normalize_app_ids(app_ids)
        hits = {app_id: [] for app_id in app_ids}
        best = {}

        if app_ids:
            for key, chart in self.canonical_order(charts):
                if not chart:
                    continue
                for app_id in app_ids:
                    rank = chart.get(app_id)
                    if rank is None:
                        continue
                    hits[app_id].append(TrendingHit(key.country, key.category, rank))

                    current = best.get(key.country)
                    if current is None or rank < current[0]:
                        best[key.country] = (rank, app_id, key.category)

        per_app = {
            app_id: AppTrending(app_id=app_id, hits=tuple(sorted(app_hits, key=lambda h: h.rank)))
            for app_id, app_hits in hits.items()
        }
        per_country = {
            code: CountryTrending(
                country=lookup(code), best_rank=rank, app_id=app_id, category=category
            )
            for code, (rank, app_id, category) in best.items()
        }
        return TrendingReduction(per_app=per_app, per_country=per_country)

    def summarize(self, app_ids, charts: dict, breadth="quick", countries_scanned: int = 0) -> TrendingSummary:
        """Reduce and order the charts into a TrendingSummary."""
        breadth = normalize_breadth(breadth)
        reduction = self.reduce(app_ids, charts)

        countries = sorted(reduction.per_country.values(), key=lambda c: c.best_rank)
        per_app = sorted(reduction.per_app.values(), key=lambda a: -a.trending_countries)

        return TrendingSummary(
            has_trending=bool(countries),
            total_trending_countries=len(countries),
            countries=tuple(countries),
            per_app=tuple(per_app),
            breadth=breadth,
            countries_scanned=countries_scanned,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )


# --------------------------------------------------------------------------- #
# Trending Summary
# --------------------------------------------------------------------------- #


class TrendingService:
    """
    Entry point: app ids + scan breadth in, TrendingSummary out.

    Always returns a well-formed summary.  Unreachable storefronts only
    show up as missing countries in the result.
    """

    def __init__(
        self,
        fetcher: ChartBatchFetcher | None = None,
        reducer: TrendingReducer | None = None,
        categories=CHART_CATEGORIES,
    ):
        self.fetcher = fetcher if fetcher is not None else ChartBatchFetcher()
        self.reducer = reducer if reducer is not None else TrendingReducer()
        self.categories = list(categories)

    def build_summary(self, app_ids, breadth="quick", on_progress=None) -> TrendingSummary:
        breadth = normalize_breadth(breadth)
        countries = resolve_breadth(breadth)
        app_ids = self.reducer.normalize_app_ids(app_ids)

        if not app_ids:
            return TrendingSummary.empty(breadth=breadth, countries_scanned=len(countries))

        logger.info(
            f"Scanning {len(countries)} countries ({breadth} mode) for {len(app_ids)} apps"
        )
        charts = self.fetcher.fetch_all(countries, self.categories, on_progress=on_progress)
        summary = self.reducer.summarize(
            app_ids, charts, breadth=breadth, countries_scanned=len(countries)
        )
        logger.info(f"Found trending in {summary.total_trending_countries} countries")
        return summary

    def prefetch(self, breadth="quick", on_progress=None) -> int:
        """Warm the chart cache for every chart in a breadth. Returns charts fetched."""
        countries = resolve_breadth(breadth)
        logger.info(f"Prefetching charts for {len(countries)} countries...")
        charts = self.fetcher.fetch_all(countries, self.categories, on_progress=on_progress)
        logger.info("Prefetch complete")
        return len(charts)
