import threading

from tests.fakes import FakeChartService
from trending.countries import lookup, resolve_breadth
from trending.models import CHART_CATEGORIES, ChartCategory, ChartKey
from trending.services import ChartBatchFetcher


def make_fetcher(service, max_concurrent=10, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return ChartBatchFetcher(
        chart_service=service,
        max_concurrent=max_concurrent,
        batch_delay=0.1,
        sleep=sleeps.append,
    )


def test_build_tasks_is_full_cross_product():
    tasks = ChartBatchFetcher.build_tasks([lookup("US"), "GB"], CHART_CATEGORIES)
    assert tasks == [
        ChartKey("US", ChartCategory.TOP_FREE),
        ChartKey("US", ChartCategory.TOP_PAID),
        ChartKey("GB", ChartCategory.TOP_FREE),
        ChartKey("GB", ChartCategory.TOP_PAID),
    ]


def test_fetch_all_returns_every_chart():
    service = FakeChartService(charts={("US", "top-free"): {"1": 1}})
    results = make_fetcher(service).fetch_all(resolve_breadth("quick"))

    assert len(results) == 10
    assert results[ChartKey("US", ChartCategory.TOP_FREE)] == {"1": 1}
    assert results[ChartKey("AU", ChartCategory.TOP_PAID)] == {}
    assert len(service.calls) == 10


def test_progress_reported_after_every_task():
    progress = []
    make_fetcher(FakeChartService(), max_concurrent=3).fetch_all(
        ["US", "GB", "CA"], on_progress=lambda done, total: progress.append((done, total))
    )
    assert progress == [(i, 6) for i in range(1, 7)]


def test_delay_only_between_batches():
    sleeps = []
    make_fetcher(FakeChartService(), max_concurrent=4, sleeps=sleeps).fetch_all(
        ["US", "GB", "CA", "AU", "IN"]
    )
    # 10 tasks in batches of 4 → 3 batches → 2 pauses
    assert sleeps == [0.1, 0.1]


def test_single_batch_never_sleeps():
    sleeps = []
    make_fetcher(FakeChartService(), sleeps=sleeps).fetch_all(["US"])
    assert sleeps == []


def test_no_countries_means_no_tasks():
    assert make_fetcher(FakeChartService()).fetch_all([]) == {}


def test_concurrency_is_bounded():
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}
    release = threading.Event()

    class SlowService(FakeChartService):
        def fetch_chart(self, country, category):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            release.wait(0.05)
            with lock:
                state["active"] -= 1
            return {}

    make_fetcher(SlowService(), max_concurrent=3).fetch_all(resolve_breadth("major"))
    assert 1 <= state["peak"] <= 3


def test_failing_tasks_do_not_stop_the_batch():
    service = FakeChartService(
        charts={("GB", "top-free"): {"7": 1}},
        failing={("US", "top-free")},
        raising={("US", "top-paid")},
    )
    results = make_fetcher(service, max_concurrent=4).fetch_all(["US", "GB"])

    assert results[ChartKey("US", ChartCategory.TOP_FREE)] == {}
    assert results[ChartKey("US", ChartCategory.TOP_PAID)] == {}
    assert results[ChartKey("GB", ChartCategory.TOP_FREE)] == {"7": 1}
    assert len(results) == 4


def test_iter_fetch_yields_completion_events():
    events = list(make_fetcher(FakeChartService(), max_concurrent=2).iter_fetch(["US"]))
    assert [e.completed for e in events] == [1, 2]
    assert {e.key for e in events} == {
        ChartKey("US", ChartCategory.TOP_FREE),
        ChartKey("US", ChartCategory.TOP_PAID),
    }
    assert all(e.total == 2 for e in events)


def test_build_tasks_upper_cases_codes():
    tasks = ChartBatchFetcher.build_tasks(["us", " gb "], [ChartCategory.TOP_FREE])
    assert tasks == [ChartKey("US", ChartCategory.TOP_FREE), ChartKey("GB", ChartCategory.TOP_FREE)]
