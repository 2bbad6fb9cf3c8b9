import pytest
import requests

from tests.fakes import FakeResponse, FakeSession, rss_payload
from trending.models import ChartCategory
from trending.services import ChartFeedError, ITunesChartService


def make_service(chart_cache, session):
    return ITunesChartService(cache=chart_cache, session=session, timeout=12, limit=200, ttl=3600)


def test_parse_feed_assigns_positional_ranks():
    chart = ITunesChartService.parse_feed(rss_payload(["111", "222", "333"]))
    assert chart == {"111": 1, "222": 2, "333": 3}


def test_parse_feed_skips_entries_without_id():
    chart = ITunesChartService.parse_feed(rss_payload(["111", None, "333", None, "444"]))
    assert chart == {"111": 1, "333": 2, "444": 3}
    assert sorted(chart.values()) == list(range(1, len(chart) + 1))


def test_parse_feed_keeps_first_position_of_duplicate_ids():
    chart = ITunesChartService.parse_feed(rss_payload(["111", "222", "111", "333"]))
    assert chart == {"111": 1, "222": 2, "333": 3}


def test_parse_feed_single_entry_object():
    payload = rss_payload(["999"])
    payload["feed"]["entry"] = payload["feed"]["entry"][0]
    assert ITunesChartService.parse_feed(payload) == {"999": 1}


def test_parse_feed_without_entries_is_empty_chart():
    assert ITunesChartService.parse_feed({"feed": {"author": {}}}) == {}


@pytest.mark.parametrize(
    "payload",
    [None, [], "oops", {"nofeed": True}, {"feed": "x"}, {"feed": {"entry": "x"}}],
)
def test_parse_feed_rejects_malformed_payload(payload):
    with pytest.raises(ChartFeedError):
        ITunesChartService.parse_feed(payload)


def test_fetch_chart_requests_feed_url(chart_cache):
    session = FakeSession(default=FakeResponse(rss_payload(["1", "2"])))
    service = make_service(chart_cache, session)

    assert service.fetch_chart("US", ChartCategory.TOP_PAID) == {"1": 1, "2": 2}

    call = session.calls[0]
    assert call["url"] == "https://itunes.apple.com/us/rss/toppaidapplications/limit=200/json"
    assert call["timeout"] == 12
    assert call["headers"] == {"Accept": "application/json"}


def test_fetch_chart_is_memoized(chart_cache):
    session = FakeSession(default=FakeResponse(rss_payload(["1"])))
    service = make_service(chart_cache, session)

    service.fetch_chart("GB", "top-free")
    service.fetch_chart("GB", ChartCategory.TOP_FREE)
    assert len(session.calls) == 1

    service.fetch_chart("GB", "top-paid")
    assert len(session.calls) == 2


def test_transport_error_returns_empty_chart(chart_cache):
    session = FakeSession(routes={"/jp/": requests.ConnectionError("unreachable")})
    service = make_service(chart_cache, session)
    assert service.fetch_chart("JP", "top-free") == {}


def test_http_error_returns_empty_chart(chart_cache):
    session = FakeSession(default=FakeResponse(status_code=503))
    service = make_service(chart_cache, session)
    assert service.fetch_chart("US", "top-free") == {}


def test_bad_json_returns_empty_chart(chart_cache):
    session = FakeSession(default=FakeResponse(error=ValueError("not json")))
    service = make_service(chart_cache, session)
    assert service.fetch_chart("US", "top-free") == {}


def test_failures_are_not_cached(chart_cache):
    session = FakeSession(default=FakeResponse(status_code=500))
    service = make_service(chart_cache, session)
    assert service.fetch_chart("CA", "top-free") == {}

    session.default = FakeResponse(rss_payload(["42"]))
    assert service.fetch_chart("CA", "top-free") == {"42": 1}
    assert len(session.calls) == 2


def test_unknown_category_returns_empty_chart(chart_cache):
    session = FakeSession()
    service = make_service(chart_cache, session)
    assert service.fetch_chart("US", "top-grossing-ish") == {}
    assert session.calls == []
