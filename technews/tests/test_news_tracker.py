# technews/tests/test_news_tracker.py
import threading
import time

import pytest

from conftest import FakeFetcher, make_item, make_source

from technews.feeds.exceptions import FeedFetchError
from technews.feeds.service import FeedService
from technews.storage.cache import NewsCache
from technews.tracker.news_tracker import NewsTracker, deduplicate, filter_by_category

TTL = 15 * 60


def _tracker(results, clock, sources=None, delays=None):
    sources = sources or [make_source(sid, priority=50) for sid in results]
    fetcher = FakeFetcher(results, delays=delays)
    service = FeedService(fetcher=fetcher, sources=sources)
    tracker = NewsTracker(feed_service=service, cache=NewsCache(ttl_seconds=TTL, clock=clock))
    return tracker, fetcher


def test_second_call_within_ttl_hits_cache(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)

    first = tracker.fetch_news()
    clock.advance(TTL - 1)
    second = tracker.fetch_news()

    assert second is first
    assert fetcher.calls == ["a"]


def test_refetches_after_ttl(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)

    tracker.fetch_news()
    clock.advance(TTL)
    tracker.fetch_news()

    assert fetcher.calls == ["a", "a"]


def test_all_sources_failing_serves_previous_cache(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    previous = tracker.fetch_news()
    assert len(previous) == 1

    clock.advance(TTL + 1)
    fetcher.results["a"] = FeedFetchError("down")
    assert tracker.fetch_news() == previous


def test_empty_refresh_keeps_stale_cache(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    previous = tracker.fetch_news()

    clock.advance(TTL + 1)
    # só itens fora do filtro de tecnologia
    fetcher.results["a"] = [make_item("Local bakery wins prize", "https://x/bread")]
    assert tracker.fetch_news() is previous


def test_pipeline_exception_returns_cache(clock, monkeypatch):
    tracker, _ = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    previous = tracker.fetch_news()

    def boom(*a, **k):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(tracker.feed_service, "fetch_all_feeds", boom)
    clock.advance(TTL + 1)
    assert tracker.fetch_news() is previous


def test_total_failure_without_cache_returns_empty(clock):
    tracker, _ = _tracker({"a": FeedFetchError("down")}, clock)
    assert tracker.fetch_news() == []


def test_merged_output_is_newest_first_regardless_of_arrival(clock):
    sources = [make_source("fast", priority=10), make_source("slow", priority=90)]
    results = {
        "fast": [make_item("Quantum processor record", "https://fast/1", pub_date="2024-01-01")],
        "slow": [make_item("Robotics startup expands", "https://slow/1", pub_date="2024-01-02")],
    }
    tracker, _ = _tracker(results, clock, sources=sources, delays={"slow": 0.05})

    articles = tracker.fetch_news()

    assert [a.link for a in articles] == ["https://slow/1", "https://fast/1"]
    assert articles[0].pub_date.startswith("2024-01-02")


def test_duplicates_across_sources_keep_higher_priority(clock):
    sources = [make_source("major", priority=90), make_source("minor", priority=10)]
    title = "Apple unveils new M4 chip for MacBook Pro laptops"
    results = {
        "major": [make_item(title, "https://major/m4"), make_item("Cloud pricing changes", "https://shared/cloud")],
        "minor": [make_item(title, "https://minor/m4"), make_item("Cloud pricing changes again", "https://shared/cloud")],
    }
    tracker, _ = _tracker(results, clock, sources=sources)

    articles = tracker.fetch_news()

    assert sorted(a.link for a in articles) == ["https://major/m4", "https://shared/cloud"]
    assert {a.source_id for a in articles} == {"major"}


def test_deduplicate_keeps_distinct_titles():
    source = make_source()
    from technews.processor.article_processor import process_article
    articles = [
        process_article(make_item("Quantum computer breaks record", "https://x/1"), source),
        process_article(make_item("Smartphone app store rules change", "https://x/2"), source),
    ]
    assert deduplicate(articles) == articles


def test_force_refresh_ignores_fresh_cache(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    tracker.fetch_news()
    tracker.force_refresh()
    assert fetcher.calls == ["a", "a"]


@pytest.mark.parametrize("category,expected", [
    ("all", ["https://x/ai", "https://x/market"]),
    (None, ["https://x/ai", "https://x/market"]),
    ("ai", ["https://x/ai"]),
    ("economics", ["https://x/market"]),
    ("science", []),
])
def test_filter_by_category(clock, category, expected):
    tracker, _ = _tracker({"a": [
        make_item("New LLM model uses AI chip", "https://x/ai", pub_date="2024-01-02"),
        make_item("Tech market investment slows", "https://x/market", pub_date="2024-01-01"),
    ]}, clock)
    articles = tracker.fetch_news()
    assert [a.link for a in filter_by_category(articles, category)] == expected


def test_concurrent_callers_share_one_failed_refresh(clock):
    tracker, fetcher = _tracker({"a": FeedFetchError("down")}, clock, delays={"a": 0.2})
    results = []

    def call():
        results.append(tracker.fetch_news())

    threads = [threading.Thread(target=call) for _ in range(4)]
    started = time.monotonic()
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert fetcher.calls == ["a"]
    assert results == [[], [], [], []]
    assert time.monotonic() - started < 0.6


def test_concurrent_callers_share_one_empty_refresh(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    previous = tracker.fetch_news()

    clock.advance(TTL + 1)
    fetcher.results["a"] = []
    fetcher.delays["a"] = 0.2
    threads = [threading.Thread(target=tracker.fetch_news) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert fetcher.calls == ["a", "a"]
    assert tracker.fetch_news() is previous


def test_force_refresh_keeps_serving_cache_to_readers(clock):
    tracker, fetcher = _tracker({"a": [make_item("AI chip", "https://x/1")]}, clock)
    previous = tracker.fetch_news()

    fetcher.results["a"] = FeedFetchError("down")
    fetcher.delays["a"] = 0.3
    background = threading.Thread(target=tracker.force_refresh)
    background.start()
    time.sleep(0.05)

    started = time.monotonic()
    served = tracker.fetch_news()
    elapsed = time.monotonic() - started
    background.join()

    assert served is previous
    assert elapsed < 0.1
    assert fetcher.calls == ["a", "a"]
    assert tracker.fetch_news() is previous
