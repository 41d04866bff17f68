# technews/tests/conftest.py
import time
from typing import Dict, List, Optional, Union

import pytest
import requests

from technews.feeds.base import BaseFeed, RawFeedItem
from technews.sources.registry import NewsSource

SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
<channel>
  <title>Example Tech</title>
  <link>https://example.com</link>
  <description>Example feed</description>
  <item>
    <title>New AI chip announced</title>
    <link>https://example.com/ai-chip</link>
    <guid>https://example.com/?p=1</guid>
    <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
    <dc:creator>Jane Doe</dc:creator>
    <description><![CDATA[<p><img src="https://example.com/inline.jpg" /> A faster processor.</p>]]></description>
    <media:thumbnail url="https://example.com/thumb.jpg" />
  </item>
  <item>
    <title>Local bakery wins prize</title>
    <link>https://example.com/bakery</link>
    <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
    <description>Bread.</description>
  </item>
</channel>
</rss>
"""


def make_source(source_id: str = "example", priority: int = 50, enabled: bool = True, **kw) -> NewsSource:
    data = {
        "id": source_id,
        "name": kw.pop("name", source_id.title()),
        "url": kw.pop("url", f"https://{source_id}.example.com/feed.xml"),
        "category": "tech",
        "region": "global",
        "language": "en",
        "enabled": enabled,
        "priority": priority,
    }
    data.update(kw)
    return NewsSource(**data)


def make_item(title: str, link: str, pub_date: Optional[str] = "2024-01-01T00:00:00+00:00", **kw) -> RawFeedItem:
    return RawFeedItem(title=title, link=link, pub_date=pub_date, **kw)


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, headers: Optional[Dict[str, str]] = None):
        self.text = text
        self.status_code = status_code
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Devolve as respostas na ordem; exceções da fila são levantadas."""

    def __init__(self, responses: List[Union[FakeResponse, Exception]]):
        self.responses = list(responses)
        self.calls: List[str] = []

    def get(self, url, timeout=None, headers=None):
        self.calls.append(url)
        result = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeFetcher(BaseFeed):
    """Feed por id de fonte: lista de itens ou exceção; delay opcional p/ inverter a ordem de chegada."""

    def __init__(self, results: Dict[str, Union[List[RawFeedItem], Exception]], delays: Optional[Dict[str, float]] = None):
        self.results = results
        self.delays = delays or {}
        self.calls: List[str] = []

    def fetch(self, source: NewsSource) -> List[RawFeedItem]:
        self.calls.append(source.id)
        if source.id in self.delays:
            time.sleep(self.delays[source.id])
        result = self.results.get(source.id, [])
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def app(monkeypatch):
    # Patches para impedir network/scheduler no startup
    from technews.api import main as api_main

    # 1) warm_cache: no-op
    monkeypatch.setattr(api_main, "warm_cache", lambda: {"status": "success", "count": 0}, raising=True)

    # 2) scheduler.start/shutdown: no-op
    class DummyScheduler:
        def add_job(self, *a, **k): pass
        def start(self): pass
        def shutdown(self, wait=False): pass
    monkeypatch.setattr(api_main, "scheduler", DummyScheduler(), raising=True)

    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    # Usa contexto para garantir lifespan mas com patches aplicados
    with TestClient(app) as c:
        yield c
