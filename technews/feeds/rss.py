import json
import logging
import time
from typing import Callable, List, Optional
from urllib.parse import quote

import feedparser
import requests
from requests.adapters import HTTPAdapter

from technews import config
from technews.feeds.base import BaseFeed, RawFeedItem
from technews.feeds.exceptions import FeedFetchError, InvalidFeedError
from technews.sources.registry import NewsSource

logger = logging.getLogger(__name__)

# ---------- Sessão HTTP global com pool (o retry é feito à mão, com backoff 1s/2s/4s) ----------
_SESSION = requests.Session()
_ADAPTER = HTTPAdapter(pool_connections=20, pool_maxsize=50, max_retries=0)
_SESSION.mount("https://", _ADAPTER)
_SESSION.mount("http://", _ADAPTER)
_SESSION.headers.update({"User-Agent": config.USER_AGENT, "Accept": config.ACCEPT})

_FEED_MARKERS = ("<rss", "<feed", "<?xml", "<rdf:rdf")


def is_valid_feed(content: str) -> bool:
    normalized = content.lower()
    return any(marker in normalized for marker in _FEED_MARKERS)


def is_html_error_page(content: str) -> bool:
    normalized = content.lower()
    return "<!doctype html" in normalized and "<rss" not in normalized and "<feed" not in normalized


def build_proxy_url(url: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.public_base_url()).rstrip("/")
    return f"{base}/api/proxy?url={quote(url, safe='')}"


def _proxy_error_message(text: str) -> Optional[str]:
    try:
        payload = json.loads(text)
    except ValueError:
        # não é JSON: segue com o corpo como está
        return None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return None


def parse_feed(content: str) -> List[RawFeedItem]:
    feed = feedparser.parse(content)
    entries = feed.get("entries") or []
    if feed.get("bozo") and not entries:
        raise InvalidFeedError(f"Unparseable feed ({feed.get('bozo_exception')})")
    return [RawFeedItem.from_entry(e) for e in entries]


class FeedFetcher(BaseFeed):
    """
    Baixa e interpreta um feed RSS/Atom por fonte.

    Cada tentativa tem timeout próprio; falhas (status != 2xx, erro de rede,
    página HTML no lugar do XML, erro JSON vindo do proxy) são repetidas com
    backoff exponencial. Em modo proxy a URL passa por /api/proxy do próprio
    serviço.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = config.FETCH_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
        use_proxy: bool = config.USE_PROXY,
        proxy_base_url: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session or _SESSION
        self.timeout = timeout
        self.max_retries = max_retries
        self.use_proxy = use_proxy
        self.proxy_base_url = proxy_base_url
        self.sleep = sleep

    def _target_url(self, url: str) -> str:
        if self.use_proxy:
            return build_proxy_url(url, self.proxy_base_url)
        return url

    def get_raw(self, url: str) -> requests.Response:
        """Um GET simples, sem retry; status != 2xx e erros de rede viram FeedFetchError."""
        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": config.USER_AGENT, "Accept": config.ACCEPT},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedFetchError(f"HTTP error for {url}: {e}") from e
        return response

    def _get_once(self, fetch_url: str) -> str:
        text = self.get_raw(fetch_url).text
        if is_html_error_page(text):
            raise FeedFetchError("Received HTML instead of RSS feed")
        if self.use_proxy and '"error":' in text:
            message = _proxy_error_message(text)
            if message:
                raise FeedFetchError(message)
        return text

    def fetch_with_retry(self, url: str, retries: Optional[int] = None) -> str:
        retries = self.max_retries if retries is None else retries
        fetch_url = self._target_url(url)
        last_error: Optional[FeedFetchError] = None

        for attempt in range(retries):
            try:
                return self._get_once(fetch_url)
            except FeedFetchError as e:
                last_error = e
                logger.debug("Attempt %d/%d failed for %s: %s", attempt + 1, retries, url, e)
                if attempt < retries - 1:
                    self.sleep(2 ** attempt)

        raise last_error or FeedFetchError(f"Failed to fetch after retries: {url}")

    def fetch(self, source: NewsSource) -> List[RawFeedItem]:
        content = self.fetch_with_retry(str(source.url))
        if not is_valid_feed(content):
            raise InvalidFeedError(f"Invalid feed format: {source.id}")
        return parse_feed(content)
