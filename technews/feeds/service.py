import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Lock
from typing import Dict, List, Optional, Sequence, Tuple

from technews import config
from technews.feeds.base import BaseFeed, RawFeedItem
from technews.feeds.rss import FeedFetcher
from technews.sources.registry import NEWS_SOURCES, NewsSource, enabled_sources
from technews.storage.models import FeedError, FeedStats
from technews.utils.tz_utils import utc_now_iso

logger = logging.getLogger(__name__)

FeedResult = Tuple[NewsSource, List[RawFeedItem]]


class FeedService:
    """Busca todas as fontes habilitadas em paralelo e guarda erros/estatísticas por fonte."""

    def __init__(
        self,
        fetcher: Optional[BaseFeed] = None,
        sources: Optional[Sequence[NewsSource]] = None,
        max_workers: int = config.MAX_FETCH_WORKERS,
        max_errors: int = config.MAX_ERRORS,
    ):
        self.fetcher = fetcher or FeedFetcher()
        self.sources: List[NewsSource] = list(NEWS_SOURCES if sources is None else sources)
        self.max_workers = max_workers
        self.max_errors = max_errors
        self._errors: List[FeedError] = []
        self._stats: Dict[str, FeedStats] = {}
        self._lock = Lock()  # fetch_feed roda em várias threads

    def _log_error(self, source_id: str, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        with self._lock:
            self._errors.insert(0, FeedError(source_id=source_id, error=message, timestamp=utc_now_iso()))
            del self._errors[self.max_errors:]
        logger.error("Error fetching %s: %s", source_id, message)

    def _update_stats(self, source_id: str, **changes) -> None:
        with self._lock:
            current = self._stats.get(source_id) or FeedStats(source_id=source_id, last_fetch=utc_now_iso())
            self._stats[source_id] = current.model_copy(update={**changes, "last_fetch": utc_now_iso()})

    def fetch_feed(self, source: NewsSource) -> Optional[List[RawFeedItem]]:
        """Itens da fonte, ou None se a busca falhou (o erro fica registrado)."""
        try:
            items = self.fetcher.fetch(source)
        except Exception as e:  # qualquer falha derruba só esta fonte
            self._log_error(source.id, e)
            self._update_stats(source.id, status="error", error=str(e))
            return None

        if not items:
            logger.warning("No items found in feed: %s", source.id)
        self._update_stats(source.id, articles_count=len(items), status="success", error=None)
        return items

    def fetch_all_feeds(self, sources: Optional[Sequence[NewsSource]] = None) -> List[FeedResult]:
        targets = enabled_sources(list(self.sources if sources is None else sources))
        if not targets:
            return []

        fetched: Dict[str, List[RawFeedItem]] = {}
        with ThreadPoolExecutor(max_workers=min(len(targets), self.max_workers)) as ex:
            futures = {ex.submit(self.fetch_feed, s): s for s in targets}
            for fut in as_completed(futures):
                source = futures[fut]
                try:
                    items = fut.result()
                except Exception as e:
                    self._log_error(source.id, e)
                    continue
                if items is not None:
                    fetched[source.id] = items

        # ordem de prioridade, independente de quem respondeu primeiro
        return [(s, fetched[s.id]) for s in targets if s.id in fetched]

    def get_errors(self) -> List[FeedError]:
        with self._lock:
            return list(self._errors)

    def get_stats(self) -> List[FeedStats]:
        with self._lock:
            return list(self._stats.values())

    def clear_errors(self) -> None:
        with self._lock:
            self._errors = []
