import time
from threading import Lock
from typing import Callable, List, Optional

from technews import config
from technews.storage.models import NewsArticle


class NewsCache:
    """
    Última lista de artigos buscada com sucesso + instante da busca.
    Só memória do processo; some no restart.
    """

    def __init__(self, ttl_seconds: float = config.CACHE_TTL_MINUTES * 60, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._articles: List[NewsArticle] = []
        self._last_fetch: Optional[float] = None
        self._lock = Lock()

    @property
    def last_fetch(self) -> Optional[float]:
        return self._last_fetch

    def is_empty(self) -> bool:
        with self._lock:
            return not self._articles

    def is_fresh(self) -> bool:
        with self._lock:
            if not self._articles or self._last_fetch is None:
                return False
            return self.clock() - self._last_fetch < self.ttl_seconds

    def get(self) -> List[NewsArticle]:
        # mesma referência: duas leituras dentro do TTL devolvem o mesmo objeto
        with self._lock:
            return self._articles

    def set(self, articles: List[NewsArticle]) -> None:
        with self._lock:
            self._articles = articles
            self._last_fetch = self.clock()
