import logging
from threading import Lock
from typing import List, Optional

from datasketch import MinHash, MinHashLSH

from technews.feeds.service import FeedService
from technews.processor.article_processor import process_article
from technews.storage.cache import NewsCache
from technews.storage.models import NewsArticle
from technews.utils.tz_utils import iso_to_utc

logger = logging.getLogger(__name__)

_NUM_PERM = 128
_LSH_THRESHOLD = 0.8


def _build_minhash(text: str) -> MinHash:
    # Barato e estável: lower + split. Limita tokens para reduzir custo.
    m = MinHash(num_perm=_NUM_PERM)
    for token in text.lower().split()[:64]:
        m.update(token.encode("utf-8"))
    return m


def deduplicate(articles: List[NewsArticle]) -> List[NewsArticle]:
    """
    Remove repetidos mantendo a primeira ocorrência:
    - exato por id/link
    - aproximado por título (MinHash LSH), p/ a mesma matéria em fontes diferentes
    """
    seen: set = set()
    lsh = MinHashLSH(threshold=_LSH_THRESHOLD, num_perm=_NUM_PERM)
    out: List[NewsArticle] = []

    for idx, article in enumerate(articles):
        if article.id in seen or article.link in seen:
            continue
        m = _build_minhash(article.title)
        if lsh.query(m):
            continue
        lsh.insert(idx, m)
        seen.add(article.id)
        seen.add(article.link)
        out.append(article)
    return out


def sort_newest_first(articles: List[NewsArticle]) -> List[NewsArticle]:
    return sorted(articles, key=lambda a: iso_to_utc(a.pub_date), reverse=True)


def filter_by_category(articles: List[NewsArticle], category: Optional[str]) -> List[NewsArticle]:
    if not category or category == "all":
        return articles
    return [a for a in articles if category in a.categories]


class NewsTracker:
    """
    Ponto de entrada único: fetch_news().

    Cache fresco -> devolve sem rede. Senão busca tudo, processa, deduplica,
    ordena (mais novo primeiro) e troca o cache. Refresh vazio com cache
    preenchido mantém o cache antigo; erro total devolve o que houver.
    """

    def __init__(self, feed_service: Optional[FeedService] = None, cache: Optional[NewsCache] = None):
        self.feed_service = feed_service or FeedService()
        self.cache = cache or NewsCache()
        self._refresh_lock = Lock()  # evita dois refreshes simultâneos buscando tudo
        self._attempts = 0           # refreshes concluídos, com sucesso ou não

    def _collect(self) -> List[NewsArticle]:
        articles: List[NewsArticle] = []
        for source, items in self.feed_service.fetch_all_feeds():
            for item in items:
                article = process_article(item, source)
                if article is not None:
                    articles.append(article)
        # dedupe antes de ordenar: em empate vence a fonte de maior prioridade
        return sort_newest_first(deduplicate(articles))

    def _refresh(self, seen_attempts: int, force: bool = False) -> List[NewsArticle]:
        with self._refresh_lock:
            # outro refresh terminou enquanto esperávamos: usa o resultado dele, bom ou ruim
            if self._attempts != seen_attempts:
                return self.cache.get()
            if not force and self.cache.is_fresh():
                return self.cache.get()

            try:
                articles = self._collect()
            except Exception:
                logger.exception("Error fetching news")
                articles = None
            self._attempts += 1

            if articles is None:
                return self.cache.get()
            if not articles and not self.cache.is_empty():
                logger.warning("Refresh returned no articles; keeping %d cached", len(self.cache.get()))
                return self.cache.get()

            self.cache.set(articles)
            logger.info("News cache updated: %d articles", len(articles))
            return articles

    def refresh(self) -> List[NewsArticle]:
        return self._refresh(self._attempts)

    def fetch_news(self) -> List[NewsArticle]:
        seen_attempts = self._attempts
        if self.cache.is_fresh():
            return self.cache.get()
        return self._refresh(seen_attempts)

    def force_refresh(self) -> List[NewsArticle]:
        # o cache atual continua servindo leitores até set() trocar a lista
        return self._refresh(self._attempts, force=True)
