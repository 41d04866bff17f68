import html
import logging
import re
import uuid
from typing import Dict, List, Optional

from technews.feeds.base import RawFeedItem
from technews.sources.registry import NewsSource
from technews.storage.models import NewsArticle
from technews.utils.tz_utils import parse_pub_date

logger = logging.getLogger(__name__)

TECH_KEYWORDS = [
    "ai", "artificial intelligence", "machine learning", "deep learning",
    "technology", "software", "hardware", "robotics", "automation",
    "blockchain", "cryptocurrency", "cyber", "digital", "cloud",
    "programming", "code", "developer", "engineering", "computer",
    "startup", "tech", "innovation", "algorithm", "data science",
    "neural network", "quantum", "semiconductor", "5g", "6g",
    "processor", "chip", "silicon", "mobile", "app",
]

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "ai": ["ai", "artificial intelligence", "machine learning", "deep learning", "neural network", "llm", "gpt"],
    "tech": ["technology", "software", "hardware", "digital", "cloud", "mobile", "app", "startup"],
    "science": ["research", "quantum", "semiconductor", "engineering", "innovation"],
    "economics": ["market", "startup", "investment", "venture capital", "funding", "acquisition"],
}

_IMG_SRC = re.compile(r"<img[^>]+src=[\"']([^\"'>]+)[\"']", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")


def _contains_any(text: str, keywords: List[str]) -> bool:
    t = text.lower()
    return any(k in t for k in keywords)


def clean_html(raw_html: Optional[str]) -> str:
    """Remove tags e colapsa espaços."""
    if not raw_html:
        return ""
    return " ".join(html.unescape(_TAG.sub(" ", raw_html)).split())


def is_tech_related(text: str) -> bool:
    return _contains_any(text or "", TECH_KEYWORDS)


def categorize_article(text: str) -> List[str]:
    """
    Categorias cujas palavras-chave aparecem no texto (substring, sem diferenciar caixa).
    Um artigo pode não ter nenhuma ou ter várias; 'ai' implica 'tech'.
    """
    categories = {name for name, terms in CATEGORY_KEYWORDS.items() if _contains_any(text or "", terms)}
    if "ai" in categories:
        categories.add("tech")
    return sorted(categories)


def _first_img(markup: Optional[str]) -> Optional[str]:
    if not markup:
        return None
    match = _IMG_SRC.search(markup)
    return match.group(1) if match else None


def extract_thumbnail(item: RawFeedItem) -> Optional[str]:
    return (
        item.media_content_url
        or item.media_thumbnail_url
        or _first_img(item.description)
        or _first_img(item.content_encoded)
    )


def process_article(item: RawFeedItem, source: NewsSource) -> Optional[NewsArticle]:
    """
    Converte um item bruto do feed em NewsArticle.
    Retorna None para itens sem título/link, fora do filtro de tecnologia ou com erro.
    """
    try:
        title = (item.title or "").strip()
        link = (item.link or "").strip()
        if not title or not link:
            return None

        snippet = clean_html(item.description or item.content_encoded)
        text = f"{title} {snippet}"
        if not is_tech_related(text):
            return None

        published = parse_pub_date(item.pub_date, item.published_parsed)

        return NewsArticle(
            id=item.guid or link or str(uuid.uuid4()),
            title=title,
            link=link,
            pub_date=published.isoformat(),
            creator=item.creator,
            content=item.content,
            content_snippet=snippet or None,
            categories=categorize_article(text),
            thumbnail=extract_thumbnail(item),
            source=source.name,
            source_id=source.id,
            region=source.region,
            language=source.language,
        )
    except Exception as e:  # um item ruim não derruba o lote
        logger.warning("Dropping item from %s (%s): %s", source.id, item.link, e)
        return None
