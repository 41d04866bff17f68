from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class NewsSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    url: HttpUrl
    type: Literal["rss", "api"] = "rss"
    category: str
    region: str
    language: str
    enabled: bool = True
    priority: int = Field(ge=0, le=100)


# Fontes coreanas
KOREAN_SOURCES: List[NewsSource] = [
    NewsSource(id="hankyung", name="Hankyung IT", url="https://www.hankyung.com/feed/it",
               category="tech", region="korea", language="ko", priority=85),
    NewsSource(id="techdaily", name="Tech Daily Korea", url="https://www.techdaily.co.kr/rss/allArticle.xml",
               category="tech", region="korea", language="ko", priority=80),
]

# Fontes globais de tecnologia
GLOBAL_SOURCES: List[NewsSource] = [
    NewsSource(id="bbc-tech", name="BBC Technology",
               url="https://feeds.bbci.co.uk/news/technology/rss.xml?edition=uk",
               category="tech", region="global", language="en", priority=95),
    NewsSource(id="techcrunch", name="TechCrunch", url="https://techcrunch.com/feed/",
               category="tech", region="global", language="en", priority=90),
    NewsSource(id="wired", name="Wired", url="https://www.wired.com/feed/rss",
               category="tech", region="global", language="en", priority=85),
]

# IA / ML
AI_ML_SOURCES: List[NewsSource] = [
    NewsSource(id="ml-mastery", name="Machine Learning Mastery", url="https://machinelearningmastery.com/blog/feed/",
               category="ai", region="global", language="en", priority=85),
    NewsSource(id="bair-blog", name="BAIR Blog", url="https://bair.berkeley.edu/blog/feed.xml",
               category="ai", region="global", language="en", priority=90),
    NewsSource(id="google-research", name="Google Research", url="https://research.google/blog/rss/",
               category="ai", region="global", language="en", priority=95),
    NewsSource(id="mit-ai-news", name="MIT AI News", url="https://news.mit.edu/rss/topic/artificial-intelligence2",
               category="ai", region="global", language="en", priority=90),
]

JAPANESE_SOURCES: List[NewsSource] = [
    NewsSource(id="itmedia", name="ITmedia", url="https://rss.itmedia.co.jp/rss/2.0/topstory.xml",
               category="tech", region="japan", language="ja", priority=85),
]

CHINESE_SOURCES: List[NewsSource] = [
    NewsSource(id="techinasia-china", name="TechInChina", url="https://www.techinasia.com/tag/china/feed",
               category="tech", region="china", language="en", priority=85),
]

NEWS_SOURCES: List[NewsSource] = [
    *GLOBAL_SOURCES,
    *KOREAN_SOURCES,
    *JAPANESE_SOURCES,
    *CHINESE_SOURCES,
    *AI_ML_SOURCES,
]


def enabled_sources(sources: Optional[List[NewsSource]] = None) -> List[NewsSource]:
    """Fontes habilitadas, da maior para a menor prioridade."""
    pool = NEWS_SOURCES if sources is None else sources
    return sorted((s for s in pool if s.enabled), key=lambda s: s.priority, reverse=True)
