from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class NewsArticle(BaseModel):
    # aliases em camelCase mantêm o formato JSON consumido pelo front-end
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    link: str
    pub_date: str = Field(alias="pubDate")      # ISO-8601 em UTC
    creator: Optional[str] = None
    content: str = ""
    content_snippet: Optional[str] = Field(default=None, alias="contentSnippet")
    categories: List[str] = Field(default_factory=list)
    thumbnail: Optional[str] = None
    source: str                                  # nome de exibição da fonte
    source_id: str = Field(alias="sourceId")
    region: Optional[str] = None
    language: str


class FeedError(BaseModel):
    source_id: str
    error: str
    timestamp: str


class FeedStats(BaseModel):
    source_id: str
    articles_count: int = 0
    last_fetch: str
    status: Literal["success", "error"] = "success"
    error: Optional[str] = None
