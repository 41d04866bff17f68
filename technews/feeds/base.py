import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from technews.sources.registry import NewsSource


def _first_url(media: Any) -> Optional[str]:
    # feedparser expõe media:content / media:thumbnail como lista de dicts
    if isinstance(media, list):
        for m in media:
            url = m.get("url") if isinstance(m, Mapping) else None
            if url:
                return url
    return None


@dataclass
class RawFeedItem:
    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[str] = None
    pub_date: Optional[str] = None
    published_parsed: Optional[time.struct_time] = None
    creator: Optional[str] = None
    description: Optional[str] = None
    content_encoded: Optional[str] = None
    media_content_url: Optional[str] = None
    media_thumbnail_url: Optional[str] = None

    @property
    def content(self) -> str:
        return self.content_encoded or self.description or ""

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> "RawFeedItem":
        contents = entry.get("content") or []
        encoded = None
        if isinstance(contents, list) and contents:
            encoded = contents[0].get("value")
        return cls(
            title=entry.get("title"),
            link=entry.get("link"),
            guid=entry.get("id") or entry.get("guid"),
            pub_date=entry.get("published") or entry.get("updated"),
            published_parsed=entry.get("published_parsed") or entry.get("updated_parsed"),
            creator=entry.get("author") or entry.get("creator"),
            description=entry.get("summary") or entry.get("description"),
            content_encoded=encoded,
            media_content_url=_first_url(entry.get("media_content")),
            media_thumbnail_url=_first_url(entry.get("media_thumbnail")),
        )


class BaseFeed(ABC):
    @abstractmethod
    def fetch(self, source: NewsSource) -> List[RawFeedItem]:
        pass
