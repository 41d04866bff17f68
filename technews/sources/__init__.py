from .registry import NEWS_SOURCES, NewsSource, enabled_sources

__all__ = ["NEWS_SOURCES", "NewsSource", "enabled_sources"]
