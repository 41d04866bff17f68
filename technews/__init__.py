"""
technews

Tech news aggregation service: fetches RSS/Atom feeds from a fixed source
registry, keeps tech-related items, categorizes and deduplicates them, caches
the merged list in memory and serves it over HTTP.
"""

__version__ = "0.1.0"
