class TechNewsError(Exception):
    """Base de todos os erros do pacote."""


class FeedFetchError(TechNewsError):
    """Raised when a feed cannot be downloaded (network, HTTP status, HTML page, proxy error)."""


class InvalidFeedError(TechNewsError):
    """Raised when downloaded content is not an RSS/Atom document or cannot be parsed."""
