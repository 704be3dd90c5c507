class ClibSearchError(Exception):
    """Base class for clib-search errors."""


class FetchError(ClibSearchError):
    """The registry could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class CacheReadError(ClibSearchError):
    pass


class CacheWriteError(ClibSearchError):
    pass


class ParseError(ClibSearchError):
    pass
