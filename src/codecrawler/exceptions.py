"""Exceptions raised by the crawler and its collaborators."""


class CrawlerError(Exception):
    """Base class for codecrawler errors."""


class ConfigError(CrawlerError):
    """Raised when crawler settings cannot be loaded or are invalid."""


class BackendUnavailableError(CrawlerError):
    """Raised when the search backend cannot be reached or written to.

    Per-document rejections are not errors: they are reported through
    ``BulkResult.failed`` instead.
    """


class CrawlInProgressError(CrawlerError):
    """Raised when a crawl is started on a crawler that is already running."""
