"""Exception types raised by the crawler."""

from __future__ import annotations


class CrawlError(Exception):
    """Base class for all crawler errors."""


class FetchError(CrawlError):
    """A remote resource could not be downloaded."""


class EmptyResponseError(FetchError):
    """The server answered successfully but sent no bytes."""


class NodeDecodeError(CrawlError):
    """A downloaded document is not valid JSON."""


class NodeSchemaError(CrawlError):
    """A document decoded fine but lacks the fields the crawler reads."""


class SetupError(CrawlError):
    """Unrecoverable setup failure; the run cannot continue."""


class PoolClosedError(CrawlError):
    """A job was submitted after the worker pool was closed."""
