"""
Directory crawler.

Recursively discovers files under a path, expands ZIP archives on the way
and hands every file matching a glob filter to subscribed observers as an
async byte stream, with a bound on how many streams are in flight.

Public API:
    - DirectoryCrawler: crawl(), subscribe(), unsubscribe()
    - CrawlerConfig: parallelism, filter_pattern, chunk_size
    - FileStream: the stream handed to observers
"""

from directory_crawler.config import CrawlerConfig
from directory_crawler.crawlers import CrawlResult, DirectoryCrawler, FileStream, matches
from directory_crawler.utils.errors import (
    ArchiveError,
    ConfigurationError,
    ConsumerError,
    CrawlError,
    DirectoryCrawlerError,
    ListError,
    NotFoundError,
    StatError,
    StreamError,
    ValidationError
)

__version__ = "1.0.0"

__all__ = [
    'DirectoryCrawler',
    'CrawlerConfig',
    'CrawlResult',
    'FileStream',
    'matches',
    'DirectoryCrawlerError',
    'ConfigurationError',
    'ValidationError',
    'CrawlError',
    'NotFoundError',
    'StatError',
    'ListError',
    'ArchiveError',
    'StreamError',
    'ConsumerError'
]
