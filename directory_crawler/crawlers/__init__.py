"""
Tree walking, archive expansion and emission of crawled files.
"""

from .base import ARCHIVE_EXTENSION, CrawlResult, EntryKind, NodeKind, TraversalNode, is_archive
from .filters import matches
from .streams import FileStream
from .observers import FileHandler, FileObservers
from .archive import (
    ArchiveDecoder,
    ArchiveEntry,
    ArchiveExpander,
    ArchiveReader,
    ZipArchiveDecoder,
    ZipArchiveReader
)
from .directory_crawler import DirectoryCrawler

__all__ = [
    'ARCHIVE_EXTENSION',
    'CrawlResult',
    'EntryKind',
    'NodeKind',
    'TraversalNode',
    'is_archive',
    'matches',
    'FileStream',
    'FileHandler',
    'FileObservers',
    'ArchiveDecoder',
    'ArchiveEntry',
    'ArchiveExpander',
    'ArchiveReader',
    'ZipArchiveDecoder',
    'ZipArchiveReader',
    'DirectoryCrawler'
]
