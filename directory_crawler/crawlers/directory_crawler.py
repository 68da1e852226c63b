"""
Recursive directory crawler emitting matching files as byte streams.
"""

import asyncio
import os
from typing import Optional

from directory_crawler.concurrent import Completion, ConcurrencyGate, join_all
from directory_crawler.config import CrawlerConfig
from directory_crawler.utils.logging import get_logger
from directory_crawler.utils.errors import ListError, crawl_error_from_os_error
from .archive import ArchiveDecoder, ArchiveExpander
from .base import CrawlResult, NodeKind, TraversalNode
from .filters import matches
from .observers import FileHandler, FileObservers
from .streams import FileStream


logger = get_logger(__name__)


class DirectoryCrawler:
    """
    Crawl a directory tree (or a single file) and hand every matching file
    to the subscribed observers.

    ZIP archives met on the way are expanded and their matching entries
    emitted too. At most ``parallelism`` emitted streams are in flight at
    any time; further files wait in a FIFO queue until a stream before them
    has been fully consumed.

    Example::

        crawler = DirectoryCrawler(filter_pattern="*.txt")

        @crawler.subscribe
        async def on_file(stream):
            data = await stream.read()

        await crawler.crawl("some/directory")
    """

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        *,
        parallelism: Optional[int] = None,
        filter_pattern: Optional[str] = None,
        archive_decoder: Optional[ArchiveDecoder] = None
    ):
        """
        Initialize crawler.

        Args:
            config: Crawler configuration, defaults when omitted
            parallelism: Overrides ``config.parallelism``
            filter_pattern: Overrides ``config.filter_pattern``
            archive_decoder: Archive decoding capability, ZIP by default

        Raises:
            ValidationError: If the resulting configuration is invalid
        """
        config = config or CrawlerConfig()
        overrides = {}
        if parallelism is not None:
            overrides["parallelism"] = parallelism
        if filter_pattern is not None:
            overrides["filter_pattern"] = filter_pattern
        if overrides:
            config = config.replace(**overrides)

        self.config = config
        self.observers = FileObservers()
        self.gate = ConcurrencyGate(config.parallelism)
        self.expander = ArchiveExpander(
            self.gate,
            self.observers,
            filter_pattern=config.filter_pattern,
            decoder=archive_decoder,
            chunk_size=config.chunk_size
        )

        logger.debug(f"parallel {config.parallelism}")
        logger.debug(f"filter {config.filter_pattern}")

    @property
    def parallelism(self) -> int:
        return self.config.parallelism

    @property
    def filter_pattern(self) -> str:
        return self.config.filter_pattern

    def subscribe(self, handler: FileHandler) -> FileHandler:
        """Register a ``file`` observer; usable as a decorator."""
        return self.observers.subscribe(handler)

    def unsubscribe(self, handler: FileHandler) -> None:
        """Remove a ``file`` observer."""
        self.observers.unsubscribe(handler)

    async def crawl(self, path: str) -> CrawlResult:
        """
        Start crawling.

        Args:
            path: Directory or file, absolute or relative to the working
                directory

        Returns:
            Summary of the crawl, once every matching file was emitted and
            fully consumed

        Raises:
            CrawlError: The first error met (missing path, unreadable
                directory, corrupt archive, stream or consumer failure)
        """
        root = os.path.abspath(path)
        result = CrawlResult(root=root)
        logger.info(f"Crawling {root}")

        try:
            await self._visit(root, result)
        except Exception as e:
            logger.info(f"Crawl of {root} failed: {e}")
            raise

        result.finish()
        logger.info(
            f"Crawl of {root} completed: {result.files_emitted} emitted, "
            f"{result.files_skipped} skipped in {result.duration_seconds:.2f}s"
        )
        return result

    async def _visit(self, path: str, result: CrawlResult) -> None:
        try:
            stat_result = await asyncio.to_thread(os.stat, path)
        except OSError as e:
            raise crawl_error_from_os_error(e, path) from e

        node = TraversalNode.from_stat(path, stat_result)

        if node.kind is NodeKind.DIRECTORY:
            await self._directory(node.path, result)
        elif node.kind is NodeKind.ARCHIVE:
            await self.expander.expand(node.path, result)
        elif node.kind is NodeKind.FILE:
            await self._file(node.path, result)
        else:
            logger.debug(f"Skipping {path}: not a regular file or directory")

    async def _directory(self, directory_path: str, result: CrawlResult) -> None:
        logger.debug(f"_directory {directory_path}")

        try:
            names = await asyncio.to_thread(os.listdir, directory_path)
        except OSError as e:
            raise crawl_error_from_os_error(e, directory_path, ListError) from e

        names.sort()
        result.directories_visited += 1
        logger.debug(f"_directory {directory_path} found files {names}")

        await join_all(
            Completion.from_awaitable(
                self._visit(os.path.join(directory_path, name), result)
            )
            for name in names
        )

    def _file(self, file_path: str, result: CrawlResult) -> Completion:
        logger.debug(f"_file {file_path}")

        if not matches(file_path, self.config.filter_pattern):
            result.files_skipped += 1
            return Completion.resolved()

        return self.gate.submit(
            lambda: self._emit_file(file_path, result),
            label=file_path
        )

    def _emit_file(self, file_path: str, result: CrawlResult) -> Completion:
        logger.debug(f"_file fifo entered {file_path}")

        stream = FileStream(
            path=file_path,
            opener=lambda: open(file_path, "rb"),
            chunk_size=self.config.chunk_size
        )
        result.files_emitted += 1
        return self.observers.emit(stream)

    def get_stats(self):
        """Gate statistics for this crawler."""
        return self.gate.get_stats()
