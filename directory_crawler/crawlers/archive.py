"""
Transparent expansion of archive files into emitted entry streams.
"""

import asyncio
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, List, Optional

from directory_crawler.concurrent import Completion, ConcurrencyGate, join_all, settle_all
from directory_crawler.utils.logging import get_logger
from directory_crawler.utils.errors import ArchiveError
from .base import CrawlResult, EntryKind
from .filters import matches
from .observers import FileObservers
from .streams import DEFAULT_CHUNK_SIZE, FileStream


logger = get_logger(__name__)


@dataclass
class ArchiveEntry:
    """One entry of an archive, produced while iterating the archive."""
    path: str
    kind: EntryKind
    opener: Callable[[], BinaryIO]
    size: Optional[int] = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def open(self) -> BinaryIO:
        """Open the entry's content; blocking."""
        return self.opener()

    def drain(self) -> None:
        """Discard the entry's content without emitting it."""
        # Random access formats skip unread entries through the central directory


class ArchiveReader(ABC):
    """An opened archive."""

    @abstractmethod
    def entries(self) -> Iterator[ArchiveEntry]:
        """Yield entries in archive order."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the archive once no entry stream is in use."""
        pass


class ArchiveDecoder(ABC):
    """Capability turning an archive path into a sequence of entries."""

    @abstractmethod
    def open(self, path: str) -> ArchiveReader:
        """
        Open an archive; blocking.

        Raises:
            ArchiveError: If the archive cannot be decoded
        """
        pass


class ZipArchiveReader(ArchiveReader):
    """Entries of a ZIP file, read through its central directory."""

    def __init__(self, zip_file: zipfile.ZipFile):
        self._zip_file = zip_file

    def entries(self) -> Iterator[ArchiveEntry]:
        for info in self._zip_file.infolist():
            yield ArchiveEntry(
                path=info.filename,
                kind=EntryKind.DIRECTORY if info.is_dir() else EntryKind.FILE,
                opener=lambda info=info: self._zip_file.open(info),
                size=info.file_size
            )

    def close(self) -> None:
        self._zip_file.close()


class ZipArchiveDecoder(ArchiveDecoder):
    """Decoder for ZIP compatible archives."""

    def open(self, path: str) -> ZipArchiveReader:
        try:
            return ZipArchiveReader(zipfile.ZipFile(path, "r"))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError, ValueError) as e:
            raise ArchiveError(
                f"Cannot decode archive '{path}': {e}",
                path=path,
                details={"reason": str(e)},
                errno=getattr(e, "errno", None)
            ) from e


class ArchiveExpander:
    """
    Route the entries of one archive through the filter and the gate.

    Directory entries and entries not matching the filter are drained.
    Matching entries are submitted to the gate as emission tasks. The
    expansion completes once every submitted entry stream was consumed;
    it fails on the first entry failure, or straight away when the archive
    itself cannot be decoded, without waiting for entries still in flight.
    """

    def __init__(
        self,
        gate: ConcurrencyGate,
        observers: FileObservers,
        filter_pattern: str = "*",
        decoder: Optional[ArchiveDecoder] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        self.gate = gate
        self.observers = observers
        self.filter_pattern = filter_pattern
        self.decoder = decoder or ZipArchiveDecoder()
        self.chunk_size = chunk_size

    async def expand(self, archive_path: str, result: Optional[CrawlResult] = None) -> None:
        """
        Expand an archive.

        Args:
            archive_path: Absolute path of the archive file
            result: Crawl summary to update

        Raises:
            ArchiveError: The archive is malformed or unreadable
            CrawlError: An entry stream failed
        """
        logger.debug(f"Expanding archive {archive_path}")

        try:
            reader = await asyncio.to_thread(self.decoder.open, archive_path)
        except ArchiveError:
            raise
        except Exception as e:
            raise ArchiveError(
                f"Cannot open archive '{archive_path}': {e}",
                path=archive_path,
                details={"reason": str(e)}
            ) from e

        if result is not None:
            result.archives_expanded += 1

        aggregate = Completion()
        queued: List[Completion] = []

        def _reject_early(entry_completion: Completion) -> None:
            if entry_completion.failed:
                aggregate.reject(entry_completion.error)

        try:
            for entry in reader.entries():
                logger.debug(f"Archive {archive_path} entry {entry.kind.value} {entry.path}")

                if entry.is_directory:
                    entry.drain()
                    continue

                if not matches(entry.path, self.filter_pattern):
                    entry.drain()
                    if result is not None:
                        result.files_skipped += 1
                    continue

                queued_entry = self.gate.submit(
                    lambda entry=entry: self._emit_entry(archive_path, entry, result),
                    label=f"{archive_path}!{entry.path}"
                )
                queued_entry.add_done_callback(_reject_early)
                queued.append(queued_entry)
        except Exception as e:
            aggregate.reject(ArchiveError(
                f"Failed while decoding archive '{archive_path}': {e}",
                path=archive_path,
                details={"reason": str(e), "entries_queued": len(queued)}
            ))
        else:
            logger.debug(f"Archive {archive_path} listed, {len(queued)} entries queued")
            aggregate.follow(join_all(queued))

        settle_all(queued).add_done_callback(lambda _: self._close_reader(reader, archive_path))

        await aggregate

    def _emit_entry(
        self,
        archive_path: str,
        entry: ArchiveEntry,
        result: Optional[CrawlResult]
    ) -> Completion:
        stream = FileStream(
            path=entry.path,
            opener=entry.open,
            archive=archive_path,
            size=entry.size,
            chunk_size=self.chunk_size
        )
        if result is not None:
            result.files_emitted += 1
        return self.observers.emit(stream)

    @staticmethod
    def _close_reader(reader: ArchiveReader, archive_path: str) -> None:
        try:
            reader.close()
        except Exception as e:
            logger.warning(f"Error closing archive {archive_path}: {e}")
