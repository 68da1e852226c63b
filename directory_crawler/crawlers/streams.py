"""
Readable byte streams handed to observers.
"""

import asyncio
from typing import AsyncIterator, BinaryIO, Callable, Optional

from directory_crawler.concurrent import Completion
from directory_crawler.utils.logging import get_logger
from directory_crawler.utils.errors import ConsumerError, CrawlError, StreamError


logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class FileStream:
    """
    Byte stream of one emitted file or archive entry.

    The source is opened lazily on the first read, in a worker thread, and
    closed once the stream ends or fails. ``completion`` resolves at end of
    data and rejects on a read failure or when an observer calls ``fail``.
    Nothing is read unless an observer reads: an unconsumed stream never
    settles.

    A stream is meant to be consumed by one reader at a time.
    """

    def __init__(
        self,
        path: str,
        opener: Callable[[], BinaryIO],
        archive: Optional[str] = None,
        size: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        """
        Initialize stream.

        Args:
            path: Filesystem path, or the entry path inside ``archive``
            opener: Blocking callable returning a binary file object
            archive: Absolute path of the containing archive, if any
            size: Size in bytes when known up front
            chunk_size: Read size used by iteration and ``drain``
        """
        self.path = path
        self.archive = archive
        self.size = size
        self.chunk_size = chunk_size
        self.bytes_read = 0
        self.completion = Completion()

        self._opener = opener
        self._source: Optional[BinaryIO] = None
        # Serialises the lazy open and every read across observers
        self._read_lock = asyncio.Lock()

    @property
    def ended(self) -> bool:
        return self.completion.settled and not self.completion.failed

    @property
    def failed(self) -> bool:
        return self.completion.failed

    @property
    def display_path(self) -> str:
        if self.archive:
            return f"{self.archive}!{self.path}"
        return self.path

    async def read(self, size: int = -1) -> bytes:
        """
        Read up to ``size`` bytes, everything left when ``size`` is negative.

        Returns:
            The bytes read, ``b''`` once the stream ended

        Raises:
            CrawlError: The stream failed (read error or consumer failure)
        """
        if size == 0 and not self.completion.failed:
            return b""

        async with self._read_lock:
            return await self._read_locked(size)

    async def _read_locked(self, size: int) -> bytes:
        if self.completion.settled:
            if self.completion.failed:
                raise self.completion.error
            return b""

        try:
            if self._source is None:
                self._source = await asyncio.to_thread(self._opener)
            data = await asyncio.to_thread(self._source.read, size)
        except Exception as e:
            if self.completion.failed:
                self._close()
                raise self.completion.error from e
            error = StreamError(
                f"Failed to read '{self.display_path}': {e}",
                path=self.path,
                details={"archive": self.archive, "reason": str(e)},
                errno=getattr(e, "errno", None)
            )
            self._settle(error)
            raise error from e

        if self.completion.settled:
            # Failed by an observer while the read was in flight
            self._close()
            if self.completion.failed:
                raise self.completion.error
            return b""

        self.bytes_read += len(data)
        if not data or size < 0:
            self._settle()
        return data

    async def drain(self) -> int:
        """
        Read the stream to its end, discarding the data.

        Returns:
            Number of bytes discarded
        """
        discarded = 0
        async for chunk in self:
            discarded += len(chunk)
        return discarded

    def fail(self, error: BaseException) -> None:
        """Report a consumer-side failure; the stream's completion rejects."""
        if self.completion.settled:
            return
        if not isinstance(error, CrawlError):
            error = ConsumerError(
                f"Consumer of '{self.display_path}' failed: {error}",
                path=self.path,
                details={"archive": self.archive, "reason": repr(error)}
            )
        self._settle(error)

    def _settle(self, error: Optional[BaseException] = None) -> None:
        self._close()
        if error is not None:
            logger.debug(f"Stream {self.display_path} failed: {error}")
            self.completion.reject(error)
        else:
            logger.debug(f"Stream {self.display_path} ended after {self.bytes_read} bytes")
            self.completion.resolve(self.bytes_read)

    def _close(self) -> None:
        if self._source is not None:
            try:
                self._source.close()
            except Exception as e:
                logger.warning(f"Error closing {self.display_path}: {e}")
            self._source = None

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(self.chunk_size)
            if not chunk:
                return
            yield chunk

    def __repr__(self) -> str:
        return f"<FileStream {self.display_path!r} {self.completion!r}>"
