"""
Observer registration and fan-out of emitted file streams.
"""

import asyncio
import inspect
from typing import Any, Callable, List

from directory_crawler.concurrent import Completion
from directory_crawler.utils.logging import get_logger
from .streams import FileStream


logger = get_logger(__name__)

FileHandler = Callable[[FileStream], Any]


class FileObservers:
    """
    Registry of ``file`` observers.

    ``emit`` calls every observer registered at that moment, synchronously
    and in registration order; observers added later never see earlier
    emissions. A handler may be a plain callable or a coroutine function;
    a returned awaitable is scheduled as a task. Each observer must consume
    (or ``drain``) the stream it receives, otherwise the emission never
    completes.
    """

    def __init__(self):
        self._handlers: List[FileHandler] = []
        self._tasks = set()

    def subscribe(self, handler: FileHandler) -> FileHandler:
        """Register a handler; returns it so this works as a decorator."""
        if handler not in self._handlers:
            self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: FileHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def __len__(self) -> int:
        return len(self._handlers)

    def emit(self, stream: FileStream) -> Completion:
        """
        Publish a stream to all current observers.

        Args:
            stream: The stream being handed over

        Returns:
            The stream's completion: resolved at end of data, rejected on a
            read error or an observer failure
        """
        handlers = list(self._handlers)
        logger.debug(f"Emitting {stream.display_path} to {len(handlers)} observer(s)")

        for handler in handlers:
            try:
                outcome = handler(stream)
            except Exception as e:
                logger.debug(f"Observer {handler!r} raised for {stream.display_path}: {e!r}")
                stream.fail(e)
                continue

            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                self._tasks.add(task)
                task.add_done_callback(
                    lambda task, stream=stream: self._on_handler_done(task, stream)
                )

        return stream.completion

    def _on_handler_done(self, task: asyncio.Future, stream: FileStream) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            stream.fail(asyncio.CancelledError(f"Observer cancelled for {stream.display_path}"))
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Observer task failed for {stream.display_path}: {error!r}")
            stream.fail(error)
