"""
Settle-once completion signals and the join combinators built on them.

A ``Completion`` wraps an ``asyncio.Future`` owned by the running loop. One
party settles it with ``resolve``/``reject`` (or by following another
awaitable), any number of parties await it. Settling twice is a no-op, so
late sibling failures can be fed in without raising.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union


class Completion:
    """Outcome of one asynchronous unit of work."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future = self._loop.create_future()

    @classmethod
    def resolved(cls, value: Any = None) -> "Completion":
        completion = cls()
        completion.resolve(value)
        return completion

    @classmethod
    def rejected(cls, error: BaseException) -> "Completion":
        completion = cls()
        completion.reject(error)
        return completion

    @classmethod
    def from_awaitable(cls, awaitable: Awaitable) -> "Completion":
        """Schedule ``awaitable`` as a task and follow its outcome."""
        completion = cls()
        completion.follow(asyncio.ensure_future(awaitable))
        return completion

    @property
    def settled(self) -> bool:
        return self._future.done()

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def error(self) -> Optional[BaseException]:
        if not self._future.done():
            return None
        if self._future.cancelled():
            return asyncio.CancelledError()
        return self._future.exception()

    @property
    def result(self) -> Any:
        return self._future.result()

    def resolve(self, value: Any = None) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        if isinstance(error, asyncio.CancelledError):
            self._future.cancel()
        else:
            self._future.set_exception(error)
        return True

    def follow(self, source: Union["Completion", asyncio.Future]) -> "Completion":
        """Settle this completion the same way ``source`` settles."""
        source.add_done_callback(self._settle_from)
        return self

    def _settle_from(self, source) -> None:
        if isinstance(source, Completion):
            error = source.error
            if error is not None:
                self.reject(error)
            else:
                self.resolve(source.result)
            return

        if source.cancelled():
            self.reject(asyncio.CancelledError())
            return
        error = source.exception()
        if error is not None:
            self.reject(error)
        else:
            self.resolve(source.result())

    def add_done_callback(self, callback: Callable[["Completion"], Any]) -> None:
        """Call ``callback(self)`` once settled; marks any error as retrieved."""
        def _on_done(future: asyncio.Future) -> None:
            if not future.cancelled():
                future.exception()
            callback(self)

        self._future.add_done_callback(_on_done)

    def __await__(self):
        return self._future.__await__()

    def __repr__(self) -> str:
        if not self.settled:
            state = "pending"
        elif self.failed:
            state = f"rejected({self.error!r})"
        else:
            state = "resolved"
        return f"<Completion {state}>"


def as_completion(outcome: Any) -> Completion:
    """
    Normalise whatever a task returned into a ``Completion``.

    ``None`` counts as an already resolved no-op.
    """
    if isinstance(outcome, Completion):
        return outcome
    if outcome is None:
        return Completion.resolved()
    if inspect.isawaitable(outcome):
        return Completion.from_awaitable(outcome)
    return Completion.resolved(outcome)


def join_all(children: Iterable[Any]) -> Completion:
    """
    Join completions: resolve with all results once every child resolved,
    reject with the first failure.

    A handler is attached to every child, so failures arriving after the join
    already rejected are retrieved and discarded.
    """
    children = [as_completion(child) for child in children]
    joined = Completion()

    if not children:
        joined.resolve([])
        return joined

    results: List[Any] = [None] * len(children)
    remaining = [len(children)]

    def _on_child(index: int, child: Completion) -> None:
        error = child.error
        if error is not None:
            joined.reject(error)
            return
        results[index] = child.result
        remaining[0] -= 1
        if remaining[0] == 0:
            joined.resolve(results)

    for index, child in enumerate(children):
        child.add_done_callback(lambda child, index=index: _on_child(index, child))

    return joined


def settle_all(children: Iterable[Any]) -> Completion:
    """
    Resolve once every child settled, whatever the outcome.

    Resolves with the list of errors (``None`` for children that succeeded);
    never rejects.
    """
    children = [as_completion(child) for child in children]
    settled = Completion()

    if not children:
        settled.resolve([])
        return settled

    errors: List[Optional[BaseException]] = [None] * len(children)
    remaining = [len(children)]

    def _on_child(index: int, child: Completion) -> None:
        errors[index] = child.error
        remaining[0] -= 1
        if remaining[0] == 0:
            settled.resolve(errors)

    for index, child in enumerate(children):
        child.add_done_callback(lambda child, index=index: _on_child(index, child))

    return settled
