"""
FIFO admission gate bounding how many tasks run at once.
"""

import itertools
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional

from directory_crawler.utils.logging import get_logger
from directory_crawler.utils.errors import ValidationError
from .completion import Completion, as_completion
from .models import PendingTask


class ConcurrencyGate:
    """
    First in first out queue admitting at most ``parallelism`` running tasks.

    A task is a zero-argument callable returning an awaitable, a
    ``Completion`` or ``None``. It is invoked once, when a slot is free and
    every task submitted before it has been admitted. Its slot is released
    when the returned completion settles, not when the call returns.

    All state is mutated from the event loop thread only; admission and
    release happen between suspension points, so no lock is taken.
    """

    def __init__(self, parallelism: int = 5):
        """
        Initialize gate.

        Args:
            parallelism: Maximum number of concurrently running tasks

        Raises:
            ValidationError: If parallelism is not a positive integer
        """
        if isinstance(parallelism, bool) or not isinstance(parallelism, int) or parallelism < 1:
            raise ValidationError(
                "parallelism must be a positive integer",
                {"parallelism": parallelism}
            )

        self.parallelism = parallelism
        self.logger = get_logger(__name__)

        self._pending: Deque[PendingTask] = deque()
        self._running = 0
        self._sequence = itertools.count()

        # Statistics
        self._submitted = 0
        self._completed = 0
        self._failed = 0
        self._peak_running = 0
        self._max_wait = 0.0

        self.logger.debug(f"ConcurrencyGate initialized with parallelism={parallelism}")

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, task: Callable[[], Any], label: Optional[str] = None) -> Completion:
        """
        Queue a task for admission.

        Args:
            task: Deferred unit of work
            label: Optional description used in log messages

        Returns:
            Completion settling exactly as the task's own completion settles
        """
        pending = PendingTask(
            sequence=next(self._sequence),
            task=task,
            completion=Completion(),
            label=label
        )
        self._pending.append(pending)
        self._submitted += 1

        self.logger.debug(
            f"Task {pending.sequence} queued ({label or 'unlabelled'}), "
            f"running={self._running}, pending={len(self._pending)}"
        )

        self._admit()
        return pending.completion

    def _admit(self) -> None:
        """Start the oldest pending tasks while capacity is available."""
        while self._running < self.parallelism and self._pending:
            pending = self._pending.popleft()
            self._running += 1
            self._peak_running = max(self._peak_running, self._running)
            pending.start_execution()
            wait_time = pending.get_wait_time()
            self._max_wait = max(self._max_wait, wait_time)

            self.logger.debug(
                f"Task {pending.sequence} admitted ({pending.label or 'unlabelled'}), "
                f"running={self._running}, waited {wait_time:.3f}s"
            )

            try:
                outcome = as_completion(pending.task())
            except Exception as e:
                outcome = Completion.rejected(e)

            outcome.add_done_callback(
                lambda outcome, pending=pending: self._release(pending, outcome)
            )

    def _release(self, pending: PendingTask, outcome: Completion) -> None:
        """Free the slot held by a settled task and admit the next one."""
        self._running -= 1

        error = outcome.error
        if error is not None:
            self._failed += 1
            pending.fail_with_error(str(error))
            pending.completion.reject(error)
            self.logger.debug(f"Task {pending.sequence} failed: {error!r}")
        else:
            self._completed += 1
            pending.complete_successfully()
            pending.completion.resolve(outcome.result)
            self.logger.debug(
                f"Task {pending.sequence} completed in {pending.get_execution_time():.3f}s"
            )

        self._admit()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get gate statistics.

        Returns:
            Dictionary with capacity, queue and outcome counters
        """
        return {
            'parallelism': self.parallelism,
            'running': self._running,
            'pending': len(self._pending),
            'submitted': self._submitted,
            'completed': self._completed,
            'failed': self._failed,
            'peak_running': self._peak_running,
            'max_wait_seconds': self._max_wait
        }
