"""
Data models for the concurrency gate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from .completion import Completion


class TaskStatus(Enum):
    """Gate task lifecycle."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PendingTask:
    """Deferred zero-argument unit of work waiting for an admission slot."""
    sequence: int
    task: Callable[[], Any]
    completion: Completion
    label: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    def start_execution(self) -> None:
        """Mark task as admitted and running."""
        self.started_at = datetime.now()
        self.status = TaskStatus.RUNNING

    def complete_successfully(self) -> None:
        """Mark task as completed successfully."""
        self.completed_at = datetime.now()
        self.status = TaskStatus.COMPLETED

    def fail_with_error(self, error_message: str) -> None:
        """Mark task as failed with error message."""
        self.completed_at = datetime.now()
        self.status = TaskStatus.FAILED
        self.error_message = error_message

    def get_wait_time(self) -> Optional[float]:
        """Seconds spent queued before admission."""
        if self.started_at:
            return (self.started_at - self.created_at).total_seconds()
        return None

    def get_execution_time(self) -> Optional[float]:
        """Seconds between admission and settlement."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None
