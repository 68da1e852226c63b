"""
Cooperative concurrency primitives for the crawler.

Main Components:
- Completion: settle-once outcome of an asynchronous unit of work
- join_all / settle_all: combinators over many completions
- ConcurrencyGate: FIFO admission queue bounding running tasks
"""

from .completion import Completion, as_completion, join_all, settle_all
from .models import PendingTask, TaskStatus
from .gate import ConcurrencyGate

__all__ = [
    'Completion',
    'as_completion',
    'join_all',
    'settle_all',
    'PendingTask',
    'TaskStatus',
    'ConcurrencyGate'
]
