"""
Data models shared by the tree walker and the archive expander.
"""

import os
import stat
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


ARCHIVE_EXTENSION = ".zip"


class NodeKind(Enum):
    """Kind of a filesystem path met during traversal."""
    FILE = "file"
    DIRECTORY = "directory"
    ARCHIVE = "archive"
    OTHER = "other"


class EntryKind(Enum):
    """Kind of an entry inside an archive."""
    DIRECTORY = "Directory"
    FILE = "File"


def is_archive(path: str) -> bool:
    """
    Check whether a path names a supported archive.

    Only the extension is inspected, never the file signature.
    """
    return os.path.splitext(path)[1] == ARCHIVE_EXTENSION


@dataclass(frozen=True)
class TraversalNode:
    """Absolute path with its resolved kind; symlinks are already followed."""
    path: str
    kind: NodeKind

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result) -> "TraversalNode":
        mode = stat_result.st_mode
        if stat.S_ISDIR(mode):
            kind = NodeKind.DIRECTORY
        elif stat.S_ISREG(mode):
            kind = NodeKind.ARCHIVE if is_archive(path) else NodeKind.FILE
        else:
            kind = NodeKind.OTHER
        return cls(path=path, kind=kind)


@dataclass
class CrawlResult:
    """Summary of one crawl."""
    root: str
    files_emitted: int = 0
    files_skipped: int = 0
    directories_visited: int = 0
    archives_expanded: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def finish(self) -> None:
        self.completed_at = datetime.now()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
