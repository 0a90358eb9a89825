"""
Core data models for the bucket mirror service.
"""
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EventKind(str, Enum):
    """Kinds of filesystem change the router understands."""
    CREATE = 'create'
    WRITE = 'write'
    REMOVE = 'remove'
    RENAME = 'rename'


@dataclass
class WatchEvent:
    """Represents a single filesystem event from the directory watcher."""
    kind: EventKind
    path: str
    is_directory: bool = False
    dest_path: Optional[str] = None  # Only set for RENAME

    @property
    def name(self) -> str:
        """Base name of the affected file (the old name for a rename)."""
        return os.path.basename(self.path)

    @property
    def dest_name(self) -> Optional[str]:
        """Base name of the rename destination."""
        if self.dest_path is None:
            return None
        return os.path.basename(self.dest_path)


@dataclass
class DiffResult:
    """Presence gaps between the remote and local name sets."""
    missing_from_local: List[str] = field(default_factory=list)
    missing_from_remote: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.missing_from_local and not self.missing_from_remote


@dataclass
class TransferResult:
    """Outcome of one upload, download or delete."""
    operation: str  # 'upload', 'download', 'delete'
    name: str
    success: bool
    size: int = 0
    error: Optional[str] = None
    fingerprint: Optional[Tuple[int, int]] = None  # (st_mtime_ns, st_size) of the uploaded file


@dataclass
class ReconcileReport:
    """Summary of one reconciliation pass."""
    diff: DiffResult
    transfers: List[TransferResult] = field(default_factory=list)
    skipped_keys: List[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.transfers if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.transfers if not result.success)

    @property
    def failures(self) -> List[TransferResult]:
        return [result for result in self.transfers if not result.success]

    @property
    def duration(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for logging."""
        return {
            'missing_from_local': self.diff.missing_from_local,
            'missing_from_remote': self.diff.missing_from_remote,
            'skipped_keys': self.skipped_keys,
            'transfers_succeeded': self.succeeded,
            'transfers_failed': self.failed,
            'errors': [f"{r.operation} {r.name}: {r.error}" for r in self.failures],
            'duration': self.duration
        }


@dataclass
class RouterStats:
    """Counters kept by the event router."""
    events_handled: Dict[str, int] = field(
        default_factory=lambda: {kind.value: 0 for kind in EventKind}
    )
    events_ignored: int = 0
    writes_suppressed: int = 0
    operations_succeeded: int = 0
    operations_failed: int = 0

    def record(self, result: TransferResult) -> None:
        if result.success:
            self.operations_succeeded += 1
        else:
            self.operations_failed += 1
