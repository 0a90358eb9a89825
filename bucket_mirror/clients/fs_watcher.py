"""
Directory watcher for the bucket mirror service.

Uses the watchdog library to monitor the local root and feeds every
create, modify, delete and move notification into a bounded queue as a
WatchEvent. A single consumer drains the queue in emission order.
"""
import os
import queue
import threading
from typing import Any, Iterator, Optional

from loguru import logger
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from ..models.data_models import EventKind, WatchEvent
from ..models.errors import WatchError

_CLOSED = object()


class QueueingEventHandler(FileSystemEventHandler):
    """Watchdog handler that turns raw notifications into WatchEvents on a queue."""

    def __init__(self, event_queue: queue.Queue, put_timeout: float = 0.1):
        super().__init__()
        self._queue = event_queue
        self._put_timeout = put_timeout
        self.closed = threading.Event()

    def _put(self, event: WatchEvent) -> None:
        # Waits while the queue is full so nothing is dropped, unless the watcher is closing
        while not self.closed.is_set():
            try:
                self._queue.put(event, timeout=self._put_timeout)
            except queue.Full:
                continue
            logger.trace(f"Queued {event.kind.value} for {event.path}")
            return
        logger.debug(f"Dropped {event.kind.value} for {event.path}, watcher is closing")

    def on_created(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        self._put(WatchEvent(EventKind.CREATE, os.fsdecode(event.src_path), event.is_directory))

    def on_modified(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        self._put(WatchEvent(EventKind.WRITE, os.fsdecode(event.src_path), event.is_directory))

    def on_deleted(self, event: FileSystemEvent) -> None:  # type: ignore[override]
        self._put(WatchEvent(EventKind.REMOVE, os.fsdecode(event.src_path), event.is_directory))

    def on_moved(self, event: FileSystemMovedEvent) -> None:  # type: ignore[override]
        self._put(WatchEvent(
            EventKind.RENAME,
            os.fsdecode(event.src_path),
            event.is_directory,
            dest_path=os.fsdecode(event.dest_path)
        ))


class DirectoryWatcher:
    """Watches one directory and exposes its changes as an ordered event stream.

    Usage:
        watcher = DirectoryWatcher("test", poll_interval=0.1)
        watcher.start()
        for event in watcher.events():
            ...
        watcher.stop()
    """

    def __init__(
        self,
        root: str,
        poll_interval: float = 0.1,
        recursive: bool = True,
        use_polling: bool = False,
        queue_size: int = 1000,
    ):
        self.root = root
        self.poll_interval = poll_interval
        self.recursive = recursive
        self.use_polling = use_polling
        self.queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._handler = QueueingEventHandler(self.queue, put_timeout=poll_interval)
        self._observer: Optional[Any] = None
        self._stopping = False

    # ---- lifecycle ----

    def _make_observer(self):
        if self.use_polling:
            return PollingObserver(timeout=self.poll_interval)
        return Observer(timeout=self.poll_interval)

    def start(self) -> None:
        """Start watching the root directory."""
        if not os.path.isdir(self.root):
            logger.error(f"Watch root does not exist: {self.root}")
            raise WatchError(f"Watch root does not exist: {self.root}")

        observer = self._make_observer()
        try:
            observer.schedule(self._handler, self.root, recursive=self.recursive)
            observer.start()
        except OSError as e:
            logger.error(f"Failed to start watching {self.root}: {e}")
            raise WatchError(f"Failed to start watching {self.root}: {e}") from e

        self._observer = observer
        self._stopping = False
        self._handler.closed.clear()
        logger.info(
            f"Watching '{self.root}' (recursive={self.recursive}, "
            f"poll={self.poll_interval}s, polling={self.use_polling})"
        )

    def stop(self) -> None:
        """Stop watching and close the event stream. Never blocks on a full queue."""
        self._stopping = True
        self._handler.closed.set()
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        self._close_stream()
        logger.info("Watcher stopped")

    def _close_stream(self) -> None:
        discarded = 0
        while True:
            try:
                self.queue.put_nowait(_CLOSED)
                break
            except queue.Full:
                # The consumer may be the caller, so a full queue is never drained; drop the oldest
                try:
                    self.queue.get_nowait()
                    discarded += 1
                except queue.Empty:
                    pass
        if discarded:
            logger.warning(f"Discarded {discarded} pending watch event(s) on shutdown")

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    # ---- consumption ----

    def events(self) -> Iterator[WatchEvent]:
        """
        Yield watch events in emission order until the watcher is stopped.

        Raises:
            WatchError: If the observer thread dies while still watching
        """
        while True:
            try:
                item = self.queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._stopping:
                    return
                if not self.is_running:
                    raise WatchError(f"Watcher for {self.root} stopped unexpectedly")
                continue

            if item is _CLOSED:
                logger.debug("Event stream closed")
                return

            yield item
