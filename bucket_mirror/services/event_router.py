"""
Event router mapping filesystem events onto bucket operations.
"""
from typing import Dict, Iterable, List, Tuple

from loguru import logger

from ..models.data_models import EventKind, RouterStats, TransferResult, WatchEvent
from .transfers import TransferManager


class EventRouter:
    """
    Applies watch events to the bucket one at a time, in order.

    REMOVE deletes the object, CREATE uploads the file, RENAME deletes the
    old key then uploads the new one. WRITE uploads only when the file on
    disk differs from what the last upload of that name read, so the
    modified notification that shadows a create or rename is not applied
    twice.
    """

    def __init__(self, transfers: TransferManager):
        """Initialize event router with the shared transfer primitives."""
        self.transfers = transfers
        self.stats = RouterStats()
        # name -> (st_mtime_ns, st_size) read by the last successful upload
        self._uploaded: Dict[str, Tuple[int, int]] = {}

    def run(self, events: Iterable[WatchEvent]) -> RouterStats:
        """
        Consume events until the stream ends.

        Args:
            events: Ordered stream of WatchEvents

        Returns:
            RouterStats accumulated over the run

        Raises:
            TransferError: On the first failed operation when fail_fast is set
            WatchError: If the event stream faults
        """
        logger.info("Event router started")
        for event in events:
            self.handle(event)
        logger.info(f"Event router stopped - handled: {self.stats.events_handled}, "
                    f"suppressed writes: {self.stats.writes_suppressed}, "
                    f"failed operations: {self.stats.operations_failed}")
        return self.stats

    def handle(self, event: WatchEvent) -> List[TransferResult]:
        """
        Apply a single event.

        Args:
            event: WatchEvent to apply

        Returns:
            Results of the operations performed, empty if the event was ignored
        """
        logger.info(f"Event: {event.kind.value} {event.path}"
                    + (f" -> {event.dest_path}" if event.dest_path else ""))

        if event.is_directory or not event.name:
            logger.debug(f"Ignoring {event.kind.value} for directory or unnamed path: {event.path}")
            self.stats.events_ignored += 1
            return []

        handler_map = {
            EventKind.REMOVE: self._handle_remove,
            EventKind.CREATE: self._handle_create,
            EventKind.RENAME: self._handle_rename,
            EventKind.WRITE: self._handle_write
        }

        handler = handler_map.get(event.kind)
        if handler is None:
            raise ValueError(f"No handler for event kind: {event.kind}")

        results = handler(event)
        for result in results:
            self.stats.record(result)
        return results

    def _upload(self, name: str, path: str) -> TransferResult:
        result = self.transfers.upload(name, path)
        if result.success and result.fingerprint is not None:
            self._uploaded[name] = result.fingerprint
        return result

    def _delete(self, name: str) -> TransferResult:
        self._uploaded.pop(name, None)
        return self.transfers.delete(name)

    def _handle_remove(self, event: WatchEvent) -> List[TransferResult]:
        self.stats.events_handled[EventKind.REMOVE.value] += 1
        return [self._delete(event.name)]

    def _handle_create(self, event: WatchEvent) -> List[TransferResult]:
        self.stats.events_handled[EventKind.CREATE.value] += 1
        return [self._upload(event.name, event.path)]

    def _handle_rename(self, event: WatchEvent) -> List[TransferResult]:
        self.stats.events_handled[EventKind.RENAME.value] += 1
        new_name = event.dest_name
        if not new_name:
            logger.warning(f"Rename without destination for {event.path}, treating as remove")
            return [self._delete(event.name)]

        results = [self._delete(event.name)]
        results.append(self._upload(new_name, event.dest_path))
        return results

    def _handle_write(self, event: WatchEvent) -> List[TransferResult]:
        current = self.transfers.fingerprint(event.path)
        if current is None:
            logger.debug(f"Suppressing write for {event.name}, file no longer exists")
            self.stats.writes_suppressed += 1
            return []

        if self._uploaded.get(event.name) == current:
            logger.debug(f"Suppressing write for {event.name}, unchanged since its last upload")
            self.stats.writes_suppressed += 1
            return []

        self.stats.events_handled[EventKind.WRITE.value] += 1
        return [self._upload(event.name, event.path)]
