"""
Exception types for the bucket mirror service.
"""


class MirrorError(Exception):
    """Base class for all bucket mirror errors."""
    pass


class ConfigurationError(MirrorError):
    """Raised when configuration is invalid or the storage session cannot be established."""
    pass


class ListingError(MirrorError):
    """Raised when the bucket listing or the local directory listing fails."""
    pass


class TransferError(MirrorError):
    """Raised in fail-fast mode when an upload, download or delete fails."""

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"{result.operation} failed for {result.name}: {result.error}"
        )


class WatchError(MirrorError):
    """Raised when the filesystem watcher faults."""
    pass
