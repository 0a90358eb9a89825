"""
Main mirror service orchestrator for local directory to S3 bucket mirroring.
"""
import threading
from typing import Any, Dict, Optional

from loguru import logger

from ..clients.fs_watcher import DirectoryWatcher
from ..clients.s3_manager import S3Manager
from ..models.config import MirrorConfig
from ..models.data_models import ReconcileReport, RouterStats
from ..models.errors import ConfigurationError, MirrorError
from .event_router import EventRouter
from .reconciler import Reconciler
from .transfers import TransferManager


class MirrorService:
    """
    Orchestrates the startup reconciliation and the live watch loop.

    Reconciliation runs on the calling thread and finishes before the watcher
    starts, so the two never touch the bucket concurrently. Watch events are
    then drained by a single consumer thread.
    """

    def __init__(self, config: MirrorConfig, storage: Optional[S3Manager] = None,
                 watcher: Optional[DirectoryWatcher] = None):
        """
        Initialize mirror service with configuration.

        Args:
            config: MirrorConfig containing all service configuration
            storage: Pre-built storage client; created from config when omitted
            watcher: Pre-built directory watcher; created from config when omitted
        """
        config.validate()
        self.config = config

        self.storage = storage or S3Manager(
            config.storage,
            timeout=config.request_timeout,
            max_retries=config.max_retries
        )
        self.transfers = TransferManager(self.storage, config.local_root, fail_fast=config.fail_fast)
        self.reconciler = Reconciler(self.storage, self.transfers)
        self.router = EventRouter(self.transfers)
        self.watcher = watcher or DirectoryWatcher(
            config.local_root,
            poll_interval=config.poll_interval,
            recursive=config.recursive,
            use_polling=config.use_polling,
            queue_size=config.queue_size
        )

        self._consumer: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

        logger.info("MirrorService initialized successfully")

    def check_connection(self) -> None:
        """
        Verify the bucket is reachable before any transfer.

        Raises:
            ConfigurationError: If the connection test fails
        """
        if not self.storage.test_connection():
            raise ConfigurationError(f"Cannot reach bucket {self.config.storage.bucket}")

    def run_reconcile(self) -> ReconcileReport:
        """Run one reconciliation pass."""
        return self.reconciler.reconcile()

    def start_watching(self) -> None:
        """Start the watcher and the consumer thread that feeds the router."""
        self.watcher.start()
        self._error = None
        self._consumer = threading.Thread(target=self._consume, daemon=True, name="EventRouter")
        self._consumer.start()

    def _consume(self) -> None:
        try:
            self.router.run(self.watcher.events())
        except MirrorError as e:
            self._error = e
            logger.error(f"Event loop terminated: {e}")
            self.watcher.stop()
        except Exception as e:
            self._error = e
            logger.exception("Unexpected error in event loop")
            self.watcher.stop()

    def wait(self) -> RouterStats:
        """
        Block until the event loop ends.

        Raises:
            MirrorError: The fatal error that ended the loop, if any
        """
        if self._consumer is None:
            raise RuntimeError("Watching has not been started")

        # Join in slices so KeyboardInterrupt reaches the main thread
        while self._consumer.is_alive():
            self._consumer.join(timeout=0.5)

        if self._error is not None:
            raise self._error
        return self.router.stats

    def stop(self) -> None:
        """Close the watch and let the consumer drain."""
        logger.info("Stopping mirror service")
        self.watcher.stop()
        if self._consumer is not None:
            self._consumer.join(timeout=5)

    def run(self) -> RouterStats:
        """
        Reconcile, then mirror local changes until stopped or a fatal error occurs.

        Returns:
            RouterStats for the watch session
        """
        self.check_connection()

        report = self.run_reconcile()
        logger.info(f"Startup reconciliation: {report.succeeded} succeeded, {report.failed} failed")

        self.start_watching()
        try:
            return self.wait()
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, shutting down gracefully")
            self.stop()
            return self.router.stats

    def get_status(self) -> Dict[str, Any]:
        """
        Get current service status.

        Returns:
            Dictionary containing service status information
        """
        try:
            connected = self.storage.test_connection()
            return {
                'service_status': 'healthy' if connected else 'unreachable',
                'bucket': self.config.storage.bucket,
                'region': self.config.storage.region,
                'endpoint': self.config.storage.endpoint,
                'local_root': self.config.local_root,
                'watching': self.watcher.is_running,
                'fail_fast': self.config.fail_fast
            }
        except Exception as e:
            return {
                'service_status': 'error',
                'error': str(e)
            }
