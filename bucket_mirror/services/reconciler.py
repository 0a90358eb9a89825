"""
Startup reconciliation between the bucket and the local root.

Compares the remote key set with the local file name set and fills the
presence gaps on both sides. Nothing is deleted: the pass is a merge, not
a mirror-with-deletions. Only names are compared, never content.
"""
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Set, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..clients.s3_manager import S3Manager
from ..models.data_models import DiffResult, ReconcileReport
from ..models.errors import ListingError
from .transfers import TransferManager


def diff_name_sets(remote_names: Iterable[str], local_names: Iterable[str]) -> DiffResult:
    """
    Compute the presence gaps between two name sets.

    Args:
        remote_names: Keys present in the bucket
        local_names: Base names present in the local root

    Returns:
        DiffResult with remote-only names in missing_from_local and
        local-only names in missing_from_remote, both sorted
    """
    remote = set(remote_names)
    local = set(local_names)
    return DiffResult(
        missing_from_local=sorted(remote - local),
        missing_from_remote=sorted(local - remote)
    )


def is_flat_name(key: str) -> bool:
    """True if the key can be stored as a single file directly under the root."""
    return bool(key) and '/' not in key and key not in ('.', '..')


def list_local_names(root: Path) -> Set[str]:
    """
    List the regular files directly under root (non-recursive).

    Raises:
        ListingError: If the directory cannot be read
    """
    try:
        return {entry.name for entry in root.iterdir() if entry.is_file()}
    except OSError as e:
        logger.error(f"Failed to list local directory {root}: {e}")
        raise ListingError(f"Cannot list local directory {root}: {e}") from e


class Reconciler:
    """Runs the one-time startup pass that fills presence gaps on both sides."""

    def __init__(self, storage: S3Manager, transfers: TransferManager):
        self.storage = storage
        self.transfers = transfers
        self.root = transfers.root

    def _remote_names(self) -> Tuple[Set[str], List[str]]:
        try:
            keys = self.storage.list_keys()
        except (ClientError, BotoCoreError) as e:
            raise ListingError(f"Cannot list bucket {self.storage.bucket}: {e}") from e

        names, skipped = set(), []
        for key in keys:
            if is_flat_name(key):
                names.add(key)
            else:
                skipped.append(key)
        if skipped:
            logger.warning(f"Skipping {len(skipped)} nested or folder keys: {skipped}")
        return names, skipped

    def compute_diff(self) -> Tuple[DiffResult, List[str]]:
        """
        List both sides and diff them without transferring anything.

        Returns:
            Tuple of the DiffResult and the remote keys skipped as non-flat

        Raises:
            ListingError: If either listing fails
        """
        remote_names, skipped = self._remote_names()
        local_names = list_local_names(self.root)
        logger.debug(f"Remote names: {len(remote_names)}, local names: {len(local_names)}")
        return diff_name_sets(remote_names, local_names), skipped

    def reconcile(self) -> ReconcileReport:
        """
        Download remote-only names and upload local-only names.

        Returns:
            ReconcileReport with the diff and every transfer outcome

        Raises:
            ListingError: If either listing fails
            TransferError: On the first failed transfer when fail_fast is set
        """
        logger.info(f"Reconciling {self.root} with bucket {self.storage.bucket}")
        diff, skipped = self.compute_diff()
        report = ReconcileReport(diff=diff, skipped_keys=skipped)

        logger.info(f"{len(diff.missing_from_local)} missing from your system")
        logger.info(f"{len(diff.missing_from_remote)} missing from your cloud")

        for name in diff.missing_from_local:
            report.transfers.append(self.transfers.download(name))

        for name in diff.missing_from_remote:
            report.transfers.append(self.transfers.upload(name))

        report.end_time = datetime.now()
        if report.failed:
            logger.warning(f"Reconciliation finished with {report.failed} failed transfer(s) "
                           f"out of {len(report.transfers)}")
        else:
            logger.info(f"Reconciliation complete - {report.succeeded} transfer(s) "
                        f"in {report.duration:.2f} seconds")
        return report
