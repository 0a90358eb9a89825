"""
Upload, download and delete primitives shared by the reconciler and the event router.
"""
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..clients.s3_manager import S3Manager
from ..models.data_models import TransferResult
from ..models.errors import TransferError


class TransferManager:
    """
    Moves whole files between the local root and the bucket.

    Each primitive returns a TransferResult instead of raising, so callers
    decide whether a failure aborts their pass. With fail_fast the first
    failure is raised as TransferError.
    """

    def __init__(self, storage: S3Manager, root: Union[str, Path], fail_fast: bool = False):
        """
        Initialize transfer manager.

        Args:
            storage: Storage client for the mirrored bucket
            root: Local directory mirrored against the bucket
            fail_fast: Raise TransferError on the first failed transfer
        """
        self.storage = storage
        self.root = Path(root)
        self.fail_fast = fail_fast

    def local_path(self, name: str) -> Path:
        """Path under the watched root for the given base name."""
        return self.root / name

    @staticmethod
    def fingerprint(path: Union[str, Path]) -> Optional[Tuple[int, int]]:
        """(st_mtime_ns, st_size) of a regular file, or None if it is gone."""
        try:
            stat = os.stat(path)
        except OSError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def _finish(self, result: TransferResult) -> TransferResult:
        if result.success:
            logger.info(f"{result.operation.capitalize()} complete: {result.name} ({result.size} bytes)")
            return result

        logger.error(f"{result.operation.capitalize()} failed for {result.name}: {result.error}")
        if self.fail_fast:
            raise TransferError(result)
        return result

    def upload(self, name: str, path: Optional[Union[str, Path]] = None) -> TransferResult:
        """
        Read a local file fully and store it under key `name`.

        Args:
            name: Object key, also the file's base name
            path: File to read; defaults to root/name

        Returns:
            TransferResult describing the outcome
        """
        source = Path(path) if path is not None else self.local_path(name)
        try:
            with open(source, 'rb') as fh:
                # Stat before reading: a write landing mid-read leaves a newer stat than recorded
                stat = os.fstat(fh.fileno())
                data = fh.read()
            self.storage.put_object_bytes(name, data)
            return self._finish(TransferResult(
                'upload', name, True, size=len(data),
                fingerprint=(stat.st_mtime_ns, stat.st_size)
            ))
        except (OSError, ClientError, BotoCoreError) as e:
            return self._finish(TransferResult('upload', name, False, error=str(e)))

    def download(self, name: str) -> TransferResult:
        """
        Fetch object `name` and write it to root/name, creating or truncating the file.

        Args:
            name: Object key, also the local base name

        Returns:
            TransferResult describing the outcome
        """
        target = self.local_path(name)
        try:
            data = self.storage.get_object_bytes(name)
            target.write_bytes(data)
            return self._finish(TransferResult('download', name, True, size=len(data)))
        except (OSError, ClientError, BotoCoreError) as e:
            return self._finish(TransferResult('download', name, False, error=str(e)))

    def delete(self, name: str) -> TransferResult:
        """
        Delete object `name` from the bucket without checking that it exists.

        Args:
            name: Object key

        Returns:
            TransferResult describing the outcome
        """
        try:
            self.storage.delete_object(name)
            return self._finish(TransferResult('delete', name, True))
        except (ClientError, BotoCoreError) as e:
            return self._finish(TransferResult('delete', name, False, error=str(e)))
