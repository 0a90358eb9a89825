"""
Configuration classes for the bucket mirror service.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes', 'on')


@dataclass
class S3Config:
    """Configuration for the S3 bucket connection."""
    bucket: str
    region: Optional[str] = 'us-east-2'
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = 'MIRROR') -> 'S3Config':
        """Create S3Config from environment variables with given prefix."""
        return cls(
            bucket=os.getenv(f'{prefix}_S3_BUCKET', ''),
            region=os.getenv(f'{prefix}_S3_REGION', 'us-east-2'),
            endpoint=os.getenv(f'{prefix}_S3_ENDPOINT') or None,
            access_key=os.getenv(f'{prefix}_S3_ACCESS_KEY') or None,
            secret_key=os.getenv(f'{prefix}_S3_SECRET_KEY') or None
        )


@dataclass
class MirrorConfig:
    """Main configuration for the mirror service."""
    storage: S3Config
    local_root: str = 'test'
    poll_interval: float = 0.1
    recursive: bool = True
    use_polling: bool = False
    fail_fast: bool = False
    queue_size: int = 1000
    request_timeout: int = 30
    max_retries: int = 3

    @classmethod
    def from_env(cls) -> 'MirrorConfig':
        """Create MirrorConfig from environment variables."""
        try:
            return cls(
                storage=S3Config.from_env('MIRROR'),
                local_root=os.getenv('MIRROR_LOCAL_ROOT', 'test'),
                poll_interval=float(os.getenv('MIRROR_POLL_INTERVAL', '0.1')),  # Seconds between watch polls
                recursive=_env_bool('MIRROR_RECURSIVE', 'true'),
                use_polling=_env_bool('MIRROR_USE_POLLING', 'false'),
                fail_fast=_env_bool('MIRROR_FAIL_FAST', 'false'),
                queue_size=int(os.getenv('MIRROR_QUEUE_SIZE', '1000')),
                request_timeout=int(os.getenv('MIRROR_REQUEST_TIMEOUT', '30')),
                max_retries=int(os.getenv('MIRROR_MAX_RETRIES', '3'))
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric configuration value: {e}") from e

    @property
    def root_path(self) -> Path:
        return Path(self.local_root)

    def validate(self) -> None:
        """
        Check the configuration before any network or filesystem work starts.

        Raises:
            ConfigurationError: If a required value is missing or out of range
        """
        if not self.storage.bucket:
            raise ConfigurationError("MIRROR_S3_BUCKET must be set")

        if not self.root_path.is_dir():
            raise ConfigurationError(f"Local root is not a directory: {self.local_root}")

        if self.poll_interval <= 0:
            raise ConfigurationError("poll_interval must be positive")

        if self.queue_size < 1:
            raise ConfigurationError("queue_size must be at least 1")

        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1")
