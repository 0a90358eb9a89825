"""
Models package for the bucket mirror service.
"""
from .data_models import (
    EventKind,
    WatchEvent,
    DiffResult,
    TransferResult,
    ReconcileReport,
    RouterStats
)
from .config import S3Config, MirrorConfig
from .errors import MirrorError, ConfigurationError, ListingError, TransferError, WatchError

__all__ = [
    'EventKind',
    'WatchEvent',
    'DiffResult',
    'TransferResult',
    'ReconcileReport',
    'RouterStats',
    'S3Config',
    'MirrorConfig',
    'MirrorError',
    'ConfigurationError',
    'ListingError',
    'TransferError',
    'WatchError'
]
