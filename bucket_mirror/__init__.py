"""
Bucket Mirror - keeps a local directory and an S3 bucket mirrored.
"""

from .services.mirror_service import MirrorService
from .services.reconciler import Reconciler, diff_name_sets
from .services.event_router import EventRouter
from .models.config import MirrorConfig, S3Config
from .models.data_models import WatchEvent, EventKind, DiffResult, TransferResult

__version__ = "1.0.0"
__all__ = [
    "MirrorService",
    "Reconciler",
    "diff_name_sets",
    "EventRouter",
    "MirrorConfig",
    "S3Config",
    "WatchEvent",
    "EventKind",
    "DiffResult",
    "TransferResult"
]
