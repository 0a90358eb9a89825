# Services package
from .transfers import TransferManager
from .reconciler import Reconciler, diff_name_sets, list_local_names
from .event_router import EventRouter
from .mirror_service import MirrorService

__all__ = ['TransferManager', 'Reconciler', 'diff_name_sets', 'list_local_names', 'EventRouter', 'MirrorService']
