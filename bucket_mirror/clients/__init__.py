# Client packages
from .s3_manager import S3Manager
from .fs_watcher import DirectoryWatcher, QueueingEventHandler

__all__ = ['S3Manager', 'DirectoryWatcher', 'QueueingEventHandler']
