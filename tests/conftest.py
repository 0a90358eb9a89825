"""
Pytest configuration and fixtures for the bucket mirror tests.
"""
import pytest
from botocore.exceptions import ClientError
from loguru import logger

from bucket_mirror.models.config import MirrorConfig, S3Config
from bucket_mirror.services.transfers import TransferManager


class FakeStorage:
    """In-memory stand-in for S3Manager that records every call."""

    def __init__(self, bucket='test-bucket', objects=None):
        self.bucket = bucket
        self.objects = dict(objects or {})
        self.calls = []
        self.fail_keys = set()

    def _check(self, operation, key):
        if key in self.fail_keys:
            raise ClientError({'Error': {'Code': '500', 'Message': 'boom'}}, operation)

    def list_keys(self):
        self.calls.append(('list', None))
        return list(self.objects)

    def get_object_bytes(self, key):
        self.calls.append(('get', key))
        self._check('GetObject', key)
        if key not in self.objects:
            raise ClientError({'Error': {'Code': 'NoSuchKey', 'Message': 'missing'}}, 'GetObject')
        return self.objects[key]

    def put_object_bytes(self, key, data):
        self.calls.append(('put', key))
        self._check('PutObject', key)
        self.objects[key] = bytes(data)

    def delete_object(self, key):
        self.calls.append(('delete', key))
        self._check('DeleteObject', key)
        self.objects.pop(key, None)

    def test_connection(self):
        return True

    def calls_of(self, operation):
        return [key for op, key in self.calls if op == operation]


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru output out of the test report."""
    logger.remove()
    yield


@pytest.fixture
def fake_storage():
    """Empty in-memory bucket."""
    return FakeStorage()


@pytest.fixture
def mirror_root(tmp_path):
    """Local root directory to mirror."""
    root = tmp_path / "mirror"
    root.mkdir()
    return root


@pytest.fixture
def transfers(fake_storage, mirror_root):
    """Transfer primitives bound to the fake bucket and the temporary root."""
    return TransferManager(fake_storage, mirror_root)


@pytest.fixture
def mirror_config(mirror_root):
    """Valid configuration pointing at the temporary root."""
    return MirrorConfig(
        storage=S3Config(bucket='test-bucket', region='us-east-2'),
        local_root=str(mirror_root),
        poll_interval=0.05
    )
