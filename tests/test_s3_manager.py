"""
Tests for S3Manager class.
"""
import pytest
from unittest.mock import Mock, patch
from io import BytesIO
from datetime import datetime
from botocore.exceptions import ClientError, NoRegionError

from bucket_mirror.clients.s3_manager import S3Manager
from bucket_mirror.models.config import S3Config
from bucket_mirror.models.errors import ConfigurationError


@pytest.fixture
def s3_config():
    """Create a test S3 configuration."""
    return S3Config(
        bucket='my-go-box',
        region='us-east-2',
        endpoint='http://localhost:9000',
        access_key='test_key',
        secret_key='test_secret'
    )


@pytest.fixture
def s3_manager(s3_config):
    """Create a test S3Manager instance with mocked client."""
    with patch('bucket_mirror.clients.s3_manager.boto3.client') as mock_boto3:
        mock_client = Mock()
        mock_boto3.return_value = mock_client

        manager = S3Manager(s3_config, backoff_factor=0)
        manager.client = mock_client

        return manager


class TestS3Manager:
    """Test cases for S3Manager."""

    def test_initialization(self, s3_config):
        """Test S3Manager initialization passes endpoint, credentials and timeouts."""
        with patch('bucket_mirror.clients.s3_manager.boto3.client') as mock_boto3:
            mock_boto3.return_value = Mock()

            manager = S3Manager(s3_config, timeout=12)

            assert manager.bucket == 'my-go-box'
            assert mock_boto3.call_count == 1
            kwargs = mock_boto3.call_args.kwargs
            assert kwargs['endpoint_url'] == 'http://localhost:9000'
            assert kwargs['region_name'] == 'us-east-2'
            assert kwargs['config'].connect_timeout == 12
            assert kwargs['config'].read_timeout == 12

    def test_initialization_failure_is_configuration_error(self, s3_config):
        """Test a client that cannot be created surfaces as ConfigurationError."""
        with patch('bucket_mirror.clients.s3_manager.boto3.client') as mock_boto3:
            mock_boto3.side_effect = NoRegionError()

            with pytest.raises(ConfigurationError):
                S3Manager(s3_config)

    def test_list_keys_across_pages(self, s3_manager):
        """Test listing keys collects every page."""
        mock_paginator = Mock()
        mock_paginator.paginate.return_value = [
            {'Contents': [{'Key': 'a.txt', 'Size': 1, 'LastModified': datetime.now(), 'ETag': '"abc"'}]},
            {},
            {'Contents': [{'Key': 'b.txt', 'Size': 2, 'LastModified': datetime.now(), 'ETag': '"def"'}]}
        ]
        s3_manager.client.get_paginator.return_value = mock_paginator

        keys = s3_manager.list_keys()

        assert keys == ['a.txt', 'b.txt']
        s3_manager.client.get_paginator.assert_called_once_with('list_objects_v2')
        mock_paginator.paginate.assert_called_once_with(Bucket='my-go-box')

    def test_get_object_bytes(self, s3_manager):
        """Test getting object content reads the whole body."""
        s3_manager.client.get_object.return_value = {'Body': BytesIO(b'test content')}

        data = s3_manager.get_object_bytes('test-key')

        assert data == b'test content'
        s3_manager.client.get_object.assert_called_once_with(Bucket='my-go-box', Key='test-key')

    def test_put_object_bytes(self, s3_manager):
        """Test storing object content."""
        s3_manager.put_object_bytes('test-key', b'payload')

        s3_manager.client.put_object.assert_called_once_with(
            Bucket='my-go-box', Key='test-key', Body=b'payload'
        )

    def test_delete_object(self, s3_manager):
        """Test deleting an object."""
        s3_manager.delete_object('test-key')

        s3_manager.client.delete_object.assert_called_once_with(Bucket='my-go-box', Key='test-key')

    def test_delete_object_failure_raises(self, s3_manager):
        """Test a delete that keeps failing propagates the ClientError."""
        s3_manager.client.delete_object.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied'}}, 'DeleteObject'
        )

        with patch('time.sleep'):
            with pytest.raises(ClientError):
                s3_manager.delete_object('test-key')

        assert s3_manager.client.delete_object.call_count == 3

    def test_retry_operation_success(self, s3_manager):
        """Test retry operation succeeds on first attempt."""
        operation = Mock(return_value='success')

        result = s3_manager._retry_operation(operation)

        assert result == 'success'
        assert operation.call_count == 1

    def test_retry_operation_eventual_success(self, s3_manager):
        """Test retry operation succeeds after failures."""
        operation = Mock()
        operation.side_effect = [
            ClientError({'Error': {'Code': '500'}}, 'TestOperation'),
            ClientError({'Error': {'Code': '500'}}, 'TestOperation'),
            'success'
        ]

        with patch('time.sleep'):
            result = s3_manager._retry_operation(operation, max_retries=3)

        assert result == 'success'
        assert operation.call_count == 3

    def test_retry_operation_max_retries_exceeded(self, s3_manager):
        """Test retry operation fails after max retries."""
        operation = Mock()
        operation.side_effect = ClientError({'Error': {'Code': '500'}}, 'TestOperation')

        with patch('time.sleep'):
            with pytest.raises(ClientError):
                s3_manager._retry_operation(operation, max_retries=2)

        assert operation.call_count == 2

    def test_test_connection_success(self, s3_manager):
        """Test connection testing when it succeeds."""
        s3_manager.client.head_bucket.return_value = {}

        assert s3_manager.test_connection() is True

    def test_test_connection_failure(self, s3_manager):
        """Test connection testing when it fails."""
        s3_manager.client.head_bucket.side_effect = Exception('Connection failed')

        assert s3_manager.test_connection() is False
