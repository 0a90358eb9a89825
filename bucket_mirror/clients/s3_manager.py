"""
S3 client manager for the mirrored bucket.
"""
import time
from typing import List

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError
from loguru import logger

from ..models.config import S3Config
from ..models.errors import ConfigurationError


class S3Manager:
    """
    Storage collaborator for one bucket.

    Created once at startup and shared by the reconciler and the event router.
    Every call is bounded by the configured timeout and retried with
    exponential backoff on client and connection errors.
    """

    def __init__(self, config: S3Config, timeout: int = 30, max_retries: int = 3,
                 backoff_factor: float = 1.0):
        """Initialize S3Manager with bucket configuration."""
        self.config = config
        self.bucket = config.bucket
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor

        self.client = self._create_s3_client(config, timeout)

        logger.info(f"S3Manager initialized for bucket: {self.bucket}")

    def _create_s3_client(self, config: S3Config, timeout: int):
        """Create an S3 client from configuration."""
        try:
            client = boto3.client(
                's3',
                endpoint_url=config.endpoint,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                region_name=config.region or 'us-east-2',
                config=BotoConfig(connect_timeout=timeout, read_timeout=timeout)
            )
            logger.debug(f"Created S3 client for region: {config.region} endpoint: {config.endpoint or 'default'}")
            return client
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to create S3 client for bucket {config.bucket}: {e}")
            raise ConfigurationError(f"Cannot create S3 client: {e}") from e

    def _retry_operation(self, operation, max_retries: int = None, backoff_factor: float = None):
        """Execute an operation with exponential backoff retry logic."""
        max_retries = max_retries or self.max_retries
        backoff_factor = self.backoff_factor if backoff_factor is None else backoff_factor

        for attempt in range(max_retries):
            try:
                return operation()
            except (ClientError, EndpointConnectionError) as e:
                if attempt == max_retries - 1:
                    logger.error(f"Operation failed after {max_retries} attempts: {e}")
                    raise

                wait_time = backoff_factor * (2 ** attempt)
                logger.warning(f"Operation failed (attempt {attempt + 1}/{max_retries}), retrying in {wait_time}s: {e}")
                time.sleep(wait_time)

    def list_keys(self) -> List[str]:
        """
        List the key of every object in the bucket.

        Returns:
            Object keys, across all listing pages
        """
        def _list_operation():
            paginator = self.client.get_paginator('list_objects_v2')
            keys = []
            for page in paginator.paginate(Bucket=self.bucket):
                keys.extend(obj['Key'] for obj in page.get('Contents', []))
            return keys

        try:
            keys = self._retry_operation(_list_operation)
            logger.debug(f"Listed {len(keys)} objects in bucket {self.bucket}")
            return keys
        except Exception as e:
            logger.error(f"Failed to list objects in bucket {self.bucket}: {e}")
            raise

    def get_object_bytes(self, key: str) -> bytes:
        """
        Download an object and read its whole body into memory.

        Args:
            key: Object key in the bucket

        Returns:
            bytes: The object content
        """
        def _get_operation():
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response['Body']
            try:
                return body.read()
            finally:
                body.close()

        try:
            data = self._retry_operation(_get_operation)
            logger.debug(f"Retrieved {len(data)} bytes for key: {key}")
            return data
        except Exception as e:
            logger.error(f"Failed to get object {key} from bucket {self.bucket}: {e}")
            raise

    def put_object_bytes(self, key: str, data: bytes) -> None:
        """
        Store data under the given key, replacing any existing object.

        Args:
            key: Object key in the bucket
            data: Full object content
        """
        def _put_operation():
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)

        try:
            self._retry_operation(_put_operation)
            logger.debug(f"Stored {len(data)} bytes under key: {key}")
        except Exception as e:
            logger.error(f"Failed to put object {key} to bucket {self.bucket}: {e}")
            raise

    def delete_object(self, key: str) -> None:
        """
        Delete an object. Deleting a missing key is not an error on S3.

        Args:
            key: Object key in the bucket
        """
        def _delete_operation():
            self.client.delete_object(Bucket=self.bucket, Key=key)

        try:
            self._retry_operation(_delete_operation)
            logger.debug(f"Deleted key: {key}")
        except Exception as e:
            logger.error(f"Failed to delete object {key} from bucket {self.bucket}: {e}")
            raise

    def test_connection(self) -> bool:
        """
        Test connection to the bucket.

        Returns:
            bool: True if connection successful, False otherwise
        """
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info(f"S3 connection test successful for bucket {self.bucket}")
            return True
        except Exception as e:
            logger.error(f"S3 connection test failed for bucket {self.bucket}: {e}")
            return False
