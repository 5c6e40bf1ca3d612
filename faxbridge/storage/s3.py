"""A blob store backed by a single AWS S3 bucket."""
import logging
from typing import Any, Dict, Optional, Union

import boto3
from botocore.exceptions import ClientError

from .base import DEFAULT_CONTENT_TYPE, BlobStore, StoredBlob, to_bytes

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = ('NoSuchKey', '404', 'NotFound')


class S3BlobStore(BlobStore):
    """Stores each key as one S3 object; ``contentType`` maps to the object's ContentType."""

    def __init__(self, bucket_name: str,
                 prefix: str = '',
                 aws_access_key_id: str = None,
                 aws_secret_access_key: str = None,
                 region_name: str = None,
                 client: Any = None):
        """Initializes the store.

        Args:
            bucket_name (str): Bucket holding the objects.
            prefix (str): Optional prefix prepended to every key.
            aws_access_key_id (str): The AWS access key ID.
            aws_secret_access_key (str): The AWS access key secret.
            region_name (str): The AWS region name.
            client: A preconfigured boto3 S3 client; overrides the credentials.
        """
        self.bucket_name = bucket_name
        self.prefix = prefix
        self._client = client or boto3.client(
            's3',
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region_name
        )

    def _object_key(self, key: str) -> str:
        return f'{self.prefix}{key}'

    def put(self, key: str, value: Union[bytes, str], metadata: Optional[Dict[str, Any]] = None) -> None:
        metadata = dict(metadata or {})
        content_type = metadata.pop('contentType', None) or DEFAULT_CONTENT_TYPE
        self._client.put_object(
            Bucket=self.bucket_name,
            Key=self._object_key(key),
            Body=to_bytes(value),
            ContentType=content_type,
            Metadata={name: str(item) for name, item in metadata.items() if item is not None}
        )
        logger.debug("Stored s3://%s/%s", self.bucket_name, self._object_key(key))

    def get(self, key: str) -> Optional[StoredBlob]:
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=self._object_key(key))
        except ClientError as ex:
            if ex.response.get('Error', {}).get('Code') in MISSING_OBJECT_CODES:
                return None
            raise

        metadata = dict(response.get('Metadata') or {})
        metadata['contentType'] = response.get('ContentType') or DEFAULT_CONTENT_TYPE
        return StoredBlob(value=response['Body'].read(), metadata=metadata)
