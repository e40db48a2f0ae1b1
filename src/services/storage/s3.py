"""S3 storage service for photo variants (AWS S3 or MinIO)."""
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional, List, Dict, Any
import logging

from src.app.config import settings
from src.core.exceptions import StorageError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {'NoSuchKey', '404', 'NotFound'}


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


class S3Service:
    """
    Gateway to the photo bucket.

    Calls are made once (botocore retries disabled); failures surface as
    StorageError carrying the botocore message.
    """

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Initialize S3 clients with configuration.

        Args:
            bucket_name: Bucket override (defaults to S3_BUCKET_NAME)
            endpoint_url: Internal endpoint override (defaults to S3_ENDPOINT_URL)
            public_base_url: scheme://host[:port] handed out to clients
                (defaults to the configured public endpoint)
        """
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self.endpoint_url = endpoint_url or settings.S3_ENDPOINT_URL
        self.public_base_url = (public_base_url or settings.S3_PUBLIC_BASE_URL).rstrip('/')

        try:
            self.s3_client = self._build_client(self.endpoint_url)
            # Presigned URLs are signed against the public host so the
            # signature stays valid for clients outside the internal network.
            if self.endpoint_url or public_base_url or settings.S3_PUBLIC_ENDPOINT:
                self.presign_client = self._build_client(self.public_base_url)
            else:
                self.presign_client = self.s3_client
            logger.info(f"S3 Service initialized for bucket: {self.bucket_name}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise StorageError(f"S3 initialization failed: {str(e)}", operation='init')

    def _build_client(self, endpoint_url: Optional[str]):
        return boto3.client(
            's3',
            endpoint_url=endpoint_url,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': settings.S3_ADDRESSING_STYLE},
                retries={'max_attempts': 1, 'mode': 'standard'}
            )
        )

    def ensure_bucket(self) -> bool:
        """
        Create the bucket if it does not exist yet.

        Returns:
            True if the bucket was created, False if it already existed

        Raises:
            StorageError: If the bucket cannot be checked or created
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return False
        except ClientError as e:
            if _error_code(e) not in MISSING_OBJECT_CODES | {'NoSuchBucket'}:
                logger.error(f"Error checking bucket {self.bucket_name}: {e}")
                raise StorageError(f"Failed to access bucket: {str(e)}", operation='head_bucket') from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to access bucket: {str(e)}", operation='head_bucket') from e

        try:
            params = {'Bucket': self.bucket_name}
            if settings.S3_REGION and settings.S3_REGION != 'us-east-1':
                params['CreateBucketConfiguration'] = {'LocationConstraint': settings.S3_REGION}
            self.s3_client.create_bucket(**params)
            logger.info(f"Created bucket: {self.bucket_name}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error creating bucket {self.bucket_name}: {e}")
            raise StorageError(f"Failed to create bucket: {str(e)}", operation='create_bucket') from e

    def upload_file(
        self,
        file_data: bytes,
        s3_key: str,
        content_type: str = 'image/jpeg',
    ) -> None:
        """
        Upload bytes to S3, overwriting any existing object at the key.

        Args:
            file_data: File content as bytes
            s3_key: S3 object key
            content_type: MIME type

        Raises:
            StorageError: If upload fails
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=file_data,
                ContentLength=len(file_data),
                ContentType=content_type
            )
            logger.info(f"Uploaded {len(file_data)} bytes to: {s3_key}")

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading file {s3_key}: {e}")
            raise StorageError(f"Failed to upload file: {str(e)}", operation='upload', key=s3_key) from e

    def delete_object(self, s3_key: str) -> None:
        """
        Delete object from S3. A missing object counts as deleted.

        Args:
            s3_key: S3 object key

        Raises:
            StorageError: If deletion fails
        """
        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=s3_key
            )
            logger.info(f"Deleted S3 object: {s3_key}")

        except ClientError as e:
            if _error_code(e) in MISSING_OBJECT_CODES:
                logger.debug(f"S3 object already absent: {s3_key}")
                return
            logger.error(f"Error deleting object {s3_key}: {e}")
            raise StorageError(f"Failed to delete object: {str(e)}", operation='delete', key=s3_key) from e
        except BotoCoreError as e:
            logger.error(f"Error deleting object {s3_key}: {e}")
            raise StorageError(f"Failed to delete object: {str(e)}", operation='delete', key=s3_key) from e

    def generate_presigned_download_url(self, s3_key: str, expires_in: int = 3600) -> str:
        """
        Generate presigned URL for download on the public endpoint.

        Args:
            s3_key: S3 object key
            expires_in: URL expiration in seconds

        Returns:
            Presigned download URL

        Raises:
            StorageError: If URL generation fails
        """
        try:
            url = self.presign_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': s3_key
                },
                ExpiresIn=expires_in
            )

            logger.debug(f"Generated download URL for: {s3_key}")
            return url

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating download URL: {e}")
            raise StorageError(f"Failed to generate download URL: {str(e)}", operation='presign', key=s3_key) from e

    def get_public_url(self, s3_key: str) -> str:
        """Direct object URL; only readable when the bucket has a public-read policy."""
        return f"{self.public_base_url}/{self.bucket_name}/{s3_key}"

    def list_objects_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        """
        List every object under a prefix (all pages).

        Args:
            prefix: S3 key prefix

        Returns:
            List of object dicts with key, size, last_modified

        Raises:
            StorageError: If listing fails
        """
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            objects = []
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for obj in page.get('Contents', []):
                    objects.append({
                        'key': obj['Key'],
                        'size': obj['Size'],
                        'last_modified': obj['LastModified'],
                    })

            logger.debug(f"Listed {len(objects)} objects with prefix: {prefix}")
            return objects

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing objects: {e}")
            raise StorageError(f"Failed to list objects: {str(e)}", operation='list', key=prefix) from e
