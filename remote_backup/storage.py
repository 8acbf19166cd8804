# remote_backup/storage.py
import abc
import posixpath
from typing import Optional
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from .logger import log
from .schemas import RemoteConfig


class StorageProvider(abc.ABC):
    @abc.abstractmethod
    def save(self, source_path: str, destination_path: str, encrypt: bool = False) -> int:
        """Uploads source_path and returns the HTTP status of the response."""


def object_key(destination: str, archive_name: str) -> str:
    """Joins the destination prefix and archive name into an S3 object key."""
    return posixpath.join(destination or "/", archive_name).lstrip("/")


class S3Storage(StorageProvider):
    def __init__(
        self,
        bucket: str,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.s3_client = client or boto3.client(
            's3',
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version='s3v4', retries={'max_attempts': 3})
        )

    def save(self, source_path: str, destination_path: str, encrypt: bool = False) -> int:
        extra = {}
        if encrypt:
            extra["ServerSideEncryption"] = "AES256"

        log(f"Attempting to upload {posixpath.basename(destination_path)} to the {self.bucket} s3 bucket")
        try:
            with open(source_path, "rb") as body:
                response = self.s3_client.put_object(
                    Bucket=self.bucket, Key=destination_path, Body=body, **extra
                )
        except ClientError as e:
            error = e.response.get("Error", {})
            log(f"{error.get('Code', 'Unknown')}: {error.get('Message', e)}", "error")
            return e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        metadata = response.get("ResponseMetadata", {})
        status = metadata.get("HTTPStatusCode", 0)
        log(f"ETag {response.get('ETag')} request {metadata.get('RequestId')}", "info" if status == 200 else "error")
        return status


def get_storage_provider(remote: RemoteConfig) -> StorageProvider:
    return S3Storage(
        bucket=remote.bucket,
        access_key=remote.key,
        secret_key=remote.secret,
        endpoint_url=remote.endpoint_url,
        region=remote.region,
    )
