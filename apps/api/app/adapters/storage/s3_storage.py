"""S3 pre-signed URL adapter."""

from __future__ import annotations

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.adapters.storage.base import ObjectStorage, StorageError


class S3ObjectStorage(ObjectStorage):
    """Signs ``put_object`` / ``get_object`` requests for a single bucket with SigV4."""

    def __init__(
        self,
        *,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> None:
        self._bucket = bucket
        # Credentials left as None fall back to the default boto3 provider chain.
        self._client = boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def presign_upload(self, key: str, *, content_type: str, expires_in: int) -> str:
        return self._presign(
            "put_object",
            {"Bucket": self._bucket, "Key": key, "ContentType": content_type},
            expires_in,
        )

    def presign_download(self, key: str, *, expires_in: int) -> str:
        return self._presign("get_object", {"Bucket": self._bucket, "Key": key}, expires_in)

    def _presign(self, client_method: str, params: dict[str, str], expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod=client_method,
                Params=params,
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to presign {client_method}") from exc


__all__ = ["S3ObjectStorage"]
