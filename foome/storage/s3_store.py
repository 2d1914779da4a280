"""S3-compatible object store (AWS S3, Cloudflare R2, MinIO) via aiobotocore."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from foome.exceptions import StorageError
from foome.storage.object_store import ObjectStore

logger = structlog.get_logger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class S3ObjectStore(ObjectStore):
    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str = "auto",
        public_base_url: str | None = None,
    ) -> None:
        self._bucket = bucket
        self._session = get_session()
        self._client_kwargs: dict[str, Any] = {
            "region_name": region,
            "endpoint_url": endpoint_url,
            "aws_access_key_id": access_key_id,
            "aws_secret_access_key": secret_access_key,
        }
        if public_base_url:
            self._public_base = public_base_url.rstrip("/")
        elif endpoint_url:
            self._public_base = f"{endpoint_url.rstrip('/')}/{bucket}"
        else:
            self._public_base = f"https://{bucket}.s3.{region}.amazonaws.com"

    @asynccontextmanager
    async def _client(self, operation: str, key: str) -> AsyncIterator[Any]:
        """Open a client; botocore failures surface as StorageError."""
        try:
            async with self._session.create_client("s3", **self._client_kwargs) as client:
                yield client
        except (BotoCoreError, ClientError) as exc:
            logger.error("s3_operation_failed", operation=operation, key=key, error=str(exc))
            msg = f"S3 {operation} failed for {key}"
            raise StorageError(msg) from exc

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        async with self._client("put", key) as client:
            await client.put_object(**params)
        logger.debug("object_stored", key=key, size=len(data), bucket=self._bucket)

    async def get(self, key: str) -> bytes | None:
        async with self._client("get", key) as client:
            try:
                resp = await client.get_object(Bucket=self._bucket, Key=key)
            except ClientError as exc:
                if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                    return None
                raise
            async with resp["Body"] as body:
                return await body.read()

    async def delete(self, key: str) -> None:
        async with self._client("delete", key) as client:
            await client.delete_object(Bucket=self._bucket, Key=key)
        logger.debug("object_deleted", key=key, bucket=self._bucket)

    def public_url(self, key: str) -> str:
        return f"{self._public_base}/{key}"
