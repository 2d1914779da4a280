"""Blob storage for employee documents and admission photos.

Keys are laid out as ``<kind>/<company_id>/<employee_id>/<name>`` so one
company's files never share a prefix with another's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class ObjectStore(ABC):
    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """Write ``data`` under ``key``, replacing any previous object."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Read the object, or None when nothing is stored under ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is a no-op."""

    @abstractmethod
    def public_url(self, key: str) -> str: ...


def create_object_store() -> ObjectStore:
    """Build the store selected by ``USE_S3``."""
    from foome.config.settings import get_settings

    settings = get_settings()
    if not settings.use_s3:
        from foome.storage.local_store import LocalObjectStore

        return LocalObjectStore(Path(settings.files_dir).expanduser(), settings.public_files_url)

    from foome.storage.s3_store import S3ObjectStore

    return S3ObjectStore(
        settings.s3_bucket,
        endpoint_url=settings.s3_endpoint_url,
        access_key_id=settings.s3_access_key_id,
        secret_access_key=settings.s3_secret_access_key,
        region=settings.s3_region,
        public_base_url=settings.s3_public_url,
    )
