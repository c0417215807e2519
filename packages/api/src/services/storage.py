# This project was developed with assistance from AI tools.
"""S3-compatible object storage for uploaded policy documents.

Objects live under ``clients/<client_id>/policies/`` and carry their SHA-256
as object metadata, so a stored file can be checked against its Document row
without downloading it through the API. boto3 is synchronous; every call runs
in the default thread-pool executor.

A single service is created during app startup (``init_storage_service``).
"""

import asyncio
import logging
import os
from functools import partial

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from ..core.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
}


def log_storage_status(cfg: Settings) -> None:
    """Log the configured storage endpoint at startup."""
    logger.info("Document storage: endpoint=%s bucket=%s", cfg.S3_ENDPOINT, cfg.S3_BUCKET)


class StorageService:
    """Policy document bucket."""

    def __init__(self, cfg: Settings, client=None):
        self.bucket = cfg.S3_BUCKET
        self._s3 = client or boto3.client(
            "s3",
            endpoint_url=cfg.S3_ENDPOINT,
            aws_access_key_id=cfg.S3_ACCESS_KEY,
            aws_secret_access_key=cfg.S3_SECRET_KEY,
            region_name=cfg.S3_REGION,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    async def _call(self, method: str, **params):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(getattr(self._s3, method), **params))

    async def ensure_bucket(self) -> None:
        """Create the bucket when missing (local MinIO)."""
        try:
            await self._call("head_bucket", Bucket=self.bucket)
        except ClientError:
            logger.info("Creating S3 bucket: %s", self.bucket)
            await self._call("create_bucket", Bucket=self.bucket)

    async def upload_file(
        self,
        file_data: bytes,
        object_key: str,
        content_type: str,
        *,
        sha256: str | None = None,
    ) -> str:
        """Store bytes under ``object_key``; returns the key."""
        params = {
            "Bucket": self.bucket,
            "Key": object_key,
            "Body": file_data,
            "ContentType": content_type,
        }
        if sha256:
            params["Metadata"] = {"sha256": sha256}
        await self._call("put_object", **params)
        return object_key

    async def get_download_url(
        self, object_key: str, expires_in: int = 300, filename: str | None = None
    ) -> str:
        """Presigned GET URL. ``filename`` sets the download name."""
        params = {"Bucket": self.bucket, "Key": object_key}
        if filename:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'
        return await self._call(
            "generate_presigned_url", ClientMethod="get_object", Params=params, ExpiresIn=expires_in
        )

    @staticmethod
    def build_object_key(client_id: str, document_id: str, filename: str) -> str:
        """clients/{client_id}/policies/{document_id}-{filename}, path parts stripped."""
        safe_name = os.path.basename(filename.replace("\\", "/")) or "policy"
        return f"clients/{client_id}/policies/{document_id}-{safe_name}"


_service: StorageService | None = None


def init_storage_service(cfg: Settings) -> StorageService:
    """Create the process-wide service (app lifespan)."""
    global _service  # noqa: PLW0603
    _service = StorageService(cfg)
    return _service


def get_storage_service() -> StorageService:
    if _service is None:
        raise RuntimeError("StorageService not initialised -- call init_storage_service() first")
    return _service
