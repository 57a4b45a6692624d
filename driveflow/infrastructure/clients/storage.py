"""Object storage client for KYC documents and fleet images"""

import mimetypes
import uuid
import httpx

from driveflow.config import settings
from driveflow.domain.exceptions import StorageError
from driveflow.infrastructure.observability.metrics import storage_upload_failures_counter


def build_object_path(filename: str, folder: str) -> str:
    """Unique object key under folder, keeping the original extension"""
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    return f"{folder.strip('/')}/{uuid.uuid4()}.{ext}"


class StorageClient:
    """Client for the hosted object store"""

    def __init__(
        self,
        base_url: str | None = None,
        bucket: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.storage_api_base
        self.bucket = bucket or settings.storage_bucket
        self.api_key = api_key if api_key is not None else settings.storage_api_key
        self.timeout = timeout or settings.http_timeout_seconds

    def public_url(self, object_path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{object_path}"

    async def upload(self, content: bytes, filename: str, folder: str) -> str:
        """
        Upload a file and return its public URL.

        Raises:
            StorageError: On timeout or HTTP errors
        """
        object_path = build_object_path(filename, folder)
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/storage/v1/object/{self.bucket}/{object_path}",
                    content=content,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": content_type,
                        "Cache-Control": "3600",
                        "x-upsert": "false",
                    },
                )
                response.raise_for_status()

            except httpx.TimeoutException as e:
                storage_upload_failures_counter.inc()
                raise StorageError(f"Storage upload timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                storage_upload_failures_counter.inc()
                raise StorageError(f"Storage upload failed: {e.response.status_code}") from e
            except httpx.RequestError as e:
                storage_upload_failures_counter.inc()
                raise StorageError(f"Storage unreachable: {e}") from e

        return self.public_url(object_path)
