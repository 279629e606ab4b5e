from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.storage.blob import BlobServiceClient, ContentSettings

from .content_tree import FlatEntry

logger = logging.getLogger(__name__)


class StorageError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass(frozen=True)
class ObjectRef:
    """Handle to one stored blob. Only ``key`` matters to the tree builder."""

    container: str
    key: str
    size: int | None = None
    etag: str | None = None
    content_type: str | None = None
    last_modified: datetime | None = None


def map_azure_error(err: AzureError, action: str) -> StorageError:
    message = f"{action} failed: {getattr(err, 'message', None) or err}"
    if isinstance(err, ResourceNotFoundError):
        return StorageError(404, message)
    if isinstance(err, ResourceExistsError):
        return StorageError(409, message)
    if isinstance(err, ClientAuthenticationError):
        return StorageError(502, message)
    if isinstance(err, (ServiceRequestError, ServiceResponseError)):
        return StorageError(504, f"Network error talking to blob storage: {message}")
    if isinstance(err, HttpResponseError) and err.status_code and err.status_code < 500:
        return StorageError(err.status_code, message)
    return StorageError(502, message)


@dataclass
class BlobStorageClient:
    connection_string: str
    _service: BlobServiceClient | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(cls):
        conn = os.getenv("AZURE_STORAGE_CONNECTION_STRING", "")
        if not conn:
            raise StorageError(503, "Blob storage env not configured")
        return cls(conn)

    @property
    def service(self) -> BlobServiceClient:
        if self._service is None:
            try:
                self._service = BlobServiceClient.from_connection_string(self.connection_string)
            except ValueError as e:
                raise StorageError(503, f"Invalid storage connection string: {e}") from e
        return self._service

    def list_containers(self) -> list[str]:
        try:
            return [c.name for c in self.service.list_containers()]
        except AzureError as e:
            raise map_azure_error(e, "list containers") from e

    def list_objects(self, container: str) -> list[FlatEntry]:
        """Flat listing of every blob in ``container``, in service order."""
        entries: list[FlatEntry] = []
        try:
            for blob in self.service.get_container_client(container).list_blobs():
                settings = blob.content_settings
                ref = ObjectRef(
                    container=container,
                    key=blob.name,
                    size=blob.size,
                    etag=blob.etag,
                    content_type=settings.content_type if settings else None,
                    last_modified=blob.last_modified,
                )
                entries.append(FlatEntry(key=blob.name, ref=ref))
        except AzureError as e:
            raise map_azure_error(e, f"list objects in '{container}'") from e
        logger.debug("listed %d objects in container %s", len(entries), container)
        return entries

    def download(self, ref: ObjectRef) -> bytes:
        blob = self.service.get_blob_client(container=ref.container, blob=ref.key)
        try:
            return blob.download_blob().readall()
        except AzureError as e:
            raise map_azure_error(e, f"download '{ref.key}'") from e

    def upload(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> ObjectRef:
        blob = self.service.get_blob_client(container=container, blob=key)
        settings = ContentSettings(content_type=content_type) if content_type else None
        try:
            result = blob.upload_blob(data, overwrite=True, content_settings=settings)
        except AzureError as e:
            raise map_azure_error(e, f"upload '{key}'") from e
        return ObjectRef(
            container=container,
            key=key,
            size=len(data),
            etag=result.get("etag"),
            content_type=content_type,
            last_modified=result.get("last_modified"),
        )

    def delete(self, ref: ObjectRef) -> None:
        blob = self.service.get_blob_client(container=ref.container, blob=ref.key)
        try:
            blob.delete_blob()
        except AzureError as e:
            raise map_azure_error(e, f"delete '{ref.key}'") from e
