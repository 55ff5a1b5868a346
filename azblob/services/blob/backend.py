"""
Blob Storage Backend

Container provisioning and append blob creation against Azure Storage.

Author: azblob-plugin contributors
Date: 2026
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from azure.core.exceptions import AzureError, HttpResponseError, ResourceExistsError
from azure.storage.blob.aio import BlobServiceClient

from .exceptions import BackendFailure, TransientBackendFailure
from .models import BlobKind, ObjectHandle
from .resilience import RetryPolicy, is_transient_error


logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """
    Abstract base class for the storage operations a provisioning request needs.

    **Lifecycle**:
    1. __init__(...) - Bind to a storage account
    2. ensure_container() / create_append_blob() - Per request
    3. close() - Release network resources on shutdown
    """

    @abstractmethod
    async def ensure_container(self, container_name: str) -> bool:
        """
        Create the container unless it already exists.

        Concurrent calls for the same name must all succeed.

        Returns:
            True if this call created the container, False if it already existed

        Raises:
            BackendFailure: If the storage service rejects the request
        """

    @abstractmethod
    async def create_append_blob(self, handle: ObjectHandle) -> None:
        """
        Create an empty append blob so appends can target it immediately.

        Raises:
            BackendFailure: If the storage service rejects the request
        """

    async def close(self) -> None:
        """Release any held resources."""


class AzureBlobStorageBackend(StorageBackend):
    """Storage backend that talks to Azure Blob Storage through the async SDK."""

    def __init__(self, service_client: BlobServiceClient, retry_policy: Optional[RetryPolicy] = None):
        self._client = service_client
        self._retry = retry_policy or RetryPolicy()

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "AzureBlobStorageBackend":
        """
        Build a backend from an Azure Storage connection string.

        The SDK's own retry policy is switched off; ``retry_policy`` is the
        single place transient faults are retried.
        """
        client = BlobServiceClient.from_connection_string(connection_string, retry_total=0)
        return cls(client, retry_policy)

    @property
    def service_client(self) -> BlobServiceClient:
        return self._client

    async def ensure_container(self, container_name: str) -> bool:
        container_client = self._client.get_container_client(container_name)

        async def _create() -> bool:
            try:
                await container_client.create_container()
            except ResourceExistsError:
                return False
            return True

        try:
            created = await self._retry.call(_create, operation_name="ensure_container")
        except AzureError as e:
            raise _translate_error("ensure_container", e) from e

        if created:
            logger.info(f"Created container '{container_name}'")
        return created

    async def create_append_blob(self, handle: ObjectHandle) -> None:
        blob_client = self._client.get_blob_client(
            container=handle.container_name,
            blob=handle.blob_name,
        )

        try:
            await self._retry.call(blob_client.create_append_blob, operation_name="create_append_blob")
        except AzureError as e:
            raise _translate_error("create_append_blob", e) from e

        logger.debug(f"Created append blob '{handle.container_name}/{handle.blob_name}'")

    async def close(self) -> None:
        await self._client.close()


def _translate_error(operation: str, error: AzureError) -> BackendFailure:
    """Wrap an Azure SDK error into the provisioning exception hierarchy."""
    status_code = error.status_code if isinstance(error, HttpResponseError) else None
    reason = getattr(error, "error_code", None) or type(error).__name__

    if is_transient_error(error):
        return TransientBackendFailure(operation, str(reason), status_code=status_code)
    return BackendFailure(operation, str(reason), status_code=status_code)


class InMemoryStorageBackend(StorageBackend):
    """
    In-memory storage backend for tests and offline development.

    Tracks containers and explicitly created blobs; block and page blobs never
    appear here because nothing creates them until a caller writes.
    """

    def __init__(self):
        self._containers: Dict[str, Dict[str, BlobKind]] = {}
        self._lock = asyncio.Lock()
        self.container_create_calls = 0

    async def ensure_container(self, container_name: str) -> bool:
        async with self._lock:
            self.container_create_calls += 1
            if container_name in self._containers:
                return False
            self._containers[container_name] = {}
            return True

    async def create_append_blob(self, handle: ObjectHandle) -> None:
        async with self._lock:
            blobs = self._containers.get(handle.container_name)
            if blobs is None:
                raise BackendFailure("create_append_blob", "ContainerNotFound", status_code=404)
            blobs[handle.blob_name] = BlobKind.APPEND

    def container_exists(self, container_name: str) -> bool:
        return container_name in self._containers

    def get_blob_kind(self, handle: ObjectHandle) -> Optional[BlobKind]:
        return self._containers.get(handle.container_name, {}).get(handle.blob_name)

    async def reset(self) -> None:
        async with self._lock:
            self._containers.clear()
            self.container_create_calls = 0
