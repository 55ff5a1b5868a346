"""
Blob Provisioning Models

Pydantic models for provisioning requests, blob handles, and issued SAS
credentials.

Author: azblob-plugin contributors
Date: 2026
"""

from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field


class BlobKind(str, Enum):
    """Azure blob kinds that can be provisioned."""
    BLOCK = "block"
    APPEND = "append"
    PAGE = "page"

    @property
    def requires_explicit_create(self) -> bool:
        """
        Whether the blob must exist before a credential is handed out.

        Append blobs reject Append Block calls until Put Blob has created them
        empty. Block and page blobs are materialized by the first authorized
        write made with the credential itself.
        """
        return self is BlobKind.APPEND

    @property
    def label(self) -> str:
        """Human-readable kind for log messages."""
        return self.value.capitalize()


class SasPermission(str, Enum):
    """Blob SAS permission flags granted to callers."""
    READ = "r"
    WRITE = "w"
    CREATE = "c"


GRANTED_PERMISSIONS: FrozenSet[SasPermission] = frozenset(
    {SasPermission.READ, SasPermission.WRITE, SasPermission.CREATE}
)


class ProvisionRequest(BaseModel):
    """A validated request for a writable blob."""

    kind: BlobKind
    ttl_minutes: float = Field(gt=0, description="Lifetime of the issued SAS in minutes")
    extension: Optional[str] = Field(default=None, description="Optional file extension")

    model_config = ConfigDict(frozen=True)


class ObjectHandle(BaseModel):
    """Location of a provisioned blob."""

    container_name: str
    blob_name: str

    model_config = ConfigDict(frozen=True)


class IssuedCredential(BaseModel):
    """
    A SAS URI granting read, write and create access to a single blob.

    The URI is a bearer credential and stays valid until ``expires_at``.
    """

    uri: str
    handle: ObjectHandle
    kind: BlobKind
    permissions: FrozenSet[SasPermission] = GRANTED_PERMISSIONS
    issued_at: datetime
    expires_at: datetime

    model_config = ConfigDict(frozen=True)
