"""
Blob Provisioner

Runs a provisioning request end to end: validate the TTL, name the blob,
ensure the container, create the blob when its kind requires it, and sign
the SAS.

Author: azblob-plugin contributors
Date: 2026
"""

import logging
from typing import Optional

from .backend import StorageBackend
from .models import BlobKind, IssuedCredential, ObjectHandle, ProvisionRequest
from .sas import CredentialIssuer
from .validation import generate_blob_name, parse_ttl


logger = logging.getLogger(__name__)


class BlobProvisioner:
    """
    Issues writable SAS URIs for freshly named blobs.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(
        self,
        backend: StorageBackend,
        issuer: CredentialIssuer,
        container_name: str,
        max_ttl_minutes: Optional[float] = None,
    ):
        self.backend = backend
        self.issuer = issuer
        self.container_name = container_name
        self.max_ttl_minutes = max_ttl_minutes

    def build_request(
        self,
        kind: BlobKind,
        raw_ttl: Optional[str],
        extension: Optional[str] = None,
    ) -> ProvisionRequest:
        """
        Validate raw query values into a ProvisionRequest.

        Raises:
            MissingOrInvalidTtl: If the TTL is absent or invalid
        """
        ttl = parse_ttl(raw_ttl, self.max_ttl_minutes)
        return ProvisionRequest(kind=kind, ttl_minutes=ttl, extension=extension)

    async def provision(
        self,
        kind: BlobKind,
        raw_ttl: Optional[str],
        extension: Optional[str] = None,
    ) -> IssuedCredential:
        """
        Provision a blob of ``kind`` and return its SAS credential.

        Validation happens before any storage call. Append blobs are created
        before signing, so a failure there leaves the caller without a
        credential.

        Raises:
            MissingOrInvalidTtl: If the TTL is absent or invalid
            BackendFailure: If container provisioning or blob creation fails
        """
        article = "an" if kind is BlobKind.APPEND else "a"
        logger.info(f"Beginning to create {article} {kind.value} blob")

        request = self.build_request(kind, raw_ttl, extension)
        return await self.execute(request)

    async def execute(self, request: ProvisionRequest) -> IssuedCredential:
        """Run a validated request through the storage and signing steps."""
        handle = ObjectHandle(
            container_name=self.container_name,
            blob_name=generate_blob_name(request.extension),
        )

        await self.backend.ensure_container(handle.container_name)

        if request.kind.requires_explicit_create:
            await self.backend.create_append_blob(handle)

        credential = self.issuer.issue(handle, request.ttl_minutes, request.kind)

        logger.info(
            f"{request.kind.label} blob SAS URI created",
            extra={"context": {
                "blob_name": handle.blob_name,
                "expires_at": credential.expires_at.isoformat(),
            }},
        )
        return credential
