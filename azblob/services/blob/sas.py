"""
SAS credential issuance.

Signing happens locally with the storage account key; no network round trip
is involved once the blob's location is known.

Author: azblob-plugin contributors
Date: 2026
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from urllib.parse import quote

from azure.storage.blob import BlobSasPermissions, generate_blob_sas
from azure.storage.blob.aio import BlobServiceClient

from azblob.core.config_manager import ConfigurationError

from .models import GRANTED_PERMISSIONS, BlobKind, IssuedCredential, ObjectHandle


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _expiry(issued_at: datetime, ttl_minutes: float) -> datetime:
    """
    Expiry for a token issued at ``issued_at``.

    SAS expiry has whole-second resolution, so the instant is rounded up to
    the next second, and it always falls at least one second after issue.
    """
    expires_at = issued_at + timedelta(minutes=ttl_minutes)
    if expires_at.microsecond:
        expires_at = expires_at.replace(microsecond=0) + timedelta(seconds=1)
    return max(expires_at, issued_at.replace(microsecond=0) + timedelta(seconds=1))


class CredentialIssuer:
    """
    Computes blob-scoped SAS URIs granting read, write and create access.

    The token carries no start time, so it is valid from the moment it is
    issued until ``expires_at``, the requested lifetime rounded up to a whole
    second.
    """

    def __init__(
        self,
        account_name: str,
        account_key: str,
        blob_endpoint: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.account_name = account_name
        self._account_key = account_key
        self.blob_endpoint = blob_endpoint.rstrip("/")
        self._clock = clock or _utcnow

    @classmethod
    def from_service_client(cls, client: BlobServiceClient) -> "CredentialIssuer":
        """
        Build an issuer from the shared key held by a service client.

        Raises:
            ConfigurationError: If the client was not built from an account key
        """
        credential = client.credential
        account_key = getattr(credential, "account_key", None)
        if not account_key:
            raise ConfigurationError(
                "The storage connection string must include an AccountKey to sign SAS tokens"
            )
        return cls(
            account_name=client.account_name,
            account_key=account_key,
            blob_endpoint=client.primary_endpoint,
        )

    def blob_url(self, handle: ObjectHandle) -> str:
        return f"{self.blob_endpoint}/{quote(handle.container_name)}/{quote(handle.blob_name, safe='~/')}"

    def issue(self, handle: ObjectHandle, ttl_minutes: float, kind: BlobKind) -> IssuedCredential:
        """
        Sign a SAS for ``handle`` expiring ``ttl_minutes`` from now.

        Args:
            handle: Location of the blob
            ttl_minutes: Positive lifetime in minutes
            kind: Blob kind, recorded on the credential

        Returns:
            IssuedCredential whose URI is usable without further interaction
        """
        issued_at = self._clock()
        expires_at = _expiry(issued_at, ttl_minutes)

        token = generate_blob_sas(
            account_name=self.account_name,
            container_name=handle.container_name,
            blob_name=handle.blob_name,
            account_key=self._account_key,
            permission=BlobSasPermissions(read=True, write=True, create=True),
            expiry=expires_at,
        )

        return IssuedCredential(
            uri=f"{self.blob_url(handle)}?{token}",
            handle=handle,
            kind=kind,
            permissions=GRANTED_PERMISSIONS,
            issued_at=issued_at,
            expires_at=expires_at,
        )
