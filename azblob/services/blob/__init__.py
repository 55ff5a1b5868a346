"""
azblob-plugin Blob Provisioning Service

Issues short-lived, writable SAS URIs for block, append, and page blobs.

Author: azblob-plugin contributors
Date: 2026
"""

from .backend import AzureBlobStorageBackend, InMemoryStorageBackend, StorageBackend
from .models import BlobKind, IssuedCredential, ObjectHandle, ProvisionRequest
from .provisioner import BlobProvisioner
from .sas import CredentialIssuer

__all__ = [
    "AzureBlobStorageBackend",
    "BlobKind",
    "BlobProvisioner",
    "CredentialIssuer",
    "InMemoryStorageBackend",
    "IssuedCredential",
    "ObjectHandle",
    "ProvisionRequest",
    "StorageBackend",
]
