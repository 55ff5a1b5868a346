"""
Route table for the blob creation operations.

Shared by the HTTP router and the OpenAPI document so both describe the
same operations.
"""

from dataclasses import dataclass
from typing import Tuple

from .models import BlobKind


@dataclass(frozen=True)
class BlobRoute:
    """One blob creation operation exposed over HTTP."""

    operation_id: str
    kind: BlobKind
    description: str
    ttl_description: str
    success_description: str
    method: str = "GET"

    @property
    def path(self) -> str:
        return f"/{self.operation_id}"


BLOB_ROUTES: Tuple[BlobRoute, ...] = (
    BlobRoute(
        operation_id="CreateBlockBlob",
        kind=BlobKind.BLOCK,
        description="Creates a block blob with a random file name.",
        ttl_description="The amount of time in minutes that the blob should be accessible via a Shared Access Signature",
        success_description="Confirms that a block blob was created and returns a writeable URI to it.",
    ),
    BlobRoute(
        operation_id="CreateAppendBlob",
        kind=BlobKind.APPEND,
        description="Creates an appendable blob with a random file name.",
        ttl_description="The amount of time in minutes that the append blob should be accessible via a Shared Access Signature",
        success_description="Confirms that an append blob was created and returns a writeable URI to it.",
    ),
    BlobRoute(
        operation_id="CreatePageBlob",
        kind=BlobKind.PAGE,
        description="Creates a page blob with a random file name.",
        ttl_description="The amount of time in minutes that the page blob should be accessible via a Shared Access Signature",
        success_description="Confirms that a page blob was created and returns a writeable URI to it.",
    ),
)

EXTENSION_DESCRIPTION = "An optional file extension for the created blob filename"
