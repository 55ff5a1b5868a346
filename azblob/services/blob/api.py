"""
Blob Provisioning API Endpoints

FastAPI endpoints that create blobs and return writable SAS URIs.

Author: azblob-plugin contributors
Date: 2026
"""

from typing import Callable, Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse

from .models import BlobKind
from .provisioner import BlobProvisioner
from .routes import BLOB_ROUTES


def get_query_value(request: Request, name: str) -> Optional[str]:
    """
    Return the first value of a query parameter, matching its name case-insensitively.

    Args:
        request: Incoming request
        name: Parameter name, e.g. ``TTL``

    Returns:
        The first matching value, or None when the parameter is absent
    """
    wanted = name.lower()
    for key, value in request.query_params.multi_items():
        if key.lower() == wanted:
            return value
    return None


def _make_endpoint(provisioner: BlobProvisioner, kind: BlobKind) -> Callable:
    async def endpoint(request: Request) -> PlainTextResponse:
        credential = await provisioner.provision(
            kind,
            raw_ttl=get_query_value(request, "TTL"),
            extension=get_query_value(request, "Extension"),
        )
        return PlainTextResponse(credential.uri, status_code=status.HTTP_201_CREATED)

    endpoint.__name__ = f"create_{kind.value}_blob"
    return endpoint


def create_router(provisioner: BlobProvisioner, prefix: str = "api") -> APIRouter:
    """
    Create FastAPI router for the blob creation endpoints.

    Args:
        provisioner: Provisioner shared by every request
        prefix: Route prefix without slashes; empty mounts at the root

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix=f"/{prefix}" if prefix else "")

    for route in BLOB_ROUTES:
        router.add_api_route(
            route.path,
            _make_endpoint(provisioner, route.kind),
            methods=[route.method],
            status_code=status.HTTP_201_CREATED,
            response_class=PlainTextResponse,
            name=route.operation_id,
            description=route.description,
        )

    return router
