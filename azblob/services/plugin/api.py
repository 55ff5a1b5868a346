"""
Plugin discovery endpoints

Serves the AI plugin manifest and the OpenAPI document it points to.
"""

from typing import Any, Dict

from fastapi import APIRouter, Request

from .manifest import SCHEMA_PATH, ManifestService, request_origin
from .models import PluginManifest
from .openapi import build_openapi_document


def create_router(manifests: ManifestService, route_prefix: str = "api") -> APIRouter:
    """
    Create FastAPI router for the discovery endpoints.

    Args:
        manifests: Manifest service
        route_prefix: Prefix of the blob creation routes, advertised in the
            OpenAPI document's server URL

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.get("/.well-known/ai-plugin.json", response_model=PluginManifest)
    async def well_known_ai_plugin(request: Request) -> PluginManifest:
        """Return the plugin manifest with ``api.url`` pointing back at this host."""
        return manifests.for_url(request.url)

    @router.get(SCHEMA_PATH)
    async def openapi_document(request: Request) -> Dict[str, Any]:
        """Return the OpenAPI document for the blob creation routes."""
        scheme, host, port = request_origin(request.url)
        server_url = f"{scheme}://{host}:{port}"
        if route_prefix:
            server_url = f"{server_url}/{route_prefix}"
        return build_openapi_document(server_url)

    return router
