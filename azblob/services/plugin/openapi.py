"""
OpenAPI document for the blob creation API.

The document is maintained here rather than generated from the route
handlers; plugin hosts read it from ``/swagger.json``.
"""

from typing import Any, Dict

from azblob.services.blob.routes import BLOB_ROUTES, EXTENSION_DESCRIPTION, BlobRoute


OPENAPI_VERSION = "3.0.1"

API_TITLE = "Azure Blob Storage Plugin"
API_VERSION = "1.0.0"
API_DESCRIPTION = "This plugin is capable of creating blobs that can be written to and read from."


def _operation(route: BlobRoute) -> Dict[str, Any]:
    return {
        "tags": [route.operation_id],
        "operationId": route.operation_id,
        "description": route.description,
        "parameters": [
            {
                "name": "TTL",
                "in": "query",
                "description": route.ttl_description,
                "required": True,
                "schema": {"type": "string"},
            },
            {
                "name": "Extension",
                "in": "query",
                "description": EXTENSION_DESCRIPTION,
                "schema": {"type": "string"},
            },
        ],
        "responses": {
            "201": {
                "description": route.success_description,
                "content": {"text/plain": {"schema": {"type": "string"}}},
            },
            "400": {
                "description": "Returns the error of the input.",
                "content": {"text/plain": {"schema": {"type": "string"}}},
            },
        },
    }


def build_openapi_document(server_url: str) -> Dict[str, Any]:
    """
    Build the OpenAPI document.

    Args:
        server_url: Base URL the creation routes are served under,
            e.g. ``https://host:443/api``

    Returns:
        OpenAPI 3.0 document as a JSON-serializable dict
    """
    paths: Dict[str, Any] = {}
    for route in BLOB_ROUTES:
        paths.setdefault(route.path, {})[route.method.lower()] = _operation(route)

    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": API_TITLE,
            "description": API_DESCRIPTION,
            "version": API_VERSION,
        },
        "servers": [{"url": server_url.rstrip("/")}],
        "paths": paths,
    }
