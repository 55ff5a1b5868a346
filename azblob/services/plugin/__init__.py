"""
azblob-plugin discovery service

Serves the AI plugin manifest and the OpenAPI document.
"""

from .manifest import ManifestService
from .models import PluginManifest
from .openapi import build_openapi_document

__all__ = ["ManifestService", "PluginManifest", "build_openapi_document"]
