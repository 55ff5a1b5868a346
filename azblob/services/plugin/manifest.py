"""
Manifest service

Serves the static plugin manifest; only ``api.url`` depends on the request.
"""

from typing import Optional, Tuple

from starlette.datastructures import URL

from azblob.core.config_manager import ManifestConfig

from .models import PluginApi, PluginManifest


DEFAULT_PORTS = {"http": 80, "https": 443}

SCHEMA_PATH = "/swagger.json"


def request_origin(url: URL) -> Tuple[str, str, int]:
    """
    Split a request URL into scheme, host and port.

    The port is always present: when the URL omits it, the scheme's default
    port is used.
    """
    scheme = url.scheme
    port = url.port or DEFAULT_PORTS.get(scheme, 80)
    host = url.hostname or "localhost"
    if ":" in host:
        host = f"[{host}]"
    return scheme, host, port


class ManifestService:
    """Builds the AI plugin manifest for a given request origin."""

    def __init__(self, config: Optional[ManifestConfig] = None):
        self.config = config or ManifestConfig()

    def build(self, scheme: str, host: str, port: int) -> PluginManifest:
        return PluginManifest(
            name_for_model=self.config.name_for_model,
            name_for_human=self.config.name_for_human,
            description_for_model=self.config.description_for_model,
            description_for_human=self.config.description_for_human,
            api=PluginApi(url=f"{scheme}://{host}:{port}{SCHEMA_PATH}"),
            contact_email=self.config.contact_email,
            logo_url=self.config.logo_url,
            legal_info_url=self.config.legal_info_url,
        )

    def for_url(self, url: URL) -> PluginManifest:
        return self.build(*request_origin(url))
