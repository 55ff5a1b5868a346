"""
azblob-plugin Command-Line Interface

Provides commands to start the plugin server and inspect its configuration.

Author: azblob-plugin contributors
Date: 2026
"""

import os
import sys
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Tuple

import click
import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from azblob import __version__
from azblob.core.config_manager import ConfigManager, ConfigurationError, PluginConfig, redact_config
from azblob.core.logging_config import setup_logging
from azblob.core.middleware import CorrelationMiddleware
from azblob.services.blob.api import create_router as create_blob_router
from azblob.services.blob.backend import AzureBlobStorageBackend, StorageBackend
from azblob.services.blob.error_handlers import register_exception_handlers
from azblob.services.blob.provisioner import BlobProvisioner
from azblob.services.blob.resilience import RetryPolicy
from azblob.services.blob.sas import CredentialIssuer
from azblob.services.plugin.api import create_router as create_plugin_router
from azblob.services.plugin.manifest import ManifestService
from azblob.services.plugin.openapi import build_openapi_document


CONFIG_FILE_ENV = "AZBLOB_CONFIG_FILE"

logger = logging.getLogger(__name__)


def build_storage(config: PluginConfig) -> Tuple[StorageBackend, CredentialIssuer]:
    """
    Build the Azure storage backend and SAS issuer from configuration.

    Raises:
        ConfigurationError: If no usable connection string is configured
    """
    if not config.storage.connection_string:
        raise ConfigurationError(
            "A storage connection string is required "
            "(set AZBLOB_STORAGE_CONNECTION_STRING or storage.connection_string)"
        )

    try:
        backend = AzureBlobStorageBackend.from_connection_string(
            config.storage.connection_string,
            retry_policy=RetryPolicy.from_config(config.provisioning.retry),
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid storage connection string: {e}") from e

    issuer = CredentialIssuer.from_service_client(backend.service_client)
    return backend, issuer


def create_app(
    config: Optional[PluginConfig] = None,
    backend: Optional[StorageBackend] = None,
    issuer: Optional[CredentialIssuer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration; loaded from the environment (and the file named
            by AZBLOB_CONFIG_FILE) when omitted
        backend: Storage backend; built from the connection string when omitted
        issuer: SAS issuer; built from the connection string when omitted

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = ConfigManager().load(config_file=os.getenv(CONFIG_FILE_ENV))

    if backend is None or issuer is None:
        azure_backend, azure_issuer = build_storage(config)
        backend = backend or azure_backend
        issuer = issuer or azure_issuer

    provisioner = BlobProvisioner(
        backend=backend,
        issuer=issuer,
        container_name=config.storage.container_name,
        max_ttl_minutes=config.provisioning.max_ttl_minutes,
    )
    manifests = ManifestService(config.manifest)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Serving blobs in container '{config.storage.container_name}' "
            f"of account '{issuer.account_name}'"
        )
        yield
        await backend.close()

    app = FastAPI(
        title="azblob-plugin",
        description="Creates writeable Azure blobs and returns SAS URIs to them",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "container": config.storage.container_name,
        }

    app.include_router(create_plugin_router(manifests, config.server.route_prefix))
    app.include_router(create_blob_router(provisioner, config.server.route_prefix))

    app.add_middleware(CorrelationMiddleware)
    register_exception_handlers(app)

    return app


@click.group()
@click.version_option(version=__version__, prog_name="azblob-plugin")
@click.pass_context
def cli(ctx):
    """
    azblob-plugin - Writable Azure blob SAS issuer

    Serves an AI plugin manifest and endpoints that create block, append and
    page blobs and hand back SAS URIs to them.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (default: from configuration, 0.0.0.0)",
)
@click.option(
    "--port",
    default=None,
    help="Port to bind to (default: from configuration, 7071)",
    type=int,
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML, JSON or local.settings.json)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload on code changes (development mode)",
)
def start(host: Optional[str], port: Optional[int], config: Optional[Path], log_level: Optional[str], reload: bool):
    """
    Start the plugin server.

    Examples:
        azblob-plugin start
        azblob-plugin start --port 8080
        azblob-plugin start --config local.settings.json --log-level DEBUG
    """
    overrides: dict = {}
    if host:
        overrides.setdefault("server", {})["host"] = host
    if port:
        overrides.setdefault("server", {})["port"] = port
    if log_level:
        overrides.setdefault("logging", {})["level"] = log_level.upper()

    try:
        plugin_config = ConfigManager().load(
            config_file=str(config) if config else None,
            cli_overrides=overrides,
        )
    except (ValidationError, ValueError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    setup_logging(
        level=plugin_config.logging.level,
        format_type=plugin_config.logging.format,
        log_file=plugin_config.logging.file,
        rotation_size=plugin_config.logging.rotation_size,
        rotation_count=plugin_config.logging.rotation_count,
        module_levels=plugin_config.logging.module_levels,
    )

    server = plugin_config.server
    click.echo(f"Starting azblob-plugin v{__version__}")
    click.echo(f"Host: {server.host}:{server.port}")
    click.echo(f"Container: {plugin_config.storage.container_name}")
    click.echo()

    try:
        if reload:
            # The reloader imports the factory by name, so hand it the config file
            if config:
                os.environ[CONFIG_FILE_ENV] = str(config)
            uvicorn.run(
                "azblob.cli:create_app",
                host=server.host,
                port=server.port,
                log_level=plugin_config.logging.level.lower(),
                reload=True,
                factory=True,
            )
        else:
            app = create_app(plugin_config)
            uvicorn.run(
                app,
                host=server.host,
                port=server.port,
                log_level=plugin_config.logging.level.lower(),
            )
    except ConfigurationError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nShutting down azblob-plugin...")


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
def config(config: Optional[Path]):
    """
    Show current configuration.

    The storage account key is redacted.
    """
    try:
        plugin_config = ConfigManager().load(config_file=str(config) if config else None)
    except (ValidationError, ValueError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(redact_config(plugin_config), indent=2))


@cli.command()
@click.argument("server_url")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the document to a file instead of stdout",
)
def openapi(server_url: str, output: Optional[Path]):
    """
    Print the OpenAPI document for a deployment.

    Example:
        azblob-plugin openapi https://myplugin.azurewebsites.net:443/api -o swagger.json
    """
    document = json.dumps(build_openapi_document(server_url), indent=2)

    if output:
        output.write_text(document + "\n")
        click.echo(f"[OK] OpenAPI document written to {output}")
    else:
        click.echo(document)


@cli.command()
def version():
    """Show azblob-plugin version."""
    click.echo(f"azblob-plugin version {__version__}")


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
