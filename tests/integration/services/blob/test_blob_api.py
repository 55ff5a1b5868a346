"""
Integration tests for the blob creation endpoints.

Tests the full request path through the FastAPI application with an
in-memory storage backend and real SAS signing.

Author: azblob-plugin contributors
Date: 2026
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from azblob.cli import create_app
from azblob.core.config_manager import PluginConfig
from azblob.services.blob.backend import InMemoryStorageBackend
from azblob.services.blob.exceptions import BackendFailure, TransientBackendFailure
from azblob.services.blob.models import BlobKind, ObjectHandle
from azblob.services.blob.sas import CredentialIssuer


DEV_ACCOUNT_KEY = "Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw=="

CREATE_ROUTES = ["/api/CreateBlockBlob", "/api/CreateAppendBlob", "/api/CreatePageBlob"]


@pytest.fixture
def backend():
    return InMemoryStorageBackend()


@pytest.fixture
def issuer():
    return CredentialIssuer(
        account_name="devstoreaccount1",
        account_key=DEV_ACCOUNT_KEY,
        blob_endpoint="http://127.0.0.1:10000/devstoreaccount1",
    )


@pytest.fixture
def config():
    return PluginConfig(storage={"container_name": "plugin-blobs"})


@pytest.fixture
def client(config, backend, issuer):
    """Create a test client."""
    return TestClient(create_app(config, backend=backend, issuer=issuer))


def blob_name_of(uri: str) -> str:
    return urlparse(uri).path.rsplit("/", 1)[-1]


def query_of(uri: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(uri).query).items()}


class TestCreateBlobSuccess:
    """Test successful blob creation."""

    @pytest.mark.parametrize("path", CREATE_ROUTES)
    def test_returns_sas_uri(self, client, path):
        """Test a valid TTL yields 201 with a plain-text SAS URI."""
        response = client.get(path, params={"TTL": "30"})

        assert response.status_code == 201
        assert response.headers["content-type"] == "text/plain; charset=utf-8"

        uri = response.text
        parsed = urlparse(uri)
        assert parsed.path.startswith("/devstoreaccount1/plugin-blobs/")
        assert query_of(uri)["sp"] == "rcw"
        assert query_of(uri)["sig"]

    def test_expiry_matches_ttl(self, client):
        """Test the SAS expiry is about now + TTL minutes."""
        before = datetime.now(timezone.utc).replace(microsecond=0)
        response = client.get("/api/CreateBlockBlob", params={"TTL": "30"})
        after = datetime.now(timezone.utc)

        expiry = datetime.strptime(query_of(response.text)["se"], "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
        assert before + timedelta(minutes=30) <= expiry + timedelta(seconds=1)
        assert expiry <= after + timedelta(minutes=30, seconds=1)

    def test_block_blob_not_created_remotely(self, client, backend):
        """Test block blobs are left for the caller to create."""
        response = client.get("/api/CreateBlockBlob", params={"TTL": "5"})
        handle = ObjectHandle(container_name="plugin-blobs", blob_name=blob_name_of(response.text))

        assert backend.container_exists("plugin-blobs")
        assert backend.get_blob_kind(handle) is None

    def test_append_blob_created_remotely(self, client, backend):
        """Test append blobs exist before the response is sent."""
        response = client.get("/api/CreateAppendBlob", params={"TTL": "5", "Extension": ".log"})
        assert response.status_code == 201

        name = blob_name_of(response.text)
        assert name.endswith(".log")
        uuid.UUID(name[:-len(".log")])
        assert backend.get_blob_kind(ObjectHandle(container_name="plugin-blobs", blob_name=name)) == BlobKind.APPEND

    def test_page_blob_not_created_remotely(self, client, backend):
        """Test page blobs are left for the caller to create."""
        response = client.get("/api/CreatePageBlob", params={"TTL": "5", "Extension": "vhd"})
        handle = ObjectHandle(container_name="plugin-blobs", blob_name=blob_name_of(response.text))
        assert handle.blob_name.endswith(".vhd")
        assert backend.get_blob_kind(handle) is None

    def test_without_extension_has_no_dot(self, client):
        """Test omitting the extension gives a bare UUID name."""
        response = client.get("/api/CreateBlockBlob", params={"TTL": "5"})
        assert "." not in blob_name_of(response.text)

    def test_extension_with_two_leading_dots(self, client):
        """Test only one leading dot is stripped from the extension."""
        response = client.get("/api/CreateBlockBlob", params={"TTL": "5", "Extension": "..bak"})
        assert blob_name_of(response.text).endswith("..bak")

    def test_query_names_are_case_insensitive(self, client):
        """Test TTL and Extension are matched regardless of case."""
        response = client.get("/api/CreateBlockBlob?ttl=5&extension=txt")
        assert response.status_code == 201
        assert blob_name_of(response.text).endswith(".txt")

    def test_repeated_requests_get_distinct_names(self, client):
        """Test identical requests never reuse a blob name."""
        names = {
            blob_name_of(client.get("/api/CreateBlockBlob", params={"TTL": "5"}).text)
            for _ in range(25)
        }
        assert len(names) == 25

    def test_fractional_ttl(self, client):
        """Test fractional TTLs are accepted."""
        response = client.get("/api/CreatePageBlob", params={"TTL": "0.5"})
        assert response.status_code == 201

    def test_correlation_id_echoed(self, client):
        """Test the correlation ID header is propagated."""
        response = client.get(
            "/api/CreateBlockBlob",
            params={"TTL": "5"},
            headers={"x-correlation-id": "abc-123"},
        )
        assert response.headers["x-correlation-id"] == "abc-123"


class TestCreateBlobValidation:
    """Test TTL validation failures."""

    @pytest.mark.parametrize("path", CREATE_ROUTES)
    def test_missing_ttl(self, client, backend, path):
        """Test a missing TTL returns 400 without touching storage."""
        response = client.get(path)

        assert response.status_code == 400
        assert response.text == "TTL is required."
        assert response.headers["content-type"] == "text/plain; charset=utf-8"
        assert backend.container_create_calls == 0

    @pytest.mark.parametrize("path", CREATE_ROUTES)
    @pytest.mark.parametrize("ttl", ["", "abc", "0", "-10", "NaN", "1_0", "\u0661\u0662"])
    def test_invalid_ttl(self, client, path, ttl):
        """Test non-numeric and non-positive TTLs return 400."""
        response = client.get(path, params={"TTL": ttl})
        assert response.status_code == 400
        assert response.text == "TTL is required."

    def test_configured_max_ttl(self, backend, issuer):
        """Test the operator-configured ceiling is enforced."""
        config = PluginConfig(provisioning={"max_ttl_minutes": 60})
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        assert client.get("/api/CreateBlockBlob", params={"TTL": "60"}).status_code == 201
        assert client.get("/api/CreateBlockBlob", params={"TTL": "61"}).status_code == 400

    def test_post_not_allowed(self, client):
        """Test only GET is routed."""
        assert client.post("/api/CreateBlockBlob", params={"TTL": "5"}).status_code == 405


class TestCreateBlobBackendFailure:
    """Test storage failures."""

    def test_backend_failure_returns_502(self, config, issuer):
        """Test a permanent storage failure maps to 502 with a JSON body."""
        backend = AsyncMock()
        backend.ensure_container.side_effect = BackendFailure("ensure_container", "AuthorizationFailure", 403)
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        response = client.get("/api/CreateBlockBlob", params={"TTL": "5"})

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "BackendFailure"
        assert error["details"]["operation"] == "ensure_container"
        assert "sig=" not in response.text

    def test_transient_failure_returns_503(self, config, issuer):
        """Test exhausted retries map to 503."""
        backend = AsyncMock()
        backend.create_append_blob.side_effect = TransientBackendFailure("create_append_blob", "ServerBusy", 503)
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        response = client.get("/api/CreateAppendBlob", params={"TTL": "5"})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "BackendUnavailable"

    def test_validation_precedes_backend(self, config, issuer):
        """Test a missing TTL is reported even when storage is down."""
        backend = AsyncMock()
        backend.ensure_container.side_effect = BackendFailure("ensure_container", "down")
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        response = client.get("/api/CreateAppendBlob")

        assert response.status_code == 400
        backend.ensure_container.assert_not_called()


class TestRoutePrefix:
    """Test the configurable route prefix."""

    def test_empty_prefix_mounts_at_root(self, backend, issuer):
        """Test an empty prefix serves the creation routes at the root."""
        config = PluginConfig(server={"route_prefix": ""})
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        assert client.get("/CreateBlockBlob", params={"TTL": "5"}).status_code == 201
        assert client.get("/api/CreateBlockBlob", params={"TTL": "5"}).status_code == 404

    def test_custom_prefix(self, backend, issuer):
        """Test a custom prefix is honoured."""
        config = PluginConfig(server={"route_prefix": "/v1/"})
        client = TestClient(create_app(config, backend=backend, issuer=issuer))

        assert client.get("/v1/CreatePageBlob", params={"TTL": "5"}).status_code == 201
