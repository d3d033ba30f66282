"""Pytest configuration and shared fixtures."""

import json
import time
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests
import structlog
from authlib.jose import JsonWebKey, jwt

from kubectl_login.core.config import ClusterConfig, LoginConfig

ISSUER = "https://idp.example.com"
JWKS_URI = f"{ISSUER}/keys"
CLIENT_ID = "kubectl-login"
KEY_ID = "test-key"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop any logging configuration a test installed."""
    yield
    structlog.reset_defaults()


# ==============================================================================
# Config Fixtures
# ==============================================================================


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """Raw config file content with one production cluster."""
    return {
        "prod": {
            "issuer": ISSUER,
            "redirectUrl": "https://localhost/cb",
            "loginSecret": "s3cret",
            "cluster": "prod",
            "aliases": ["p", "production"],
        }
    }


@pytest.fixture
def multi_cluster_data(sample_config_data: dict[str, Any]) -> dict[str, Any]:
    """Raw config file content with several clusters."""
    data = dict(sample_config_data)
    data["staging"] = {
        "issuer": "https://idp.staging.example.com",
        "redirectUrl": "https://localhost/cb",
        "cluster": "eks-staging-us-east-1",
        "aliases": ["s", "stg"],
    }
    data["dev"] = {
        "issuer": "https://idp.dev.example.com",
        "aliases": ["d"],
    }
    return data


@pytest.fixture
def config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """Write the sample config to a temporary file."""
    path = tmp_path / ".kubectl-login.json"
    path.write_text(json.dumps(sample_config_data))
    return path


@pytest.fixture
def sample_login_config(sample_config_data: dict[str, Any]) -> LoginConfig:
    """Parsed sample config."""
    return LoginConfig.model_validate(sample_config_data)


@pytest.fixture
def sample_cluster_config(sample_login_config: LoginConfig) -> ClusterConfig:
    """The prod cluster record."""
    return sample_login_config.root["prod"]


# ==============================================================================
# OIDC Fixtures
# ==============================================================================


@pytest.fixture(scope="session")
def signing_key():
    """RSA key the identity provider signs tokens with."""
    return JsonWebKey.generate_key("RSA", 2048, options={"kid": KEY_ID}, is_private=True)


@pytest.fixture(scope="session")
def foreign_key():
    """RSA key unknown to the identity provider, same key ID."""
    return JsonWebKey.generate_key("RSA", 2048, options={"kid": KEY_ID}, is_private=True)


@pytest.fixture
def jwks(signing_key) -> dict[str, Any]:
    """Public key set published by the identity provider."""
    return {"keys": [{**signing_key.as_dict(is_private=False), "kid": KEY_ID}]}


@pytest.fixture
def discovery_metadata() -> dict[str, Any]:
    """Discovery document published by the identity provider."""
    return {
        "issuer": ISSUER,
        "authorization_endpoint": f"{ISSUER}/auth",
        "token_endpoint": f"{ISSUER}/token",
        "jwks_uri": JWKS_URI,
        "id_token_signing_alg_values_supported": ["RS256"],
    }


@pytest.fixture
def make_id_token(signing_key):
    """Build a signed ID token, overriding claims as needed."""

    def _make(key=None, **overrides: Any) -> str:
        now = int(time.time())
        claims = {
            "iss": ISSUER,
            "aud": CLIENT_ID,
            "sub": "jane@example.com",
            "iat": now,
            "exp": now + 600,
        }
        claims.update(overrides)
        header = {"alg": "RS256", "kid": KEY_ID}
        return jwt.encode(header, claims, key or signing_key).decode("utf-8")

    return _make


@pytest.fixture
def oidc_server(discovery_metadata: dict[str, Any], jwks: dict[str, Any]):
    """Serve discovery and key set responses in place of the identity provider."""

    def _get(url: str, timeout: float | None = None) -> MagicMock:
        response = MagicMock()
        response.raise_for_status.return_value = None
        if url == f"{ISSUER}/.well-known/openid-configuration":
            response.json.return_value = discovery_metadata
        elif url == JWKS_URI:
            response.json.return_value = jwks
        else:
            response.raise_for_status.side_effect = requests.HTTPError(f"404 for {url}")
        return response

    with patch("kubectl_login.clients.oidc.requests.get", side_effect=_get) as mock_get:
        yield mock_get


# ==============================================================================
# Subprocess Fixtures
# ==============================================================================


@pytest.fixture
def mock_kubectl():
    """Mock subprocess.run so kubectl always succeeds."""
    result = MagicMock()
    result.returncode = 0
    result.stdout = ""
    result.stderr = ""
    with patch("subprocess.run", return_value=result) as mock_run:
        yield mock_run


@pytest.fixture
def mock_popen():
    """Mock subprocess.Popen so no browser is started."""
    with patch("subprocess.Popen") as popen:
        popen.return_value.pid = 4242
        yield popen


# ==============================================================================
# Pytest Markers
# ==============================================================================


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
