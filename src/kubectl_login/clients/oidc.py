"""OIDC provider discovery, authorization URL and ID token verification."""

from typing import Any

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.jose import JsonWebKey, JsonWebToken
from authlib.jose.errors import JoseError

from kubectl_login.core.exceptions import DiscoveryError, TokenVerificationError
from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)

DISCOVERY_PATH = "/.well-known/openid-configuration"
HTTP_TIMEOUT_SECONDS = 10

# Asymmetric algorithms only: "none" and HMAC never verify an ID token here
SUPPORTED_SIGNING_ALGORITHMS = (
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "ES256",
    "ES384",
    "ES512",
)
DEFAULT_SIGNING_ALGORITHM = "RS256"


class OidcProvider:
    """OIDC provider resolved from its discovery document.

    Use OidcProvider.discover(issuer) rather than building one by hand.
    """

    def __init__(self, issuer: str, metadata: dict[str, Any]):
        """Initialize provider.

        Args:
            issuer: Issuer URL the provider was discovered from
            metadata: Discovery document
        """
        self.issuer = issuer
        self.metadata = metadata

    @classmethod
    def discover(cls, issuer: str) -> "OidcProvider":
        """Fetch the provider's discovery metadata.

        Args:
            issuer: OIDC issuer URL

        Returns:
            OidcProvider for the issuer

        Raises:
            DiscoveryError: If the request fails or the document is not usable
        """
        discovery_url = issuer.rstrip("/") + DISCOVERY_PATH
        logger.debug("oidc_discovery_started", url=discovery_url)

        try:
            response = requests.get(discovery_url, timeout=HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            metadata = response.json()
        except requests.RequestException as e:
            logger.error("oidc_discovery_failed", url=discovery_url, error=str(e))
            raise DiscoveryError(f"Failed to discover OIDC provider at {issuer}: {e}") from e
        except ValueError as e:
            logger.error("oidc_discovery_invalid_json", url=discovery_url)
            raise DiscoveryError(f"Invalid discovery document from {issuer}") from e

        if not isinstance(metadata, dict):
            raise DiscoveryError(f"Invalid discovery document from {issuer}")

        for field in ("authorization_endpoint", "jwks_uri"):
            if not metadata.get(field):
                raise DiscoveryError(f"Discovery document from {issuer} has no {field}")

        # The document must describe the issuer we asked for
        advertised = str(metadata.get("issuer", ""))
        if advertised.rstrip("/") != issuer.rstrip("/"):
            raise DiscoveryError(
                f"Issuer mismatch: expected {issuer}, provider reports {advertised or 'nothing'}"
            )

        logger.info(
            "oidc_discovery_completed",
            issuer=issuer,
            authorization_endpoint=metadata["authorization_endpoint"],
        )
        return cls(issuer, metadata)

    @property
    def authorization_endpoint(self) -> str:
        return self.metadata["authorization_endpoint"]

    @property
    def jwks_uri(self) -> str:
        return self.metadata["jwks_uri"]

    @property
    def signing_algorithms(self) -> list[str]:
        """Algorithms accepted for ID token signatures.

        The provider's advertised list is narrowed to the supported asymmetric
        algorithms. RS256 is used when nothing usable is advertised.
        """
        advertised = self.metadata.get("id_token_signing_alg_values_supported") or []
        if not isinstance(advertised, list):
            advertised = []

        accepted = [alg for alg in advertised if alg in SUPPORTED_SIGNING_ALGORITHMS]
        return accepted or [DEFAULT_SIGNING_ALGORITHM]

    def authorization_url(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str],
        state: str | None = None,
    ) -> str:
        """Build the browser URL that starts the authorization code flow.

        Args:
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret
            redirect_uri: Where the provider sends the browser after login
            scopes: Scopes to request
            state: Anti-forgery state (random when omitted)

        Returns:
            Authorization URL
        """
        client = OAuth2Session(
            client_id=client_id,
            client_secret=client_secret,
            scope=" ".join(scopes),
            redirect_uri=redirect_uri or None,
        )
        url, _ = client.create_authorization_url(self.authorization_endpoint, state=state)

        logger.debug("authorization_url_created", client_id=client_id, scopes=scopes)
        return url

    def _fetch_key_set(self) -> Any:
        try:
            response = requests.get(self.jwks_uri, timeout=HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            return JsonWebKey.import_key_set(response.json())
        except requests.RequestException as e:
            raise TokenVerificationError(f"Failed to fetch signing keys: {e}") from e
        except (ValueError, JoseError) as e:
            raise TokenVerificationError(f"Invalid signing keys from {self.jwks_uri}") from e

    def verify_id_token(self, raw_token: str, audience: str) -> dict[str, Any]:
        """Verify an ID token's signature, issuer, audience and expiry.

        Args:
            raw_token: Compact JWT
            audience: Expected audience (the client ID)

        Returns:
            Verified claims

        Raises:
            TokenVerificationError: If the token is not valid for this provider
        """
        key_set = self._fetch_key_set()

        claims_options = {
            "iss": {"essential": True, "value": self.metadata.get("issuer", self.issuer)},
            "aud": {"essential": True, "value": audience},
            "exp": {"essential": True},
        }

        try:
            claims = JsonWebToken(self.signing_algorithms).decode(
                raw_token, key_set, claims_options=claims_options
            )
            claims.validate()
        except (JoseError, ValueError) as e:
            logger.warning("id_token_rejected", error=str(e))
            raise TokenVerificationError(str(e)) from e
        except (KeyError, TypeError) as e:
            # authlib raises plain KeyError/TypeError for some malformed headers
            logger.warning("id_token_rejected", error_type=type(e).__name__)
            raise TokenVerificationError(f"malformed token header ({type(e).__name__})") from e

        logger.info("id_token_verified", subject=claims.get("sub"))
        return dict(claims)
