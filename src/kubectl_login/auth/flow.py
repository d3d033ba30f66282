"""Interactive OIDC login with manual token entry."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from rich.console import Console
from rich.markup import escape

from kubectl_login.clients.oidc import OidcProvider
from kubectl_login.core.config import CLIENT_ID, SCOPES
from kubectl_login.core.exceptions import TokenReadError, TokenVerificationError
from kubectl_login.core.models import ResolvedSession
from kubectl_login.utils.browser import open_url
from kubectl_login.utils.logging import get_logger
from kubectl_login.utils.terminal import TerminalGuard

logger = get_logger(__name__)


class LoginFlow:
    """Drive one login: discover, open the browser, read the token, verify it.

    Every step blocks and runs once. The browser is the only thing started without
    being waited on.
    """

    def __init__(
        self,
        console: Console,
        opener: Callable[[str], Any] = open_url,
        client_id: str = CLIENT_ID,
        scopes: list[str] | None = None,
    ):
        """Initialize login flow.

        Args:
            console: Console used for prompts and messages
            opener: Starts the URL opener without waiting for it
            client_id: OAuth2 client ID, also the expected token audience
            scopes: Scopes to request
        """
        self.console = console
        self.opener = opener
        self.client_id = client_id
        self.scopes = scopes or list(SCOPES)

    def login(self, session: ResolvedSession) -> str:
        """Run the login for a resolved session.

        Args:
            session: Session with cluster config and client secret

        Returns:
            Verified raw ID token (also stored on the session)

        Raises:
            DiscoveryError: If the provider cannot be discovered
            BrowserLaunchError: If the URL opener cannot be started
            TokenReadError: If no token could be read
            TokenVerificationError: If the token is rejected
        """
        provider = OidcProvider.discover(session.config.issuer)

        auth_url = provider.authorization_url(
            client_id=self.client_id,
            client_secret=session.client_secret,
            redirect_uri=session.config.redirect_url,
            scopes=self.scopes,
        )

        self.console.print("Opening browser for authentication...")
        self.console.print(f"If it does not open, visit: {escape(auth_url)}", soft_wrap=True)
        self.opener(auth_url)

        raw_token = self.read_token()

        provider.verify_id_token(raw_token, audience=self.client_id)
        session.token = raw_token

        logger.info("login_verified", cluster_name=session.cluster_name)
        return raw_token

    def read_token(self) -> str:
        """Prompt for the pasted token with echo disabled.

        Returns:
            Token with surrounding whitespace removed

        Raises:
            TokenReadError: If reading from the terminal fails
            TokenVerificationError: If nothing was entered
        """
        with TerminalGuard():
            try:
                token = self.console.input("[cyan]Enter token: [/cyan]", password=True)
            except (EOFError, OSError) as e:
                raise TokenReadError(f"Failed to read token: {e}") from e

        token = token.strip()
        if not token:
            raise TokenVerificationError("no token entered")
        return token
