"""Custom exceptions for kubectl-login.

Every failure raised by a component derives from KubectlLoginError. The CLI is the
only place that turns one into a process exit, using the exception's exit_code.
"""


class KubectlLoginError(Exception):
    """Base exception for all kubectl-login errors."""

    exit_code = 1


class ConfigurationError(KubectlLoginError):
    """Configuration file missing, unreadable or invalid."""


class AliasNotFoundError(KubectlLoginError):
    """No cluster declares the requested alias."""

    def __init__(self, alias: str):
        """Initialize alias error.

        Args:
            alias: Alias that could not be resolved
        """
        super().__init__(f'Alias "{alias}" not found')
        self.alias = alias


class MissingSecretError(KubectlLoginError):
    """No OIDC client secret in the environment or the cluster config."""


class OidcError(KubectlLoginError):
    """OIDC provider operation failed."""


class DiscoveryError(OidcError):
    """Provider metadata discovery failed."""


class TokenVerificationError(OidcError):
    """Pasted token was rejected by the verifier.

    This is the one soft failure: the user is told and the process exits normally.
    """

    exit_code = 0


class BrowserLaunchError(KubectlLoginError):
    """URL opener could not be started."""


class TokenReadError(KubectlLoginError):
    """Token could not be read from the terminal."""


class KubectlError(KubectlLoginError):
    """kubectl command failed."""


class ContextInstallError(KubectlError):
    """Installing the credential and context stopped part way.

    Attributes:
        applied_steps: Steps that completed before the failure
        failed_step: Step that failed
    """

    def __init__(self, message: str, applied_steps: list[str], failed_step: str):
        """Initialize context install error.

        Args:
            message: Error message
            applied_steps: Names of the steps already applied
            failed_step: Name of the failing step
        """
        super().__init__(message)
        self.applied_steps = applied_steps
        self.failed_step = failed_step
