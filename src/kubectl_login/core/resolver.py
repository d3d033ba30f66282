"""Alias and client secret resolution."""

import os
from collections.abc import Mapping

from kubectl_login.core.config import SECRET_ENV_VAR, ClusterConfig, LoginConfig
from kubectl_login.core.exceptions import AliasNotFoundError, MissingSecretError
from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_alias(config: LoginConfig, alias: str) -> tuple[str, ClusterConfig]:
    """Find the cluster that declares an alias.

    Matching is exact and case-sensitive. Aliases are unique across the config, so at
    most one cluster can match.

    Args:
        config: Loaded login configuration
        alias: Alias typed by the user

    Returns:
        Tuple of (cluster name, ClusterConfig)

    Raises:
        AliasNotFoundError: If no cluster declares the alias
    """
    for name, cluster in config.clusters():
        if alias in cluster.aliases:
            logger.debug("alias_resolved", alias=alias, cluster_name=name)
            return name, cluster

    logger.debug("alias_not_found", alias=alias, clusters=len(config.root))
    raise AliasNotFoundError(alias)


def resolve_secret(cluster: ClusterConfig, environ: Mapping[str, str] | None = None) -> str:
    """Pick the OIDC client secret.

    The KUBELOGIN environment variable wins over the cluster's loginSecret.

    Args:
        cluster: Selected cluster configuration
        environ: Environment to read (defaults to os.environ)

    Returns:
        Client secret

    Raises:
        MissingSecretError: If neither source has a non-empty secret
    """
    env = os.environ if environ is None else environ

    secret = env.get(SECRET_ENV_VAR, "")
    if secret:
        logger.debug("client_secret_resolved", source="environment")
        return secret

    if cluster.login_secret:
        logger.debug("client_secret_resolved", source="config")
        return cluster.login_secret

    raise MissingSecretError(
        f"{SECRET_ENV_VAR} is not set. You can also set loginSecret in your "
        f"~/.kubectl-login.json file."
    )
