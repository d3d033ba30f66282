"""Configuration management for kubectl-login."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError, model_validator

from kubectl_login.core.exceptions import ConfigurationError
from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILE_NAME = ".kubectl-login.json"
CONFIG_ENV_VAR = "KUBECTL_LOGIN_CONFIG"
SECRET_ENV_VAR = "KUBELOGIN"

CLIENT_ID = "kubectl-login"
SCOPES = ["openid", "profile", "email", "groups"]


def default_config_path() -> Path:
    """Return the per-user config file path."""
    return Path.home() / CONFIG_FILE_NAME


class ClusterConfig(BaseModel):
    """Login configuration for one cluster."""

    model_config = ConfigDict(populate_by_name=True)

    issuer: str = Field(..., description="OIDC issuer URL")
    redirect_url: str = Field("", alias="redirectUrl", description="OAuth2 redirect URL")
    login_secret: str | None = Field(None, alias="loginSecret", description="OIDC client secret")
    cluster: str = Field("", description="Cluster name known to kubectl")
    aliases: list[str] = Field(default_factory=list, description="Shortcuts for this cluster")


class LoginConfig(RootModel[dict[str, ClusterConfig]]):
    """All clusters from the config file, keyed by cluster name."""

    @model_validator(mode="after")
    def check_unique_aliases(self) -> "LoginConfig":
        """Reject an alias declared by more than one cluster."""
        owners: dict[str, str] = {}
        for name, cluster in sorted(self.root.items()):
            for alias in cluster.aliases:
                owner = owners.setdefault(alias, name)
                if owner != name:
                    raise ValueError(
                        f'alias "{alias}" is declared by both "{owner}" and "{name}"'
                    )
        return self

    @classmethod
    def from_file(cls, path: str | Path) -> "LoginConfig":
        """Load configuration from a JSON file.

        Args:
            path: Path to configuration file

        Returns:
            LoginConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = json.load(f)
        except (OSError, ValueError) as e:  # ValueError covers JSONDecodeError and bad encodings
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        logger.debug("config_loaded", path=str(config_path), clusters=len(config.root))
        return config

    def clusters(self) -> list[tuple[str, ClusterConfig]]:
        """Get clusters sorted by name.

        Returns:
            List of (cluster name, ClusterConfig) pairs
        """
        return sorted(self.root.items())
