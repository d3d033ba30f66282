"""Core data models for kubectl-login."""

from __future__ import annotations

from dataclasses import dataclass

from kubectl_login.core.config import ClusterConfig


@dataclass
class ResolvedSession:
    """State of one login, built up as the pipeline runs. Never persisted."""

    cluster_name: str
    config: ClusterConfig
    client_secret: str
    token: str | None = None

    @property
    def kubectl_cluster(self) -> str:
        """Cluster name passed to kubectl, falling back to the config key."""
        return self.config.cluster or self.cluster_name

    def __repr__(self) -> str:
        return (
            f"ResolvedSession(cluster_name={self.cluster_name!r}, "
            f"kubectl_cluster={self.kubectl_cluster!r}, verified={self.token is not None})"
        )
