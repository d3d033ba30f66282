"""Kubectl wrapper for installing the login credential and context."""

import subprocess

from kubectl_login.core.exceptions import ContextInstallError, KubectlError
from kubectl_login.utils.logging import get_logger

logger = get_logger(__name__)

CREDENTIAL_NAME = "kubectl-login"
CONTEXT_NAME = "kubectl-login-context"
DEFAULT_NAMESPACE = "default"

_TOKEN_FLAG = "--token="


def _redact(cmd: list[str]) -> str:
    return " ".join(
        f"{_TOKEN_FLAG}[REDACTED]" if arg.startswith(_TOKEN_FLAG) else arg for arg in cmd
    )


class KubectlWrapper:
    """Wrapper for the kubectl command-line tool.

    Each call blocks until kubectl exits. All three config mutations are
    idempotent, so a failed install can simply be run again.
    """

    def __init__(
        self,
        kubeconfig_path: str | None = None,
        credential_name: str = CREDENTIAL_NAME,
        context_name: str = CONTEXT_NAME,
        namespace: str = DEFAULT_NAMESPACE,
    ):
        """Initialize kubectl wrapper.

        Args:
            kubeconfig_path: Path to kubeconfig file (optional)
            credential_name: Name of the user entry holding the token
            context_name: Name of the context to create and switch to
            namespace: Namespace for the context
        """
        self.kubeconfig_path = kubeconfig_path
        self.credential_name = credential_name
        self.context_name = context_name
        self.namespace = namespace

        logger.debug("kubectl_wrapper_initialized", context=context_name)

    def _run_command(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run kubectl command.

        Args:
            args: Command arguments

        Returns:
            CompletedProcess instance

        Raises:
            KubectlError: If command fails
        """
        cmd = ["kubectl"] + args

        if self.kubeconfig_path:
            cmd.extend(["--kubeconfig", self.kubeconfig_path])

        logger.debug("running_kubectl_command", command=_redact(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
            )

            logger.debug(
                "kubectl_command_completed",
                returncode=result.returncode,
            )

            return result

        except subprocess.CalledProcessError as e:
            logger.error(
                "kubectl_command_failed",
                command=_redact(cmd),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            detail = (e.stderr or e.stdout or "").strip() or f"exit status {e.returncode}"
            raise KubectlError(f"kubectl {args[0]} {args[1]} failed: {detail}") from e
        except FileNotFoundError as e:
            logger.error("kubectl_not_found")
            raise KubectlError("kubectl command not found. Please install kubectl.") from e

    def set_credentials(self, token: str) -> None:
        """Store the token as a bearer token user entry.

        Args:
            token: Verified ID token
        """
        self._run_command(
            ["config", "set-credentials", self.credential_name, f"{_TOKEN_FLAG}{token}"]
        )
        logger.info("kubectl_credentials_set", credential=self.credential_name)

    def set_context(self, cluster: str) -> None:
        """Create or update the context binding the credential to a cluster.

        Args:
            cluster: Cluster name known to kubectl
        """
        self._run_command(
            [
                "config",
                "set-context",
                self.context_name,
                f"--user={self.credential_name}",
                f"--cluster={cluster}",
                f"--namespace={self.namespace}",
            ]
        )
        logger.info("kubectl_context_set", context=self.context_name, cluster=cluster)

    def use_context(self) -> None:
        """Switch kubectl's current context to the login context."""
        self._run_command(["config", "use-context", self.context_name])
        logger.info("kubectl_context_switched", context=self.context_name)

    def install(self, token: str, cluster: str) -> None:
        """Install the credential, bind it to the cluster and switch to it.

        Steps run in order and stop at the first failure. Nothing is rolled back;
        re-running the install is safe.

        Args:
            token: Verified ID token
            cluster: Cluster name known to kubectl

        Raises:
            ContextInstallError: If a step fails, naming the steps already applied
        """
        steps = [
            ("set-credentials", lambda: self.set_credentials(token)),
            ("set-context", lambda: self.set_context(cluster)),
            ("use-context", self.use_context),
        ]

        applied: list[str] = []
        for name, step in steps:
            try:
                step()
            except KubectlError as e:
                logger.error(
                    "kubectl_install_incomplete",
                    failed_step=name,
                    applied_steps=applied,
                )
                done = ", ".join(applied) if applied else "none"
                raise ContextInstallError(
                    f"{e} (steps applied: {done}; re-running the login is safe)",
                    applied_steps=applied,
                    failed_step=name,
                ) from e
            applied.append(name)

        logger.info("kubectl_context_installed", context=self.context_name, cluster=cluster)
