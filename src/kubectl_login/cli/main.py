"""Main CLI entry point for kubectl-login."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kubectl_login import __version__
from kubectl_login.auth.flow import LoginFlow
from kubectl_login.clients.kubectl import KubectlWrapper
from kubectl_login.core.config import CONFIG_ENV_VAR, LoginConfig, default_config_path
from kubectl_login.core.exceptions import AliasNotFoundError, KubectlLoginError
from kubectl_login.core.models import ResolvedSession
from kubectl_login.core.resolver import resolve_alias, resolve_secret
from kubectl_login.utils.logging import get_logger, log_error, setup_logging

console = Console(soft_wrap=True)
logger = get_logger(__name__)

CONFIG_HINT = "cat $HOME/.kubectl-login.json"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _print_clusters(config: LoginConfig) -> None:
    """Print configured clusters as a table."""
    clusters = config.clusters()
    if not clusters:
        console.print("[yellow]No clusters configured[/yellow]")
        return

    table = Table(title="Configured Clusters")
    table.add_column("Name", style="cyan")
    table.add_column("Cluster")
    table.add_column("Issuer")
    table.add_column("Aliases", style="bold")

    for name, cluster in clusters:
        table.add_row(name, cluster.cluster or name, cluster.issuer, ", ".join(cluster.aliases))

    console.print(table)


def _resolve_session(config: LoginConfig, alias: str) -> ResolvedSession:
    cluster_name, cluster = resolve_alias(config, alias)
    return ResolvedSession(
        cluster_name=cluster_name,
        config=cluster,
        client_secret=resolve_secret(cluster),
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.argument("alias", required=False)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar=CONFIG_ENV_VAR,
    default=None,
    help="Path to configuration file (default: ~/.kubectl-login.json)",
)
@click.option(
    "--kubeconfig",
    "kubeconfig_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="kubeconfig file to update (default: kubectl's own choice)",
)
@click.option("--list", "list_only", is_flag=True, help="List configured clusters and aliases")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="KUBECTL_LOGIN_LOG_LEVEL",
    default="WARNING",
    help="Log level for diagnostics on stderr",
)
@click.option(
    "--log-format", type=click.Choice(["console", "json"]), default="console", help="Log format"
)
@click.pass_context
def cli(
    ctx: click.Context,
    alias: str | None,
    config_path: str | None,
    kubeconfig_path: str | None,
    list_only: bool,
    log_level: str,
    log_format: str,
) -> None:
    """Log in to a Kubernetes cluster through OIDC and switch kubectl to it.

    ALIAS is one of the aliases declared in ~/.kubectl-login.json.
    """
    if not alias and not list_only:
        raise click.UsageError(
            f"Alias is mandatory i.e kubectl-login <ALIAS>. Try '{CONFIG_HINT}' to get this value."
        )

    setup_logging(level=log_level, format=log_format)

    path = Path(config_path) if config_path else default_config_path()

    try:
        config = LoginConfig.from_file(path)

        if list_only:
            _print_clusters(config)
            return

        session = _resolve_session(config, alias)
        logger.info("session_resolved", session=repr(session))

        LoginFlow(console).login(session)
        kubectl = KubectlWrapper(kubeconfig_path=kubeconfig_path)
        kubectl.install(session.token, session.kubectl_cluster)

    except KubectlLoginError as e:
        log_error(logger, e, operation="login")

        if e.exit_code == 0:
            # Rejected token: the user can simply try again
            console.print(f"[yellow]Token is invalid, error: {escape(str(e))}[/yellow]")
        elif isinstance(e, AliasNotFoundError):
            console.print(
                f"[red]Error: {escape(str(e))}. Try '{CONFIG_HINT}' to get this value.[/red]"
            )
        else:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(e.exit_code)

    console.print(
        "\nLogged in. Now try [cyan]kubectl config get-contexts[/cyan] to get your context "
        "or [cyan]kubectl get pods[/cyan] to get started."
    )


if __name__ == "__main__":
    cli()
