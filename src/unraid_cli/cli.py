"""Command-line entry point: ``unraid config ...`` and ``unraid docker ...``."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, cast

import click

from unraid_cli import __version__
from unraid_cli.client import request
from unraid_cli.config import ConfigStore
from unraid_cli.const import (
    API_KEY_PREVIEW_LENGTH,
    APP_NAME,
    ENV_CONFIG,
    OPERATION_LIST_CONTAINERS,
    OPERATION_RESTART,
    OPERATION_START,
    OPERATION_STOP,
    OPERATION_UPDATE,
)
from unraid_cli.exceptions import UnraidError
from unraid_cli.models import CliOverrides, DockerContainer, EnvOverrides
from unraid_cli.settings import resolve_settings

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(name)s %(levelname)s: %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG with --verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


@dataclasses.dataclass
class CliContext:
    """Shared state passed through Click's context object."""

    store: ConfigStore
    overrides: CliOverrides
    verify_ssl: bool = False


class UnraidGroup(click.Group):
    """Root group that reports UnraidError as ``Error: ...`` with exit code 1."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except UnraidError as err:
            _LOGGER.debug("Command failed", exc_info=True)
            raise click.ClickException(str(err)) from err


class AliasedGroup(click.Group):
    """Group that accepts short aliases for its subcommands."""

    aliases: dict[str, str] = {"ls": "list-containers"}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args


@click.group(cls=UnraidGroup)
@click.option("--server", default=None, help="Server name from config to use.")
@click.option("--url", default=None, help="Server URL (overrides config and env).")
@click.option("--api-key", default=None, help="API key (overrides config and env).")
@click.option(
    "--timeout",
    default=None,
    metavar="SECONDS",
    help="Request timeout in seconds (default 5).",
)
@click.option(
    "--config",
    "config_path",
    envvar=ENV_CONFIG,
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of the platform default.",
)
@click.option(
    "--verify-ssl",
    is_flag=True,
    help="Verify the server's SSL certificate.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.pass_context
def cli(
    ctx: click.Context,
    server: str | None,
    url: str | None,
    api_key: str | None,
    timeout: str | None,
    config_path: Path | None,
    *,
    verify_ssl: bool,
    verbose: bool,
) -> None:
    """CLI client for the Unraid API."""
    configure_logging(verbose=verbose)
    ctx.obj = CliContext(
        store=ConfigStore(config_path),
        overrides=CliOverrides(url=url, api_key=api_key, server=server, timeout=timeout),
        verify_ssl=verify_ssl,
    )


# =============================================================================
# Config Commands
# =============================================================================


@cli.group("config")
def config_group() -> None:
    """Manage server configurations."""


@config_group.command("add")
@click.argument("name")
@click.option("--url", required=True, help="Server URL (e.g. https://192.168.1.100).")
@click.option("--api-key", required=True, help="API key for authentication.")
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    default=None,
    help="Request timeout in seconds for this server.",
)
@click.pass_obj
def config_add(
    obj: CliContext, name: str, url: str, api_key: str, timeout: int | None
) -> None:
    """Add a new server configuration (overwrites an existing NAME)."""
    replaced = obj.store.add(name, url, api_key, timeout)
    if replaced:
        click.echo(f"Server '{name}' updated.")
    else:
        click.echo(f"Server '{name}' added successfully.")

    if obj.store.default == name and not replaced:
        click.echo("Set as default server.")


@config_group.command("remove")
@click.argument("name")
@click.pass_obj
def config_remove(obj: CliContext, name: str) -> None:
    """Remove a server configuration."""
    was_default = obj.store.default == name
    obj.store.remove(name)
    click.echo(f"Server '{name}' removed successfully.")
    if was_default:
        click.echo(
            "No default server is set. Use 'unraid config default <name>' to set one."
        )


@config_group.command("default")
@click.argument("name")
@click.pass_obj
def config_default(obj: CliContext, name: str) -> None:
    """Set the default server."""
    obj.store.set_default(name)
    click.echo(f"Default server set to '{name}'.")


@config_group.command("list")
@click.pass_obj
def config_list(obj: CliContext) -> None:
    """List all configured servers."""
    config = obj.store.load()

    if not config.servers:
        click.echo("No servers configured.")
        click.echo(
            "Use 'unraid config add <name> --url <url> --api-key <key>' "
            "to add a server."
        )
        return

    click.echo("Configured servers:")
    click.echo()
    for profile in config.profiles():
        marker = " (default)" if config.default == profile.name else ""
        click.echo(f"  {profile.name}{marker}")
        click.echo(f"    URL: {profile.url}")
        click.echo(f"    API Key: {profile.api_key[:API_KEY_PREVIEW_LENGTH]}...")
        if profile.timeout is not None:
            click.echo(f"    Timeout: {profile.timeout}s")
        click.echo()


@config_group.command("path")
@click.pass_obj
def config_path_cmd(obj: CliContext) -> None:
    """Show where the config file is stored."""
    click.echo(str(obj.store.path))


# =============================================================================
# Docker Commands
# =============================================================================


def _run_docker(
    obj: CliContext, operation: str, params: dict[str, Any]
) -> list[DockerContainer] | DockerContainer:
    """Resolve settings and run one Docker operation to completion."""
    settings = resolve_settings(
        obj.overrides, EnvOverrides.from_environ(), obj.store.load()
    )
    _LOGGER.debug(
        "Using server %s at %s (timeout %ss)",
        settings.server_name or "<unnamed>",
        settings.url,
        settings.timeout,
    )
    return asyncio.run(
        request(settings, operation, params, verify_ssl=obj.verify_ssl)
    )


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return f"{text[: max_len - 3]}..."


@cli.group("docker", cls=AliasedGroup)
def docker_group() -> None:
    """Docker container management."""


@docker_group.command("list-containers")
@click.option(
    "--all", "-a", "show_all", is_flag=True, help="Show all containers, not just running."
)
@click.pass_obj
def docker_list_containers(obj: CliContext, *, show_all: bool) -> None:
    """List Docker containers (alias: ls)."""
    containers = cast(
        "list[DockerContainer]",
        _run_docker(obj, OPERATION_LIST_CONTAINERS, {"all": show_all}),
    )

    if not containers:
        if show_all:
            click.echo("No containers found.")
        else:
            click.echo("No running containers found. Use --all to show all containers.")
        return

    click.echo(f"{'NAME':<30} {'IMAGE':<40} {'STATE':<10} {'STATUS':<20}")
    click.echo("-" * 100)
    for container in containers:
        state = (container.state or "unknown").lower()
        click.echo(
            f"{_truncate(container.name, 29):<30} "
            f"{_truncate(container.image or '', 39):<40} "
            f"{state:<10} "
            f"{_truncate(container.status or '', 19):<20}"
        )


def _container_command(operation: str, done: str, summary: str) -> click.Command:
    """Build ``docker <operation> NAME``."""

    @click.command(operation, help=summary)
    @click.argument("name")
    @click.pass_obj
    def command(obj: CliContext, name: str) -> None:
        _run_docker(obj, operation, {"name": name})
        click.echo(f"Container '{name}' {done}.")

    return command


docker_group.add_command(
    _container_command(OPERATION_START, "started", "Start a container.")
)
docker_group.add_command(
    _container_command(OPERATION_STOP, "stopped", "Stop a container.")
)
docker_group.add_command(
    _container_command(OPERATION_RESTART, "restarted", "Restart a container.")
)
docker_group.add_command(
    _container_command(
        OPERATION_UPDATE, "updated", "Update a container to its latest image."
    )
)


def main() -> None:
    """Run the CLI."""
    cli(prog_name=APP_NAME)
