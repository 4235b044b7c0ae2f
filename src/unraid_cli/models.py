"""Pydantic models for server profiles, resolved settings and API responses."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PositiveInt,
    model_validator,
)

from unraid_cli.const import (
    CONTAINER_STATE_RUNNING,
    DEFAULT_TIMEOUT,
    ENV_API_KEY,
    ENV_SERVER,
    ENV_TIMEOUT,
    ENV_URL,
)
from unraid_cli.exceptions import ProfileNotFoundError


def _blank_to_none(value: Any) -> Any:
    """Treat empty or whitespace-only strings as unset.

    Args:
        value: Raw flag or environment value.

    Returns:
        None for blank strings, otherwise the value unchanged.

    """
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Optional override value where "" means the same as not given.
OptionalStr = Annotated[str | None, BeforeValidator(_blank_to_none)]
OptionalTimeout = Annotated[int | str | None, BeforeValidator(_blank_to_none)]


class UnraidBaseModel(BaseModel):
    """Base model that ignores unknown fields for forward compatibility."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# =============================================================================
# Config File Models
# =============================================================================


class ServerProfile(UnraidBaseModel):
    """A named Unraid server: URL, API key and optional request timeout."""

    name: str
    url: str
    api_key: str = Field(repr=False)
    timeout: PositiveInt | None = None

    def to_toml(self) -> dict[str, Any]:
        """Return the fields stored under ``[servers.<name>]``."""
        table: dict[str, Any] = {"url": self.url, "api_key": self.api_key}
        if self.timeout is not None:
            table["timeout"] = self.timeout
        return table


class ConfigFile(UnraidBaseModel):
    """Contents of the TOML config file.

    Servers keep insertion order, which is the order they are listed in.
    The in-memory operations here never touch the disk; see
    ``unraid_cli.config.ConfigStore`` for persistence.
    """

    default: str | None = None
    servers: dict[str, ServerProfile] = {}

    @model_validator(mode="before")
    @classmethod
    def _inject_server_names(cls, data: Any) -> Any:
        """Copy each ``[servers.<name>]`` key into the profile's name field."""
        if not isinstance(data, dict):
            return data
        servers = data.get("servers")
        if isinstance(servers, dict):
            data = dict(data)
            data["servers"] = {
                name: (
                    {**table, "name": name} if isinstance(table, dict) else table
                )
                for name, table in servers.items()
            }
        return data

    @property
    def default_server(self) -> ServerProfile | None:
        """Return the default profile, or None if unset or dangling."""
        if self.default is None:
            return None
        return self.servers.get(self.default)

    def profiles(self) -> Iterator[ServerProfile]:
        """Yield profiles in insertion order."""
        yield from self.servers.values()

    def get_server(self, name: str) -> ServerProfile:
        """Return the named profile.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        try:
            return self.servers[name]
        except KeyError:
            raise ProfileNotFoundError(name) from None

    def add_server(
        self,
        name: str,
        url: str,
        api_key: str,
        timeout: int | None = None,
    ) -> bool:
        """Insert or overwrite a profile.

        The profile becomes the default when no valid default is set.

        Args:
            name: Profile name (case-sensitive).
            url: Server URL.
            api_key: Unraid API key.
            timeout: Optional request timeout in seconds.

        Returns:
            True if an existing profile with that name was replaced.

        """
        replaced = name in self.servers
        self.servers[name] = ServerProfile(
            name=name, url=url, api_key=api_key, timeout=timeout
        )
        if self.default not in self.servers:
            self.default = name
        return replaced

    def remove_server(self, name: str) -> ServerProfile:
        """Remove a profile, clearing the default if it pointed there.

        Returns:
            The removed profile.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        if name not in self.servers:
            raise ProfileNotFoundError(name)
        profile = self.servers.pop(name)
        if self.default == name:
            self.default = None
        return profile

    def set_default(self, name: str) -> None:
        """Make an existing profile the default.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        if name not in self.servers:
            raise ProfileNotFoundError(name)
        self.default = name

    def to_toml(self) -> dict[str, Any]:
        """Return the document structure written to disk."""
        document: dict[str, Any] = {}
        if self.default is not None:
            document["default"] = self.default
        document["servers"] = {
            name: profile.to_toml() for name, profile in self.servers.items()
        }
        return document


# =============================================================================
# Settings Resolution Models
# =============================================================================


class CliOverrides(UnraidBaseModel):
    """Values given as global command-line flags."""

    model_config = ConfigDict(frozen=True)

    url: OptionalStr = None
    api_key: OptionalStr = Field(default=None, repr=False)
    server: OptionalStr = None
    timeout: OptionalTimeout = None


class EnvOverrides(UnraidBaseModel):
    """Values read from ``UNRAID_*`` environment variables."""

    model_config = ConfigDict(frozen=True)

    url: OptionalStr = None
    api_key: OptionalStr = Field(default=None, repr=False)
    server: OptionalStr = None
    timeout: OptionalTimeout = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> EnvOverrides:
        """Build overrides from an environment mapping.

        Args:
            environ: Mapping to read from (default ``os.environ``).

        Returns:
            EnvOverrides with every unset or empty variable as None.

        """
        if environ is None:
            environ = os.environ
        return cls(
            url=environ.get(ENV_URL),
            api_key=environ.get(ENV_API_KEY),
            server=environ.get(ENV_SERVER),
            timeout=environ.get(ENV_TIMEOUT),
        )


class EffectiveSettings(UnraidBaseModel):
    """Connection settings resolved for a single invocation."""

    model_config = ConfigDict(frozen=True)

    url: str
    api_key: str = Field(repr=False)
    timeout: PositiveInt = DEFAULT_TIMEOUT
    server_name: str | None = None


# =============================================================================
# Docker Models
# =============================================================================


class ContainerPort(UnraidBaseModel):
    """Docker container port mapping."""

    ip: str | None = None
    privatePort: int | None = None
    publicPort: int | None = None
    type: str | None = None


class DockerContainer(UnraidBaseModel):
    """Docker container information."""

    id: str
    name: str
    names: list[str] = []  # Container may have multiple names
    state: str | None = None
    status: str | None = None  # Status message (e.g., "Up 5 days")
    image: str | None = None
    autoStart: bool | None = None
    ports: list[ContainerPort] = []

    @property
    def is_running(self) -> bool:
        """Return True if the container is running."""
        if self.state is None:
            return False
        return self.state.lower() == CONTAINER_STATE_RUNNING

    def matches(self, name_or_id: str) -> bool:
        """Return True if the container has this ID or name.

        Names match with or without their leading slash.
        """
        wanted = name_or_id.lstrip("/")
        if self.id == name_or_id:
            return True
        return any(n.lstrip("/") == wanted for n in self.names)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> DockerContainer:
        """Create DockerContainer from API response.

        Extracts name from the names array, removing leading slashes.

        Args:
            data: API response data for a container.

        Returns:
            DockerContainer instance with parsed data.

        """
        names = data.get("names", []) or []
        # Extract name from names array, removing leading slash
        name = names[0].lstrip("/") if names else data.get("id") or "unknown"

        return cls(
            id=data.get("id") or "",
            name=name,
            names=names,
            state=data.get("state"),
            status=data.get("status"),
            image=data.get("image"),
            autoStart=data.get("autoStart"),
            ports=[ContainerPort(**p) for p in (data.get("ports") or [])],
        )
