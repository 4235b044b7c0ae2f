"""Unraid CLI - manage server profiles and Docker containers on Unraid."""

from unraid_cli.client import UnraidClient, request
from unraid_cli.config import ConfigStore, default_config_path
from unraid_cli.exceptions import (
    ConfigIOError,
    ConfigParseError,
    ContainerNotFoundError,
    InvalidTimeoutError,
    MissingCredentialsError,
    ProfileNotFoundError,
    UnknownServerError,
    UnraidAPIError,
    UnraidAuthenticationError,
    UnraidConfigError,
    UnraidConnectionError,
    UnraidError,
    UnraidSSLError,
    UnraidTimeoutError,
)
from unraid_cli.models import (
    CliOverrides,
    ConfigFile,
    DockerContainer,
    EffectiveSettings,
    EnvOverrides,
    ServerProfile,
)
from unraid_cli.settings import resolve_settings

__all__ = [
    "CliOverrides",
    "ConfigFile",
    "ConfigIOError",
    "ConfigParseError",
    "ConfigStore",
    "ContainerNotFoundError",
    "DockerContainer",
    "EffectiveSettings",
    "EnvOverrides",
    "InvalidTimeoutError",
    "MissingCredentialsError",
    "ProfileNotFoundError",
    "ServerProfile",
    "UnknownServerError",
    "UnraidAPIError",
    "UnraidAuthenticationError",
    "UnraidClient",
    "UnraidConfigError",
    "UnraidConnectionError",
    "UnraidError",
    "UnraidSSLError",
    "UnraidTimeoutError",
    "default_config_path",
    "request",
    "resolve_settings",
]

__version__ = "0.1.0"
