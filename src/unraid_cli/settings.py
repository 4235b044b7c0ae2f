"""Resolve connection settings from flags, environment and config file.

Precedence is strict and per field: command-line flag, then environment
variable, then the selected config profile. The selected profile is the
one named by ``--server``/``UNRAID_SERVER``, else the config default.
Timeout falls back to the profile value and then to ``DEFAULT_TIMEOUT``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from unraid_cli.const import DEFAULT_TIMEOUT
from unraid_cli.exceptions import (
    InvalidTimeoutError,
    MissingCredentialsError,
    UnknownServerError,
)
from unraid_cli.models import EffectiveSettings

if TYPE_CHECKING:
    from unraid_cli.models import CliOverrides, ConfigFile, EnvOverrides, ServerProfile


def parse_timeout(value: int | str) -> int:
    """Parse a timeout given as a flag or environment value.

    Args:
        value: Integer seconds, or a string of decimal digits.

    Returns:
        The timeout as a positive integer.

    Raises:
        InvalidTimeoutError: If the value is not a positive integer.

    """
    if isinstance(value, bool):
        raise InvalidTimeoutError(value)
    if isinstance(value, int):
        seconds = value
    else:
        text = value.strip()
        if not text.isdecimal():
            raise InvalidTimeoutError(value)
        seconds = int(text)
    if seconds <= 0:
        raise InvalidTimeoutError(value)
    return seconds


def select_profile(
    cli: CliOverrides, env: EnvOverrides, config: ConfigFile
) -> ServerProfile | None:
    """Pick the config profile that backs this invocation.

    Raises:
        UnknownServerError: If a server named by flag or env is not configured.

    """
    name = cli.server or env.server
    if name is None:
        return config.default_server
    profile = config.servers.get(name)
    if profile is None:
        raise UnknownServerError(name)
    return profile


def resolve_settings(
    cli: CliOverrides, env: EnvOverrides, config: ConfigFile
) -> EffectiveSettings:
    """Merge the three setting sources into effective settings.

    This is a pure function: it reads nothing but its arguments.

    Args:
        cli: Global command-line flag values.
        env: ``UNRAID_*`` environment values.
        config: Loaded config file.

    Returns:
        The URL, API key and timeout to use.

    Raises:
        UnknownServerError: If a named server is not configured.
        InvalidTimeoutError: If a flag or env timeout is not a positive integer.
        MissingCredentialsError: If no source provides a URL or API key.

    """
    profile = select_profile(cli, env, config)

    if cli.timeout is not None:
        timeout = parse_timeout(cli.timeout)
    elif env.timeout is not None:
        timeout = parse_timeout(env.timeout)
    elif profile is not None and profile.timeout is not None:
        timeout = profile.timeout
    else:
        timeout = DEFAULT_TIMEOUT

    url = cli.url or env.url or (profile.url if profile else None)
    api_key = cli.api_key or env.api_key or (profile.api_key if profile else None)

    if not url or not api_key:
        missing = [
            label for label, value in (("url", url), ("api_key", api_key)) if not value
        ]
        raise MissingCredentialsError(missing)

    return EffectiveSettings(
        url=url,
        api_key=api_key,
        timeout=timeout,
        server_name=profile.name if profile else None,
    )
