"""TOML-backed store for named Unraid server profiles."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import click
import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from unraid_cli.const import APP_NAME, CONFIG_FILE_NAME
from unraid_cli.exceptions import ConfigIOError, ConfigParseError
from unraid_cli.models import ConfigFile

if TYPE_CHECKING:
    from collections.abc import Iterator

    from unraid_cli.models import ServerProfile


_LOGGER = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Return the platform config file path.

    ``~/.config/unraid/config.toml`` on Linux (honouring XDG_CONFIG_HOME),
    the platform equivalent elsewhere.
    """
    return Path(click.get_app_dir(APP_NAME)) / CONFIG_FILE_NAME


def dumps(config: ConfigFile) -> str:
    """Serialize a config to TOML text.

    Args:
        config: Config to serialize.

    Returns:
        TOML document with ``default`` and one ``[servers.<name>]`` table
        per profile, in insertion order.

    """
    data = config.to_toml()
    doc = tomlkit.document()
    if "default" in data:
        doc.add("default", data["default"])

    servers = tomlkit.table(is_super_table=True)
    for name, fields in data["servers"].items():
        table = tomlkit.table()
        table.update(fields)
        servers.add(name, table)
    doc.add("servers", servers)
    return tomlkit.dumps(doc)


def loads(text: str, *, source: str = "<string>") -> ConfigFile:
    """Parse TOML text into a config.

    Args:
        text: TOML document.
        source: Name used in error messages.

    Returns:
        Parsed config.

    Raises:
        ConfigParseError: If the text is not TOML or does not match the schema.

    """
    try:
        data = tomlkit.parse(text).unwrap()
    except TOMLKitError as err:
        raise ConfigParseError(f"Failed to parse config file {source}: {err}") from err

    try:
        return ConfigFile.model_validate(data)
    except ValidationError as err:
        raise ConfigParseError(f"Invalid config file {source}: {err}") from err


class ConfigStore:
    """Profile store bound to one config file.

    Every mutating call loads the current file, applies the change and
    writes it back atomically, so a store can be shared by commands without
    holding state between them.

    Example:
        store = ConfigStore(tmp_path / "config.toml")
        store.add("tower", "https://192.168.1.100", "key")
        assert store.default == "tower"

    """

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize the store.

        Args:
            path: Config file location (default: platform config directory).

        """
        self._path = Path(path) if path is not None else default_config_path()

    @property
    def path(self) -> Path:
        """Get the config file path."""
        return self._path

    def load(self) -> ConfigFile:
        """Read the config file.

        Returns:
            Parsed config, or an empty one if the file does not exist yet.

        Raises:
            ConfigIOError: If the file exists but cannot be read.
            ConfigParseError: If the file is malformed.

        """
        try:
            with self._path.open("r", encoding="utf-8") as fp:
                text = fp.read()
        except FileNotFoundError:
            _LOGGER.debug("No config file at %s, using empty config", self._path)
            return ConfigFile()
        except UnicodeDecodeError as err:
            raise ConfigParseError(
                f"Failed to parse config file {self._path}: {err}"
            ) from err
        except OSError as err:
            raise ConfigIOError(
                f"Failed to read config file {self._path}: {err}"
            ) from err

        _LOGGER.debug("Loaded config from %s", self._path)
        return loads(text, source=str(self._path))

    def save(self, config: ConfigFile) -> None:
        """Write the config file atomically.

        The document is written to a temporary file in the same directory
        and renamed over the target, so readers see either the old or the
        new file.

        Args:
            config: Config to persist.

        Raises:
            ConfigIOError: If the directory or file cannot be written.

        """
        text = dumps(config)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                delete=False,
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                encoding="utf-8",
            ) as tf:
                tmp_name = tf.name
                tf.write(text)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(tmp_name, self._path)
        except OSError as err:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise ConfigIOError(
                f"Failed to write config file {self._path}: {err}"
            ) from err

        _LOGGER.debug("Saved config to %s", self._path)

    # =========================================================================
    # Profile Operations
    # =========================================================================

    @property
    def default(self) -> str | None:
        """Get the name of the default server."""
        return self.load().default

    def list_servers(self) -> Iterator[ServerProfile]:
        """Yield configured profiles in insertion order."""
        yield from self.load().profiles()

    def get(self, name: str) -> ServerProfile:
        """Return the named profile.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        return self.load().get_server(name)

    def add(
        self,
        name: str,
        url: str,
        api_key: str,
        timeout: int | None = None,
    ) -> bool:
        """Add a profile, overwriting any profile of the same name.

        The first profile added becomes the default.

        Args:
            name: Profile name.
            url: Server URL.
            api_key: Unraid API key.
            timeout: Optional request timeout in seconds.

        Returns:
            True if an existing profile was overwritten.

        """
        config = self.load()
        replaced = config.add_server(name, url, api_key, timeout)
        if replaced:
            _LOGGER.warning("Overwriting existing server '%s'", name)
        self.save(config)
        return replaced

    def remove(self, name: str) -> ServerProfile:
        """Remove a profile; removing the default leaves no default.

        Returns:
            The removed profile.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        config = self.load()
        profile = config.remove_server(name)
        self.save(config)
        return profile

    def set_default(self, name: str) -> None:
        """Make an existing profile the default.

        Raises:
            ProfileNotFoundError: If no profile has that name.

        """
        config = self.load()
        config.set_default(name)
        self.save(config)
