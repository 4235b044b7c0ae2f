"""Shared pytest fixtures for Unraid CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from unraid_cli import ConfigFile, ConfigStore, EffectiveSettings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def api_key() -> str:
    """Return a test API key."""
    return "test-api-key-12345"


@pytest.fixture
def url() -> str:
    """Return a test server URL."""
    return "https://192.168.1.100"


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Return a config file path inside a not yet existing directory."""
    return tmp_path / "unraid" / "config.toml"


@pytest.fixture
def store(config_path: Path) -> ConfigStore:
    """Return a store bound to a temporary config file."""
    return ConfigStore(config_path)


@pytest.fixture
def sample_config() -> ConfigFile:
    """Return a config with 'tower' (default) and 'backup' servers."""
    config = ConfigFile()
    config.add_server("tower", "https://192.168.1.100", "key-tower")
    config.add_server("backup", "https://192.168.1.101", "key-backup")
    return config


@pytest.fixture
def settings(url: str, api_key: str) -> EffectiveSettings:
    """Return resolved settings pointing at the test server."""
    return EffectiveSettings(url=url, api_key=api_key, timeout=5)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove UNRAID_* variables from the environment."""
    for name in (
        "UNRAID_URL",
        "UNRAID_API_KEY",
        "UNRAID_SERVER",
        "UNRAID_TIMEOUT",
        "UNRAID_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def containers_response() -> dict[str, Any]:
    """Return a docker containers query response."""
    return {
        "data": {
            "docker": {
                "containers": [
                    {
                        "id": "container:plex",
                        "names": ["/plex"],
                        "image": "plexinc/pms-docker:latest",
                        "state": "RUNNING",
                        "status": "Up 5 days",
                        "autoStart": True,
                        "ports": [
                            {
                                "ip": "0.0.0.0",
                                "privatePort": 32400,
                                "publicPort": 32400,
                                "type": "TCP",
                            }
                        ],
                    },
                    {
                        "id": "container:sonarr",
                        "names": ["/sonarr"],
                        "image": "linuxserver/sonarr",
                        "state": "EXITED",
                        "status": "Exited (0) 2 hours ago",
                        "autoStart": False,
                        "ports": [],
                    },
                ]
            }
        }
    }


@pytest.fixture
def container_response() -> dict[str, Any]:
    """Return a container start mutation response."""
    return {
        "data": {
            "docker": {
                "start": {
                    "id": "container:sonarr",
                    "names": ["/sonarr"],
                    "image": "linuxserver/sonarr",
                    "state": "RUNNING",
                    "status": "Up 1 second",
                }
            }
        }
    }
