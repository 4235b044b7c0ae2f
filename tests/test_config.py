"""Tests for the TOML config store."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from unraid_cli.config import ConfigStore, default_config_path, dumps, loads
from unraid_cli.exceptions import ConfigIOError, ConfigParseError, ProfileNotFoundError
from unraid_cli.models import ConfigFile


class TestConfigPath:
    """Tests for the default config location."""

    @pytest.mark.skipif(os.name != "posix", reason="XDG layout is POSIX only")
    def test_default_path_honours_xdg(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the path lives under XDG_CONFIG_HOME/unraid."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        with patch("sys.platform", "linux"):
            path = default_config_path()

        assert path == tmp_path / "unraid" / "config.toml"

    def test_store_uses_default_path(self) -> None:
        """Test a store without a path uses the platform default."""
        assert ConfigStore().path == default_config_path()

    def test_store_accepts_string_path(self, tmp_path: Path) -> None:
        """Test a string path is converted to a Path."""
        store = ConfigStore(str(tmp_path / "config.toml"))

        assert store.path == tmp_path / "config.toml"


class TestSerialization:
    """Tests for dumps/loads."""

    def test_dumps_layout(self, sample_config: ConfigFile) -> None:
        """Test the document has a default key and server tables."""
        text = dumps(sample_config)

        assert 'default = "tower"' in text
        assert "[servers.tower]" in text
        assert "[servers.backup]" in text
        assert text.index("[servers.tower]") < text.index("[servers.backup]")

    def test_round_trip(self, sample_config: ConfigFile) -> None:
        """Test serialization is lossless."""
        sample_config.add_server("media", "https://media", "k", timeout=30)

        assert loads(dumps(sample_config)) == sample_config

    def test_round_trip_empty(self) -> None:
        """Test an empty config survives a round trip."""
        assert loads(dumps(ConfigFile())) == ConfigFile()

    def test_round_trip_quoted_names(self) -> None:
        """Test names needing quotes in TOML keys survive."""
        config = ConfigFile()
        config.add_server("my server.lan", "https://a", "k")

        assert loads(dumps(config)) == config

    def test_loads_empty_document(self) -> None:
        """Test an empty file is an empty config."""
        config = loads("")

        assert config.default is None
        assert config.servers == {}

    def test_loads_default_only(self) -> None:
        """Test a default with no servers is preserved."""
        config = loads('default = "myserver"\n')

        assert config.default == "myserver"
        assert config.servers == {}

    def test_loads_malformed_toml(self) -> None:
        """Test invalid TOML raises ConfigParseError."""
        with pytest.raises(ConfigParseError, match="Failed to parse"):
            loads("default = \n[servers")

    def test_loads_missing_field(self) -> None:
        """Test a server without api_key raises ConfigParseError."""
        text = '[servers.tower]\nurl = "https://tower"\n'

        with pytest.raises(ConfigParseError, match="Invalid config"):
            loads(text)

    def test_loads_invalid_timeout(self) -> None:
        """Test a non-positive profile timeout raises ConfigParseError."""
        text = '[servers.tower]\nurl = "https://t"\napi_key = "k"\ntimeout = 0\n'

        with pytest.raises(ConfigParseError):
            loads(text)


class TestLoadSave:
    """Tests for reading and writing the config file."""

    def test_load_missing_file(self, store: ConfigStore) -> None:
        """Test a missing file loads as an empty config."""
        assert store.load() == ConfigFile()
        assert not store.path.exists()

    def test_save_creates_parent_directories(
        self, store: ConfigStore, sample_config: ConfigFile
    ) -> None:
        """Test the first save creates the config directory."""
        assert not store.path.parent.exists()

        store.save(sample_config)

        assert store.path.is_file()

    def test_save_then_load(
        self, store: ConfigStore, sample_config: ConfigFile
    ) -> None:
        """Test load returns what save wrote."""
        store.save(sample_config)

        assert store.load() == sample_config

    def test_save_leaves_no_temp_files(
        self, store: ConfigStore, sample_config: ConfigFile
    ) -> None:
        """Test the temporary file is renamed into place."""
        store.save(sample_config)
        store.save(sample_config)

        assert [p.name for p in store.path.parent.iterdir()] == ["config.toml"]

    def test_failed_replace_keeps_old_file(
        self, store: ConfigStore, sample_config: ConfigFile
    ) -> None:
        """Test a failed write leaves the previous file intact."""
        store.save(sample_config)
        before = store.path.read_text(encoding="utf-8")
        sample_config.add_server("media", "https://media", "k")

        with (
            patch("unraid_cli.config.os.replace", side_effect=OSError("disk full")),
            pytest.raises(ConfigIOError, match="disk full"),
        ):
            store.save(sample_config)

        assert store.path.read_text(encoding="utf-8") == before
        assert [p.name for p in store.path.parent.iterdir()] == ["config.toml"]

    def test_load_directory_is_io_error(self, tmp_path: Path) -> None:
        """Test an unreadable path raises ConfigIOError."""
        store = ConfigStore(tmp_path)

        with pytest.raises(ConfigIOError):
            store.load()

    def test_load_malformed_file(self, store: ConfigStore) -> None:
        """Test a corrupt file raises ConfigParseError and is left alone."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("this is not toml ][", encoding="utf-8")

        with pytest.raises(ConfigParseError):
            store.load()

        assert store.path.read_text(encoding="utf-8") == "this is not toml ]["

    def test_load_invalid_utf8(self, store: ConfigStore) -> None:
        """Test undecodable bytes raise ConfigParseError."""
        store.path.parent.mkdir(parents=True)
        store.path.write_bytes(b"default = \"\xff\xfe\"\n")

        with pytest.raises(ConfigParseError):
            store.load()


class TestProfileOperations:
    """Tests for ConfigStore add/remove/list/default."""

    def test_add_then_list(self, store: ConfigStore) -> None:
        """Test an added profile is listed exactly once with its values."""
        store.add("tower", "https://192.168.1.100", "key-tower")

        profiles = list(store.list_servers())

        assert len(profiles) == 1
        assert profiles[0].name == "tower"
        assert profiles[0].url == "https://192.168.1.100"
        assert profiles[0].api_key == "key-tower"

    def test_add_twice_last_write_wins(self, store: ConfigStore) -> None:
        """Test adding the same name twice leaves one updated entry."""
        assert store.add("tower", "https://old", "old-key") is False
        assert store.add("tower", "https://new", "new-key") is True

        profiles = list(store.list_servers())

        assert [p.name for p in profiles] == ["tower"]
        assert profiles[0].url == "https://new"
        assert profiles[0].api_key == "new-key"

    def test_overwrite_logs_warning(
        self, store: ConfigStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test overwriting a profile logs a warning."""
        store.add("tower", "https://old", "old-key")

        with caplog.at_level("WARNING", logger="unraid_cli.config"):
            store.add("tower", "https://new", "new-key")

        assert "Overwriting existing server 'tower'" in caplog.text
        assert "new-key" not in caplog.text

    def test_first_add_is_default(self, store: ConfigStore) -> None:
        """Test the first profile becomes the default."""
        store.add("tower", "https://tower", "k")

        assert store.default == "tower"

    def test_second_add_keeps_default(self, store: ConfigStore) -> None:
        """Test a second profile does not take over the default."""
        store.add("tower", "https://tower", "k")
        store.add("backup", "https://backup", "k")

        assert store.default == "tower"

    def test_list_is_lazy_and_ordered(self, store: ConfigStore) -> None:
        """Test listing yields profiles in insertion order."""
        for name in ("zeta", "alpha", "mid"):
            store.add(name, f"https://{name}", "k")

        servers = store.list_servers()

        assert not isinstance(servers, list)
        assert [p.name for p in servers] == ["zeta", "alpha", "mid"]

    def test_add_with_timeout(self, store: ConfigStore) -> None:
        """Test a profile timeout is persisted."""
        store.add("tower", "https://tower", "k", timeout=20)

        assert store.get("tower").timeout == 20

    def test_remove_default(self, store: ConfigStore) -> None:
        """Test removing the default clears it on disk."""
        store.add("tower", "https://tower", "k")
        store.add("backup", "https://backup", "k")

        store.remove("tower")

        assert store.default is None
        assert [p.name for p in store.list_servers()] == ["backup"]

    def test_remove_non_default(self, store: ConfigStore) -> None:
        """Test removing another profile keeps the default."""
        store.add("tower", "https://tower", "k")
        store.add("backup", "https://backup", "k")

        store.remove("backup")

        assert store.default == "tower"

    def test_remove_unknown(self, store: ConfigStore) -> None:
        """Test removing a missing profile raises without writing."""
        with pytest.raises(ProfileNotFoundError):
            store.remove("nonexistent")

        assert not store.path.exists()

    def test_set_default(self, store: ConfigStore) -> None:
        """Test switching the default."""
        store.add("tower", "https://tower", "k")
        store.add("backup", "https://backup", "k")

        store.set_default("backup")

        assert store.default == "backup"

    def test_set_default_unknown(self, store: ConfigStore) -> None:
        """Test an unknown default raises."""
        store.add("tower", "https://tower", "k")

        with pytest.raises(ProfileNotFoundError):
            store.set_default("nonexistent")

        assert store.default == "tower"

    def test_get_unknown(self, store: ConfigStore) -> None:
        """Test looking up a missing profile raises."""
        with pytest.raises(ProfileNotFoundError):
            store.get("tower")
