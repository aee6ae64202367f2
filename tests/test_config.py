"""Tests for config module."""

from pathlib import Path

import pytest

from encounter_db.config import Config, create_default_config, load_config


class TestConfig:
    """Tests for Config model."""

    def test_config_creation_with_defaults(self) -> None:
        """Test creating Config with only the database path."""
        config = Config.model_validate({"paths": {"db_file": "/tmp/encounters.db"}})

        assert config.db_file == Path("/tmp/encounters.db").resolve()
        assert config.backup_dir is None
        assert config.backup_before_migrate is True
        assert config.timeout == 5.0
        assert config.foreign_keys is True

    def test_config_path_expansion(self) -> None:
        """Test that ~ is expanded in path fields."""
        config = Config.model_validate({"paths": {"db_file": "~/encounters.db", "backup_dir": "~/backups"}})

        assert "~" not in str(config.db_file)
        assert config.db_file.is_absolute()
        assert config.backup_dir is not None
        assert config.backup_dir.is_absolute()

    def test_empty_backup_dir_means_default(self) -> None:
        """Test an empty backup_dir falls back to next to the database."""
        config = Config.model_validate({"paths": {"db_file": "/tmp/encounters.db", "backup_dir": ""}})
        assert config.backup_dir is None

    def test_config_validation_timeout_minimum(self) -> None:
        """Test that timeout must be >= 0."""
        with pytest.raises(ValueError):
            Config.model_validate(
                {"paths": {"db_file": "/tmp/encounters.db"}, "connection": {"timeout": -1}}
            )

    def test_missing_db_file(self) -> None:
        """Test that db_file is required."""
        with pytest.raises(ValueError):
            Config.model_validate({"paths": {}})


class TestLoadConfig:
    """Tests for loading configuration files."""

    def test_create_default_config(self) -> None:
        """Test the bundled defaults."""
        config = create_default_config()

        assert config.db_file.name == "encounters.db"
        assert config.db_file.is_absolute()
        assert config.backup_dir is None
        assert config.backup_before_migrate is True
        assert config.foreign_keys is True

    def test_load_config_without_path(self) -> None:
        """Test loading without a path returns defaults."""
        assert load_config() == create_default_config()

    def test_load_config_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file falls back to defaults without creating it."""
        config_file = tmp_path / "config.toml"

        config = load_config(config_file)

        assert config == create_default_config()
        assert not config_file.exists()

    def test_load_config_from_file(self, tmp_path: Path) -> None:
        """Test loading every section from a file."""
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            f"""
[paths]
db_file = "{tmp_path / "data" / "encounters.db"}"
backup_dir = "{tmp_path / "backups"}"

[migrations]
backup_before_migrate = false

[connection]
timeout = 1.5
foreign_keys = false
"""
        )

        config = load_config(config_file)

        assert config.db_file == (tmp_path / "data" / "encounters.db").resolve()
        assert config.backup_dir == (tmp_path / "backups").resolve()
        assert config.backup_before_migrate is False
        assert config.timeout == 1.5
        assert config.foreign_keys is False

    def test_load_config_handles_partial_config(self, tmp_path: Path) -> None:
        """Test missing sections and keys come from the defaults."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[connection]\ntimeout = 30.0\n")

        config = load_config(config_file)

        assert config.timeout == 30.0
        assert config.foreign_keys is True
        assert config.db_file == create_default_config().db_file

    def test_load_config_expands_paths_in_toml(self, tmp_path: Path, monkeypatch) -> None:
        """Test environment variables are expanded in paths."""
        monkeypatch.setenv("ENCOUNTER_TEST_DIR", str(tmp_path))
        config_file = tmp_path / "config.toml"
        config_file.write_text('[paths]\ndb_file = "$ENCOUNTER_TEST_DIR/encounters.db"\n')

        config = load_config(config_file)

        assert config.db_file == (tmp_path / "encounters.db").resolve()

    def test_load_config_invalid_toml(self, tmp_path: Path) -> None:
        """Test that invalid TOML raises ValueError."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("[paths\ndb_file = ")

        with pytest.raises(ValueError):
            load_config(config_file)

    def test_load_config_invalid_value(self, tmp_path: Path) -> None:
        """Test that invalid values raise ValueError."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('[connection]\ntimeout = "soon"\n')

        with pytest.raises(ValueError):
            load_config(config_file)
