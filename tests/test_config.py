"""Tests for extension host configuration."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import yaml

from exthost.config import Config


def test_config_initialization(tmp_path):
    """Test that Config initializes with defaults."""
    with patch.dict(os.environ, {}, clear=True):
        config = Config(tmp_path / ".exthostrc")
        assert config.get("include_builtin") is True
        assert config.get("activation_permissions") == ["ui.render"]
        assert config.get("http.timeout") == 30.0
        assert config.log_level == "INFO"


def test_config_with_env_vars(tmp_path):
    """Test configuration with environment variables."""
    env = {
        "EXTHOST_WORKSPACE": str(tmp_path),
        "EXTHOST_LOG_LEVEL": "debug",
    }
    with patch.dict(os.environ, env, clear=True):
        config = Config(tmp_path / ".exthostrc")
        assert config.workspace_path == tmp_path.resolve()
        assert config.storage_dir == tmp_path.resolve() / ".exthost" / "storage"
        assert config.log_level == "DEBUG"


def test_user_config_overrides_defaults(tmp_path):
    """Test that values from the config file win over defaults."""
    path = tmp_path / ".exthostrc"
    path.write_text(yaml.dump({
        "workspace_path": str(tmp_path),
        "extensions_dirs": ["exts", "/opt/exts"],
        "http": {"timeout": 5},
    }))

    with patch.dict(os.environ, {}, clear=True):
        config = Config(path)
        assert config.get("http.timeout") == 5
        assert config.get("missing.key", "fallback") == "fallback"
        assert config.get_extensions_dirs() == [tmp_path.resolve() / "exts", Path("/opt/exts")]


def test_invalid_config_file_is_ignored(tmp_path):
    path = tmp_path / ".exthostrc"
    path.write_text("extensions_dirs: [unclosed")

    config = Config(path)
    assert config.user_config == {}


def test_set_saves_config(tmp_path):
    path = tmp_path / ".exthostrc"
    config = Config(path)
    config.set("http.timeout", 10)

    with open(path, 'r') as f:
        assert yaml.safe_load(f) == {"http": {"timeout": 10}}


def test_create_default_config():
    """Test creating default configuration file."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / ".exthostrc"

        with patch("pathlib.Path.home", return_value=Path(temp_dir)):
            config = Config()
            assert config.create_default_config() == config_path

            assert config_path.exists()

            # Verify content
            with open(config_path, 'r') as f:
                content = yaml.safe_load(f)

            assert content["extensions_dirs"] == ["extensions"]
            assert content["activation_permissions"] == ["ui.render"]
            assert "settings" in content
