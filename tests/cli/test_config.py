"""Tests for config loading and validation."""

from pathlib import Path

import pytest

from cli.config import find_config, get_db_path, load_config
from cli.config_models import JrnlConfig
from journal.errors import ConfigurationError
from shared_types import OutputFormat


def test_defaults_without_file(isolated_env):
    config = load_config()
    assert config.paths.db is None
    assert config.store.busy_timeout == 5.0
    assert config.logging.level == "WARNING"
    assert config.logging.json_mode is False
    assert config.output.format == OutputFormat.TEXT
    assert get_db_path(config) == isolated_env / ".jrnl.db"


def test_find_config_prefers_cwd(tmp_path, isolated_env):
    home_cfg = isolated_env / ".jrnl" / "config.yaml"
    home_cfg.parent.mkdir()
    home_cfg.write_text("output:\n  sort: true\n")
    assert find_config() == home_cfg

    (tmp_path / "jrnl.yaml").write_text("{}\n")
    assert find_config() == Path.cwd() / "jrnl.yaml"


def test_find_config_xdg(isolated_env):
    xdg = isolated_env / ".config" / "jrnl" / "config.yaml"
    xdg.parent.mkdir(parents=True)
    xdg.write_text("{}\n")
    assert find_config() == xdg


def test_load_yaml(tmp_path):
    cfg = tmp_path / "custom.yaml"
    cfg.write_text(
        "paths:\n"
        "  db: ~/notes/journal.db\n"
        "store:\n"
        "  busy_timeout: 0.5\n"
        "logging:\n"
        "  level: debug\n"
        "  json: true\n"
        "output:\n"
        "  sort: true\n"
        "  format: json\n"
    )
    config = load_config(cfg)
    assert config.store.busy_timeout == 0.5
    assert config.logging.level == "DEBUG"
    assert config.logging.json_mode is True
    assert config.output.sort is True
    assert config.output.format == OutputFormat.JSON
    assert get_db_path(config) == Path.home() / "notes" / "journal.db"


def test_env_var_reference(tmp_path, monkeypatch):
    monkeypatch.setenv("MY_JOURNAL", str(tmp_path / "from-env.db"))
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text("paths:\n  db: ${MY_JOURNAL}\n")
    assert load_config(cfg).paths.db == tmp_path / "from-env.db"


def test_unset_env_var_reference_means_default(tmp_path, monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text("paths:\n  db: ${NOT_SET_ANYWHERE}\n")
    assert load_config(cfg).paths.db is None


def test_jrnl_db_env_wins(tmp_path, monkeypatch):
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text(f"paths:\n  db: {tmp_path / 'file.db'}\n")
    monkeypatch.setenv("JRNL_DB", str(tmp_path / "env.db"))
    assert load_config(cfg).paths.db == tmp_path / "env.db"


def test_cli_override_wins(tmp_path):
    config = JrnlConfig.from_dict({"paths": {"db": str(tmp_path / "file.db")}})
    assert get_db_path(config, tmp_path / "cli.db") == tmp_path / "cli.db"


def test_invalid_yaml(tmp_path):
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text("paths: [unclosed\n")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_config(cfg)


def test_non_mapping(tmp_path):
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(cfg)


@pytest.mark.parametrize(
    "body",
    [
        "logging:\n  level: LOUD\n",
        "store:\n  busy_timeout: -1\n",
        "output:\n  format: xml\n",
    ],
)
def test_validation_errors(tmp_path, body):
    cfg = tmp_path / "jrnl.yaml"
    cfg.write_text(body)
    with pytest.raises(ConfigurationError, match="validation failed"):
        load_config(cfg)
