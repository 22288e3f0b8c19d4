"""Configuration loading and management."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from journal.errors import ConfigurationError
from journal.storage import resolve_db_path

from .config_models import JrnlConfig


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [Path.cwd() / "jrnl.yaml"]
    try:
        home = Path.home()
    except RuntimeError:
        home = None
    if home is not None:
        locations += [
            home / ".jrnl" / "config.yaml",
            home / ".config" / "jrnl" / "config.yaml",
        ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def load_config(config_path: Optional[Path] = None) -> JrnlConfig:
    """Load configuration from file or defaults.

    Raises:
        ConfigurationError: unreadable file, invalid YAML, or validation failure.
    """
    base_config = {}

    path = config_path or find_config()
    if path:
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e
        if not isinstance(base_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

    try:
        return JrnlConfig.from_dict(base_config)
    except ValidationError as e:
        raise ConfigurationError(f"Config validation failed: {e}") from e


def get_db_path(config: JrnlConfig, override: Optional[str | Path] = None) -> Path:
    """Backing-file path: CLI override, then config/env, then ``~/.jrnl.db``."""
    return resolve_db_path(override or config.paths.db)
