"""Pydantic configuration models for jrnl."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shared_types import OutputFormat


def _expand_env(value: str) -> str:
    """Expand a whole-value ``${VAR}`` reference."""
    if value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class PathsConfig(BaseModel):
    """File paths configuration."""

    db: Optional[Path] = None  # None = ~/.jrnl.db

    @field_validator("db", mode="before")
    @classmethod
    def expand_db(cls, v):
        if isinstance(v, str):
            v = _expand_env(v)
            return Path(v) if v else None
        return v


class StoreConfig(BaseModel):
    """Quad store connection settings."""

    busy_timeout: float = 5.0

    @field_validator("busy_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"busy_timeout must be >= 0, got {v}")
        return v


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    json_mode: bool = Field(default=False, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class OutputConfig(BaseModel):
    """How `jrnl get` renders entries by default."""

    sort: bool = False
    format: OutputFormat = OutputFormat.TEXT


class JrnlConfig(BaseModel):
    """Main configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def apply_env_overrides(self):
        """JRNL_DB wins over the config file."""
        env_db = os.getenv("JRNL_DB")
        if env_db:
            self.paths.db = Path(env_db)
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "JrnlConfig":
        return cls.model_validate(data)
