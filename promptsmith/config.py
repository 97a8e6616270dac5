"""Runtime settings for the rule and scoring engine.

Settings come from a YAML file (``PROMPTSMITH_CONFIG``, default
``config/promptsmith.yml``) with a couple of environment overrides. A missing
default file simply means "use the defaults"; a file named through the
environment must exist, and a broken file is fatal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from promptsmith.errors import ConfigurationError

logger = logging.getLogger("promptsmith.config")

CONFIG_ENV_VAR = "PROMPTSMITH_CONFIG"
DEFAULT_CONFIG_PATH = "config/promptsmith.yml"

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    match_weight: int = Field(default=2, ge=1, description="Score added per detection pattern match")
    hint_bonus: int = Field(default=3, ge=0, description="Flat bonus per analyzer domain hint")
    detection_floor: int = Field(default=2, ge=0, description="Minimum score to trust a domain")
    complexity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    close_call_margin: float = Field(default=0.05, ge=0.0, le=1.0)
    compare_workers: int = Field(default=1, ge=1, le=32)
    log_level: str = "WARNING"

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("log_level", mode="before")
    def _level(cls, v):  # type: ignore
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return level


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    level = os.environ.get("PROMPTSMITH_LOG_LEVEL")
    if level:
        overrides["log_level"] = level
    workers = os.environ.get("PROMPTSMITH_COMPARE_WORKERS")
    if workers:
        overrides["compare_workers"] = workers
    return overrides


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """Build Settings from an explicit path, the env-configured path, or defaults.

    Raises:
        ConfigurationError: a named file is missing or unreadable, or a value
            is invalid. Only the default path may be absent.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        target = Path(path)
        if not target.exists():
            raise ConfigurationError(f"Settings file not found: {target}")
        data = _read_yaml(target)
    else:
        named = os.environ.get(CONFIG_ENV_VAR)
        if named:
            target = Path(named)
            if not target.exists():
                raise ConfigurationError(f"Settings file not found: {target} (from {CONFIG_ENV_VAR})")
            data = _read_yaml(target)
        elif Path(DEFAULT_CONFIG_PATH).exists():
            data = _read_yaml(Path(DEFAULT_CONFIG_PATH))
        else:
            logger.debug("No settings file at %s, using defaults", DEFAULT_CONFIG_PATH)

    data.update(_env_overrides())
    try:
        settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
    logger.debug("Loaded settings: %s", settings.model_dump())
    return settings


def configure_logging(level: str = "WARNING") -> None:
    """Attach a basic stderr handler; only front ends call this."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["Settings", "load_settings", "configure_logging", "CONFIG_ENV_VAR"]
