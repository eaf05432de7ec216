import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import BaseModel, field_validator

CONFIG_DIR = Path.home() / ".formulatree"
CONFIG_FILE = CONFIG_DIR / "config"

ENV_PREFIX = "FORMULATREE_"


class Settings(BaseModel):
    """runtime settings for the parser."""
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "WARNING"
    # log a caret marker under the offending token when parsing fails
    show_markers: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def _read_config_file(path: Path) -> Dict[str, str]:
    config = {}
    if not path.exists():
        return config

    try:
        with open(path, "r") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                config[key.strip()] = value.strip()
    except (IOError, PermissionError, OSError):
        # if we can't read the file, treat as not configured
        return {}
    return config


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    load settings from the config file, then apply environment overrides.

    the config file holds KEY=VALUE lines such as ``FORMULATREE_LOG_LEVEL=DEBUG``.
    """
    values = _read_config_file(path or CONFIG_FILE)
    values.update({k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)})

    fields = {}
    for name in Settings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in values:
            fields[name] = values[key]
    return Settings(**fields)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """settings loaded once per process."""
    return load_settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """apply the configured log level to the formulatree logger."""
    settings = settings or get_settings()
    logging.getLogger("formulatree").setLevel(settings.log_level)
