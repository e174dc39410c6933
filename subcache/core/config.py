import os
import logging
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the startup file or environment cannot configure the service."""


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


class Settings:
    PROJECT_NAME: str = "Subscription Cache"

    # Startup file holding the upstream url (overridden by -c)
    DEFAULT_CONFIG_PATH: str = "./config.yaml"

    CACHE_FILE_MODE: int = 0o666

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ

        # Single-slot cache of the last good subscription document
        self.CACHE_PATH: str = env.get("SUBCACHE_CACHE_PATH", "./cache.yaml")

        self.HOST: str = env.get("SUBCACHE_HOST", "0.0.0.0")
        try:
            self.PORT: int = int(env.get("SUBCACHE_PORT", "8080"))
            # Seconds; None means the upstream request never times out
            self.UPSTREAM_TIMEOUT: Optional[float] = _optional_float(env.get("SUBCACHE_UPSTREAM_TIMEOUT"))
        except ValueError as e:
            raise ConfigError(f"invalid environment setting: {e}") from e


class UpstreamConfig(BaseModel):
    """The upstream subscription endpoint, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v


def load_upstream_config(path: str) -> UpstreamConfig:
    """
    Reads the startup YAML file and returns the upstream config.
    Any problem with the file is reported as ConfigError.
    """
    try:
        # Binary mode lets PyYAML report bad encodings as YAMLError
        with open(path, 'rb') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping with a 'url' field")

    try:
        config = UpstreamConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config in {path}: {e}") from e

    logger.info(f"Loaded upstream config from {path}")
    return config
