"""Configuration for the mock server and the fixture generator.

Values are resolved with the following precedence (highest first):
1) Explicit overrides (CLI options)
2) Environment variables prefixed with ``MOCK_ENGINE_``
3) Defaults declared on the models

Pydantic validates the merged result.
"""

import logging
import os
import time
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "MOCK_ENGINE_"
SERVER_NAME = "api-mock-engine"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    grace_period: float = Field(default=5.0, gt=0)
    seed: Optional[int] = None
    server_name: str = SERVER_NAME
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return v


class GenerateConfig(BaseModel):
    seed: int = Field(default_factory=time.time_ns)
    count: int = Field(default=1, ge=1)


def _env(key: str) -> Optional[str]:
    return os.environ.get(ENV_PREFIX + key)


def load_server_config(**overrides) -> ServerConfig:
    """Build a ServerConfig from CLI overrides, then environment, then defaults.

    Overrides whose value is None are ignored so unset CLI options fall
    through to the environment.
    """
    values: dict = {}
    for field in ServerConfig.model_fields:
        env_value = _env(field.upper())
        if env_value is not None and env_value.strip():
            values[field] = env_value.strip()
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ServerConfig(**values)
    except ValidationError as e:
        logger.error("Invalid server configuration: %s", e)
        raise


def load_generate_config(seed: Optional[int] = None, count: Optional[int] = None) -> GenerateConfig:
    values: dict = {}
    if seed is not None:
        values["seed"] = seed
    if count is not None:
        values["count"] = count
    try:
        return GenerateConfig(**values)
    except ValidationError as e:
        logger.error("Invalid generate configuration: %s", e)
        raise


__all__ = [
    "GenerateConfig",
    "ServerConfig",
    "SERVER_NAME",
    "load_generate_config",
    "load_server_config",
]
