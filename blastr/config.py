"""Configuration management for blastr."""

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .core.errors import ConfigurationError

# Load .env file
load_dotenv()

DEFAULT_ENDPOINT = "https://blast.ncbi.nlm.nih.gov/blast/Blast.cgi"
DEFAULT_TICK_INTERVAL = 30.0
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class PollerConfig(BaseModel):
    """Configuration for the BLAST job poller."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="BLAST URL API base URL")
    tick_interval: float = Field(default=DEFAULT_TICK_INTERVAL, description="Seconds between status checks")
    request_timeout: float = Field(default=60.0, description="Total timeout per HTTP request (seconds)")
    max_polls: Optional[int] = Field(
        default=None, description="Maximum number of status checks; None polls until a terminal state"
    )
    user_agent: str = Field(default=f"blastr/{__version__}", description="User-Agent header sent upstream")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return v

    @field_validator("tick_interval", "request_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("max_polls")
    @classmethod
    def validate_max_polls(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("must be at least 1 when set")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def from_env(cls, **overrides: Any) -> "PollerConfig":
        """
        Load configuration from environment variables.

        Environment variable mapping:
        - BLASTR_ENDPOINT: BLAST URL API base URL
        - BLASTR_TICK_INTERVAL: seconds between status checks
        - BLASTR_REQUEST_TIMEOUT: per-request timeout in seconds
        - BLASTR_MAX_POLLS: optional bound on status checks
        - BLASTR_USER_AGENT: User-Agent header
        - BLASTR_LOG_LEVEL: logging level

        Keyword overrides that are not None take precedence over the
        environment.

        Raises:
            ConfigurationError: If a value is missing the expected type or range
        """
        env_map = {
            "endpoint": "BLASTR_ENDPOINT",
            "tick_interval": "BLASTR_TICK_INTERVAL",
            "request_timeout": "BLASTR_REQUEST_TIMEOUT",
            "max_polls": "BLASTR_MAX_POLLS",
            "user_agent": "BLASTR_USER_AGENT",
            "log_level": "BLASTR_LOG_LEVEL",
        }

        values = {}
        for field_name, env_name in env_map.items():
            env_val = os.getenv(env_name)
            if env_val:
                values[field_name] = env_val
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            key = str(first["loc"][0]) if first.get("loc") else "config"
            raise ConfigurationError(key, values.get(key), first["msg"]) from e
