"""
polycache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is read from environment variables and validated up front.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Supported storage backends."""

    MEMORY = "memory"
    REDIS = "redis"  # Requires the redis client
    MAPPING = "mapping"  # Requires a caller-supplied mapping (e.g. a session)


class ClearStrategy(str, Enum):
    """How clear() removes a cache's entries."""

    FLUSH = "flush"  # wipe the whole store
    GENERATION = "generation"  # bump the generation counter, abandon old keys


class SerializerName(str, Enum):
    """Supported Item serializers."""

    PICKLE = "pickle"
    JSON = "json"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StampedeConfig(BaseModel):
    """Probabilistic early expiration settings."""

    enabled: bool = Field(default=False, description="Enable stampede protection")
    beta: int = Field(default=3, ge=1, le=10, description="Early expiration scale (1-10)")
    delta: int = Field(default=10, ge=1, le=100, description="Percentage of TTL eligible for early expiration")


class CacheConfig(BaseModel):
    """Cache configuration."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Storage backend to use")
    default_ttl: int = Field(default=0, ge=0, description="TTL used when set() gets none (0 = no expiry)")
    maximum_ttl: int = Field(default=0, ge=0, description="Ceiling applied to every TTL (0 = unbounded)")
    suffix: str | None = Field(default=None, description="Per-deployment key namespace")
    clear_strategy: ClearStrategy = Field(default=ClearStrategy.FLUSH, description="clear() behaviour")
    serializer: SerializerName = Field(default=SerializerName.PICKLE, description="Item serializer")
    swallow_backend_errors: bool = Field(
        default=True,
        description="Degrade to misses and failed writes instead of raising when the store is down",
    )
    stampede: StampedeConfig = Field(default_factory=StampedeConfig)

    # Memory-specific settings (only used when backend=memory)
    max_size: int = Field(default=1000, ge=1, description="Max cache entries (memory backend)")

    # Redis-specific settings (only used when backend=redis)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: int = Field(default=5, ge=1, description="Redis socket timeout in seconds")

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v: str | None) -> str | None:
        """Empty suffixes mean no suffix; reserved characters are rejected."""
        if v is None or not v.strip():
            return None
        if any(char in v for char in "{}()/\\@:"):
            raise ValueError("suffix must not contain any of `{}()/\\@:`")
        return v.strip()

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None, info: Any) -> str | None:
        """Ensure redis_url is provided when backend is redis."""
        backend = info.data.get("backend")
        if backend == CacheBackend.REDIS and not v:
            raise ValueError("redis_url is required when cache backend is 'redis'")
        return v


class PolycacheConfig(BaseModel):
    """Root configuration for polycache."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
