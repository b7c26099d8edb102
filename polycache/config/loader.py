"""
polycache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import PolycacheConfig

logger = logging.getLogger(__name__)

_config_instance: PolycacheConfig | None = None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> PolycacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated PolycacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    # Load .env file if exists
    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    # Auto-detect backend: Redis if REDIS_URL is set, else memory
    redis_url = os.getenv("REDIS_URL")
    cache_backend = "redis" if redis_url else "memory"

    try:
        config_dict = {
            "environment": os.getenv("ENVIRONMENT", "development"),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "json_logs": _env_bool("LOG_JSON", "true"),
            "cache": {
                "backend": os.getenv("CACHE_BACKEND", cache_backend),
                "default_ttl": int(os.getenv("CACHE_DEFAULT_TTL", "0")),
                "maximum_ttl": int(os.getenv("CACHE_MAXIMUM_TTL", "0")),
                "suffix": os.getenv("CACHE_SUFFIX"),
                "clear_strategy": os.getenv("CACHE_CLEAR_STRATEGY", "flush"),
                "serializer": os.getenv("CACHE_SERIALIZER", "pickle"),
                "swallow_backend_errors": _env_bool("CACHE_SWALLOW_BACKEND_ERRORS", "true"),
                "max_size": int(os.getenv("CACHE_MAX_SIZE", "1000")),
                "stampede": {
                    "enabled": _env_bool("CACHE_STAMPEDE_PROTECTION", "false"),
                    "beta": int(os.getenv("CACHE_STAMPEDE_BETA", "3")),
                    "delta": int(os.getenv("CACHE_STAMPEDE_DELTA", "10")),
                },
                "redis_url": redis_url,
                "redis_max_connections": int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
                "redis_socket_timeout": int(os.getenv("REDIS_SOCKET_TIMEOUT", "5")),
            },
        }
    except ValueError as e:
        logger.error("Non-integer value in cache environment variables: %s", e, extra={"error": str(e)})
        raise ConfigurationError(
            f"Invalid numeric environment variable: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = PolycacheConfig(**config_dict)  # type: ignore[arg-type]
        logger.info(
            "Configuration loaded successfully (environment: %s)",
            _config_instance.environment,
            extra={"environment": _config_instance.environment, "cache_backend": str(_config_instance.cache.backend)},
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> PolycacheConfig:
    """
    Get the current configuration instance.

    Loads it from the environment on first access.
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> PolycacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded PolycacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Forget the loaded configuration. Used by tests."""
    global _config_instance
    _config_instance = None
