"""
polycache - Observability Module

Logging setup for the library. Degraded cache operations (backend
failures, undecodable entries) are reported through these loggers.

Usage:
    from polycache.observability import setup_logging

    setup_logging("DEBUG")
"""

from .monitoring import (
    JSONFormatter,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "JSONFormatter",
    "setup_logging",
    "setup_logging_from_config",
]
