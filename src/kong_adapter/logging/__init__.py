"""Logging configuration for kong_adapter."""

from kong_adapter.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
