"""Version information for kong_adapter."""

__version__ = "0.1.0"
