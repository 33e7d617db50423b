"""Portal to Kong gateway reconciliation adapter."""

from kong_adapter.__version__ import __version__

__all__ = ["__version__"]
