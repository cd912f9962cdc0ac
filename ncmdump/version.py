"""Runtime engine version."""

from .main import ncmdump

__version__ = ncmdump.ENGINE_VERSION

__all__ = ["__version__"]
