"""
Dropbox bridge
Exposes a Dropbox account as a storage provider with lazily derived public links
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
