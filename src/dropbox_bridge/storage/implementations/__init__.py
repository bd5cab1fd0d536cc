"""Storage provider implementations."""

from .dropbox import DropboxLinkClient, DropboxStorageProvider
from .missing import MissingStorageProvider

__all__ = ["DropboxLinkClient", "DropboxStorageProvider", "MissingStorageProvider"]
