"""Storage system backed by Dropbox.

Main components:
- StorageProvider: Abstract base class for storage implementations
- LinkResolver: Public link resolution with lazy image style generation
- DropboxStorageProvider: Dropbox implementation of StorageProvider
"""

from .base import (
    Diagnostic,
    RemoteUnavailableException,
    SecurityException,
    Severity,
    StorageException,
    StorageProvider,
)
from .config import DropboxConfig, create_example_config, load_storage_config
from .factory import (
    create_storage,
    create_storage_provider,
    create_style_registry,
    get_storage_config,
)
from .links import LinkResolver
from .paths import DerivationDescriptor, parse_derivation, target

__all__ = [
    # Base classes and exceptions
    "StorageProvider",
    "Diagnostic",
    "Severity",
    "StorageException",
    "SecurityException",
    "RemoteUnavailableException",
    # Link resolution
    "LinkResolver",
    "DerivationDescriptor",
    "parse_derivation",
    "target",
    # Factory functions
    "create_storage",
    "create_storage_provider",
    "create_style_registry",
    "get_storage_config",
    # Configuration
    "DropboxConfig",
    "load_storage_config",
    "create_example_config",
]
