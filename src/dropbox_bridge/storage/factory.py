"""Factory for creating the Dropbox storage provider."""

from pathlib import Path

import httpx

from ..config import Settings
from ..logging import get_logger
from ..styles import StyleRegistry
from .base import StorageException, StorageProvider
from .config import DropboxConfig, load_storage_config
from .derivation import DerivationTrigger
from .implementations.dropbox import DropboxLinkClient, DropboxStorageProvider
from .implementations.missing import MissingStorageProvider
from .links import LinkResolver
from .urls import DownloadUrlBuilder

logger = get_logger(__name__)

# Singleton storage configuration
# Loaded once to avoid re-parsing YAML on every request
_storage_config: DropboxConfig | None = None


def get_storage_config() -> DropboxConfig:
    """Get the singleton storage configuration.

    Loads the configuration from settings.storage_config_path on first access.
    Subsequent calls return the cached configuration.
    """
    global _storage_config

    if _storage_config is None:
        from ..config import settings

        config_path = Path(settings.storage_config_path) if settings.storage_config_path else None
        _storage_config = load_storage_config(config_path)
        logger.info(
            "Loaded storage configuration",
            scheme=_storage_config.scheme,
            prefix=_storage_config.prefix,
            public=_storage_config.public,
        )

    return _storage_config


def create_style_registry(settings: Settings) -> StyleRegistry:
    """Load image styles from the styles file, falling back to the storage config file."""
    config_path = settings.styles_config_path or settings.storage_config_path
    if not config_path or not Path(config_path).exists():
        logger.debug("No image styles configured")
        return StyleRegistry()

    return StyleRegistry.from_yaml(
        Path(config_path), private_key=settings.private_key, hash_salt=settings.hash_salt
    )


def create_storage_provider(
    config: DropboxConfig,
    styles: StyleRegistry,
    http_client: httpx.AsyncClient | None = None,
) -> StorageProvider:
    """Wire a Dropbox provider together.

    If the Dropbox client cannot be created, a MissingStorageProvider is
    returned so callers still get download URLs.
    """
    url_builder = DownloadUrlBuilder(config.download_url_base, config.scheme)
    client = DropboxLinkClient(config.token, config.client_id)

    try:
        client.connect()
    except StorageException as e:
        logger.error("Dropbox client unavailable, using missing adapter", error=str(e))
        return MissingStorageProvider(str(e), url_builder, prefix=config.prefix)

    resolver = LinkResolver(
        client=client,
        trigger=DerivationTrigger(http_client, timeout=config.derivation_timeout),
        styles=styles,
        url_builder=url_builder,
        scheme=config.scheme,
        prefix=config.prefix,
    )

    logger.info("Registered Dropbox storage provider", scheme=config.scheme, styles=len(styles))
    return DropboxStorageProvider(
        client=client,
        resolver=resolver,
        url_builder=url_builder,
        scheme=config.scheme,
        prefix=config.prefix,
        public=config.public,
    )


def create_storage() -> StorageProvider:
    """Create the provider from global settings."""
    from ..config import settings

    styles = create_style_registry(settings)
    try:
        config = get_storage_config()
    except ValueError as e:
        logger.error("Invalid storage configuration", error=str(e))
        defaults = DropboxConfig()
        url_builder = DownloadUrlBuilder(defaults.download_url_base, defaults.scheme)
        return MissingStorageProvider(str(e), url_builder, prefix=defaults.prefix)

    return create_storage_provider(config, styles)
