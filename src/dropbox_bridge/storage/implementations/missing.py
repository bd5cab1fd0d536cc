"""Stand-in provider used when the Dropbox client cannot be set up."""

from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any

from .. import paths
from ..base import Diagnostic, Severity, StorageException, StorageProvider
from ..urls import DownloadUrlBuilder


class MissingStorageProvider(StorageProvider):
    """Fails every file operation but still hands out site download URLs."""

    def __init__(self, reason: str, url_builder: DownloadUrlBuilder, prefix: str = ""):
        self.reason = reason
        self.url_builder = url_builder
        self.prefix = prefix

    def _unavailable(self) -> StorageException:
        return StorageException(f"Dropbox storage is not available: {self.reason}")

    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterator[bytes],
        content_type: str | None = None,
    ) -> str:
        raise self._unavailable()

    async def download(self, key: str) -> bytes:
        raise self._unavailable()

    async def delete(self, key: str) -> bool:
        raise self._unavailable()

    async def exists(self, key: str) -> bool:
        return False

    async def list_contents(self, key: str = "", recursive: bool = False) -> list[dict[str, Any]]:
        raise self._unavailable()

    async def get_metadata(self, key: str) -> dict[str, Any]:
        raise self._unavailable()

    async def get_download_url(self, key: str, expires_in: timedelta | None = None) -> str:
        raise self._unavailable()

    async def get_external_url(self, logical_path: str) -> str:
        target = paths.target(logical_path, self.url_builder.scheme, self.prefix)
        return self.url_builder.build(target)

    async def ensure(self) -> list[Diagnostic]:
        return [
            Diagnostic(
                severity=Severity.ERROR,
                message="The Dropbox adapter is missing: %reason.",
                context={"%reason": self.reason},
            )
        ]
