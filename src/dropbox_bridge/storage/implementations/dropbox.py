"""Dropbox storage provider with lazily derived public links."""

import asyncio
import threading
from collections.abc import AsyncIterator, Callable
from datetime import timedelta
from functools import partial
from typing import Any

import dropbox
from dropbox.exceptions import ApiError, DropboxException
from dropbox.files import FileMetadata, FolderMetadata, WriteMode
from requests.exceptions import RequestException

from ...logging import get_logger
from .. import paths
from ..base import (
    Diagnostic,
    RemoteUnavailableException,
    SecurityException,
    StorageException,
    StorageProvider,
)
from ..links import LinkResolver
from ..urls import DownloadUrlBuilder

logger = get_logger(__name__)


class DropboxLinkClient:
    """Thin async wrapper around one lazily created ``dropbox.Dropbox`` handle.

    SDK calls run in the default executor. SDK and transport errors are
    re-raised as RemoteUnavailableException.
    """

    def __init__(self, token: str | None, client_id: str = "dropbox-bridge", timeout: float = 100):
        self.token = token
        self.client_id = client_id
        self.timeout = timeout
        self._client: dropbox.Dropbox | None = None
        self._lock = threading.Lock()

    def _get_client(self) -> dropbox.Dropbox:
        """Get or create the Dropbox client; creation happens at most once."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.token:
                        raise RemoteUnavailableException("Dropbox access token is not configured")
                    try:
                        self._client = dropbox.Dropbox(
                            oauth2_access_token=self.token,
                            user_agent=self.client_id,
                            timeout=self.timeout,
                        )
                    except Exception as e:
                        logger.error(f"Failed to initialize Dropbox client: {e}")
                        raise RemoteUnavailableException(
                            f"Dropbox client initialization failed: {e}"
                        ) from e
        return self._client

    def connect(self) -> None:
        """Create the client now instead of on first use."""
        self._get_client()

    async def _run_sync(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a synchronous SDK call in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def call(self, operation: Callable[[dropbox.Dropbox], Any]) -> Any:
        """Run ``operation(client)`` off the event loop, mapping remote failures."""
        try:
            return await self._run_sync(lambda: operation(self._get_client()))
        except (DropboxException, RequestException) as e:
            raise RemoteUnavailableException(str(e)) from e

    async def create_shareable_link(self, path: str) -> str | None:
        """Create, or fetch the existing, shared link for ``path``."""

        def _create(client: dropbox.Dropbox) -> str | None:
            try:
                return client.sharing_create_shared_link_with_settings(path).url
            except ApiError as e:
                if not e.error.is_shared_link_already_exists():
                    raise
            links = client.sharing_list_shared_links(path=path, direct_only=True).links
            return links[0].url if links else None

        return await self.call(_create)

    async def get_account_info(self) -> Any:
        return await self.call(lambda client: client.users_get_current_account())


def _entry_to_dict(entry: Any) -> dict[str, Any]:
    if isinstance(entry, FileMetadata):
        return {
            "type": "file",
            "name": entry.name,
            "path": entry.path_display,
            "id": entry.id,
            "size": entry.size,
            "last_modified": entry.server_modified,
            "content_hash": entry.content_hash,
            "rev": entry.rev,
        }
    if isinstance(entry, FolderMetadata):
        return {"type": "dir", "name": entry.name, "path": entry.path_display, "id": entry.id}
    return {"type": "unknown", "name": entry.name, "path": entry.path_display}


class DropboxStorageProvider(StorageProvider):
    """Dropbox storage exposed through the StorageProvider interface."""

    def __init__(
        self,
        client: DropboxLinkClient,
        resolver: LinkResolver,
        url_builder: DownloadUrlBuilder,
        scheme: str = "dropbox",
        prefix: str = "",
        public: bool = False,
    ):
        self.client = client
        self.resolver = resolver
        self.url_builder = url_builder
        self.scheme = scheme
        self.prefix = prefix
        self.public = public

    def _remote_path(self, key: str) -> str:
        return paths.remote_path(paths.target(key, self.scheme, self.prefix))

    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterator[bytes],
        content_type: str | None = None,
    ) -> str:
        """Upload content to Dropbox, overwriting any existing file."""
        path = self._remote_path(key)
        try:
            if isinstance(content, bytes):
                body = content
            else:
                chunks = []
                async for chunk in content:
                    chunks.append(chunk)
                body = b"".join(chunks)

            metadata = await self.client.call(
                lambda client: client.files_upload(body, path, mode=WriteMode.overwrite)
            )
            logger.info("Uploaded file", path=path, size=len(body), content_type=content_type)
            return metadata.path_display

        except RemoteUnavailableException as e:
            logger.error(f"Failed to upload {path} to Dropbox: {e}")
            raise StorageException(f"Dropbox upload failed: {e}") from e

    async def download(self, key: str) -> bytes:
        """Download file content from Dropbox."""
        path = self._remote_path(key)
        try:
            _, response = await self.client.call(lambda client: client.files_download(path))
            return response.content

        except RemoteUnavailableException as e:
            logger.error(f"Failed to download {path} from Dropbox: {e}")
            raise StorageException(f"Dropbox download failed: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete file by storage key. Returns False if it did not exist."""
        path = self._remote_path(key)

        def _delete(client: dropbox.Dropbox) -> bool:
            try:
                client.files_delete_v2(path)
            except ApiError as e:
                if e.error.is_path_lookup() and e.error.get_path_lookup().is_not_found():
                    return False
                raise
            return True

        try:
            deleted = await self.client.call(_delete)
        except RemoteUnavailableException as e:
            logger.error(f"Failed to delete {path} from Dropbox: {e}")
            raise StorageException(f"Dropbox delete failed: {e}") from e

        logger.debug("Deleted file", path=path, deleted=deleted)
        return deleted

    async def exists(self, key: str) -> bool:
        """Check if file exists."""
        path = self._remote_path(key)
        try:
            await self.client.call(lambda client: client.files_get_metadata(path))
            return True
        except RemoteUnavailableException:
            return False

    async def list_contents(self, key: str = "", recursive: bool = False) -> list[dict[str, Any]]:
        """List a folder, following pagination cursors."""
        # The Dropbox API addresses the root folder as ""
        path = self._remote_path(key) if key.strip("/") else ""

        def _list(client: dropbox.Dropbox) -> list[Any]:
            result = client.files_list_folder(path, recursive=recursive)
            entries = list(result.entries)
            while result.has_more:
                result = client.files_list_folder_continue(result.cursor)
                entries.extend(result.entries)
            return entries

        try:
            entries = await self.client.call(_list)
        except RemoteUnavailableException as e:
            logger.error(f"Failed to list {path or '/'} on Dropbox: {e}")
            raise StorageException(f"Dropbox list failed: {e}") from e

        return [_entry_to_dict(entry) for entry in entries]

    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get file metadata (size, modified date, etc.)."""
        path = self._remote_path(key)
        try:
            entry = await self.client.call(lambda client: client.files_get_metadata(path))
        except RemoteUnavailableException as e:
            logger.error(f"Failed to get metadata for {path} from Dropbox: {e}")
            raise StorageException(f"Dropbox get metadata failed: {e}") from e

        return _entry_to_dict(entry)

    async def get_download_url(self, key: str, expires_in: timedelta | None = None) -> str:
        """Return a Dropbox temporary link.

        Dropbox fixes the lifetime of temporary links at four hours, so
        ``expires_in`` is ignored.
        """
        path = self._remote_path(key)
        try:
            result = await self.client.call(lambda client: client.files_get_temporary_link(path))
            return result.link

        except RemoteUnavailableException as e:
            logger.error(f"Failed to create temporary link for {path}: {e}")
            raise StorageException(f"Dropbox temporary link creation failed: {e}") from e

    async def get_external_url(self, logical_path: str) -> str:
        """Public Dropbox link when enabled and available, else the site download URL.

        Raises:
            StorageException: If the path has no valid target
        """
        if self.public:
            url = await self.resolver.resolve_public_url(logical_path)
            if url:
                return url

        try:
            target = self.resolver.target(logical_path)
        except SecurityException as e:
            logger.error(f"Invalid path {logical_path}: {e}")
            raise StorageException(f"Cannot build a URL for {logical_path}: {e}") from e

        return self.url_builder.build(target)

    async def ensure(self) -> list[Diagnostic]:
        return await self.resolver.ensure()

    async def aclose(self) -> None:
        await self.resolver.aclose()
