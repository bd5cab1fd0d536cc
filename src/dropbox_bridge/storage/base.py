"""Core storage interfaces, exceptions and diagnostics."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any


class Severity(IntEnum):
    """RFC 5424 log levels used for diagnostic entries."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


@dataclass
class Diagnostic:
    """A single entry reported by a provider health check."""

    severity: Severity
    message: str
    context: dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        """Return the message with its %placeholders substituted."""
        message = self.message
        for placeholder, value in self.context.items():
            message = message.replace(placeholder, value)
        return message


class StorageException(Exception):
    """Base exception for storage operations."""

    pass


class SecurityException(StorageException):
    """Security-related storage exception."""

    pass


class RemoteUnavailableException(StorageException):
    """A remote call failed or returned nothing usable."""

    pass


class StorageProvider(ABC):
    """Abstract base class for all storage providers."""

    @abstractmethod
    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterator[bytes],
        content_type: str | None = None,
    ) -> str:
        """Upload content and return the remote path it was written to.

        Raises:
            StorageException: On upload failure
            SecurityException: On an invalid key
        """
        pass

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Download content by storage key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete file by storage key."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if file exists."""
        pass

    @abstractmethod
    async def list_contents(self, key: str = "", recursive: bool = False) -> list[dict[str, Any]]:
        """List the entries below a key."""
        pass

    @abstractmethod
    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get file metadata (size, modified date, etc.)."""
        pass

    @abstractmethod
    async def get_download_url(self, key: str, expires_in: timedelta | None = None) -> str:
        """Generate a short-lived direct download URL."""
        pass

    @abstractmethod
    async def get_external_url(self, logical_path: str) -> str:
        """Return the URL end users should be given for a logical path."""
        pass

    @abstractmethod
    async def ensure(self) -> list[Diagnostic]:
        """Check the provider is usable. An empty list means healthy."""
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
