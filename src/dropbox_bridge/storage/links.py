"""Public link resolution with lazy derivative generation.

Resolution of a logical path:

1. Ask Dropbox for a shared link to the target. Existing files, derived or
   not, return here.
2. Otherwise, if the target names an image style derivative of a registered
   style, request the derivative from the site once (the request blocks until
   the derivative is written to Dropbox) and ask for the shared link once more.
3. Anything else yields None and the caller falls back to a non-public URL.

Remote failures never escape ``resolve_public_url``; they all collapse into
"no link available right now".
"""

from typing import Any, Protocol

import httpx

from ..logging import bind_operation, clear_operation, get_logger
from ..styles import StyleRegistry
from . import paths
from .base import Diagnostic, RemoteUnavailableException, SecurityException, Severity
from .derivation import DerivationTrigger
from .urls import DownloadUrlBuilder

logger = get_logger(__name__)

ENSURE_FAILURE_MESSAGE = "The Dropbox client failed with: %error."


class LinkClient(Protocol):
    """Remote calls the resolver needs. Failures raise RemoteUnavailableException."""

    async def create_shareable_link(self, path: str) -> str | None: ...

    async def get_account_info(self) -> Any: ...


class LinkResolver:
    """Produces the best available public URL for a logical path."""

    def __init__(
        self,
        client: LinkClient,
        trigger: DerivationTrigger,
        styles: StyleRegistry,
        url_builder: DownloadUrlBuilder,
        scheme: str,
        prefix: str = "",
    ):
        self.client = client
        self.trigger = trigger
        self.styles = styles
        self.url_builder = url_builder
        self.scheme = scheme
        self.prefix = prefix

    def target(self, logical_path: str) -> str:
        return paths.target(logical_path, self.scheme, self.prefix)

    async def resolve_public_url(self, logical_path: str) -> str | None:
        """Return a public link for ``logical_path``, or None if none can be produced."""
        bind_operation()
        try:
            try:
                target = self.target(logical_path)
            except SecurityException as e:
                logger.warning("Rejected path", path=logical_path, error=str(e))
                return None

            # Quick exit for existing files.
            link = await self.try_shareable_link(target)
            if link:
                return link

            if await self._derive(logical_path, target):
                return await self.try_shareable_link(target)

            return None
        finally:
            clear_operation()

    async def _derive(self, logical_path: str, target: str) -> bool:
        """Trigger generation of the derivative named by ``target``, if it names one."""
        descriptor = paths.parse_derivation(target)
        if descriptor is None:
            return False

        style = self.styles.load(descriptor.style_name)
        if style is None:
            logger.debug("Unknown image style", style=descriptor.style_name, target=target)
            return False

        url = httpx.URL(self.url_builder.build(target)).copy_set_param(
            "itok", style.path_token(descriptor.source_uri)
        )

        logger.info("Generating derivative", path=logical_path, style=style.name)
        return await self.trigger.trigger(str(url))

    async def try_shareable_link(self, target: str) -> str | None:
        """Return the shared link for ``target`` forced to download, or None."""
        try:
            link = await self.client.create_shareable_link(paths.remote_path(target))
        except RemoteUnavailableException as e:
            logger.debug("No shared link available", target=target, error=str(e))
            return None

        if not link:
            return None

        try:
            return str(httpx.URL(link).copy_set_param("dl", "1"))
        except httpx.InvalidURL as e:
            logger.warning("Dropbox returned an invalid link", target=target, error=str(e))
            return None

    async def ensure(self) -> list[Diagnostic]:
        """Check the Dropbox account is reachable."""
        try:
            await self.client.get_account_info()
        except RemoteUnavailableException as e:
            logger.error("Dropbox account check failed", error=str(e))
            return [
                Diagnostic(
                    severity=Severity.ERROR,
                    message=ENSURE_FAILURE_MESSAGE,
                    context={"%error": str(e)},
                )
            ]

        return []

    async def aclose(self) -> None:
        await self.trigger.aclose()
