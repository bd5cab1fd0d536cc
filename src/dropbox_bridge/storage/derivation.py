"""HTTP trigger that makes the site materialize a derived artifact."""

import httpx

from ..logging import get_logger

logger = get_logger(__name__)


class DerivationTrigger:
    """Fetches a derivative URL so the serving site writes the derivative to Dropbox.

    The endpoint is expected to block until the derivative exists. Only a 200
    response counts as success and nothing is retried.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None, timeout: float = 30.0):
        self.timeout = timeout
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def trigger(self, url: str, timeout: float | None = None) -> bool:
        """GET ``url`` and report whether the derivative was generated."""
        try:
            response = await self._http_client.get(
                url, timeout=timeout if timeout is not None else self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning("Derivation request failed", url=url, error=str(e))
            return False

        if response.status_code != 200:
            logger.warning(
                "Derivation endpoint refused request", url=url, status_code=response.status_code
            )
            return False

        logger.debug("Derivation succeeded", url=url)
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()
