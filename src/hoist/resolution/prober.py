"""URL existence probing without fetching bodies."""

import asyncio
import typing as t
from abc import ABC, abstractmethod

import aiohttp

from ..infrastructure.logging import get_logger

if t.TYPE_CHECKING:
    import loguru

# Servers that refuse HEAD answer with one of these; retry as GET.
_HEAD_UNSUPPORTED = frozenset({403, 405, 501})


class BaseProber(ABC):
    """Checks whether a URL exists."""

    @abstractmethod
    async def probe(self, url: str) -> bool:
        """True if ``url`` can be fetched. Never raises for network errors."""


class HttpProber(BaseProber):
    """Probes with HEAD, falling back to a GET whose body is never read.

    Any network error or timeout counts as "does not exist": the enquirer
    simply moves on to the next repository.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        *,
        timeout: float | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.client = client
        self.timeout = timeout
        self._logger = logger

    async def probe(self, url: str) -> bool:
        try:
            async with asyncio.timeout(self.timeout):
                status = await self._head(url)
                if status in _HEAD_UNSUPPORTED:
                    status = await self._get_without_body(url)
        except (aiohttp.ClientError, TimeoutError) as exc:
            self._logger.debug(f"Probe failed for {url}: {type(exc).__name__}: {exc}")
            return False

        exists = 200 <= status < 300
        self._logger.debug(f"Probe {url} -> HTTP {status}")
        return exists

    async def _head(self, url: str) -> int:
        async with self.client.head(url, allow_redirects=True) as response:
            return response.status

    async def _get_without_body(self, url: str) -> int:
        async with self.client.get(url) as response:
            status = response.status
            response.release()
            return status
