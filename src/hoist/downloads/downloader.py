"""HTTP downloader publishing files only after a complete stream.

Bytes are streamed into a hidden temporary file beside the destination and
renamed into place once the response has been fully written, so an
interrupted download never leaves a partial file at the published path.
"""

import asyncio
import typing as t
from pathlib import Path

import aiofiles
import aiofiles.os
import aiohttp
from aiofiles.threadpool.binary import AsyncBufferedIOBase

from ..domain.error_info import ErrorInfo
from ..domain.exceptions import DownloadFailureError
from ..events import (
    BaseEmitter,
    DownloadCompletedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    NullEmitter,
)
from ..infrastructure.logging import get_logger
from ..infrastructure.storage import discard, temporary_sibling

if t.TYPE_CHECKING:
    import loguru

# Checksum files and snapshot descriptors are tiny; anything bigger is not
# what we asked for.
MAX_TEXT_BYTES = 1024 * 1024


class Downloader:
    """Fetches artifacts and small text documents over HTTP.

    Implementation Decisions:
    - Uses dependency injection for client, logger and emitter to enable easy
      testing and configuration
    - Every request runs under the configured timeout; a timeout is a failure,
      never a partial result
    - No retries: callers decide whether a failed fetch is worth repeating
    - Wraps network errors in DownloadFailureError so callers handle a single
      exception type
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        logger: "loguru.Logger" = get_logger(__name__),
        emitter: BaseEmitter | None = None,
        *,
        timeout: float | None = None,
        chunk_size: int = 64 * 1024,
    ) -> None:
        """Initialize the downloader.

        Args:
            client: Configured aiohttp ClientSession for making HTTP requests
            logger: Logger instance for recording download events and errors
            emitter: Event emitter for download.* events. If None, a
                    NullEmitter is used.
            timeout: Maximum time in seconds for one request (None = no limit)
            chunk_size: Size of data chunks to read/write
        """
        self.client = client
        self.logger = logger
        self._emitter = emitter or NullEmitter()
        self.timeout = timeout
        self.chunk_size = chunk_size

    @property
    def emitter(self) -> BaseEmitter:
        """Event emitter for broadcasting download events."""
        return self._emitter

    async def _write_chunk_to_file(
        self, chunk: bytes, file_handle: AsyncBufferedIOBase
    ) -> None:
        await file_handle.write(chunk)

    async def fetch(self, url: str, destination: Path) -> Path:
        """Download ``url`` and publish it at ``destination``.

        Returns:
            The published destination path.

        Raises:
            DownloadFailureError: For network, HTTP status, timeout or file
                system errors. Nothing is left at ``destination`` and the
                temporary file is removed.
        """
        await aiofiles.os.makedirs(destination.parent, exist_ok=True)
        staging_path = temporary_sibling(destination, suffix=".part")
        bytes_downloaded = 0
        self.logger.debug(f"Starting download: {url} -> {destination}")

        try:
            async with asyncio.timeout(self.timeout):
                async with self.client.get(url) as response:
                    self._raise_for_status(url, response)
                    await self.emitter.emit(
                        "download.started",
                        DownloadStartedEvent(
                            url=url, total_bytes=response.content_length
                        ),
                    )
                    async with aiofiles.open(staging_path, "wb") as file_handle:
                        async for chunk in response.content.iter_chunked(
                            self.chunk_size
                        ):
                            await self._write_chunk_to_file(chunk, file_handle)
                            bytes_downloaded += len(chunk)

            await aiofiles.os.replace(staging_path, destination)

        except asyncio.CancelledError:
            # Cancellation is not a failure: clean up, no download.failed.
            await self._cleanup_partial_file(staging_path)
            self.logger.debug(f"Download cancelled, cleaned up: {staging_path}")
            raise

        except Exception as download_error:
            await self._cleanup_partial_file(staging_path)
            failure = self._categorise_error(download_error, url)
            self.logger.error(str(failure))
            await self.emitter.emit(
                "download.failed",
                DownloadFailedEvent(
                    url=url, error=ErrorInfo.from_exception(download_error)
                ),
            )
            if failure is download_error:
                raise
            raise failure from download_error

        self.logger.debug(f"Download completed successfully: {destination}")
        await self.emitter.emit(
            "download.completed",
            DownloadCompletedEvent(
                url=url,
                destination_path=str(destination),
                total_bytes=bytes_downloaded,
            ),
        )
        return destination

    async def fetch_text(self, url: str) -> str:
        """Fetch a small UTF-8 document such as a checksum file or descriptor.

        Raises:
            DownloadFailureError: On any failure, including oversized bodies.
        """
        try:
            async with asyncio.timeout(self.timeout):
                async with self.client.get(url) as response:
                    self._raise_for_status(url, response)
                    body = bytearray()
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        body.extend(chunk)
                        if len(body) > MAX_TEXT_BYTES:
                            raise DownloadFailureError(url, "Document too large")
        except DownloadFailureError:
            raise
        except Exception as fetch_error:
            failure = self._categorise_error(fetch_error, url)
            self.logger.debug(str(failure))
            raise failure from fetch_error

        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DownloadFailureError(url, "Document is not valid UTF-8") from exc

    @staticmethod
    def _raise_for_status(url: str, response: aiohttp.ClientResponse) -> None:
        if not 200 <= response.status < 300:
            raise DownloadFailureError(
                url, f"HTTP {response.status} error", status=response.status
            )

    def _categorise_error(
        self, exception: Exception, url: str
    ) -> DownloadFailureError:
        """Map an exception to a DownloadFailureError with a meaningful message.

        Categorises exceptions by type so error patterns are clear in logs.
        """
        match exception:
            case DownloadFailureError():
                return exception

            # Network connection errors - issues establishing connection
            case aiohttp.ClientSSLError():
                error_category = "SSL/TLS error"
            case aiohttp.ClientConnectorError():
                error_category = "Connection failed"
            case aiohttp.ClientOSError():
                error_category = "Network error"

            # HTTP response errors - server responded but with error
            case aiohttp.ClientResponseError():
                return DownloadFailureError(
                    url,
                    f"HTTP {exception.status} error",
                    status=exception.status,
                )
            case aiohttp.ClientPayloadError():
                error_category = "Invalid response payload"
            case aiohttp.ClientError():
                error_category = "HTTP client error"

            # Timeout errors - operation took too long
            case TimeoutError():
                error_category = "Timed out"

            # File system errors - issues writing to disk
            case PermissionError():
                error_category = "Permission denied writing file"
            case OSError():
                error_category = "File system error"

            case _:
                error_category = "Unexpected error"
                self.logger.debug(
                    f"Uncaught exception of type {type(exception).__name__}: {exception}"
                )

        return DownloadFailureError(url, f"{error_category} ({exception})")

    async def _cleanup_partial_file(self, file_path: Path) -> None:
        """Remove a partially written file if it exists.

        Logs cleanup failures but doesn't raise, to avoid masking the
        original error.
        """
        try:
            await discard(file_path)
        except OSError as cleanup_error:
            self.logger.warning(
                f"Failed to clean up partial file {file_path}: {cleanup_error}"
            )
