"""Checksum verification of staged artifacts."""

import hmac
import typing as t
from pathlib import Path

import aiofiles.os

from ..config.settings import VerificationPolicy
from ..domain.exceptions import (
    DownloadFailureError,
    FileAccessError,
    HashMismatchError,
    VerificationFailureError,
)
from ..domain.hash_validation import (
    ChecksumSource,
    HashAlgorithm,
    VerificationResult,
    parse_checksum_document,
)
from ..infrastructure.logging import get_logger
from .cache import VerificationCache
from .calculator import ChecksumCalculator

if t.TYPE_CHECKING:
    import loguru

    from ..downloads.downloader import Downloader


class ChecksumVerifier:
    """Authenticates a local file's digest against its checksum source.

    With a source, the expected digest (pinned, or fetched from a published
    checksum file) is compared case-insensitively with the local digest. A
    mismatch raises HashMismatchError. Without a source the ``policy``
    decides: STRICT raises, PASSTHROUGH reports ``verified=False``.

    The policy has no default; accepting unverifiable artifacts is always an
    explicit decision of the caller.
    """

    def __init__(
        self,
        fetcher: "Downloader",
        cache: VerificationCache,
        *,
        policy: VerificationPolicy,
        calculator: ChecksumCalculator | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self.policy = policy
        self._calculator = calculator or ChecksumCalculator()
        self._logger = logger

    async def verify(
        self,
        file_path: Path,
        source: ChecksumSource | None,
        algorithm: HashAlgorithm,
    ) -> VerificationResult:
        """Verify ``file_path``.

        Returns:
            The outcome; ``verified`` is False only under PASSTHROUGH.

        Raises:
            HashMismatchError: If the digests differ.
            VerificationFailureError: If no source exists under STRICT, or the
                expected digest cannot be obtained.
            FileAccessError: If the file cannot be read.
        """
        if not await aiofiles.os.path.isfile(file_path):
            raise FileAccessError(f"File not found for verification: {file_path}")

        cached = await self._cache.get(file_path, algorithm)
        # A pinned digest is always compared; only remote fetches are skipped.
        pinned = source is not None and source.digest is not None
        if cached is not None and cached.verified and not pinned:
            self._logger.debug(f"Verification cache hit for {file_path}")
            return VerificationResult(
                verified=True, digest=cached.digest, algorithm=algorithm, cached=True
            )

        if cached is not None:
            actual_hash = cached.digest
        else:
            actual_hash = await self._calculator.calculate(file_path, algorithm)

        if source is None:
            return await self._without_source(file_path, algorithm, actual_hash)

        expected_hash = await self._expected_digest(source, algorithm)
        if not hmac.compare_digest(actual_hash.lower(), expected_hash.lower()):
            await self._cache.invalidate(file_path)
            raise HashMismatchError(
                expected_hash=expected_hash,
                actual_hash=actual_hash,
                file_path=file_path,
            )

        await self._cache.put(file_path, algorithm, actual_hash, verified=True)
        self._logger.debug(
            "File verified successfully",
            file=str(file_path),
            algorithm=str(algorithm),
        )
        return VerificationResult(verified=True, digest=actual_hash, algorithm=algorithm)

    async def _without_source(
        self, file_path: Path, algorithm: HashAlgorithm, actual_hash: str
    ) -> VerificationResult:
        if self.policy is not VerificationPolicy.PASSTHROUGH:
            raise VerificationFailureError(
                f"No checksum available for {file_path} and policy is {self.policy}"
            )
        self._logger.warning(f"Accepting unverified artifact {file_path} (passthrough)")
        await self._cache.put(file_path, algorithm, actual_hash, verified=False)
        return VerificationResult(verified=False, digest=actual_hash, algorithm=algorithm)

    async def _expected_digest(
        self, source: ChecksumSource, algorithm: HashAlgorithm
    ) -> str:
        expected = source.digest
        if expected is None:
            expected = await self._fetch_expected(t.cast(str, source.url))

        if len(expected) != algorithm.hex_length:
            raise VerificationFailureError(
                f"Expected {algorithm} digest has {len(expected)} characters, "
                f"not {algorithm.hex_length}"
            )
        return expected

    async def _fetch_expected(self, url: str) -> str:
        try:
            document = await self._fetcher.fetch_text(url)
            return parse_checksum_document(document)
        except DownloadFailureError as exc:
            raise VerificationFailureError(
                f"Could not fetch checksum from {url}: {exc}"
            ) from exc
        except ValueError as exc:
            raise VerificationFailureError(
                f"Malformed checksum document at {url}: {exc}"
            ) from exc
