"""File digest calculation."""

import asyncio
import hashlib
from pathlib import Path

from ..domain.exceptions import FileAccessError
from ..domain.hash_validation import HashAlgorithm


class ChecksumCalculator:
    """Digests local files under a named algorithm.

    Hashing runs in a worker thread so large artifacts never block the
    event loop.
    """

    def __init__(self, *, chunk_size: int = 64 * 1024) -> None:
        self._chunk_size = chunk_size

    async def calculate(self, file_path: Path, algorithm: HashAlgorithm) -> str:
        """Return the lower-case hex digest of ``file_path``.

        Raises:
            FileAccessError: If the file cannot be read.
        """
        try:
            return await asyncio.to_thread(self._calculate_sync, file_path, algorithm)
        except OSError as exc:
            raise FileAccessError(f"Unable to read file for hashing: {file_path}") from exc

    def _calculate_sync(self, file_path: Path, algorithm: HashAlgorithm) -> str:
        hasher = hashlib.new(str(algorithm))
        with file_path.open("rb") as handle:
            while chunk := handle.read(self._chunk_size):
                hasher.update(chunk)
        return hasher.hexdigest()
