"""Persistent cache of digests and verification outcomes.

Maps a file path to the fingerprint (size, mtime) it had when it was last
hashed, together with the digest and whether it was authenticated. An
unchanged file skips recomputation on later runs.
"""

import asyncio
import typing as t
from pathlib import Path

import aiofiles.os
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..domain.hash_validation import HashAlgorithm
from ..infrastructure.logging import get_logger
from ..infrastructure.storage import atomic_write_text, read_text_if_exists

if t.TYPE_CHECKING:
    import loguru

CACHE_FILE_NAME = "checksums.json"


class FileFingerprint(BaseModel):
    """Cheap identity of a file's current contents."""

    model_config = ConfigDict(frozen=True)

    size: int
    mtime_ns: int


class VerificationCacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: FileFingerprint
    algorithm: HashAlgorithm
    digest: str
    verified: bool


class VerificationCacheDocument(BaseModel):
    version: int = 1
    entries: dict[str, VerificationCacheEntry] = Field(default_factory=dict)


async def fingerprint(path: Path) -> FileFingerprint:
    stat = await aiofiles.os.stat(path)
    return FileFingerprint(size=stat.st_size, mtime_ns=stat.st_mtime_ns)


class VerificationCache:
    """Digest/outcome cache persisted as JSON in the state directory."""

    def __init__(
        self,
        path: Path,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.path = path
        self._logger = logger
        self._document: VerificationCacheDocument | None = None
        self._lock = asyncio.Lock()
        self._load_lock = asyncio.Lock()

    async def get(
        self, file_path: Path, algorithm: HashAlgorithm
    ) -> VerificationCacheEntry | None:
        """Entry for ``file_path`` if its fingerprint and algorithm still match."""
        document = await self._load()
        entry = document.entries.get(str(file_path))
        if entry is None or entry.algorithm != algorithm:
            return None
        try:
            current = await fingerprint(file_path)
        except FileNotFoundError:
            return None
        if current != entry.fingerprint:
            self._logger.debug(f"Cached digest is stale for {file_path}")
            return None
        return entry

    async def put(
        self, file_path: Path, algorithm: HashAlgorithm, digest: str, verified: bool
    ) -> VerificationCacheEntry:
        entry = VerificationCacheEntry(
            fingerprint=await fingerprint(file_path),
            algorithm=algorithm,
            digest=digest,
            verified=verified,
        )
        async with self._lock:
            document = await self._load()
            document.entries[str(file_path)] = entry
            await atomic_write_text(self.path, document.model_dump_json(indent=2))
        return entry

    async def invalidate(self, file_path: Path) -> None:
        async with self._lock:
            document = await self._load()
            if document.entries.pop(str(file_path), None) is not None:
                await atomic_write_text(self.path, document.model_dump_json(indent=2))

    async def _load(self) -> VerificationCacheDocument:
        async with self._load_lock:
            if self._document is None:
                self._document = await self._read_document()
            return self._document

    async def _read_document(self) -> VerificationCacheDocument:
        text = await read_text_if_exists(self.path)
        if text is None:
            return VerificationCacheDocument()
        try:
            return VerificationCacheDocument.model_validate_json(text)
        except ValidationError:
            # Entries are re-derivable; a damaged cache only costs re-hashing.
            self._logger.warning(f"Ignoring unreadable verification cache {self.path}")
            return VerificationCacheDocument()
