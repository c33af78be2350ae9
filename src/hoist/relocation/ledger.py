"""Persistent ledger of produced relocations.

Keyed by (artifact identity, relocation set identifier). Entries are
content-addressed and re-derivable, so no cross-process lock is taken: each
commit re-reads the document from disk, merges its key and atomically
replaces the file. The last writer for a given key wins.
"""

import asyncio
import typing as t
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..infrastructure.logging import get_logger
from ..infrastructure.storage import atomic_write_text, read_text_if_exists

if t.TYPE_CHECKING:
    import loguru

LEDGER_FILE_NAME = "relocations.json"


class LedgerEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: Path
    checksum: str
    source_path: Path
    relocation_id: str


class LedgerDocument(BaseModel):
    version: int = 1
    entries: dict[str, LedgerEntry] = Field(default_factory=dict)


class RelocationLedger:
    """Append/update-only map from relocation key to produced output."""

    def __init__(
        self,
        path: Path,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.path = path
        self._logger = logger
        self._entries: dict[str, LedgerEntry] | None = None
        self._lock = asyncio.Lock()

    @staticmethod
    def key(identity: str, relocation_id: str) -> str:
        return f"{identity}:{relocation_id}"

    async def get(self, key: str) -> LedgerEntry | None:
        async with self._lock:
            if self._entries is None:
                self._entries = (await self._read_document()).entries
            return self._entries.get(key)

    async def commit(self, key: str, entry: LedgerEntry) -> None:
        """Record ``entry`` under ``key`` with a temp-file-then-rename write."""
        async with self._lock:
            document = await self._read_document()
            document.entries[key] = entry
            await atomic_write_text(self.path, document.model_dump_json(indent=2))
            self._entries = document.entries
        self._logger.debug(f"Ledger committed {key} -> {entry.output_path}")

    async def _read_document(self) -> LedgerDocument:
        text = await read_text_if_exists(self.path)
        if text is None:
            return LedgerDocument()
        try:
            return LedgerDocument.model_validate_json(text)
        except ValidationError:
            self._logger.warning(f"Ignoring unreadable relocation ledger {self.path}")
            return LedgerDocument()
