"""Relocation helper: rewrite an artifact once per (content, rule set)."""

import asyncio
import hmac
import typing as t
from collections import defaultdict
from pathlib import Path

import aiofiles.os
from pydantic import BaseModel, ConfigDict

from ..domain.exceptions import ConfigurationError, RelocationFailureError
from ..domain.hash_validation import HashAlgorithm
from ..domain.relocation import RelocationSet
from ..infrastructure.logging import get_logger
from ..infrastructure.storage import discard, temporary_sibling
from ..verification.calculator import ChecksumCalculator
from .ledger import LedgerEntry, RelocationLedger
from .rewriter import BaseArchiveRewriter, ZipArchiveRewriter

if t.TYPE_CHECKING:
    import loguru


class RelocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: Path
    checksum: str
    relocation_id: str
    cached: bool = False


class RelocationHelper:
    """Produces relocated copies of artifacts and records them in a ledger.

    The ledger key is the source artifact's content digest plus the
    relocation set identifier, so a repeat request for the same pair reuses
    the earlier output without rewriting. Outputs are written to a temporary
    sibling and renamed into place before the ledger entry is committed; an
    interrupted relocation therefore never leaves a ledger entry that points
    at partial output.

    After committing, the output is re-digested and compared with what the
    ledger recorded. A mismatch (another process replaced the file, or the
    disk lied) triggers one redo before failing.
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        ledger: RelocationLedger,
        output_dir: Path,
        *,
        rewriter: BaseArchiveRewriter | None = None,
        calculator: ChecksumCalculator | None = None,
        algorithm: HashAlgorithm = HashAlgorithm.SHA256,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.ledger = ledger
        self.output_dir = output_dir
        self.rewriter = rewriter or ZipArchiveRewriter()
        self.calculator = calculator or ChecksumCalculator()
        self.algorithm = algorithm
        self._logger = logger
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def output_path_for(self, source: Path, identity: str, relocation_id: str) -> Path:
        return self.output_dir / f"{source.stem}-{identity[:8]}-{relocation_id[:12]}{source.suffix}"

    async def relocate(self, source: Path, relocation_set: RelocationSet) -> RelocationResult:
        """Return a relocated copy of ``source``.

        Raises:
            ConfigurationError: If ``relocation_set`` has no rules.
            RelocationFailureError: If the artifact cannot be rewritten or
                the output cannot be confirmed.
        """
        if not relocation_set:
            raise ConfigurationError("Relocation requires at least one rule")

        identity = await self.calculator.calculate(source, self.algorithm)
        relocation_id = relocation_set.identifier
        key = self.ledger.key(identity, relocation_id)

        async with self._locks[key]:
            reused = await self._reuse(key)
            if reused is not None:
                self._logger.debug(f"Reusing relocation of {source.name}: {reused.output_path}")
                return reused

            output_path = self.output_path_for(source, identity, relocation_id)
            for attempt in range(1, self.MAX_ATTEMPTS + 1):
                checksum = await self._produce(source, output_path, relocation_set)
                await self.ledger.commit(
                    key,
                    LedgerEntry(
                        output_path=output_path,
                        checksum=checksum,
                        source_path=source,
                        relocation_id=relocation_id,
                    ),
                )
                if await self._matches_ledger(key, output_path):
                    self._logger.info(f"Relocated {source.name} -> {output_path.name}")
                    return RelocationResult(
                        output_path=output_path,
                        checksum=checksum,
                        relocation_id=relocation_id,
                    )
                self._logger.warning(
                    f"Relocated output {output_path} does not match its ledger entry "
                    f"(attempt {attempt}/{self.MAX_ATTEMPTS})"
                )
                await discard(output_path)

        raise RelocationFailureError(
            f"Relocated output for {source} could not be confirmed after "
            f"{self.MAX_ATTEMPTS} attempts"
        )

    async def _reuse(self, key: str) -> RelocationResult | None:
        entry = await self.ledger.get(key)
        if entry is None or not await aiofiles.os.path.isfile(entry.output_path):
            return None
        digest = await self.calculator.calculate(entry.output_path, self.algorithm)
        if not hmac.compare_digest(digest, entry.checksum):
            self._logger.warning(f"Ledger entry for {entry.output_path} is stale; redoing")
            return None
        return RelocationResult(
            output_path=entry.output_path,
            checksum=entry.checksum,
            relocation_id=entry.relocation_id,
            cached=True,
        )

    async def _produce(
        self, source: Path, output_path: Path, relocation_set: RelocationSet
    ) -> str:
        await aiofiles.os.makedirs(output_path.parent, exist_ok=True)
        tmp_path = temporary_sibling(output_path, ".part")
        try:
            stats = await asyncio.to_thread(
                self.rewriter.rewrite, source, tmp_path, relocation_set
            )
            checksum = await self.calculator.calculate(tmp_path, self.algorithm)
            await aiofiles.os.replace(tmp_path, output_path)
        except asyncio.CancelledError:
            await discard(tmp_path)
            raise
        except RelocationFailureError:
            await discard(tmp_path)
            raise
        except Exception as exc:
            await discard(tmp_path)
            raise RelocationFailureError(f"Failed to relocate {source}: {exc}") from exc

        self._logger.debug(
            f"Rewrote {source.name}: {stats.entries} entries, "
            f"{stats.renamed_entries} moved, {stats.rewritten_entries} rewritten, "
            f"{stats.dropped_signatures} signatures dropped"
        )
        return checksum

    async def _matches_ledger(self, key: str, output_path: Path) -> bool:
        entry = await self.ledger.get(key)
        if entry is None:
            return False
        digest = await self.calculator.calculate(output_path, self.algorithm)
        return hmac.compare_digest(digest, entry.checksum)
