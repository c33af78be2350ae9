"""Per-coordinate orchestration: locate, stage, verify, relocate."""

import asyncio
import typing as t
from pathlib import Path

import aiofiles.os

from ..domain.artifacts import ArtifactRecord
from ..domain.coordinates import Coordinate, Repository, ResolvedLocation
from ..domain.error_info import ErrorInfo
from ..domain.exceptions import (
    ConfigurationError,
    FileAccessError,
    HashMismatchError,
    VerificationFailureError,
)
from ..domain.hash_validation import ChecksumSource, VerificationResult
from ..domain.relocation import RelocationSet
from ..downloads.downloader import Downloader
from ..events import (
    ArtifactDownloadedEvent,
    ArtifactLocatedEvent,
    ArtifactRelocatedEvent,
    ArtifactResolvedEvent,
    ArtifactVerificationFailedEvent,
    ArtifactVerifiedEvent,
    BaseEmitter,
    NullEmitter,
)
from ..infrastructure.logging import get_logger
from ..infrastructure.storage import discard
from ..relocation.helper import RelocationHelper
from ..verification.verifier import ChecksumVerifier
from .enquirer import RepositoryEnquirer
from .preresolution import PreResolutionProvider

if t.TYPE_CHECKING:
    import loguru

K = t.TypeVar("K", bound=t.Hashable)
R = t.TypeVar("R")


class DependencyResolver:
    """Turns a coordinate into a verified, optionally relocated local file.

    Every step is memoized for the lifetime of the resolver: the location
    per coordinate, the staged and verified artifact per coordinate and the
    relocated copy per (coordinate, relocation set). Concurrent callers for
    the same key share one task and await it through ``asyncio.shield``, so a
    cancelled caller does not cancel the work for the others. Failures are
    memoized as well; a coordinate that was not found stays not found.

    The first ``repositories`` passed for a coordinate win; later calls with
    other repositories reuse the memoized location.
    """

    def __init__(
        self,
        enquirer: RepositoryEnquirer,
        downloader: Downloader,
        verifier: ChecksumVerifier,
        download_dir: Path,
        *,
        pre_resolution: PreResolutionProvider | None = None,
        relocation_helper: RelocationHelper | None = None,
        default_repositories: t.Sequence[Repository] = (Repository.central(),),
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.enquirer = enquirer
        self.downloader = downloader
        self.verifier = verifier
        self.download_dir = download_dir
        self.pre_resolution = pre_resolution or PreResolutionProvider()
        self.relocation_helper = relocation_helper
        self.default_repositories = tuple(default_repositories)
        self.emitter = emitter or NullEmitter()
        self._logger = logger

        self._location_tasks: dict[Coordinate, asyncio.Task[ResolvedLocation]] = {}
        self._artifact_tasks: dict[Coordinate, asyncio.Task[ArtifactRecord]] = {}
        self._relocation_tasks: dict[tuple[Coordinate, str], asyncio.Task[ArtifactRecord]] = {}

    async def locate(
        self, coordinate: Coordinate, repositories: t.Sequence[Repository] = ()
    ) -> ResolvedLocation:
        """Return the memoized download location of ``coordinate``.

        Raises:
            ResolutionNotFoundError: If no repository serves it.
        """
        return await self._shared(
            self._location_tasks,
            coordinate,
            lambda: self._locate(coordinate, repositories),
        )

    async def resolve(
        self,
        coordinate: Coordinate,
        repositories: t.Sequence[Repository] = (),
        relocations: RelocationSet | None = None,
    ) -> ArtifactRecord:
        """Return a verified local artifact, relocated when rules are given.

        Raises:
            ResolutionNotFoundError: If no repository serves the coordinate.
            DownloadFailureError: If the download fails.
            VerificationFailureError: If the artifact cannot be trusted.
            RelocationFailureError: If the artifact cannot be rewritten.
        """
        record = await self._shared(
            self._artifact_tasks,
            coordinate,
            lambda: self._stage(coordinate, repositories),
        )
        if relocations:
            record = await self._shared(
                self._relocation_tasks,
                (coordinate, relocations.identifier),
                lambda: self._relocate(record, relocations),
            )

        await self.emitter.emit(
            "artifact.resolved",
            ArtifactResolvedEvent(
                coordinate=str(coordinate),
                path=str(record.local_path),
                verified=record.verified,
                relocated=record.relocated,
            ),
        )
        return record

    def cancel_pending(self) -> int:
        """Cancel every in-flight task; returns how many were cancelled."""
        cancelled = 0
        for tasks in (self._location_tasks, self._artifact_tasks, self._relocation_tasks):
            for task in list(tasks.values()):
                if not task.done():
                    task.cancel()
                    cancelled += 1
        if cancelled:
            self._logger.debug(f"Cancelled {cancelled} pending resolution tasks")
        return cancelled

    def staged_path(self, coordinate: Coordinate, location: ResolvedLocation) -> Path:
        """Local path a located artifact is downloaded to.

        Snapshots keep the concrete build's file name, so a newer build is
        never mistaken for an already verified older one.
        """
        file_name = coordinate.file_name()
        if coordinate.is_snapshot and not location.pinned:
            file_name = location.download_url.rsplit("/", 1)[-1] or file_name
        return self.download_dir / coordinate.version_directory / file_name

    async def _shared(
        self,
        tasks: dict[K, asyncio.Task[R]],
        key: K,
        factory: t.Callable[[], t.Coroutine[t.Any, t.Any, R]],
    ) -> R:
        task = tasks.get(key)
        if task is None:
            task = asyncio.create_task(factory())
            tasks[key] = task
            task.add_done_callback(lambda done: self._settle(tasks, key, done))
        return await asyncio.shield(task)

    @staticmethod
    def _settle(tasks: dict[K, asyncio.Task[R]], key: K, task: asyncio.Task[R]) -> None:
        # Cancelled work may be retried; failures stay memoized.
        if task.cancelled():
            if tasks.get(key) is task:
                del tasks[key]
            return
        # Mark the exception retrieved; callers re-raise it through the shield.
        task.exception()

    async def _locate(
        self, coordinate: Coordinate, repositories: t.Sequence[Repository]
    ) -> ResolvedLocation:
        location = self.pre_resolution.get(coordinate)
        if location is not None:
            self._logger.debug(f"Using pinned location for {coordinate}")
        else:
            location = await self.enquirer.resolve(
                coordinate, repositories or self.default_repositories
            )

        await self.emitter.emit(
            "artifact.located",
            ArtifactLocatedEvent(
                coordinate=str(coordinate),
                url=location.download_url,
                checksum_url=location.checksum_url,
                pinned=location.pinned,
            ),
        )
        return location

    async def _stage(
        self, coordinate: Coordinate, repositories: t.Sequence[Repository]
    ) -> ArtifactRecord:
        location = await self.locate(coordinate, repositories)
        destination = self.staged_path(coordinate, location)
        source = self._checksum_source(location)

        result: VerificationResult | None = None
        reused = await aiofiles.os.path.isfile(destination)
        if reused:
            result = await self._verify_existing(coordinate, destination, source, location)
        if result is None:
            reused = False
            await self.downloader.fetch(location.download_url, destination)

        await self.emitter.emit(
            "artifact.downloaded",
            ArtifactDownloadedEvent(
                coordinate=str(coordinate),
                url=location.download_url,
                path=str(destination),
                reused=reused,
            ),
        )
        if result is None:
            result = await self._verify(coordinate, destination, source, location)

        await self.emitter.emit(
            "artifact.verified",
            ArtifactVerifiedEvent(
                coordinate=str(coordinate),
                path=str(destination),
                algorithm=result.algorithm,
                digest=result.digest,
                verified=result.verified,
                cached=result.cached,
            ),
        )
        self._logger.info(
            f"Resolved {coordinate} -> {destination}"
            + ("" if result.verified else " (unverified)")
        )
        return ArtifactRecord(
            coordinate=coordinate,
            local_path=destination,
            checksum=result.digest,
            algorithm=result.algorithm,
            verified=result.verified,
            source_url=location.download_url,
        )

    async def _verify_existing(
        self,
        coordinate: Coordinate,
        path: Path,
        source: ChecksumSource | None,
        location: ResolvedLocation,
    ) -> VerificationResult | None:
        """Verify an already staged file; None means download it again."""
        try:
            return await self.verifier.verify(path, source, location.algorithm)
        except (HashMismatchError, FileAccessError) as exc:
            self._logger.warning(f"Discarding stale staged file for {coordinate}: {exc}")
            await discard(path)
            return None
        except VerificationFailureError as exc:
            await self._reject(coordinate, path, exc)
            raise

    async def _verify(
        self,
        coordinate: Coordinate,
        path: Path,
        source: ChecksumSource | None,
        location: ResolvedLocation,
    ) -> VerificationResult:
        try:
            return await self.verifier.verify(path, source, location.algorithm)
        except VerificationFailureError as exc:
            await self._reject(coordinate, path, exc)
            raise

    async def _reject(
        self, coordinate: Coordinate, path: Path, exc: VerificationFailureError
    ) -> None:
        self._logger.error(f"Verification failed for {coordinate}: {exc}")
        await discard(path)
        await self.emitter.emit(
            "artifact.verification_failed",
            ArtifactVerificationFailedEvent(
                coordinate=str(coordinate),
                path=str(path),
                error=ErrorInfo.from_exception(exc),
            ),
        )

    async def _relocate(
        self, record: ArtifactRecord, relocations: RelocationSet
    ) -> ArtifactRecord:
        if self.relocation_helper is None:
            raise ConfigurationError(
                f"Relocations requested for {record.coordinate} but no relocation "
                "helper is configured"
            )
        result = await self.relocation_helper.relocate(record.local_path, relocations)
        await self.emitter.emit(
            "artifact.relocated",
            ArtifactRelocatedEvent(
                coordinate=str(record.coordinate),
                source_path=str(record.local_path),
                output_path=str(result.output_path),
                relocation_id=result.relocation_id,
                cached=result.cached,
            ),
        )
        return record.model_copy(
            update={
                "local_path": result.output_path,
                "checksum": result.checksum,
                "algorithm": self.relocation_helper.algorithm,
                "relocated": True,
                "relocation_id": result.relocation_id,
            }
        )

    @staticmethod
    def _checksum_source(location: ResolvedLocation) -> ChecksumSource | None:
        if location.expected_checksum is None and location.checksum_url is None:
            return None
        return ChecksumSource(url=location.checksum_url, digest=location.expected_checksum)
