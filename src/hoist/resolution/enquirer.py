"""Repository enquirer: coordinate + repositories -> one download location."""

import typing as t

from ..domain.coordinates import Coordinate, Repository, ResolvedLocation
from ..domain.exceptions import DownloadFailureError, ResolutionNotFoundError
from ..infrastructure.logging import get_logger
from .metadata import SnapshotBuild, parse_snapshot_metadata
from .mirrors import BaseMirrorSelector, DeclarationOrderMirrorSelector
from .prober import BaseProber
from .strategies import (
    ChecksumPathStrategy,
    MediatingPathStrategy,
    PathResolutionStrategy,
)

if t.TYPE_CHECKING:
    import loguru


class TextFetcher(t.Protocol):
    """Anything able to fetch a small text document (the Downloader)."""

    async def fetch_text(self, url: str) -> str: ...


class RepositoryEnquirer:
    """Finds the first repository that serves a coordinate.

    Repositories are tried in mirror-selector order. Snapshot versions first
    fetch the per-version descriptor to learn the concrete build; release
    versions never do. The first artifact URL whose probe succeeds wins;
    there is no latency or quality scoring.

    The checksum URL is best effort: when the published checksum file does
    not exist the location simply carries none.
    """

    def __init__(
        self,
        prober: BaseProber,
        fetcher: TextFetcher,
        *,
        strategy: PathResolutionStrategy | None = None,
        checksum_strategy: ChecksumPathStrategy | None = None,
        mirror_selector: BaseMirrorSelector | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.prober = prober
        self.fetcher = fetcher
        self.strategy = strategy or MediatingPathStrategy()
        self.checksum_strategy = checksum_strategy or ChecksumPathStrategy()
        self.mirror_selector = mirror_selector or DeclarationOrderMirrorSelector()
        self._logger = logger

    async def resolve(
        self, coordinate: Coordinate, repositories: t.Sequence[Repository]
    ) -> ResolvedLocation:
        """Resolve ``coordinate`` against ``repositories``.

        Raises:
            ResolutionNotFoundError: If no repository serves the artifact.
        """
        ordered = self.mirror_selector.order(repositories)
        for repository in ordered:
            location = await self._enquire(coordinate, repository)
            if location is not None:
                self._logger.debug(f"Resolved {coordinate} -> {location.download_url}")
                return location

        raise ResolutionNotFoundError(coordinate, [repo.url for repo in ordered])

    async def _enquire(
        self, coordinate: Coordinate, repository: Repository
    ) -> ResolvedLocation | None:
        build: SnapshotBuild | None = None
        if self.strategy.requires_descriptor(coordinate):
            build = await self._fetch_snapshot_build(coordinate, repository)
            if build is None:
                return None

        artifact_path = self.strategy.artifact_path(coordinate, build)
        download_url = repository.url_for(artifact_path)
        if not await self.prober.probe(download_url):
            self._logger.debug(f"{coordinate} not found at {repository.url}")
            return None

        checksum_url: str | None = repository.url_for(
            self.checksum_strategy.checksum_path(artifact_path)
        )
        if not await self.prober.probe(checksum_url):
            self._logger.debug(f"No published checksum for {download_url}")
            checksum_url = None

        return ResolvedLocation(
            download_url=download_url,
            checksum_url=checksum_url,
            algorithm=self.checksum_strategy.algorithm,
            repository=repository.url,
        )

    async def _fetch_snapshot_build(
        self, coordinate: Coordinate, repository: Repository
    ) -> SnapshotBuild | None:
        descriptor_url = repository.url_for(self.strategy.descriptor_path(coordinate))
        try:
            document = await self.fetcher.fetch_text(descriptor_url)
            return parse_snapshot_metadata(document)
        except DownloadFailureError as exc:
            self._logger.debug(f"No snapshot descriptor at {descriptor_url}: {exc}")
        except ValueError as exc:
            self._logger.warning(f"Ignoring snapshot descriptor {descriptor_url}: {exc}")
        return None
