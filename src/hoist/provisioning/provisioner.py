"""Provisioner facade: settings in, verified local artifacts out."""

import typing as t
from pathlib import Path

import aiofiles.os
import aiohttp

from ..config.settings import Settings
from ..domain.artifacts import ArtifactRecord, BatchResult, DependencySpec
from ..domain.coordinates import Coordinate, Repository, ResolvedLocation
from ..domain.exceptions import ProvisionerNotInitializedError
from ..downloads.downloader import Downloader
from ..events import BaseEmitter, NullEmitter
from ..infrastructure.http import create_client_session
from ..infrastructure.logging import get_logger
from ..loading import BaseLoader, NullLoader
from ..relocation.helper import RelocationHelper
from ..relocation.ledger import LEDGER_FILE_NAME, RelocationLedger
from ..resolution.enquirer import RepositoryEnquirer
from ..resolution.mirrors import BaseMirrorSelector
from ..resolution.preresolution import PreResolutionProvider
from ..resolution.prober import HttpProber
from ..resolution.resolver import DependencyResolver
from ..resolution.strategies import ChecksumPathStrategy
from ..verification.cache import CACHE_FILE_NAME, VerificationCache
from ..verification.calculator import ChecksumCalculator
from ..verification.verifier import ChecksumVerifier
from .pool import ProvisioningPool

if t.TYPE_CHECKING:
    import loguru


class Provisioner:
    """Resolves, verifies and relocates a batch of declared dependencies.

    Owns the HTTP session unless one is injected and wires the default
    components from Settings. Use as an async context manager:

        async with Provisioner(settings) as provisioner:
            result = await provisioner.provision(specs)
            for path in result.paths():
                ...

    Successful artifacts are handed to the injected loader. Mandatory
    failures raise ProvisioningError (unless ``raise_on_failure=False``);
    optional failures are only logged.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: aiohttp.ClientSession | None = None,
        loader: BaseLoader | None = None,
        pre_resolution: PreResolutionProvider | None = None,
        mirror_selector: BaseMirrorSelector | None = None,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.settings = settings or Settings()
        self.loader = loader or NullLoader()
        self.pre_resolution = pre_resolution
        self.mirror_selector = mirror_selector
        self.emitter = emitter or NullEmitter()
        self._logger = logger
        self._client = client
        self._owns_client = False
        self._resolver: DependencyResolver | None = None
        self._pool: ProvisioningPool | None = None

    async def __aenter__(self) -> "Provisioner":
        await aiofiles.os.makedirs(self.settings.state_dir, exist_ok=True)
        if self._client is None:
            self._client = create_client_session(self.settings.timeout)
            self._owns_client = True
        self._resolver = self._build_resolver(self._client)
        return self

    async def __aexit__(self, *args: t.Any) -> None:
        if self._resolver is not None:
            self._resolver.cancel_pending()
            self._resolver = None
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None
            self._owns_client = False

    @property
    def resolver(self) -> DependencyResolver:
        """The session's resolver.

        Raises:
            ProvisionerNotInitializedError: Outside the context manager.
        """
        if self._resolver is None:
            raise ProvisionerNotInitializedError(
                "Provisioner must be used as an async context manager"
            )
        return self._resolver

    async def provision(
        self, specs: t.Sequence[DependencySpec], raise_on_failure: bool = True
    ) -> BatchResult:
        """Provision every spec concurrently.

        Raises:
            ProvisioningError: If ``raise_on_failure`` and any mandatory
                dependency failed.
            ProvisionerNotInitializedError: Outside the context manager.
        """
        pool = ProvisioningPool(
            self.resolver,
            max_workers=self.settings.max_workers,
            loader=self.loader,
            emitter=self.emitter,
            logger=self._logger,
        )
        self._pool = pool
        try:
            result = await pool.run(specs)
        finally:
            self._pool = None

        optional_failures = len(result.failures) - len(result.mandatory_failures)
        self._logger.info(
            f"Provisioned {len(result.records)}/{len(result.outcomes)} dependencies"
            + (f" ({optional_failures} optional unavailable)" if optional_failures else "")
        )
        if raise_on_failure:
            result.raise_for_failures()
        return result

    async def resolve(self, spec: DependencySpec) -> ArtifactRecord:
        """Provision one spec, raising its failure directly."""
        record = await self.resolver.resolve(
            spec.coordinate, spec.repositories, spec.relocations
        )
        load = await self.loader.make_loadable(record.local_path)
        if not load.loaded:
            self._logger.debug(f"{spec.coordinate} not loaded: {load.detail}")
        return record

    async def locate(
        self, coordinate: Coordinate, repositories: t.Sequence[Repository] = ()
    ) -> ResolvedLocation:
        """Where ``coordinate`` would be downloaded from, without downloading."""
        return await self.resolver.locate(coordinate, repositories)

    async def cancel(self) -> None:
        """Cancel the running batch and every in-flight resolution."""
        if self._pool is not None:
            await self._pool.stop()
        if self._resolver is not None:
            self._resolver.cancel_pending()

    def _build_resolver(self, client: aiohttp.ClientSession) -> DependencyResolver:
        settings = self.settings
        calculator = ChecksumCalculator(chunk_size=settings.chunk_size)
        downloader = Downloader(
            client,
            self._logger,
            self.emitter,
            timeout=settings.timeout,
            chunk_size=settings.chunk_size,
        )
        enquirer = RepositoryEnquirer(
            HttpProber(client, timeout=settings.timeout, logger=self._logger),
            downloader,
            checksum_strategy=ChecksumPathStrategy(settings.checksum_algorithm),
            mirror_selector=self.mirror_selector,
            logger=self._logger,
        )
        verifier = ChecksumVerifier(
            downloader,
            VerificationCache(settings.state_dir / CACHE_FILE_NAME, logger=self._logger),
            policy=settings.verification_policy,
            calculator=calculator,
            logger=self._logger,
        )
        relocation_helper = RelocationHelper(
            RelocationLedger(settings.state_dir / LEDGER_FILE_NAME, logger=self._logger),
            settings.relocation_dir,
            calculator=calculator,
            algorithm=settings.relocation_algorithm,
            logger=self._logger,
        )
        return DependencyResolver(
            enquirer,
            downloader,
            verifier,
            Path(settings.download_dir),
            pre_resolution=self.pre_resolution,
            relocation_helper=relocation_helper,
            emitter=self.emitter,
            logger=self._logger,
        )
