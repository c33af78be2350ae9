"""Bounded worker pool resolving a batch of dependency specs."""

import asyncio
import typing as t

from ..domain.artifacts import BatchResult, DependencySpec, ResolutionOutcome
from ..domain.error_info import ErrorInfo
from ..events import ArtifactFailedEvent, BaseEmitter, NullEmitter
from ..infrastructure.logging import get_logger
from ..loading import BaseLoader, NullLoader
from ..resolution.resolver import DependencyResolver

if t.TYPE_CHECKING:
    import loguru


class ProvisioningPool:
    """Runs ``max_workers`` tasks draining a queue of dependency specs.

    Each spec's outcome is isolated: a failure is captured in its
    ResolutionOutcome and never aborts siblings. A resolved artifact is
    handed to the loader by the same worker, so a loader error fails only
    that spec. Outcomes keep the declaration order of the input regardless
    of completion order.

    Implementation decisions:
    - The queue is filled before workers start, so a worker exits as soon as
      it finds the queue empty instead of polling
    - The shutdown check happens before each item so ``request_shutdown``
      lets in-flight resolutions finish without starting new ones
    - ``stop`` cancels in-flight work; specs that never completed are
      reported as cancelled failures while finished outcomes are kept
    """

    def __init__(
        self,
        resolver: DependencyResolver,
        *,
        max_workers: int = 3,
        loader: BaseLoader | None = None,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.resolver = resolver
        self.max_workers = max_workers
        self.loader = loader or NullLoader()
        self.emitter = emitter or NullEmitter()
        self._logger = logger
        self._shutdown_event = asyncio.Event()
        self._worker_tasks: list[asyncio.Task[None]] = []
        self._is_running = False

    @property
    def active_tasks(self) -> tuple[asyncio.Task[None], ...]:
        return tuple(self._worker_tasks)

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def run(self, specs: t.Sequence[DependencySpec]) -> BatchResult:
        """Resolve every spec and return outcomes in declaration order."""
        queue: asyncio.Queue[tuple[int, DependencySpec]] = asyncio.Queue()
        for index, spec in enumerate(specs):
            queue.put_nowait((index, spec))
        outcomes: list[ResolutionOutcome | None] = [None] * len(specs)

        self._shutdown_event.clear()
        self._is_running = True
        worker_count = max(1, min(self.max_workers, len(specs)))
        self._worker_tasks = [
            asyncio.create_task(self._process_queue(queue, outcomes))
            for _ in range(worker_count)
        ]
        try:
            await asyncio.gather(*self._worker_tasks, return_exceptions=True)
        finally:
            self._worker_tasks.clear()
            self._is_running = False

        return BatchResult(
            outcomes=tuple(
                outcome if outcome is not None else self._cancelled(spec)
                for outcome, spec in zip(outcomes, specs)
            )
        )

    def request_shutdown(self) -> None:
        """Stop taking new specs; in-flight resolutions finish."""
        self._shutdown_event.set()

    async def stop(self) -> None:
        """Cancel in-flight resolutions and wait for workers to exit."""
        self.request_shutdown()
        tasks = list(self._worker_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _process_queue(
        self,
        queue: asyncio.Queue[tuple[int, DependencySpec]],
        outcomes: list[ResolutionOutcome | None],
    ) -> None:
        while not self._shutdown_event.is_set():
            try:
                index, spec = queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            try:
                outcomes[index] = await self._resolve(spec)
            except asyncio.CancelledError:
                self._logger.debug(f"Resolution of {spec.coordinate} cancelled")
                raise
            finally:
                queue.task_done()

    async def _resolve(self, spec: DependencySpec) -> ResolutionOutcome:
        try:
            record = await self.resolver.resolve(
                spec.coordinate, spec.repositories, spec.relocations
            )
            load = await self.loader.make_loadable(record.local_path)
        except Exception as exc:
            if spec.optional:
                self._logger.warning(
                    f"Optional dependency {spec.coordinate} unavailable: {exc}"
                )
            else:
                self._logger.error(
                    f"Failed to provision {spec.coordinate}: {type(exc).__name__}: {exc}"
                )
            error = ErrorInfo.from_exception(exc)
            await self.emitter.emit(
                "artifact.failed",
                ArtifactFailedEvent(
                    coordinate=str(spec.coordinate), error=error, optional=spec.optional
                ),
            )
            return ResolutionOutcome(spec=spec, error=error)
        if not load.loaded:
            self._logger.debug(f"{spec.coordinate} not loaded: {load.detail}")
        return ResolutionOutcome(spec=spec, record=record, load=load)

    @staticmethod
    def _cancelled(spec: DependencySpec) -> ResolutionOutcome:
        return ResolutionOutcome(
            spec=spec,
            error=ErrorInfo.from_exception(asyncio.CancelledError("provisioning cancelled")),
        )
