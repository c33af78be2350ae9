"""Loader interface: make a verified artifact usable by the host program.

How an artifact becomes loadable is host-specific (a class loader, a
``sys.path`` entry, a plugin registry), so the core only defines the seam
and a loader that does nothing.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .domain.artifacts import LoadResult


class BaseLoader(ABC):
    """Hands a provisioned artifact to the host."""

    @abstractmethod
    async def make_loadable(self, path: Path) -> LoadResult:
        """Make the artifact at ``path`` available to the host.

        An exception fails that artifact's outcome only.
        """
        pass


class NullLoader(BaseLoader):
    """Loader that leaves artifacts on disk untouched."""

    async def make_loadable(self, path: Path) -> LoadResult:
        return LoadResult(path=path, loaded=False, detail="no loader configured")
