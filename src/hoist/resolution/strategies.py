"""Path resolution strategies: coordinate -> path relative to a repository root.

Strategies are pure; anything that needs the network (the snapshot
descriptor) is fetched by the caller and passed in.
"""

from abc import ABC, abstractmethod

from ..domain.coordinates import Coordinate
from ..domain.hash_validation import HashAlgorithm
from .metadata import SnapshotBuild

DESCRIPTOR_FILE_NAME = "maven-metadata.xml"


class PathResolutionStrategy(ABC):
    """Computes the relative path of an artifact inside a repository."""

    @abstractmethod
    def artifact_path(
        self, coordinate: Coordinate, build: SnapshotBuild | None = None
    ) -> str:
        """Relative path of the artifact file."""

    def requires_descriptor(self, coordinate: Coordinate) -> bool:
        """True when ``artifact_path`` needs a fetched SnapshotBuild."""
        return False

    def descriptor_path(self, coordinate: Coordinate) -> str:
        """Relative path of the per-version metadata descriptor."""
        return f"{coordinate.version_directory}/{DESCRIPTOR_FILE_NAME}"


class ReleasePathStrategy(PathResolutionStrategy):
    """``{groupPath}/{artifact}/{version}/{artifact}-{version}[-{classifier}].{ext}``."""

    def artifact_path(
        self, coordinate: Coordinate, build: SnapshotBuild | None = None
    ) -> str:
        return f"{coordinate.version_directory}/{coordinate.file_name()}"


class SnapshotPathStrategy(PathResolutionStrategy):
    """Timestamped snapshot file names learned from the version descriptor.

    ``1.0-SNAPSHOT`` built at ``20240102.030405`` as build ``7`` lives at
    ``.../1.0-SNAPSHOT/{artifact}-1.0-20240102.030405-7.jar``. Without a
    concrete build (local repositories publish none) the literal
    ``-SNAPSHOT`` file name is used.
    """

    def requires_descriptor(self, coordinate: Coordinate) -> bool:
        return coordinate.is_snapshot

    def artifact_path(
        self, coordinate: Coordinate, build: SnapshotBuild | None = None
    ) -> str:
        if build is None or build.is_local:
            return f"{coordinate.version_directory}/{coordinate.file_name()}"
        version = build.concrete_version(coordinate.base_version)
        return f"{coordinate.version_directory}/{coordinate.file_name(version=version)}"


class PomPathStrategy(PathResolutionStrategy):
    """Path of the project descriptor (``.pom``) of a release."""

    def artifact_path(
        self, coordinate: Coordinate, build: SnapshotBuild | None = None
    ) -> str:
        version = coordinate.version
        if build is not None and not build.is_local:
            version = build.concrete_version(coordinate.base_version)
        return (
            f"{coordinate.version_directory}/"
            f"{coordinate.artifact}-{version}.pom"
        )


class MediatingPathStrategy(PathResolutionStrategy):
    """Delegates to the snapshot strategy for snapshot versions, else release."""

    def __init__(
        self,
        release: PathResolutionStrategy | None = None,
        snapshot: PathResolutionStrategy | None = None,
    ) -> None:
        self.release = release or ReleasePathStrategy()
        self.snapshot = snapshot or SnapshotPathStrategy()

    def _select(self, coordinate: Coordinate) -> PathResolutionStrategy:
        return self.snapshot if coordinate.is_snapshot else self.release

    def requires_descriptor(self, coordinate: Coordinate) -> bool:
        return self._select(coordinate).requires_descriptor(coordinate)

    def descriptor_path(self, coordinate: Coordinate) -> str:
        return self._select(coordinate).descriptor_path(coordinate)

    def artifact_path(
        self, coordinate: Coordinate, build: SnapshotBuild | None = None
    ) -> str:
        return self._select(coordinate).artifact_path(coordinate, build)


class ChecksumPathStrategy:
    """Checksum files share the artifact path plus an algorithm suffix."""

    def __init__(self, algorithm: HashAlgorithm = HashAlgorithm.SHA1) -> None:
        self.algorithm = algorithm

    def checksum_path(self, artifact_path: str) -> str:
        return f"{artifact_path}.{self.algorithm.file_extension}"
