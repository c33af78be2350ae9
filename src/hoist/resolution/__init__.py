"""Resolution - coordinate to download location to verified local artifact."""

from .enquirer import RepositoryEnquirer, TextFetcher
from .metadata import SnapshotBuild, parse_snapshot_metadata
from .mirrors import (
    BaseMirrorSelector,
    DeclarationOrderMirrorSelector,
    PriorityMirrorSelector,
)
from .preresolution import PinnedResolution, PreResolutionProvider
from .prober import BaseProber, HttpProber
from .resolver import DependencyResolver
from .strategies import (
    ChecksumPathStrategy,
    MediatingPathStrategy,
    PathResolutionStrategy,
    PomPathStrategy,
    ReleasePathStrategy,
    SnapshotPathStrategy,
)

__all__ = [
    "BaseMirrorSelector",
    "BaseProber",
    "ChecksumPathStrategy",
    "DeclarationOrderMirrorSelector",
    "DependencyResolver",
    "HttpProber",
    "MediatingPathStrategy",
    "PathResolutionStrategy",
    "PinnedResolution",
    "PomPathStrategy",
    "PreResolutionProvider",
    "PriorityMirrorSelector",
    "ReleasePathStrategy",
    "RepositoryEnquirer",
    "SnapshotBuild",
    "SnapshotPathStrategy",
    "TextFetcher",
    "parse_snapshot_metadata",
]
