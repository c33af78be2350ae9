"""Domain models - coordinates, hashes, relocation rules and artifacts."""

from .artifacts import (
    ArtifactRecord,
    BatchResult,
    DependencySpec,
    LoadResult,
    ResolutionOutcome,
)
from .coordinates import Coordinate, Repository, ResolvedLocation
from .error_info import ErrorInfo
from .exceptions import (
    ConfigurationError,
    DownloadFailureError,
    FileAccessError,
    HashMismatchError,
    HoistError,
    ProvisionerNotInitializedError,
    ProvisioningError,
    RelocationFailureError,
    ResolutionNotFoundError,
    VerificationFailureError,
)
from .hash_validation import ChecksumSource, HashAlgorithm, HashConfig, VerificationResult
from .relocation import RelocationRule, RelocationSet

__all__ = [
    "ArtifactRecord",
    "BatchResult",
    "ChecksumSource",
    "ConfigurationError",
    "Coordinate",
    "DependencySpec",
    "DownloadFailureError",
    "ErrorInfo",
    "FileAccessError",
    "HashAlgorithm",
    "HashConfig",
    "HashMismatchError",
    "HoistError",
    "LoadResult",
    "ProvisionerNotInitializedError",
    "ProvisioningError",
    "RelocationFailureError",
    "RelocationRule",
    "RelocationSet",
    "Repository",
    "ResolutionNotFoundError",
    "ResolutionOutcome",
    "ResolvedLocation",
    "VerificationFailureError",
    "VerificationResult",
]
