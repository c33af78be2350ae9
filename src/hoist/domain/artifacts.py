"""Dependency declarations, artifact records and batch results."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .coordinates import Coordinate, Repository
from .error_info import ErrorInfo
from .exceptions import ProvisioningError
from .hash_validation import HashAlgorithm
from .relocation import RelocationSet


class DependencySpec(BaseModel):
    """One declared dependency: what to fetch, from where, how to rewrite it."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    repositories: tuple[Repository, ...] = Field(default=())
    relocations: RelocationSet = Field(default_factory=RelocationSet)
    optional: bool = Field(
        default=False, description="Optional failures are warnings, not fatal"
    )


class ArtifactRecord(BaseModel):
    """A resolved artifact on local disk.

    ``verified`` is False only when the verification policy explicitly
    allows unverifiable artifacts.
    """

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    local_path: Path
    checksum: str = Field(description="Digest of the file at local_path")
    algorithm: HashAlgorithm
    verified: bool
    relocated: bool = False
    source_url: str | None = None
    relocation_id: str | None = None


class LoadResult(BaseModel):
    """What the host loader did with a provisioned artifact."""

    model_config = ConfigDict(frozen=True)

    path: Path
    loaded: bool
    detail: str | None = None


class ResolutionOutcome(BaseModel):
    """Result of provisioning a single DependencySpec."""

    model_config = ConfigDict(frozen=True)

    spec: DependencySpec
    record: ArtifactRecord | None = None
    load: LoadResult | None = Field(
        default=None, description="Loader result for a successful record"
    )
    error: ErrorInfo | None = None

    @property
    def coordinate(self) -> Coordinate:
        return self.spec.coordinate

    @property
    def succeeded(self) -> bool:
        return self.record is not None


class BatchResult(BaseModel):
    """Per-dependency outcomes of one provisioning run, in declaration order."""

    model_config = ConfigDict(frozen=True)

    outcomes: tuple[ResolutionOutcome, ...] = Field(default=())

    @property
    def records(self) -> list[ArtifactRecord]:
        return [outcome.record for outcome in self.outcomes if outcome.record]

    @property
    def failures(self) -> list[ResolutionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def mandatory_failures(self) -> list[ResolutionOutcome]:
        return [outcome for outcome in self.failures if not outcome.spec.optional]

    @property
    def ok(self) -> bool:
        """True when every mandatory dependency was provisioned."""
        return not self.mandatory_failures

    def paths(self) -> list[Path]:
        """Final local paths, ready for the host's loader."""
        return [record.local_path for record in self.records]

    def raise_for_failures(self) -> None:
        """Raise ProvisioningError naming each failed mandatory coordinate."""
        if self.mandatory_failures:
            raise ProvisioningError(self.mandatory_failures)
