"""Event models emitted while provisioning artifacts.

Artifact events carry the coordinate they relate to; download events carry
only the URL, since the downloader knows nothing about coordinates.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from ..domain.error_info import ErrorInfo
from ..domain.hash_validation import HashAlgorithm


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    """Immutable base for all events."""

    model_config = ConfigDict(frozen=True)

    occurred_at: datetime = Field(default_factory=_utc_now)
    event_type: str = Field(default="base", description="Event type identifier")


class DownloadEvent(BaseEvent):
    """Base class for downloader events."""

    url: str = Field(description="The URL being fetched")
    event_type: str = Field(default="download.base")


class DownloadStartedEvent(DownloadEvent):
    """Emitted once the server accepted the request."""

    event_type: str = Field(default="download.started")
    total_bytes: int | None = Field(
        default=None, ge=0, description="Total size if known from Content-Length"
    )


class DownloadCompletedEvent(DownloadEvent):
    """Emitted after the file was published at its destination."""

    event_type: str = Field(default="download.completed")
    destination_path: str = Field(default="", description="Published path")
    total_bytes: int = Field(default=0, ge=0, description="Bytes written")


class DownloadFailedEvent(DownloadEvent):
    """Emitted when a fetch fails; no file is left at the destination."""

    event_type: str = Field(default="download.failed")
    error: ErrorInfo


class ArtifactEvent(BaseEvent):
    """Base class for per-coordinate events."""

    coordinate: str = Field(description="group:artifact:version[:classifier]")
    event_type: str = Field(default="artifact.base")


class ArtifactLocatedEvent(ArtifactEvent):
    """Emitted when a download location has been chosen."""

    event_type: str = Field(default="artifact.located")
    url: str
    checksum_url: str | None = None
    pinned: bool = False


class ArtifactDownloadedEvent(ArtifactEvent):
    """Emitted when the artifact is staged locally."""

    event_type: str = Field(default="artifact.downloaded")
    url: str
    path: str
    reused: bool = Field(
        default=False, description="True when a staged copy was reused"
    )


class ArtifactVerifiedEvent(ArtifactEvent):
    """Emitted after verification accepted the artifact."""

    event_type: str = Field(default="artifact.verified")
    path: str
    algorithm: HashAlgorithm
    digest: str
    verified: bool
    cached: bool = False


class ArtifactVerificationFailedEvent(ArtifactEvent):
    """Emitted when the artifact must not be trusted."""

    event_type: str = Field(default="artifact.verification_failed")
    path: str
    error: ErrorInfo


class ArtifactRelocatedEvent(ArtifactEvent):
    """Emitted after a relocation was produced or reused."""

    event_type: str = Field(default="artifact.relocated")
    source_path: str
    output_path: str
    relocation_id: str
    cached: bool = False


class ArtifactResolvedEvent(ArtifactEvent):
    """Emitted when an ArtifactRecord is returned."""

    event_type: str = Field(default="artifact.resolved")
    path: str
    verified: bool
    relocated: bool


class ArtifactFailedEvent(ArtifactEvent):
    """Emitted when provisioning a dependency failed."""

    event_type: str = Field(default="artifact.failed")
    error: ErrorInfo
    optional: bool = False
