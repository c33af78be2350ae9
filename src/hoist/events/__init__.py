"""Event infrastructure - event emitter and event types."""

from ..domain.error_info import ErrorInfo
from .base import BaseEmitter
from .emitter import EventEmitter
from .models import (
    ArtifactDownloadedEvent,
    ArtifactEvent,
    ArtifactFailedEvent,
    ArtifactLocatedEvent,
    ArtifactRelocatedEvent,
    ArtifactResolvedEvent,
    ArtifactVerificationFailedEvent,
    ArtifactVerifiedEvent,
    BaseEvent,
    DownloadCompletedEvent,
    DownloadEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
)
from .null import NullEmitter

__all__ = [
    # Base and implementations
    "BaseEmitter",
    "BaseEvent",
    "ErrorInfo",
    "EventEmitter",
    "NullEmitter",
    # Downloader events
    "DownloadEvent",
    "DownloadStartedEvent",
    "DownloadCompletedEvent",
    "DownloadFailedEvent",
    # Artifact events
    "ArtifactEvent",
    "ArtifactLocatedEvent",
    "ArtifactDownloadedEvent",
    "ArtifactVerifiedEvent",
    "ArtifactVerificationFailedEvent",
    "ArtifactRelocatedEvent",
    "ArtifactResolvedEvent",
    "ArtifactFailedEvent",
]
