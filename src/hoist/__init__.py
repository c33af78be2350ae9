"""hoist - runtime dependency fetching, verification and relocation."""

from .app import App, create_app
from .config.settings import Settings, VerificationPolicy, build_settings
from .domain import (
    ArtifactRecord,
    BatchResult,
    Coordinate,
    DependencySpec,
    HoistError,
    ProvisioningError,
    RelocationRule,
    RelocationSet,
    Repository,
)
from .loading import BaseLoader, LoadResult, NullLoader
from .provisioning import Provisioner

__all__ = [
    "App",
    "ArtifactRecord",
    "BaseLoader",
    "BatchResult",
    "Coordinate",
    "DependencySpec",
    "HoistError",
    "LoadResult",
    "NullLoader",
    "Provisioner",
    "ProvisioningError",
    "RelocationRule",
    "RelocationSet",
    "Repository",
    "Settings",
    "VerificationPolicy",
    "build_settings",
    "create_app",
]
