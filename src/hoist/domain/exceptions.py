"""Custom exceptions for hoist."""

import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from .artifacts import ResolutionOutcome
    from .coordinates import Coordinate


class HoistError(Exception):
    """Base exception for all hoist errors."""

    pass


class ConfigurationError(HoistError):
    """Raised for malformed coordinates, manifests or settings."""

    pass


class ProvisionerNotInitializedError(HoistError):
    """Raised when the Provisioner is used before it has been opened.

    This typically occurs when trying to provision without using the
    Provisioner as a context manager or providing a client.
    """

    pass


class ResolutionNotFoundError(HoistError):
    """Raised when no repository serves the requested coordinate."""

    def __init__(self, coordinate: "Coordinate", repositories: t.Sequence[str]) -> None:
        self.coordinate = coordinate
        self.repositories = tuple(repositories)
        tried = ", ".join(self.repositories) or "no repositories"
        super().__init__(f"Could not resolve {coordinate} (tried {tried})")


class DownloadFailureError(HoistError):
    """Raised when a URL cannot be fetched (network, timeout, HTTP status)."""

    def __init__(self, url: str, message: str, *, status: int | None = None) -> None:
        self.url = url
        self.status = status
        super().__init__(f"{message}: {url}")


class VerificationFailureError(HoistError):
    """Base exception for artifacts that cannot be trusted."""

    pass


class FileAccessError(VerificationFailureError):
    """Raised when files cannot be accessed for verification."""

    pass


class HashMismatchError(VerificationFailureError):
    """Raised when calculated hash does not match expected value."""

    def __init__(
        self,
        *,
        expected_hash: str,
        actual_hash: str | None,
        file_path: Path,
    ) -> None:
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        self.file_path = file_path
        message = (
            f"Hash mismatch for {file_path}: expected {expected_hash[:16]}..., "
            f"got {actual_hash[:16] if actual_hash else 'unknown'}..."
        )
        super().__init__(message)


class RelocationFailureError(HoistError):
    """Raised when an artifact cannot be rewritten into a trustworthy output."""

    pass


class ProvisioningError(HoistError):
    """Raised when one or more mandatory dependencies failed to provision."""

    def __init__(self, failures: t.Sequence["ResolutionOutcome"]) -> None:
        self.failures = tuple(failures)
        details = "; ".join(
            f"{outcome.coordinate}: {outcome.error.message if outcome.error else 'unknown'}"
            for outcome in self.failures
        )
        super().__init__(
            f"{len(self.failures)} mandatory dependencies failed: {details}"
        )
