"""Runtime settings resolved once at start-up."""

import enum
import os
import typing as t
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

from ..domain.exceptions import ConfigurationError
from ..domain.hash_validation import HashAlgorithm

ENV_PREFIX = "HOIST_"


class Environment(enum.StrEnum):
    """Runtime environment for the application.

    Kept small and explicit to support simple environment-driven behavior
    without introducing configuration dependencies.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(enum.StrEnum):
    """Log levels understood by loguru."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class VerificationPolicy(enum.StrEnum):
    """What to do with an artifact that has no checksum source.

    STRICT rejects it. PASSTHROUGH accepts it with ``verified=False``.
    """

    STRICT = "strict"
    PASSTHROUGH = "passthrough"


def _default_download_dir() -> Path:
    return Path.home() / ".hoist"


@dataclass(frozen=True)
class Settings:
    """Immutable settings container passed to every component.

    Rationale: keep a stable shape that core code depends on while allowing
    the app/CLI layer to decide how values are populated (environment
    variables, CLI options or explicit construction in tests).
    """

    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO
    download_dir: Path = field(default_factory=_default_download_dir)
    application_name: str = "hoist"
    max_workers: int = 3
    timeout: float = 30.0
    chunk_size: int = 64 * 1024
    checksum_algorithm: HashAlgorithm = HashAlgorithm.SHA1
    relocation_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    verification_policy: VerificationPolicy = VerificationPolicy.STRICT

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.chunk_size < 1:
            raise ConfigurationError("chunk_size must be positive")
        if not self.application_name.strip():
            raise ConfigurationError("application_name cannot be empty")

    @property
    def state_dir(self) -> Path:
        """Directory holding the checksum cache and relocation ledger."""
        return self.download_dir / ".hoist"

    @property
    def relocation_dir(self) -> Path:
        """Directory receiving relocated artifacts for this application."""
        return self.download_dir / "relocated" / self.application_name


def build_settings(**overrides: t.Any) -> Settings:
    """Build Settings from defaults, applying only non-None overrides.

    Example:
        >>> build_settings(max_workers=None, log_level=LogLevel.DEBUG)
        Settings(..., log_level=<LogLevel.DEBUG: 'DEBUG'>, max_workers=3, ...)
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return replace(Settings(), **values) if values else Settings()


_CONVERTERS: dict[str, t.Callable[[str], t.Any]] = {
    "environment": Environment,
    "log_level": lambda value: LogLevel(value.upper()),
    "download_dir": lambda value: Path(value).expanduser(),
    "application_name": str,
    "max_workers": int,
    "timeout": float,
    "chunk_size": int,
    "checksum_algorithm": lambda value: HashAlgorithm(value.lower()),
    "relocation_algorithm": lambda value: HashAlgorithm(value.lower()),
    "verification_policy": lambda value: VerificationPolicy(value.lower()),
}


def settings_from_env(
    environ: t.Mapping[str, str] | None = None, **overrides: t.Any
) -> Settings:
    """Build Settings from ``HOIST_*`` environment variables.

    Explicit non-None overrides win over the environment.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, t.Any] = {}
    for settings_field in fields(Settings):
        raw = environ.get(f"{ENV_PREFIX}{settings_field.name.upper()}")
        if raw is None or not raw.strip():
            continue
        try:
            values[settings_field.name] = _CONVERTERS[settings_field.name](raw.strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid value for {ENV_PREFIX}{settings_field.name.upper()}: {raw!r}"
            ) from exc
    values.update({key: value for key, value in overrides.items() if value is not None})
    return build_settings(**values)
