"""Coordinates, repositories and resolved locations."""

import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .hash_validation import HashAlgorithm

SNAPSHOT_SUFFIX: Final = "-SNAPSHOT"
MAVEN_CENTRAL_URL: Final = "https://repo1.maven.org/maven2/"

_SEGMENT_PATTERN: Final = re.compile(r"^[A-Za-z0-9_.\-+]+$")


def _check_segment(value: str) -> str:
    value = value.strip()
    if not _SEGMENT_PATTERN.fullmatch(value):
        raise ValueError(f"invalid coordinate segment {value!r}")
    return value


class Coordinate(BaseModel):
    """Identifier of one dependency: group, artifact, version, classifier.

    Frozen so it can key memoization maps and the relocation ledger.
    """

    model_config = ConfigDict(frozen=True)

    group: str = Field(description="Dotted group id, e.g. com.google.code.gson")
    artifact: str = Field(description="Artifact id")
    version: str = Field(description="Pinned version, possibly -SNAPSHOT")
    classifier: str | None = Field(default=None, description="Optional classifier")
    extension: str = Field(default="jar", description="Artifact file extension")

    @field_validator("group", "artifact", "version", "extension")
    @classmethod
    def _validate_segment(cls, value: str) -> str:
        return _check_segment(value)

    @field_validator("classifier")
    @classmethod
    def _validate_classifier(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return _check_segment(value)

    @classmethod
    def parse(cls, notation: str) -> "Coordinate":
        """Parse ``group:artifact:version[:classifier]``.

        Raises:
            ConfigurationError: If the notation is malformed.
        """
        parts = notation.strip().split(":")
        if len(parts) not in (3, 4) or not all(part.strip() for part in parts):
            raise ConfigurationError(
                f"Malformed coordinate {notation!r}; "
                "expected group:artifact:version[:classifier]"
            )
        group, artifact, version = parts[:3]
        classifier = parts[3] if len(parts) == 4 else None
        try:
            return cls(
                group=group, artifact=artifact, version=version, classifier=classifier
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Malformed coordinate {notation!r}: {exc}") from exc

    @property
    def is_snapshot(self) -> bool:
        """True for mutable, timestamp-qualified versions."""
        return self.version.endswith(SNAPSHOT_SUFFIX)

    @property
    def base_version(self) -> str:
        """Version without the ``-SNAPSHOT`` qualifier."""
        if self.is_snapshot:
            return self.version[: -len(SNAPSHOT_SUFFIX)]
        return self.version

    @property
    def group_path(self) -> str:
        return self.group.replace(".", "/")

    @property
    def version_directory(self) -> str:
        """Repository directory holding every file of this version."""
        return f"{self.group_path}/{self.artifact}/{self.version}"

    def file_name(self, version: str | None = None, extension: str | None = None) -> str:
        """``{artifact}-{version}[-{classifier}].{ext}``."""
        name = f"{self.artifact}-{version or self.version}"
        if self.classifier:
            name = f"{name}-{self.classifier}"
        return f"{name}.{extension or self.extension}"

    def __str__(self) -> str:
        notation = f"{self.group}:{self.artifact}:{self.version}"
        if self.classifier:
            notation = f"{notation}:{self.classifier}"
        return notation


class Repository(BaseModel):
    """A package repository base URL with an ordering priority."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Repository base URL")
    priority: int = Field(
        default=0, description="Higher numbers are preferred by priority selectors"
    )

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"repository URL must be http(s): {value!r}")
        return value if value.endswith("/") else f"{value}/"

    @classmethod
    def central(cls) -> "Repository":
        """Maven Central."""
        return cls(url=MAVEN_CENTRAL_URL)

    def url_for(self, relative_path: str) -> str:
        """Absolute URL of ``relative_path`` inside this repository."""
        return f"{self.url}{relative_path.lstrip('/')}"


class ResolvedLocation(BaseModel):
    """Where to download an artifact and how to authenticate it."""

    model_config = ConfigDict(frozen=True)

    download_url: str = Field(description="Artifact URL")
    checksum_url: str | None = Field(
        default=None, description="Published checksum URL, if one exists"
    )
    expected_checksum: str | None = Field(
        default=None, description="Pinned digest, if the caller supplied one"
    )
    algorithm: HashAlgorithm = Field(
        default=HashAlgorithm.SHA1, description="Algorithm of the checksum"
    )
    repository: str | None = Field(
        default=None, description="Repository that served the artifact"
    )
    pinned: bool = Field(
        default=False, description="True when taken from the pre-resolution mapping"
    )
