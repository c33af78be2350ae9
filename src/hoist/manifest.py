"""JSON manifest and pinned-resolution file readers for the CLI."""

import json
import typing as t
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .domain.artifacts import DependencySpec
from .domain.coordinates import Coordinate, Repository
from .domain.exceptions import ConfigurationError
from .domain.relocation import RelocationRule, RelocationSet
from .resolution.preresolution import PreResolutionProvider


class ManifestDependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    coordinate: str
    repositories: tuple[Repository, ...] = Field(default=())
    relocations: tuple[RelocationRule, ...] = Field(default=())
    optional: bool = False

    @field_validator("coordinate")
    @classmethod
    def _validate_coordinate(cls, value: str) -> str:
        try:
            Coordinate.parse(value)
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc
        return value.strip()


class Manifest(BaseModel):
    """Declared dependencies plus the repositories they default to."""

    model_config = ConfigDict(frozen=True)

    repositories: tuple[Repository, ...] = Field(default=())
    dependencies: tuple[ManifestDependency, ...] = Field(default=())

    def specs(self) -> list[DependencySpec]:
        """Dependency specs in declaration order.

        A dependency without repositories inherits the document's list, or
        Maven Central when that is empty too.
        """
        defaults = self.repositories or (Repository.central(),)
        return [
            DependencySpec(
                coordinate=Coordinate.parse(dependency.coordinate),
                repositories=dependency.repositories or defaults,
                relocations=RelocationSet(rules=dependency.relocations),
                optional=dependency.optional,
            )
            for dependency in self.dependencies
        ]


def _read_json(path: Path, kind: str) -> t.Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {kind} {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Malformed {kind} {path}: {exc}") from exc


def load_manifest(path: Path) -> Manifest:
    """Read and validate a manifest file.

    Raises:
        ConfigurationError: If the file is unreadable or invalid.
    """
    try:
        return Manifest.model_validate(_read_json(path, "manifest"))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid manifest {path}: {exc}") from exc


def load_pins(path: Path) -> PreResolutionProvider:
    """Read a pinned-resolution file.

    Raises:
        ConfigurationError: If the file is unreadable or invalid.
    """
    document = _read_json(path, "pinned resolution file")
    if not isinstance(document, dict):
        raise ConfigurationError(f"Pinned resolution file {path} must hold an object")
    return PreResolutionProvider.from_mapping(document)
