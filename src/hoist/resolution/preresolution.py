"""Pinned coordinate -> URL/checksum mappings that bypass the enquirer."""

import typing as t

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..domain.coordinates import Coordinate, ResolvedLocation
from ..domain.exceptions import ConfigurationError
from ..domain.hash_validation import HashAlgorithm, HashConfig


class PinnedResolution(BaseModel):
    """One pinned entry: where to download, and optionally how to verify."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Artifact download URL")
    checksum_url: str | None = Field(default=None, description="Checksum file URL")
    checksum: HashConfig | None = Field(
        default=None, description="Pinned digest as '<algorithm>:<hex>'"
    )
    algorithm: HashAlgorithm | None = Field(
        default=None, description="Algorithm of checksum_url (defaults to sha1)"
    )

    @model_validator(mode="before")
    @classmethod
    def _parse_checksum_string(cls, data: t.Any) -> t.Any:
        if isinstance(data, dict) and isinstance(data.get("checksum"), str):
            data = {**data, "checksum": HashConfig.from_checksum_string(data["checksum"])}
        return data


class PreResolutionProvider:
    """O(1) lookup of pinned resolutions."""

    def __init__(
        self,
        pins: t.Mapping[Coordinate, PinnedResolution] | None = None,
        *,
        default_algorithm: HashAlgorithm = HashAlgorithm.SHA1,
    ) -> None:
        self._pins = dict(pins or {})
        self.default_algorithm = default_algorithm

    def __len__(self) -> int:
        return len(self._pins)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._pins

    @classmethod
    def from_mapping(
        cls,
        mapping: t.Mapping[str, t.Any],
        *,
        default_algorithm: HashAlgorithm = HashAlgorithm.SHA1,
    ) -> "PreResolutionProvider":
        """Build from ``{"group:artifact:version": {"url": ..., ...}}``.

        Raises:
            ConfigurationError: If a coordinate or entry is malformed.
        """
        pins: dict[Coordinate, PinnedResolution] = {}
        for notation, entry in mapping.items():
            coordinate = Coordinate.parse(notation)
            try:
                pins[coordinate] = PinnedResolution.model_validate(entry)
            except (ValidationError, ValueError) as exc:
                raise ConfigurationError(
                    f"Malformed pinned resolution for {notation}: {exc}"
                ) from exc
        return cls(pins, default_algorithm=default_algorithm)

    def get(self, coordinate: Coordinate) -> ResolvedLocation | None:
        pin = self._pins.get(coordinate)
        if pin is None:
            return None
        if pin.checksum is not None:
            algorithm = pin.checksum.algorithm
        else:
            algorithm = pin.algorithm or self.default_algorithm
        return ResolvedLocation(
            download_url=pin.url,
            checksum_url=pin.checksum_url,
            expected_checksum=pin.checksum.expected_hash if pin.checksum else None,
            algorithm=algorithm,
            pinned=True,
        )
