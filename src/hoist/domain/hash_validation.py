"""Hash validation domain models."""

import enum
import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_HEX_PATTERN: Final = re.compile(r"^[0-9a-f]+$")


class HashAlgorithm(enum.StrEnum):
    """Supported checksum algorithms."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def hex_length(self) -> int:
        """Expected hexadecimal string length for the algorithm."""
        return {
            HashAlgorithm.MD5: 32,
            HashAlgorithm.SHA1: 40,
            HashAlgorithm.SHA256: 64,
            HashAlgorithm.SHA512: 128,
        }[self]

    @property
    def file_extension(self) -> str:
        """Suffix of checksum files published next to artifacts."""
        return self.value


def normalize_hash(value: str) -> str:
    """Lower-case and strip a hexadecimal digest, rejecting anything else."""
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError("Expected hash cannot be empty")
    if not _HEX_PATTERN.fullmatch(normalized):
        raise ValueError("Expected hash must be hexadecimal")
    return normalized


class HashConfig(BaseModel):
    """Algorithm plus expected digest for a single file."""

    model_config = ConfigDict(frozen=True)

    algorithm: HashAlgorithm = Field(description="Hash algorithm to use")
    expected_hash: str = Field(
        min_length=1,
        description="Expected checksum in hexadecimal form",
    )

    @field_validator("expected_hash")
    @classmethod
    def _normalize_hash(cls, value: str) -> str:
        return normalize_hash(value)

    @model_validator(mode="after")
    def _validate_length(self) -> "HashConfig":
        expected_length = self.algorithm.hex_length
        if len(self.expected_hash) != expected_length:
            raise ValueError(
                f"{self.algorithm} hash must be {expected_length} characters"
            )
        return self

    @classmethod
    def from_checksum_string(cls, checksum: str) -> "HashConfig":
        """Create config from '<algorithm>:<hash>' strings."""
        if ":" not in checksum:
            raise ValueError("Checksum must be in format '<algorithm>:<hash>'")
        algorithm_part, hash_part = checksum.split(":", 1)
        algorithm_value = algorithm_part.strip().lower()
        try:
            algorithm = HashAlgorithm(algorithm_value)
        except ValueError as exc:
            msg = f"Unsupported hash algorithm '{algorithm_value}'"
            raise ValueError(msg) from exc

        return cls(algorithm=algorithm, expected_hash=hash_part)


class ChecksumSource(BaseModel):
    """Where the expected digest of an artifact comes from.

    Either a URL of a published checksum file, or a digest pinned by the
    caller. A pinned digest wins when both are present.
    """

    model_config = ConfigDict(frozen=True)

    url: str | None = Field(default=None, description="Checksum file URL")
    digest: str | None = Field(default=None, description="Pinned hex digest")

    @field_validator("digest")
    @classmethod
    def _normalize_digest(cls, value: str | None) -> str | None:
        return normalize_hash(value) if value is not None else None

    @model_validator(mode="after")
    def _require_one(self) -> "ChecksumSource":
        if self.url is None and self.digest is None:
            raise ValueError("ChecksumSource needs a url or a digest")
        return self


class VerificationResult(BaseModel):
    """Outcome of verifying one file."""

    model_config = ConfigDict(frozen=True)

    verified: bool = Field(description="True when the digest was authenticated")
    digest: str = Field(description="Digest computed from the local file")
    algorithm: HashAlgorithm = Field(description="Algorithm used for the digest")
    cached: bool = Field(
        default=False, description="True when served from the verification cache"
    )


def parse_checksum_document(text: str) -> str:
    """Extract the digest from a published checksum file.

    Checksum files hold the digest as their first token, optionally followed
    by a file name (``<hex>  artifact.jar``).
    """
    tokens = text.split()
    if not tokens:
        raise ValueError("Checksum document is empty")
    return normalize_hash(tokens[0])
