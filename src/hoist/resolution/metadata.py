"""Parsing of per-version snapshot descriptors (``maven-metadata.xml``)."""

import re
import xml.etree.ElementTree as ElementTree
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

_TIMESTAMP_PATTERN: Final = re.compile(r"^\d{8}\.\d{6}$")


class SnapshotBuild(BaseModel):
    """Concrete build behind a ``-SNAPSHOT`` version."""

    model_config = ConfigDict(frozen=True)

    timestamp: str | None = Field(default=None, description="yyyyMMdd.HHmmss")
    build_number: int | None = Field(default=None, ge=1)

    @property
    def is_local(self) -> bool:
        """True when the repository publishes no timestamped build."""
        return self.timestamp is None or self.build_number is None

    def concrete_version(self, base_version: str) -> str:
        return f"{base_version}-{self.timestamp}-{self.build_number}"


def parse_snapshot_metadata(document: str) -> SnapshotBuild:
    """Extract the snapshot timestamp and build number from a descriptor.

    Descriptors without a ``<versioning><snapshot>`` block, or marking the
    snapshot as ``localCopy``, yield a local build.

    Raises:
        ValueError: If the document is not well-formed or the values are
            malformed.
    """
    try:
        root = ElementTree.fromstring(document)
    except ElementTree.ParseError as exc:
        raise ValueError(f"Malformed snapshot descriptor: {exc}") from exc

    snapshot = root.find("./versioning/snapshot")
    if snapshot is None:
        return SnapshotBuild()
    if (snapshot.findtext("localCopy") or "").strip().lower() == "true":
        return SnapshotBuild()

    timestamp = (snapshot.findtext("timestamp") or "").strip()
    build_number = (snapshot.findtext("buildNumber") or "").strip()
    if not timestamp and not build_number:
        return SnapshotBuild()
    if not _TIMESTAMP_PATTERN.fullmatch(timestamp) or not build_number.isdigit():
        raise ValueError(
            f"Malformed snapshot entry: timestamp={timestamp!r}, "
            f"buildNumber={build_number!r}"
        )
    return SnapshotBuild(timestamp=timestamp, build_number=int(build_number))
