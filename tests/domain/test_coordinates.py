"""Tests for coordinates, repositories and resolved locations."""

import pydantic
import pytest

from hoist.domain.coordinates import MAVEN_CENTRAL_URL, Coordinate, Repository
from hoist.domain.exceptions import ConfigurationError


class TestCoordinateParsing:
    """Test group:artifact:version[:classifier] parsing."""

    def test_parse_release(self):
        """Three segments give a coordinate without classifier."""
        coordinate = Coordinate.parse("com.google.code.gson:gson:2.10.1")

        assert coordinate.group == "com.google.code.gson"
        assert coordinate.artifact == "gson"
        assert coordinate.version == "2.10.1"
        assert coordinate.classifier is None
        assert coordinate.extension == "jar"

    def test_parse_with_classifier(self):
        """A fourth segment is the classifier."""
        coordinate = Coordinate.parse("org.example:lib:1.0:sources")

        assert coordinate.classifier == "sources"
        assert str(coordinate) == "org.example:lib:1.0:sources"

    @pytest.mark.parametrize(
        "notation",
        [
            "",
            "org.example:lib",
            "org.example:lib:1.0:sources:extra",
            "org.example::1.0",
            "org example:lib:1.0",
            "org.example:lib:1.0/../..",
        ],
    )
    def test_malformed_notation_raises(self, notation):
        """Malformed notations raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            Coordinate.parse(notation)

    def test_round_trips_through_str(self):
        """str() gives back the parsed notation."""
        assert str(Coordinate.parse("a.b:c:1.2.3")) == "a.b:c:1.2.3"


class TestCoordinateProperties:
    """Test derived paths and snapshot detection."""

    def test_snapshot_detection(self):
        """Only -SNAPSHOT versions are snapshots."""
        snapshot = Coordinate.parse("org.example:lib:1.0-SNAPSHOT")
        release = Coordinate.parse("org.example:lib:1.0")

        assert snapshot.is_snapshot
        assert snapshot.base_version == "1.0"
        assert not release.is_snapshot
        assert release.base_version == "1.0"

    def test_paths(self):
        """Group dots become directories."""
        coordinate = Coordinate.parse("com.google.code.gson:gson:2.10.1")

        assert coordinate.group_path == "com/google/code/gson"
        assert coordinate.version_directory == "com/google/code/gson/gson/2.10.1"
        assert coordinate.file_name() == "gson-2.10.1.jar"
        assert coordinate.file_name(extension="pom") == "gson-2.10.1.pom"

    def test_file_name_with_classifier(self):
        """The classifier follows the version in file names."""
        coordinate = Coordinate.parse("org.example:lib:1.0:sources")

        assert coordinate.file_name() == "lib-1.0-sources.jar"

    def test_hashable_and_value_equal(self):
        """Equal coordinates share a dictionary slot."""
        first = Coordinate.parse("org.example:lib:1.0")
        second = Coordinate(group="org.example", artifact="lib", version="1.0")

        assert first == second
        assert len({first: 1, second: 2}) == 1


class TestRepository:
    """Test repository URL handling."""

    def test_url_normalised_with_trailing_slash(self):
        """Base URLs always end with a slash."""
        repository = Repository(url="https://repo.example.org/maven")

        assert repository.url == "https://repo.example.org/maven/"
        assert (
            repository.url_for("/org/example/lib.jar")
            == "https://repo.example.org/maven/org/example/lib.jar"
        )

    def test_central(self):
        """Maven Central is the default repository."""
        assert Repository.central().url == MAVEN_CENTRAL_URL

    def test_rejects_non_http_url(self):
        """Only http(s) repositories are accepted."""
        with pytest.raises(pydantic.ValidationError):
            Repository(url="ftp://repo.example.org/")
