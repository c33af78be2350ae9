"""Shared fixtures for CLI tests."""

import json
from pathlib import Path

import pytest

from hoist.cli.app import create_cli_app
from hoist.cli.state import CLIState
from hoist.domain.artifacts import (
    ArtifactRecord,
    BatchResult,
    DependencySpec,
    ResolutionOutcome,
)
from hoist.domain.coordinates import Coordinate
from hoist.domain.error_info import ErrorInfo
from hoist.domain.exceptions import ResolutionNotFoundError
from hoist.domain.hash_validation import HashAlgorithm
from hoist.provisioning import Provisioner


@pytest.fixture
def mock_provisioner(mocker):
    """Provide fully mocked Provisioner with spec for type safety."""
    mock = mocker.AsyncMock(spec=Provisioner)
    # Configure context manager behavior
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = None
    return mock


@pytest.fixture
def provisioner_factory(mocker, mock_provisioner):
    """Factory returning the mocked provisioner; records its arguments."""
    return mocker.Mock(return_value=mock_provisioner)


@pytest.fixture
def cli_state_with_mock_provisioner(test_settings, provisioner_factory):
    """CLIState that returns the mocked provisioner."""
    return CLIState(test_settings, provisioner_factory=provisioner_factory)


@pytest.fixture
def app_with_mock_provisioner(cli_state_with_mock_provisioner):
    """CLI app with mocked provisioner factory for testing."""
    return create_cli_app(state=cli_state_with_mock_provisioner)


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document into tmp_path and return its path."""

    def _write(name: str, document) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_outcome():
    """Factory for successful or failed ResolutionOutcomes."""

    def _make(
        notation: str,
        *,
        ok: bool = True,
        optional: bool = False,
        verified: bool = True,
    ) -> ResolutionOutcome:
        coordinate = Coordinate.parse(notation)
        spec = DependencySpec(coordinate=coordinate, optional=optional)
        if not ok:
            error = ErrorInfo.from_exception(
                ResolutionNotFoundError(coordinate, ["https://repo1.maven.org/maven2/"])
            )
            return ResolutionOutcome(spec=spec, error=error)
        record = ArtifactRecord(
            coordinate=coordinate,
            local_path=Path("/deps") / coordinate.file_name(),
            checksum="a" * 40,
            algorithm=HashAlgorithm.SHA1,
            verified=verified,
        )
        return ResolutionOutcome(spec=spec, record=record)

    return _make



@pytest.fixture
def test_app(test_settings):
    """Provide CLI app with test settings injected."""
    return create_cli_app(settings=test_settings)
