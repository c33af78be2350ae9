"""Pytest configuration and fixtures for hoist tests."""

import hashlib
import io
import typing as t
import zipfile

import loguru
import pytest
import pytest_asyncio
from aiohttp import ClientSession
from blockbuster import BlockBuster, blockbuster_ctx
from typer.testing import CliRunner

from hoist.app import create_app
from hoist.cli.app import create_cli_app
from hoist.config.settings import Environment, LogLevel, Settings
from hoist.domain.hash_validation import HashAlgorithm
from hoist.events import BaseEmitter, EventEmitter
from hoist.infrastructure.logging import reset_logging


@pytest.fixture
def blockbuster() -> t.Iterator[BlockBuster]:
    """Detect blocking calls in the event loop made from hoist code.

    Opt in with ``pytestmark = pytest.mark.usefixtures("blockbuster")``.
    """
    with blockbuster_ctx(
        scanned_modules=["hoist"],
    ) as bb:
        # Third party modules use these functions, so we deactivate them
        # for now
        bb.functions["os.path.abspath"].deactivate()

        yield bb


@pytest.fixture
def test_settings(tmp_path):
    """Provide test-specific settings rooted in a temporary directory."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,  # Minimal logging during tests
        download_dir=tmp_path / "hoist",
    )


@pytest.fixture
def test_app(test_settings):
    """Provide a test app with clean logging state."""
    reset_logging()
    app = create_app(settings=test_settings)
    yield app
    reset_logging()


@pytest.fixture
def mock_logger(mocker):
    """Provide a mock logger for testing that captures log calls."""
    logger = mocker.Mock(spec=loguru.logger)
    return logger


@pytest.fixture
def mock_emitter(mocker):
    """Provide a mock event emitter for testing event emission."""
    emitter = mocker.Mock(spec=BaseEmitter)
    emitter.emit = mocker.AsyncMock()
    return emitter


@pytest.fixture
def real_emitter(mock_logger):
    """Provide a real EventEmitter for testing actual event emission."""
    return EventEmitter(mock_logger)


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Automatically reset logging before each test for isolation."""
    reset_logging()
    yield
    reset_logging()


@pytest_asyncio.fixture
async def aio_client():
    """Provide a real aiohttp ClientSession (pair with aioresponses)."""
    session = ClientSession()
    yield session
    await session.close()


@pytest.fixture
def calculate_hash():
    """Factory fixture to calculate hash for test content.

    Usage:
        def test_something(calculate_hash):
            hash_value = calculate_hash(b"content", HashAlgorithm.SHA256)
    """

    def _calculate(content: bytes, algorithm: HashAlgorithm) -> str:
        hasher = hashlib.new(str(algorithm))
        hasher.update(content)
        return hasher.hexdigest()

    return _calculate


@pytest.fixture
def make_jar():
    """Factory fixture building zip archives in memory.

    Entries are written in the given order with a fixed timestamp so the
    same arguments always produce the same bytes.
    """

    def _make_jar(entries: dict[str, bytes | str]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, content in entries.items():
                info = zipfile.ZipInfo(name, date_time=(2024, 1, 2, 3, 4, 6))
                info.compress_type = zipfile.ZIP_DEFLATED
                data = content.encode("utf-8") if isinstance(content, str) else content
                archive.writestr(info, data)
        return buffer.getvalue()

    return _make_jar


@pytest.fixture
def make_class_file():
    """Factory fixture building a minimal class file.

    The constant pool holds the given strings as CONSTANT_Utf8 entries
    interleaved with a Class and a Long constant, followed by a fixed tail.
    """

    def _make_class_file(strings: list[str]) -> bytes:
        pool = bytearray()
        count = 1
        for value in strings:
            raw = value.encode("utf-8")
            pool += b"\x01" + len(raw).to_bytes(2, "big") + raw
            count += 1
        # Class pointing at the first string, then a two-slot Long.
        pool += b"\x07" + (1).to_bytes(2, "big")
        count += 1
        pool += b"\x05" + (42).to_bytes(8, "big")
        count += 2
        header = b"\xca\xfe\xba\xbe" + b"\x00\x00\x00\x34" + count.to_bytes(2, "big")
        tail = b"\x00\x21\x00\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
        return header + bytes(pool) + tail

    return _make_class_file


@pytest.fixture
def cli_runner():
    """Provide Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def default_app():
    """Provide CLI app with default settings."""
    return create_cli_app()
