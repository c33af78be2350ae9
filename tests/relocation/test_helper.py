"""Tests for RelocationHelper idempotency and crash safety."""

import pytest

from hoist.domain.exceptions import ConfigurationError, RelocationFailureError
from hoist.domain.hash_validation import HashAlgorithm
from hoist.domain.relocation import RelocationRule, RelocationSet
from hoist.relocation.helper import RelocationHelper
from hoist.relocation.ledger import RelocationLedger
from hoist.relocation.rewriter import ZipArchiveRewriter
from hoist.verification.calculator import ChecksumCalculator

RELOCATIONS = RelocationSet(
    rules=(RelocationRule(from_prefix="com.example", to_prefix="shaded.example"),)
)
OTHER_RELOCATIONS = RelocationSet(
    rules=(RelocationRule(from_prefix="com.example", to_prefix="vendored.example"),)
)


@pytest.fixture
def source(tmp_path, make_jar, make_class_file):
    path = tmp_path / "staging" / "lib-1.0.jar"
    path.parent.mkdir()
    path.write_bytes(
        make_jar(
            {
                "com/example/Foo.class": make_class_file(["com/example/Foo"]),
                "com/example/app.properties": "impl=com.example.Foo\n",
            }
        )
    )
    return path


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "state" / "relocations.json"


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "relocated"


@pytest.fixture
def make_helper(ledger_path, output_dir, mock_logger):
    def _make(**kwargs) -> RelocationHelper:
        return RelocationHelper(
            RelocationLedger(ledger_path, mock_logger),
            output_dir,
            logger=mock_logger,
            **kwargs,
        )

    return _make


def _temporary_files(directory):
    return [path.name for path in directory.iterdir() if path.name.endswith(".part")]


class TestRelocate:
    """Test producing relocated outputs."""

    @pytest.mark.asyncio
    async def test_produces_named_output(
        self, make_helper, source, output_dir, calculate_hash
    ):
        """The output is named after the source, its identity and the set."""
        identity = calculate_hash(source.read_bytes(), HashAlgorithm.SHA256)

        result = await make_helper().relocate(source, RELOCATIONS)

        assert result.output_path == (
            output_dir
            / f"lib-1.0-{identity[:8]}-{RELOCATIONS.identifier[:12]}.jar"
        )
        assert result.relocation_id == RELOCATIONS.identifier
        assert result.checksum == calculate_hash(
            result.output_path.read_bytes(), HashAlgorithm.SHA256
        )
        assert not result.cached
        assert _temporary_files(output_dir) == []

    @pytest.mark.asyncio
    async def test_repeat_reuses_output_without_rewriting(
        self, make_helper, source, mocker
    ):
        """A second relocation of the same pair is served from the ledger."""
        helper = make_helper()
        spy = mocker.spy(helper.rewriter, "rewrite")

        first = await helper.relocate(source, RELOCATIONS)
        content = first.output_path.read_bytes()
        second = await helper.relocate(source, RELOCATIONS)

        assert second.cached
        assert second.output_path == first.output_path
        assert second.output_path.read_bytes() == content
        assert spy.call_count == 1

    @pytest.mark.asyncio
    async def test_reuse_survives_restart(self, make_helper, source, mocker):
        """A new helper over the same ledger reuses earlier outputs."""
        first = await make_helper().relocate(source, RELOCATIONS)

        helper = make_helper()
        spy = mocker.spy(helper.rewriter, "rewrite")
        second = await helper.relocate(source, RELOCATIONS)

        assert second.cached
        assert second.checksum == first.checksum
        spy.assert_not_called()

    @pytest.mark.asyncio
    async def test_different_sets_produce_different_outputs(self, make_helper, source):
        """Each relocation set gets its own output."""
        helper = make_helper()

        first = await helper.relocate(source, RELOCATIONS)
        second = await helper.relocate(source, OTHER_RELOCATIONS)

        assert first.output_path != second.output_path
        assert first.output_path.exists()
        assert second.output_path.exists()

    @pytest.mark.asyncio
    async def test_tampered_output_is_redone(self, make_helper, source, mocker):
        """An output that no longer matches its ledger entry is rebuilt."""
        helper = make_helper()
        first = await helper.relocate(source, RELOCATIONS)
        original = first.output_path.read_bytes()
        first.output_path.write_bytes(b"tampered")
        spy = mocker.spy(helper.rewriter, "rewrite")

        second = await helper.relocate(source, RELOCATIONS)

        assert not second.cached
        assert second.output_path.read_bytes() == original
        assert spy.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_set_is_rejected(self, make_helper, source):
        """Relocating without rules is a configuration error."""
        with pytest.raises(ConfigurationError):
            await make_helper().relocate(source, RelocationSet())


class TestRelocationFailures:
    """Test failure paths and ledger integrity."""

    @pytest.mark.asyncio
    async def test_interrupted_relocation_keeps_prior_entry(
        self, make_helper, source, output_dir, ledger_path, mock_logger, mocker
    ):
        """A failed rewrite commits nothing and leaves no temporary file."""
        helper = make_helper()
        first = await helper.relocate(source, RELOCATIONS)
        ledger_before = ledger_path.read_text(encoding="utf-8")

        failing = mocker.Mock(spec=ZipArchiveRewriter)
        failing.rewrite.side_effect = OSError("disk full")
        broken = make_helper(rewriter=failing)

        with pytest.raises(RelocationFailureError, match="disk full"):
            await broken.relocate(source, OTHER_RELOCATIONS)

        assert ledger_path.read_text(encoding="utf-8") == ledger_before
        assert _temporary_files(output_dir) == []
        assert [path.name for path in output_dir.iterdir()] == [first.output_path.name]
        reused = await make_helper().relocate(source, RELOCATIONS)
        assert reused.cached

    @pytest.mark.asyncio
    async def test_rewrite_failure_propagates(self, make_helper, tmp_path, output_dir):
        """A source that cannot be rewritten raises RelocationFailureError."""
        source = tmp_path / "lib.pom"
        source.write_text("<project/>", encoding="utf-8")

        with pytest.raises(RelocationFailureError, match="Not a zip-based artifact"):
            await make_helper().relocate(source, RELOCATIONS)

        assert _temporary_files(output_dir) == []

    @pytest.mark.asyncio
    async def test_unconfirmed_output_is_retried_then_fails(
        self, make_helper, source, output_dir, mocker
    ):
        """An output whose digest never matches the ledger fails after a redo."""

        async def calculate(path, algorithm):
            if path == source:
                return "a" * 64
            if path.name.endswith(".part"):
                return "b" * 64
            return "c" * 64

        calculator = mocker.Mock(spec=ChecksumCalculator)
        calculator.calculate = mocker.AsyncMock(side_effect=calculate)
        helper = make_helper(calculator=calculator)
        spy = mocker.spy(helper.rewriter, "rewrite")

        with pytest.raises(RelocationFailureError, match="could not be confirmed"):
            await helper.relocate(source, RELOCATIONS)

        assert spy.call_count == RelocationHelper.MAX_ATTEMPTS
        assert list(output_dir.iterdir()) == []
