"""Tests for the persistent RelocationLedger."""

import json

import pytest

from hoist.relocation.ledger import LedgerEntry, RelocationLedger


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "state" / "relocations.json"


def _entry(tmp_path, name="out.jar", checksum="c" * 64):
    return LedgerEntry(
        output_path=tmp_path / name,
        checksum=checksum,
        source_path=tmp_path / "lib.jar",
        relocation_id="r" * 64,
    )


class TestRelocationLedger:
    """Test ledger lookups and commits."""

    def test_key_combines_identity_and_set(self):
        """Keys are identity and relocation id joined by a colon."""
        assert RelocationLedger.key("abc", "def") == "abc:def"

    @pytest.mark.asyncio
    async def test_missing_key(self, ledger_path, mock_logger):
        """Unknown keys have no entry."""
        ledger = RelocationLedger(ledger_path, mock_logger)

        assert await ledger.get("abc:def") is None

    @pytest.mark.asyncio
    async def test_commit_then_get(self, ledger_path, tmp_path, mock_logger):
        """Committed entries are visible immediately."""
        ledger = RelocationLedger(ledger_path, mock_logger)
        entry = _entry(tmp_path)

        await ledger.commit("abc:def", entry)

        assert await ledger.get("abc:def") == entry

    @pytest.mark.asyncio
    async def test_entries_survive_restart(self, ledger_path, tmp_path, mock_logger):
        """A new ledger instance reads committed entries from disk."""
        entry = _entry(tmp_path)
        await RelocationLedger(ledger_path, mock_logger).commit("abc:def", entry)

        assert await RelocationLedger(ledger_path, mock_logger).get("abc:def") == entry

    @pytest.mark.asyncio
    async def test_commit_merges_with_other_writers(
        self, ledger_path, tmp_path, mock_logger
    ):
        """A commit keeps entries another instance wrote in the meantime."""
        first = RelocationLedger(ledger_path, mock_logger)
        second = RelocationLedger(ledger_path, mock_logger)
        await first.get("warm:cache")

        await second.commit("b:b", _entry(tmp_path, "b.jar"))
        await first.commit("a:a", _entry(tmp_path, "a.jar"))

        document = json.loads(ledger_path.read_text(encoding="utf-8"))
        assert set(document["entries"]) == {"a:a", "b:b"}
        assert await first.get("b:b") is not None

    @pytest.mark.asyncio
    async def test_last_writer_wins_per_key(self, ledger_path, tmp_path, mock_logger):
        """Recommitting a key replaces its entry."""
        ledger = RelocationLedger(ledger_path, mock_logger)
        await ledger.commit("abc:def", _entry(tmp_path, checksum="a" * 64))
        await ledger.commit("abc:def", _entry(tmp_path, checksum="b" * 64))

        entry = await RelocationLedger(ledger_path, mock_logger).get("abc:def")

        assert entry.checksum == "b" * 64

    @pytest.mark.asyncio
    async def test_unreadable_document_is_ignored(
        self, ledger_path, tmp_path, mock_logger
    ):
        """A damaged ledger is treated as empty and rewritten on commit."""
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text("[]", encoding="utf-8")
        ledger = RelocationLedger(ledger_path, mock_logger)

        assert await ledger.get("abc:def") is None
        mock_logger.warning.assert_called_once()

        await ledger.commit("abc:def", _entry(tmp_path))
        assert json.loads(ledger_path.read_text(encoding="utf-8"))["version"] == 1

    @pytest.mark.asyncio
    async def test_no_temporary_files_left(self, ledger_path, tmp_path, mock_logger):
        """Commits leave only the ledger document behind."""
        await RelocationLedger(ledger_path, mock_logger).commit(
            "abc:def", _entry(tmp_path)
        )

        assert [path.name for path in ledger_path.parent.iterdir()] == [
            "relocations.json"
        ]
