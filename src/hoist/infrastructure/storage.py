"""Crash-safe persistence helpers for local state documents."""

import uuid
from pathlib import Path

import aiofiles
import aiofiles.os


def temporary_sibling(path: Path, suffix: str = ".tmp") -> Path:
    """Hidden, uniquely named path in the same directory as ``path``.

    Same directory means the final ``os.replace`` never crosses a file
    system boundary and is therefore atomic.
    """
    return path.with_name(f".{path.name}.{uuid.uuid4().hex}{suffix}")


async def discard(path: Path) -> None:
    """Remove ``path`` if it exists."""
    if await aiofiles.os.path.exists(path):
        await aiofiles.os.remove(path)


async def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temporary file and rename.

    Readers observe either the previous document or the new one, never a
    truncated file.
    """
    await aiofiles.os.makedirs(path.parent, exist_ok=True)
    tmp_path = temporary_sibling(path)
    try:
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as handle:
            await handle.write(content)
            await handle.flush()
        await aiofiles.os.replace(tmp_path, path)
    except BaseException:
        await discard(tmp_path)
        raise


async def read_text_if_exists(path: Path) -> str | None:
    """Return the file's text, or None when it does not exist."""
    if not await aiofiles.os.path.isfile(path):
        return None
    async with aiofiles.open(path, "r", encoding="utf-8") as handle:
        return await handle.read()
