"""Namespace rewrite engines.

The default engine rewrites zip-based artifacts (jar, wheel, zip). It moves
entries, rewrites compiled class constant pools and textual resources, and
keeps every other byte as it was so the same input always produces the same
output.
"""

import re
import typing as t
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict

from ..domain.exceptions import RelocationFailureError
from ..domain.relocation import RelocationRule, RelocationSet

SERVICES_PREFIX: Final = "META-INF/services/"
CLASS_MAGIC: Final = b"\xca\xfe\xba\xbe"

TEXT_SUFFIXES: Final = frozenset(
    {
        ".cfg",
        ".java",
        ".json",
        ".kt",
        ".mf",
        ".properties",
        ".py",
        ".pyi",
        ".toml",
        ".txt",
        ".xml",
        ".yaml",
        ".yml",
    }
)

_SIGNATURE_PATTERN: Final = re.compile(r"^META-INF/[^/]+\.(SF|RSA|DSA|EC)$", re.IGNORECASE)

# A dotted or slashed qualified name, optionally an absolute resource path.
# It never starts inside another name.
_NAME_TOKEN: Final = re.compile(r"(?<![\w$./])/?[\w$]+(?:[./][\w$]+)*")

# Constant pool entry sizes (bytes after the tag), Utf8 excluded.
_CONSTANT_SIZES: Final = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long (two slots)
    6: 8,  # Double (two slots)
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}
_UTF8_TAG: Final = 1
_WIDE_TAGS: Final = frozenset({5, 6})


class NamespaceRewriter:
    """Applies ordered rules to strings, matching only at namespace boundaries.

    Both the dotted (``com.example``) and slashed (``com/example``) form of
    every rule is recognised. ``com.example`` matches ``com.example.Foo``,
    ``Lcom/example/Foo;``, ``com/example/`` and the absolute resource path
    ``/com/example/app.properties`` but not ``com.examples`` or
    ``org.com.example``.

    The text is scanned as qualified-name tokens. Each token is offered to
    the rules in order and the first rule whose prefix ends at a segment
    boundary wins, so ``org.lib`` never shadows a later ``org.lib2`` rule.
    """

    def __init__(self, rules: t.Iterable[RelocationRule]) -> None:
        self._replacements: dict[str, str] = {}
        for rule in rules:
            self._replacements.setdefault(rule.from_prefix, rule.to_prefix)
            self._replacements.setdefault(rule.from_path, rule.to_path)

    def rewrite(self, text: str) -> str:
        if not self._replacements:
            return text
        return _NAME_TOKEN.sub(self._replace, text)

    def _replace(self, match: re.Match[str]) -> str:
        token = match.group(0)
        for offset in self._name_offsets(token):
            name = token[offset:]
            for needle, replacement in self._replacements.items():
                if self._is_prefix(name, needle, match):
                    return token[:offset] + replacement + name[len(needle) :]
        return token

    @staticmethod
    def _name_offsets(token: str) -> tuple[int, ...]:
        if token.startswith("/"):
            return (1,)
        # Type descriptor: the 'L' is not part of the class name.
        if token.startswith("L"):
            return (0, 1)
        return (0,)

    @staticmethod
    def _is_prefix(name: str, needle: str, match: re.Match[str]) -> bool:
        if not name.startswith(needle):
            return False
        if len(name) > len(needle):
            return name[len(needle)] in "./"
        # The needle spans the whole token: an artifact-style suffix like
        # ``com.example-extra`` is not a namespace.
        end = match.end()
        return end == len(match.string) or match.string[end] != "-"


def rewrite_class_file(data: bytes, rewriter: NamespaceRewriter) -> bytes:
    """Rewrite every CONSTANT_Utf8 string of a compiled class.

    Lengths are recomputed for changed strings; every byte outside the
    constant pool strings is copied verbatim. Modified UTF-8 sequences are
    carried through untouched via ``surrogateescape``.

    Raises:
        RelocationFailureError: If the constant pool cannot be parsed.
    """
    if len(data) < 10 or data[:4] != CLASS_MAGIC:
        raise RelocationFailureError("Not a class file")

    count = int.from_bytes(data[8:10], "big")
    output = bytearray(data[:10])
    position = 10
    index = 1
    try:
        while index < count:
            tag = data[position]
            if tag == _UTF8_TAG:
                length = int.from_bytes(data[position + 1 : position + 3], "big")
                raw = data[position + 3 : position + 3 + length]
                if len(raw) != length:
                    raise RelocationFailureError("Truncated constant pool string")
                text = raw.decode("utf-8", "surrogateescape")
                rewritten = rewriter.rewrite(text)
                if rewritten != text:
                    raw = rewritten.encode("utf-8", "surrogateescape")
                    if len(raw) > 0xFFFF:
                        raise RelocationFailureError("Rewritten constant exceeds 65535 bytes")
                output.append(_UTF8_TAG)
                output += len(raw).to_bytes(2, "big")
                output += raw
                position += 3 + length
                index += 1
                continue

            size = _CONSTANT_SIZES.get(tag)
            if size is None:
                raise RelocationFailureError(f"Unknown constant pool tag {tag}")
            output += data[position : position + 1 + size]
            position += 1 + size
            index += 2 if tag in _WIDE_TAGS else 1
    except IndexError as exc:
        raise RelocationFailureError("Truncated class file") from exc

    output += data[position:]
    return bytes(output)


class RewriteStats(BaseModel):
    """What a rewrite touched."""

    model_config = ConfigDict(frozen=True)

    entries: int = 0
    renamed_entries: int = 0
    rewritten_entries: int = 0
    dropped_signatures: int = 0


class BaseArchiveRewriter(ABC):
    """Rewrite-engine capability injected into the relocation helper."""

    @abstractmethod
    def rewrite(
        self, source: Path, destination: Path, relocation_set: RelocationSet
    ) -> RewriteStats:
        """Write a relocated copy of ``source`` to ``destination``.

        Blocking; callers run it in a worker thread.

        Raises:
            RelocationFailureError: If ``source`` cannot be rewritten.
        """


class ZipArchiveRewriter(BaseArchiveRewriter):
    """Rewrites zip-based artifacts entry by entry.

    Entry order, timestamps, compression, attributes and comments are
    preserved. Jar signature files are dropped since any rewrite invalidates
    them.
    """

    def rewrite(
        self, source: Path, destination: Path, relocation_set: RelocationSet
    ) -> RewriteStats:
        if not zipfile.is_zipfile(source):
            raise RelocationFailureError(f"Not a zip-based artifact: {source}")

        rewriter = NamespaceRewriter(relocation_set.rules)
        entries = renamed = rewritten = dropped = 0
        seen: set[str] = set()

        with (
            zipfile.ZipFile(source) as archive,
            zipfile.ZipFile(destination, "w") as relocated,
        ):
            relocated.comment = archive.comment
            for info in archive.infolist():
                if _SIGNATURE_PATTERN.match(info.filename):
                    dropped += 1
                    continue

                name = self._rewrite_name(info.filename, rewriter)
                if name in seen:
                    raise RelocationFailureError(
                        f"Relocation maps two entries onto {name!r} in {source}"
                    )
                seen.add(name)

                data = b"" if info.is_dir() else archive.read(info)
                new_data = self._rewrite_data(info.filename, data, rewriter)

                new_info = zipfile.ZipInfo(name, date_time=info.date_time)
                new_info.compress_type = info.compress_type
                new_info.create_system = info.create_system
                new_info.external_attr = info.external_attr
                new_info.comment = info.comment
                relocated.writestr(new_info, new_data)

                entries += 1
                renamed += name != info.filename
                rewritten += new_data != data

        return RewriteStats(
            entries=entries,
            renamed_entries=renamed,
            rewritten_entries=rewritten,
            dropped_signatures=dropped,
        )

    @staticmethod
    def _rewrite_name(name: str, rewriter: NamespaceRewriter) -> str:
        if name.startswith(SERVICES_PREFIX) and len(name) > len(SERVICES_PREFIX):
            service = name[len(SERVICES_PREFIX) :]
            return SERVICES_PREFIX + rewriter.rewrite(service)
        return rewriter.rewrite(name)

    @staticmethod
    def _rewrite_data(name: str, data: bytes, rewriter: NamespaceRewriter) -> bytes:
        if not data:
            return data
        if name.endswith(".class"):
            if not data.startswith(CLASS_MAGIC):
                return data
            return rewrite_class_file(data, rewriter)
        if not (name.startswith(SERVICES_PREFIX) or Path(name).suffix.lower() in TEXT_SUFFIXES):
            return data
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return data
        rewritten = rewriter.rewrite(text)
        return data if rewritten == text else rewritten.encode("utf-8")
