"""Relocation rules and rule sets."""

import hashlib
import json
import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

_NAMESPACE_PATTERN: Final = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


class RelocationRule(BaseModel):
    """Rewrite references under ``from_prefix`` to ``to_prefix``.

    Prefixes are dotted namespaces (``com.google.gson``); the slashed form
    used by archive entry names is derived from them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_prefix: str = Field(alias="from", description="Namespace to move")
    to_prefix: str = Field(alias="to", description="Namespace to move it to")

    @field_validator("from_prefix", "to_prefix")
    @classmethod
    def _validate_namespace(cls, value: str) -> str:
        value = value.strip().strip(".")
        if not value.isascii() or not _NAMESPACE_PATTERN.fullmatch(value):
            raise ValueError(f"invalid namespace prefix {value!r}")
        return value

    @property
    def from_path(self) -> str:
        return self.from_prefix.replace(".", "/")

    @property
    def to_path(self) -> str:
        return self.to_prefix.replace(".", "/")


class RelocationSet(BaseModel):
    """Ordered rules, identified by a stable hash of their contents."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[RelocationRule, ...] = Field(default=())

    def __bool__(self) -> bool:
        return bool(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def identifier(self) -> str:
        """SHA-256 over the canonical, ordered rule list.

        Rule order is significant: the same rules in another order are a
        different set.
        """
        canonical = json.dumps(
            [[rule.from_prefix, rule.to_prefix] for rule in self.rules],
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
