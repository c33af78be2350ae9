"""Namespace relocation of downloaded artifacts."""

from .helper import RelocationHelper, RelocationResult
from .ledger import LEDGER_FILE_NAME, LedgerEntry, RelocationLedger
from .rewriter import (
    BaseArchiveRewriter,
    NamespaceRewriter,
    RewriteStats,
    ZipArchiveRewriter,
    rewrite_class_file,
)

__all__ = [
    "BaseArchiveRewriter",
    "LEDGER_FILE_NAME",
    "LedgerEntry",
    "NamespaceRewriter",
    "RelocationHelper",
    "RelocationLedger",
    "RelocationResult",
    "RewriteStats",
    "ZipArchiveRewriter",
    "rewrite_class_file",
]
