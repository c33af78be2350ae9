"""Verification - digest calculation, outcome cache and checksum verifier."""

from .cache import VerificationCache
from .calculator import ChecksumCalculator
from .verifier import ChecksumVerifier

__all__ = ["ChecksumCalculator", "ChecksumVerifier", "VerificationCache"]
