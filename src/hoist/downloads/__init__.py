"""Download operations."""

from ..domain.exceptions import DownloadFailureError
from .downloader import Downloader

__all__ = ["Downloader", "DownloadFailureError"]
