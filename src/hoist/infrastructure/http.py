"""HTTP client factories."""

import ssl
import typing as t

import aiohttp
import certifi


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context backed by certifi's CA bundle.

    Portable certificate verification across platforms and Python versions,
    e.g. certificates are not wired up by default on macOS framework builds.
    """
    return ssl.create_default_context(cafile=certifi.where())


def create_secure_connector(
    ssl: ssl.SSLContext | None = None, **kwargs: t.Any
) -> aiohttp.TCPConnector:
    """Create a TCP connector verifying peers with ``ssl`` (certifi by default)."""
    return aiohttp.TCPConnector(ssl=ssl or create_ssl_context(), **kwargs)


def create_client_session(timeout: float | None = None) -> aiohttp.ClientSession:
    """Create the session shared by the prober and the downloader."""
    return aiohttp.ClientSession(
        connector=create_secure_connector(),
        timeout=aiohttp.ClientTimeout(total=timeout),
        raise_for_status=False,
    )
