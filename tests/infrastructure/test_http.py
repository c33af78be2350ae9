"""Tests for HTTP client factories."""

import ssl

import aiohttp
import pytest

from hoist.infrastructure.http import (
    create_client_session,
    create_secure_connector,
    create_ssl_context,
)


class TestSSLContext:
    """Test certifi-backed SSL context creation."""

    def test_verifies_certificates(self):
        """The context requires and checks peer certificates."""
        context = create_ssl_context()

        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True


class TestClientFactories:
    """Test connector and session factories."""

    @pytest.mark.asyncio
    async def test_connector_uses_given_context(self):
        """An explicit SSL context is passed through to the connector."""
        context = create_ssl_context()
        connector = create_secure_connector(context, limit=5)
        try:
            assert isinstance(connector, aiohttp.TCPConnector)
            assert connector.limit == 5
        finally:
            await connector.close()

    @pytest.mark.asyncio
    async def test_session_carries_timeout(self):
        """Sessions are created with the configured total timeout."""
        session = create_client_session(timeout=12.5)
        try:
            assert session.timeout.total == 12.5
        finally:
            await session.close()
