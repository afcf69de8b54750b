"""Parsoid client factory.

Provides the factory that chooses the backend ParsoidClient for a
request based on configuration (the Parsoid service, or the in-memory
mock for development).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from visualedit.config import get_settings
from visualedit.parsoid.dual import DualParsoidClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from visualedit.config import Settings
    from visualedit.parsoid.models import Authority
    from visualedit.parsoid.protocol import ParsoidClientProtocol

logger = logging.getLogger(__name__)

# Cached mock client instance to preserve recorded calls across requests
_mock_client_instance: ParsoidClientProtocol | None = None

# Connection pool shared by every DirectParsoidClient the factory creates
_http_client: httpx.Client | None = None


def _shared_http_client(timeout: float) -> httpx.Client:
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        from visualedit.parsoid.client import USER_AGENT

        _http_client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )
    return _http_client


class ParsoidClientFactory:
    """Creates ParsoidClient instances for a given user.

    Args:
        settings_provider: Callable returning the current settings.
            Consulted on every backend creation, never cached.
    """

    def __init__(
        self,
        settings_provider: Callable[[], Settings] = get_settings,
    ) -> None:
        self._settings_provider = settings_provider

    def create_parsoid_client(self, authority: Authority) -> ParsoidClientProtocol:
        """Create the client request handlers should use.

        Returns a DualParsoidClient, so that saves are routed to the
        backend that served the original HTML.
        """
        return DualParsoidClient(self, authority)

    def create_parsoid_client_internal(
        self, authority: Authority
    ) -> ParsoidClientProtocol:
        """Create a concrete backend client from the current configuration.

        If DEV__PARSOID_MOCK=true, returns MockParsoidClient (singleton to
        keep recorded calls). Otherwise returns a DirectParsoidClient.

        Raises:
            ValueError: If parsoid.url is empty and mock mode is disabled.
        """
        global _mock_client_instance  # noqa: PLW0603
        settings = self._settings_provider()

        if settings.dev.parsoid_mock:
            if _mock_client_instance is None:
                from visualedit.parsoid.mock import MockParsoidClient

                _mock_client_instance = MockParsoidClient()
            return _mock_client_instance

        parsoid = settings.parsoid
        if not parsoid.url:
            msg = (
                "PARSOID__URL is required when DEV__PARSOID_MOCK is not enabled. "
                "Set PARSOID__URL and PARSOID__DOMAIN in your .env file."
            )
            raise ValueError(msg)

        from visualedit.parsoid.client import DirectParsoidClient

        logger.debug("Using Parsoid service at %s", parsoid.url)
        return DirectParsoidClient(
            url=parsoid.url,
            domain=parsoid.domain,
            authority=authority,
            timeout=parsoid.timeout,
            http_client=_shared_http_client(parsoid.timeout),
        )


def get_parsoid_client(authority: Authority) -> ParsoidClientProtocol:
    """Get the ParsoidClient for ``authority`` using the global settings."""
    return ParsoidClientFactory().create_parsoid_client(authority)


def clear_config_cache() -> None:
    """Clear the configuration and client caches.

    Closes the shared HTTP connection pool. Useful for testing when you
    need to reload configuration or reset recorded mock calls.
    """
    global _mock_client_instance, _http_client  # noqa: PLW0603
    get_settings.cache_clear()
    _mock_client_instance = None
    if _http_client is not None:
        _http_client.close()
        _http_client = None
