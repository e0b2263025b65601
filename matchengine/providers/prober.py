"""Availability prober: cheap reachability check before a provider is tried."""

import logging

import httpx

from matchengine.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class AvailabilityProber:
    """Reports whether a provider is worth calling right now.

    Order of checks:
      1. Missing credentials → unavailable, no network call.
      2. ``force_available`` in the provider config → available, no network call.
      3. GET the adapter's health URL; HTTP 200 → available.

    Usage::

        prober = AvailabilityProber(timeout_seconds=5.0)
        if await prober.probe(adapter):
            ...
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_seconds
        self._transport = transport

    async def probe(self, adapter: ProviderAdapter) -> bool:
        config = adapter.config
        if adapter.requires_api_key and not config.api_key:
            logger.info("Provider '%s' has no API key configured - unavailable", config.name)
            return False

        if config.force_available:
            logger.warning(
                "Provider '%s' forced available by configuration - health check skipped",
                config.name,
            )
            return True

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                response = await client.get(adapter.health_url(), headers=adapter.health_headers())
        except httpx.HTTPError as e:
            logger.debug("Health check for '%s' failed: %s", config.name, e)
            return False

        available = response.status_code == 200
        logger.debug(
            "Health check for '%s': HTTP %d (available=%s)",
            config.name, response.status_code, available,
        )
        return available
