"""Fallback orchestrator: walks the provider chain in priority order.

Per provider:
  1. Probe availability. Unavailable → skip (not reported as a failure).
  2. Call once. Success → stop and return, tagged with the provider.
  3. Auth / rate-limit / network / malformed → log and move on. No retries.
Chain exhausted → an outcome with no result. Nothing is raised to the caller.

Calls are strictly sequential; only the first success is ever used.
"""

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from matchengine.providers.base import CallStatus, ProviderAdapter, ProviderCallResult
from matchengine.providers.prober import AvailabilityProber

logger = logging.getLogger(__name__)

ProviderCall = Callable[[ProviderAdapter], Awaitable[ProviderCallResult]]


class ProviderAttempt(BaseModel):
    """What happened to one provider during one run."""

    model_config = ConfigDict(frozen=True)

    provider: str
    status: CallStatus
    probed_unavailable: bool = False
    error: str | None = None


class FallbackOutcome(BaseModel):
    """Result of one run through the chain."""

    model_config = ConfigDict(frozen=True)

    result: ProviderCallResult | None = None
    provider: str | None = None
    model: str | None = None
    fallback: bool = False
    attempts: list[ProviderAttempt] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None and self.result.ok


class FallbackOrchestrator:
    """Tries providers by ascending ``priority``; ties keep configuration order."""

    def __init__(self, adapters: list[ProviderAdapter], prober: AvailabilityProber) -> None:
        if not adapters:
            msg = "at least one provider adapter is required"
            raise ValueError(msg)
        self._adapters = sorted(adapters, key=lambda a: a.config.priority)
        self._prober = prober

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    async def run(self, call: ProviderCall) -> FallbackOutcome:
        attempts: list[ProviderAttempt] = []

        for index, adapter in enumerate(self._adapters):
            if not await self._prober.probe(adapter):
                logger.info("Provider '%s' unavailable - skipping", adapter.name)
                attempts.append(
                    ProviderAttempt(
                        provider=adapter.name,
                        status=CallStatus.UNAVAILABLE,
                        probed_unavailable=True,
                    ),
                )
                continue

            result = await self._invoke(adapter, call)
            attempts.append(
                ProviderAttempt(provider=adapter.name, status=result.status, error=result.error),
            )

            if result.ok:
                fallback = index > 0
                logger.info(
                    "Provider '%s' (%s) answered%s",
                    adapter.name, adapter.model, " as fallback" if fallback else "",
                )
                return FallbackOutcome(
                    result=result,
                    provider=adapter.name,
                    model=adapter.model,
                    fallback=fallback,
                    attempts=attempts,
                )

            _log_failure(adapter, result)

        logger.warning(
            "All providers unavailable or failed: %s",
            ", ".join(f"{a.provider}={a.status.value}" for a in attempts),
        )
        return FallbackOutcome(fallback=True, attempts=attempts)

    async def _invoke(self, adapter: ProviderAdapter, call: ProviderCall) -> ProviderCallResult:
        try:
            return await call(adapter)
        except Exception as e:
            logger.exception("Provider call for '%s' raised", adapter.name)
            return ProviderCallResult.failure(CallStatus.NETWORK_ERROR, f"{type(e).__name__}: {e}")


def _log_failure(adapter: ProviderAdapter, result: ProviderCallResult) -> None:
    if result.status is CallStatus.AUTH_ERROR:
        logger.error(
            "Provider '%s' rejected credentials - check its API key: %s",
            adapter.name, result.error,
        )
    elif result.status is CallStatus.RATE_LIMITED:
        logger.warning("Provider '%s' rate limited - trying next: %s", adapter.name, result.error)
    elif result.status is CallStatus.MALFORMED_RESPONSE:
        logger.warning(
            "Provider '%s' returned an unusable response - trying next: %s",
            adapter.name, result.error,
        )
    else:
        logger.warning(
            "Provider '%s' failed (%s) - trying next: %s",
            adapter.name, result.status.value, result.error,
        )
