"""Abstract base class for provider adapters and shared logic.

Every adapter converts its backend's response shape and exception types into a
single ``ProviderCallResult`` before anything reaches the fallback chain.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from matchengine.core.config import ProviderConfig

logger = logging.getLogger(__name__)

Message = dict[str, str]

_UNAVAILABLE_STATUSES = frozenset({502, 503, 504, 529})


class CallStatus(str, Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"


class ProviderCallResult(BaseModel):
    """Outcome of one call to one provider."""

    model_config = ConfigDict(frozen=True)

    status: CallStatus
    text: str = ""
    raw_metadata: dict[str, Any] = Field(default_factory=dict)
    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is CallStatus.SUCCESS

    @classmethod
    def success(
        cls, text: str, raw_metadata: dict[str, Any] | None = None, data: Any = None,
    ) -> "ProviderCallResult":
        return cls(status=CallStatus.SUCCESS, text=text, raw_metadata=raw_metadata or {}, data=data)

    @classmethod
    def failure(cls, status: CallStatus, error: str) -> "ProviderCallResult":
        if status is CallStatus.SUCCESS:
            msg = "failure() requires a non-success status"
            raise ValueError(msg)
        return cls(status=status, error=error)


class MalformedResponseError(ValueError):
    """The backend answered, but not in the shape we can use."""


def status_from_http(status_code: int) -> CallStatus:
    """Map an HTTP error status onto the provider error taxonomy."""
    if status_code in (401, 403):
        return CallStatus.AUTH_ERROR
    if status_code == 429:
        return CallStatus.RATE_LIMITED
    if status_code in _UNAVAILABLE_STATUSES:
        return CallStatus.UNAVAILABLE
    return CallStatus.NETWORK_ERROR


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield every balanced ``{...}`` substring, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : i + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """Return the first balanced JSON object embedded in model output.

    Models often wrap the object in prose or markdown fences, so the text
    around it is ignored. Only the first balanced substring is considered;
    later objects are never tried.

    Raises:
        MalformedResponseError: If there is no balanced substring or the
            first one is not valid JSON.
    """
    candidate = next(_balanced_objects(raw_text), None)
    if candidate is None:
        msg = "No JSON object found in model response"
        raise MalformedResponseError(msg)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        msg = f"First JSON object in model response is invalid: {exc}"
        raise MalformedResponseError(msg) from exc
    return data


class ProviderAdapter(ABC):
    """Base class that every provider adapter must implement."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def model(self) -> str:
        return self._config.model

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Backend identifier (e.g. 'deepseek')."""

    @property
    def requires_api_key(self) -> bool:
        return True

    @abstractmethod
    def health_url(self) -> str:
        """Lightweight GET endpoint answering 200 when the backend is up."""

    def health_headers(self) -> dict[str, str]:
        return {}

    @abstractmethod
    async def _send(
        self,
        messages: list[Message],
        *,
        system: str | None,
        temperature: float,
        max_tokens: int,
    ) -> tuple[str, dict[str, Any]]:
        """Issue the request and return (text, raw metadata).

        May raise the backend's own exceptions; ``complete`` classifies them.
        """

    @abstractmethod
    def _classify_error(self, exc: Exception) -> CallStatus | None:
        """Map a backend exception to a status, or None if it is not a backend error."""

    async def complete(
        self,
        messages: list[Message],
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ProviderCallResult:
        """Send a conversation and return a classified result. Never raises."""
        if self.requires_api_key and not self._config.api_key:
            return ProviderCallResult.failure(
                CallStatus.UNAVAILABLE, f"No API key configured for '{self.name}'",
            )

        use_temperature = self._config.temperature if temperature is None else temperature
        use_max_tokens = max_tokens or self._config.max_tokens

        logger.info("Sending %d message(s) to %s (%s)...", len(messages), self.name, self.model)
        try:
            text, raw_metadata = await self._send(
                messages, system=system, temperature=use_temperature, max_tokens=use_max_tokens,
            )
        except ImportError as e:
            logger.error("Provider '%s' SDK missing: %s", self.name, e)
            return ProviderCallResult.failure(CallStatus.UNAVAILABLE, str(e))
        except MalformedResponseError as e:
            return ProviderCallResult.failure(CallStatus.MALFORMED_RESPONSE, str(e))
        except Exception as e:
            status = self._classify_error(e)
            if status is None:
                logger.warning("Unexpected error from '%s'", self.name, exc_info=True)
                status = CallStatus.NETWORK_ERROR
            return ProviderCallResult.failure(status, f"{type(e).__name__}: {e}")

        if not text or not text.strip():
            return ProviderCallResult.failure(
                CallStatus.MALFORMED_RESPONSE, f"Empty response from '{self.name}'",
            )
        return ProviderCallResult.success(text, raw_metadata)

    async def complete_json(
        self,
        messages: list[Message],
        *,
        system: str | None = None,
        schema: type[BaseModel] | None = None,
        temperature: float | None = 0.2,
        max_tokens: int | None = 2048,
    ) -> ProviderCallResult:
        """Like ``complete`` but require a JSON object in the reply.

        The parsed object (validated against ``schema`` when given) is placed
        in ``result.data``; anything unparseable becomes MALFORMED_RESPONSE.
        """
        result = await self.complete(
            messages, system=system, temperature=temperature, max_tokens=max_tokens,
        )
        if not result.ok:
            return result

        try:
            data: Any = extract_json_object(result.text)
            if schema is not None:
                data = schema.model_validate(data)
        except (MalformedResponseError, ValidationError) as e:
            return ProviderCallResult.failure(CallStatus.MALFORMED_RESPONSE, str(e))

        return result.model_copy(update={"data": data})
