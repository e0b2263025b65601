"""Anthropic Claude provider."""

from typing import Any

from matchengine.core.config import ProviderConfig
from matchengine.providers.base import CallStatus, Message, ProviderAdapter, status_from_http

_API_VERSION = "2023-06-01"


class AnthropicAdapter(ProviderAdapter):
    """Adapter for the Anthropic Messages API."""

    def __init__(self, config: ProviderConfig, client: Any = None) -> None:
        super().__init__(config)
        self._client = client

    @property
    def provider_id(self) -> str:
        return "anthropic"

    def health_url(self) -> str:
        return f"{self._config.base_url}/v1/models"

    def health_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._config.api_key or "",
            "anthropic-version": _API_VERSION,
        }

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                import anthropic
            except ImportError:
                msg = (
                    "anthropic is required for the Anthropic provider. "
                    "Install with: pip install anthropic"
                )
                raise ImportError(msg) from None

            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def _send(
        self,
        messages: list[Message],
        *,
        system: str | None,
        temperature: float,
        max_tokens: int,
    ) -> tuple[str, dict[str, Any]]:
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": _leading_user(messages),
        }
        if system:
            kwargs["system"] = system

        message = await client.messages.create(**kwargs)

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
        metadata: dict[str, Any] = {"model": self.model}
        if getattr(message, "stop_reason", None):
            metadata["stop_reason"] = message.stop_reason
        return text, metadata

    def _classify_error(self, exc: Exception) -> CallStatus | None:
        import anthropic

        if isinstance(exc, anthropic.APIConnectionError):
            return CallStatus.NETWORK_ERROR
        if isinstance(exc, anthropic.APIStatusError):
            return status_from_http(exc.status_code)
        return None


def _leading_user(messages: list[Message]) -> list[Message]:
    """The Messages API rejects conversations that open with an assistant turn."""
    start = 0
    while start < len(messages) and messages[start]["role"] != "user":
        start += 1
    return messages[start:]
