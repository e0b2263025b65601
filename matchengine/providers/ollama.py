"""Ollama local provider (native /api/generate endpoint)."""

from typing import Any

import httpx

from matchengine.core.config import ProviderConfig
from matchengine.providers.base import (
    CallStatus,
    MalformedResponseError,
    Message,
    ProviderAdapter,
    status_from_http,
)


class OllamaAdapter(ProviderAdapter):
    """Adapter for a local Ollama server. No API key needed."""

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def requires_api_key(self) -> bool:
        return False

    def health_url(self) -> str:
        return f"{self._config.base_url}/api/tags"

    def health_headers(self) -> dict[str, str]:
        if self._config.api_key:
            return {"Authorization": f"Bearer {self._config.api_key}"}
        return {}

    async def _send(
        self,
        messages: list[Message],
        *,
        system: str | None,
        temperature: float,
        max_tokens: int,
    ) -> tuple[str, dict[str, Any]]:
        body: dict[str, Any] = {
            "model": self.model,
            "prompt": _render_prompt(messages),
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if system:
            body["system"] = system

        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport,
        ) as client:
            response = await client.post(
                f"{self._config.base_url}/api/generate",
                json=body,
                headers=self.health_headers(),
            )
            response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            msg = f"Ollama returned non-JSON body: {e}"
            raise MalformedResponseError(msg) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            msg = "Ollama response is missing the 'response' field"
            raise MalformedResponseError(msg)

        metadata: dict[str, Any] = {"model": data.get("model", self.model)}
        if "eval_count" in data:
            metadata["eval_count"] = data["eval_count"]
        return text, metadata

    def _classify_error(self, exc: Exception) -> CallStatus | None:
        if isinstance(exc, httpx.HTTPStatusError):
            return status_from_http(exc.response.status_code)
        if isinstance(exc, httpx.TransportError):
            return CallStatus.NETWORK_ERROR
        return None


def _render_prompt(messages: list[Message]) -> str:
    """Flatten a chat transcript into a single generation prompt."""
    lines = []
    for m in messages:
        speaker = "User" if m["role"] == "user" else "Assistant"
        lines.append(f"{speaker}: {m['content']}")
    lines.append("Assistant:")
    return "\n\n".join(lines)
