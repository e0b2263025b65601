"""DeepSeek provider (OpenAI-compatible chat completions API)."""

from typing import Any

from matchengine.core.config import ProviderConfig
from matchengine.providers.base import CallStatus, Message, ProviderAdapter, status_from_http


class DeepSeekAdapter(ProviderAdapter):
    """Adapter for DeepSeek via the openai SDK pointed at the DeepSeek base URL."""

    def __init__(self, config: ProviderConfig, client: Any = None) -> None:
        super().__init__(config)
        self._client = client

    @property
    def provider_id(self) -> str:
        return "deepseek"

    def health_url(self) -> str:
        return f"{self._config.base_url}/models"

    def health_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_key}"}

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                import openai
            except ImportError:
                msg = (
                    "openai is required for the DeepSeek provider. "
                    "Install with: pip install openai"
                )
                raise ImportError(msg) from None

            self._client = openai.AsyncOpenAI(
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
        payload = [{"role": "system", "content": system}] if system else []
        payload.extend(messages)

        response = await client.chat.completions.create(
            model=self.model,
            messages=payload,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        if not response.choices:
            return "", {}
        text = response.choices[0].message.content or ""
        metadata: dict[str, Any] = {"model": self.model}
        if getattr(response, "usage", None) is not None:
            metadata["total_tokens"] = getattr(response.usage, "total_tokens", None)
        return text, metadata

    def _classify_error(self, exc: Exception) -> CallStatus | None:
        import openai

        if isinstance(exc, openai.APIConnectionError):
            return CallStatus.NETWORK_ERROR
        if isinstance(exc, openai.APIStatusError):
            return status_from_http(exc.status_code)
        return None
