"""Provider adapter registry with lazy loading.

Usage:
    from matchengine.providers import build_adapter

    adapter = build_adapter(settings.providers[0])
    result = await adapter.complete([{"role": "user", "content": "hi"}])
"""

from __future__ import annotations

import importlib
from typing import Any

from matchengine.core.config import ProviderConfig
from matchengine.providers.base import (
    CallStatus,
    ProviderAdapter,
    ProviderCallResult,
    extract_json_object,
)

__all__ = [
    "CallStatus",
    "ProviderAdapter",
    "ProviderCallResult",
    "available_kinds",
    "build_adapter",
    "extract_json_object",
    "get_adapter_class",
]

# Lazy registry: maps provider kind → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "deepseek": ("matchengine.providers.deepseek", "DeepSeekAdapter"),
    "anthropic": ("matchengine.providers.anthropic", "AnthropicAdapter"),
    "ollama": ("matchengine.providers.ollama", "OllamaAdapter"),
}


def get_adapter_class(kind: str) -> type[ProviderAdapter]:
    """Return the adapter class registered for a provider kind.

    Raises:
        ValueError: If the kind is unknown.
    """
    if kind not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown provider kind '{kind}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[kind]
    module = importlib.import_module(module_path)
    return getattr(module, class_name)  # type: ignore[no-any-return]


def build_adapter(config: ProviderConfig, **kwargs: Any) -> ProviderAdapter:
    """Instantiate the adapter for ``config.kind``.

    Extra keyword arguments (e.g. a pre-built ``client`` or an httpx
    ``transport``) are passed to the adapter constructor.
    """
    cls = get_adapter_class(config.kind)
    return cls(config, **kwargs)  # type: ignore[call-arg]


def available_kinds() -> list[str]:
    """Return sorted list of registered provider kinds."""
    return sorted(_REGISTRY)
