from __future__ import annotations

from enum import Enum

from reviewbuddy_core.adapters.base import BaseAdapter
from reviewbuddy_core.adapters.gemini import GeminiAdapter
from reviewbuddy_core.adapters.openai_compatible import GitHubModelsAdapter, OpenRouterAdapter
from reviewbuddy_core.errors import ConfigError

DEFAULT_ADAPTER = "gemini"


class AdapterKind(str, Enum):
    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    GITHUB_MODELS = "github-models"


_ALIASES = {
    "github_models": AdapterKind.GITHUB_MODELS,
}


def supported_adapter_names() -> list[str]:
    return [kind.value for kind in AdapterKind] + list(_ALIASES)


def adapter_kind(name: str | None) -> AdapterKind:
    """Normalise a configured adapter name; empty means the default."""
    key = (name or DEFAULT_ADAPTER).strip().lower() or DEFAULT_ADAPTER
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return AdapterKind(key)
    except ValueError:
        raise ConfigError(
            f"Unknown adapter: {name!r}. Supported adapters: {', '.join(supported_adapter_names())}"
        ) from None


def get_adapter(name: str | None) -> BaseAdapter:
    kind = adapter_kind(name)
    if kind is AdapterKind.GEMINI:
        return GeminiAdapter()
    if kind is AdapterKind.OPENROUTER:
        return OpenRouterAdapter()
    if kind is AdapterKind.GITHUB_MODELS:
        return GitHubModelsAdapter()
    raise ConfigError(f"No adapter registered for {kind.value!r}.")
