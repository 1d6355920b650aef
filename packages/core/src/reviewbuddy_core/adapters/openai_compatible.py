"""Backends that speak the OpenAI chat-completions protocol.

OpenRouter and GitHub Models both accept the same ``messages`` envelope and
return ``choices[0].message.content``; they differ only in base URL, default
model and which token authenticates the call.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI

from reviewbuddy_core.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


class OpenAICompatibleAdapter(BaseAdapter):
    BASE_URL: str = ""

    def build_request(self, prompt_text: str, model: str | None = None) -> dict:
        self._check_prompt(prompt_text)
        return {
            "model": self.resolve_model(model),
            "messages": [{"role": "user", "content": prompt_text}],
        }

    def _post(self, credential: str, request: dict, model: str | None) -> Any:
        payload = dict(request)
        if model:
            payload["model"] = model
        elif not payload.get("model"):
            payload["model"] = self.resolve_model(None)
        logger.info("Sending request to %s (model: %s)...", self.NAME, payload["model"])
        client = OpenAI(api_key=credential, base_url=self.BASE_URL, max_retries=0)
        return client.chat.completions.create(**payload)

    def extract_text(self, response: Any) -> str | None:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or None


class OpenRouterAdapter(OpenAICompatibleAdapter):
    NAME = "OpenRouter"
    BASE_URL = "https://openrouter.ai/api/v1"
    # OpenRouter fronts hundreds of models; there is no sensible default.
    DEFAULT_MODEL = None
    CREDENTIAL_KEYS = ("adaptive_api_token",)
    CREDENTIAL_ENV = "ADAPTIVE_API_TOKEN"


class GitHubModelsAdapter(OpenAICompatibleAdapter):
    NAME = "GitHub Models"
    BASE_URL = "https://models.github.ai/inference"
    DEFAULT_MODEL = "openai/gpt-4o"
    # The workflow's own GITHUB_TOKEN can call GitHub Models when no
    # dedicated token is configured.
    CREDENTIAL_KEYS = ("adaptive_api_token", "github_token")
    CREDENTIAL_ENV = "ADAPTIVE_API_TOKEN (or GITHUB_TOKEN)"
