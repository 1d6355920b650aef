from __future__ import annotations

import logging
from typing import Any

from google import genai

from reviewbuddy_core.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseAdapter):
    NAME = "Gemini"
    DEFAULT_MODEL = "gemini-3-flash-preview"
    CREDENTIAL_KEYS = ("gemini_api_key",)
    CREDENTIAL_ENV = "GEMINI_API_KEY"

    def build_request(self, prompt_text: str, model: str | None = None) -> dict:
        # The model travels separately for Gemini; it is part of the endpoint,
        # not the body.
        self._check_prompt(prompt_text)
        return {"contents": [{"parts": [{"text": prompt_text}]}]}

    def _post(self, credential: str, request: dict, model: str | None) -> Any:
        model_name = self.resolve_model(model)
        logger.info("Sending request to Gemini (model: %s)...", model_name)
        client = genai.Client(api_key=credential)
        return client.models.generate_content(model=model_name, contents=request["contents"])

    def extract_text(self, response: Any) -> str | None:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return None
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        if not parts:
            return None
        return getattr(parts[0], "text", None) or None
