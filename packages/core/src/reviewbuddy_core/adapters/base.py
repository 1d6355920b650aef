"""Base adapter implementing the Template Method pattern.

Every LLM backend exposes the same three operations to the orchestrator:

    build_request(prompt)            → backend request envelope
    send_request(credential, request) → raw SDK response, or None on failure
        └── _post()                  ← only the network call differs per backend
    extract_text(response)           → first generated text fragment, or None

Subclasses implement the envelope shape, the single raw call and the response
navigation. Failure handling lives here so a transport error is logged and
turned into None the same way for every backend.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from reviewbuddy_core.errors import ConfigError

logger = logging.getLogger(__name__)


class BaseAdapter(ABC):
    NAME: str = ""
    # None means the backend has no sensible default and the caller must pick.
    DEFAULT_MODEL: str | None = None
    # Config keys checked in order when looking up the credential.
    CREDENTIAL_KEYS: tuple[str, ...] = ()
    # Reported to the user when none of CREDENTIAL_KEYS is set.
    CREDENTIAL_ENV: str = ""

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def resolve_model(self, model: str | None = None) -> str:
        """Return the explicit model, else the adapter default.

        Raises ConfigError when neither exists so a run never silently
        falls back to an arbitrary model.
        """
        resolved = (model or "").strip() or self.DEFAULT_MODEL
        if not resolved:
            raise ConfigError(f"{self.NAME} requires a model name. Set MODEL (or --model) to choose one.")
        return resolved

    def credential(self, config: dict) -> str | None:
        for key in self.CREDENTIAL_KEYS:
            value = config.get(key)
            if value:
                return value
        return None

    def send_request(self, credential: str, request: dict, model: str | None = None) -> Any | None:
        """Make a single call to the backend.

        Returns the raw response object, or None when the call failed for any
        reason. The orchestrator treats None as fatal for the cycle.
        """
        try:
            return self._post(credential, request, model)
        except ConfigError:
            raise
        except Exception as e:
            logger.error("%s API request failed: %s", self.NAME, e)
            return None

    @staticmethod
    def _check_prompt(prompt_text: str) -> None:
        if not prompt_text or not prompt_text.strip():
            raise ValueError("Prompt text must not be empty.")

    # ------------------------------------------------------------------ #
    # Abstract — implement in each backend                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def build_request(self, prompt_text: str, model: str | None = None) -> dict:
        """Wrap raw prompt text into the backend's request envelope."""

    @abstractmethod
    def _post(self, credential: str, request: dict, model: str | None) -> Any:
        """Perform one network exchange and return the raw response.

        Should raise on failure; send_request handles logging.
        """

    @abstractmethod
    def extract_text(self, response: Any) -> str | None:
        """Return the first generated text fragment, or None if there is none."""
