"""Error types raised by a review cycle.

The CLI maps these onto exit codes: configuration problems are usage errors
raised before any network call, everything else aborts the running cycle.
"""


class ConfigError(ValueError):
    """Unknown adapter, unknown tone, or no model that can be resolved."""


class ProviderError(RuntimeError):
    """The LLM provider returned no response, or a response without text."""


class ResponseShapeError(ValueError):
    """The model's text could not be parsed into the expected JSON object."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)
