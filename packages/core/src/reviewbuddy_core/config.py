import os
from pathlib import Path
from typing import Optional

import yaml

from reviewbuddy_core.adapters.registry import get_adapter
from reviewbuddy_core.errors import ConfigError

TONES = ("roast", "professional", "funny", "friendly")

DEFAULT_CONFIG: dict = {
    "adapter": "gemini",
    "model": None,  # None = the adapter's default model
    "tone": "roast",
    "language": "hinglish",
    "trigger": "/buddy",
    "labels": True,
    "max_diff_chars": 100000,
    "max_chat_diff_chars": 50000,
    "min_description_length": 50,
    "history_limit": 20,  # most recent comments fed to the reply prompt
    "history_body_chars": 3000,
}

# Settings that may come from the workflow environment. GitHub Actions exposes
# action inputs as INPUT_<NAME>; the bare name wins when both are set.
_ENV_SETTINGS = {
    "adapter": "ADAPTER",
    "model": "MODEL",
    "tone": "TONE",
    "language": "LANGUAGE",
}

_ENV_CREDENTIALS = {
    "github_token": "GITHUB_TOKEN",
    "gemini_api_key": "GEMINI_API_KEY",
    "adaptive_api_token": "ADAPTIVE_API_TOKEN",
}


def _env(name: str) -> Optional[str]:
    return os.environ.get(name) or os.environ.get(f"INPUT_{name}") or None


def load_config(config_path: str = ".reviewbuddy.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewbuddy.yml in the current directory
      3. Environment variables (ADAPTER, MODEL, TONE, LANGUAGE or their INPUT_ forms)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for key, env_name in _ENV_SETTINGS.items():
        value = _env(env_name)
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["tone"] = str(config["tone"]).strip().lower()
    config["language"] = str(config["language"]).strip().lower()

    # Resolve credentials and run identity from environment variables
    for key, env_name in _ENV_CREDENTIALS.items():
        config[key] = _env(env_name)
    config["repository"] = os.environ.get("GITHUB_REPOSITORY")
    config["pr_number"] = os.environ.get("PR_NUMBER")

    return config


def missing_credentials(config: dict) -> list[str]:
    """Return the environment variables that must be set before a run can start."""
    missing = []
    adapter = get_adapter(config.get("adapter"))
    if not adapter.credential(config):
        missing.append(adapter.CREDENTIAL_ENV)
    if not config.get("github_token"):
        missing.append("GITHUB_TOKEN")
    return missing


def validate_config(config: dict) -> None:
    """Raise ConfigError for settings that make a run impossible.

    Called before any network activity: unknown adapter, unknown tone, and an
    adapter with no model to use are all caught here.
    """
    if config.get("tone") not in TONES:
        raise ConfigError(f"Unknown tone: {config.get('tone')!r}. Choose one of: {', '.join(TONES)}")
    get_adapter(config.get("adapter")).resolve_model(config.get("model"))
