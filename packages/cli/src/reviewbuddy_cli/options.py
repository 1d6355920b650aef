from __future__ import annotations

import click

from reviewbuddy_core.adapters.registry import supported_adapter_names
from reviewbuddy_core.config import TONES


def llm_options(func):
    """Options shared by every command that runs a prompt through an adapter."""
    options = [
        click.option(
            "--adapter",
            type=click.Choice(supported_adapter_names(), case_sensitive=False),
            default=None,
            help="LLM provider. Overrides ADAPTER and the config file.",
        ),
        click.option("--model", default=None, help="Model name. Defaults to the adapter's default model."),
        click.option(
            "--tone",
            type=click.Choice(TONES, case_sensitive=False),
            default=None,
            help="Review tone. Overrides TONE and the config file.",
        ),
        click.option("--language", default=None, help="Review language, e.g. hinglish or english."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def llm_overrides(adapter, model, tone, language) -> dict:
    return {"adapter": adapter, "model": model, "tone": tone, "language": language}
