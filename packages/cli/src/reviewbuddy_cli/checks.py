"""Startup validation shared by every command that talks to GitHub or an LLM."""

from __future__ import annotations

import click

from reviewbuddy_core.errors import ConfigError, ProviderError


def load_run_config(ctx: click.Context, overrides: dict) -> dict:
    """Load config with CLI overrides, resolve the GitHub token and validate.

    Everything that can make a run impossible is checked here, before any
    network call is made.
    """
    # Imported here so tests can patch the module attributes.
    from reviewbuddy_core.config import load_config
    from reviewbuddy_cli.auth import resolve_github_token

    config_path = (ctx.obj or {}).get("config_path", ".reviewbuddy.yml")
    config = load_config(config_path, cli_overrides=overrides)

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ensure_runnable(config)
    return config


def ensure_runnable(config: dict) -> None:
    from reviewbuddy_core.config import missing_credentials, validate_config

    try:
        validate_config(config)
        missing = missing_credentials(config)
    except ConfigError as e:
        raise click.UsageError(str(e))
    if missing:
        raise click.UsageError(f"Missing required environment variables: {', '.join(missing)}")


def require_repo(repo: str | None) -> str:
    if not repo:
        raise click.UsageError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")
    return repo


def run_cycle(func, *args, **kwargs):
    """Call a review/reply cycle, turning its fatal errors into a non-zero exit."""
    try:
        return func(*args, **kwargs)
    except (ProviderError, ValueError) as e:
        raise click.ClickException(str(e))
