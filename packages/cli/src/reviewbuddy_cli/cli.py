"""CLI entry point for reviewbuddy.

Commands:
  review   — review a pull request and post the analysis
  reply    — answer a PR comment, re-evaluating the verdict
  action   — GitHub Actions entry point; dispatches on the triggering event
"""

from __future__ import annotations

import logging
import platform

import click
from rich.console import Console
from rich.logging import RichHandler

from reviewbuddy_cli.commands.action import action_cmd
from reviewbuddy_cli.commands.reply import reply_cmd
from reviewbuddy_cli.commands.review import review_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )
    # SDK clients log every HTTP request at INFO.
    for name in ("httpx", "urllib3", "google_genai"):
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group()
@click.version_option(package_name="reviewbuddy", prog_name="reviewbuddy")
@click.option(
    "--config",
    "config_path",
    default=".reviewbuddy.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWBUDDY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI pull request reviewer that posts its findings as PR comments."""
    _configure_logging(verbose)
    logging.getLogger(__name__).debug("Python %s on %s", platform.python_version(), platform.platform())

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(reply_cmd)
main.add_command(action_cmd)
