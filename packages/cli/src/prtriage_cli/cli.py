"""CLI entry point for prtriage.

Commands:
  team       open PRs for one team, grouped by triage bucket
  repo       open PRs across the whole repository, grouped by triage bucket
  attention  stalled community PRs, grouped by attention bucket
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from prtriage_cli.commands.attention import attention_cmd
from prtriage_cli.commands.repo import repo_cmd
from prtriage_cli.commands.team import team_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prtriage"),
    prog_name="prtriage",
)
@click.option(
    "--config",
    "config_path",
    default=".prtriage.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTRIAGE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Triage open GitHub pull requests by code ownership and activity."""
    from prtriage_core.config import load_config
    from prtriage_core.errors import ConfigError
    from prtriage_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.UsageError(str(e))

    # Resolve once so every subcommand sees the same token.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(team_cmd)
main.add_command(repo_cmd)
main.add_command(attention_cmd)
