"""team command: open PRs for one team."""

from __future__ import annotations

import click

from prtriage_cli.render import console, render_groups, render_warnings
from prtriage_cli.runner import triage_repo
from prtriage_core.pipeline import select_team
from prtriage_core.triage import TriageBucket, group_by_bucket


@click.command("team")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Overrides config file.")
@click.option("--team", "team_name", default=None, help="CODEOWNERS team name. Overrides config file.")
@click.pass_context
def team_cmd(ctx, repo: str | None, team_name: str | None):
    """Show a team's open PRs grouped by triage bucket.

    Includes ready PRs authored by `team_members` and community PRs whose
    CODEOWNERS include the team.
    """
    if team_name:
        ctx.obj["config"]["team_name"] = team_name
    config = ctx.obj["config"]
    if not config.get("team_name"):
        raise click.UsageError("No team given. Pass --team or set 'team_name' (or TEAM_NAME).")
    if not config.get("team_members"):
        raise click.UsageError("No team members configured. Set 'team_members' (or TEAM_MEMBERS).")

    run, config = triage_repo(ctx, repo)
    selected = select_team(run, config)
    render_warnings(run.warnings)

    if not selected:
        console.print("[yellow]No open pull requests found.[/yellow]")
        return

    groups = group_by_bucket(selected, TriageBucket, key=lambda item: item.bucket)
    render_groups(f"Open Pull Requests for {config['team_name']} Team", groups, config["bot_login"])
