"""Shared setup for the report commands: token, repository, triage run."""

from __future__ import annotations

import click
from github import GithubException
from requests.exceptions import RequestException

from prtriage_core.errors import ConfigError, PrTriageError
from prtriage_core.gh.pull_request import GitHubSource, get_repo
from prtriage_core.pipeline import TriageRun, run_triage


def triage_repo(ctx: click.Context, repo: str | None) -> tuple[TriageRun, dict]:
    """Run triage for ``repo`` (or the configured repo) and return it with the config.

    Anything that stops the whole run (no token, no repo, CODEOWNERS or PR
    list unavailable) becomes a one-line click error.
    """
    config = dict(ctx.obj["config"])
    if repo:
        config["repo"] = repo
    if not config.get("repo"):
        raise click.UsageError("No repository given. Pass --repo owner/name or set 'repo' in .prtriage.yml.")

    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    try:
        source = GitHubSource(get_repo(config["repo"], token=token))
        run = run_triage(source, config)
    except ConfigError as e:
        raise click.UsageError(str(e))
    except GithubException as e:
        message = e.data.get("message") if isinstance(e.data, dict) else None
        raise click.ClickException(f"GitHub request failed ({e.status}): {message or e}")
    except RequestException as e:
        raise click.ClickException(f"Could not reach GitHub: {e}")
    except PrTriageError as e:
        raise click.ClickException(str(e))

    return run, config
