"""GitHub token lookup.

Order (first hit wins):
  1. GITHUB_TOKEN environment variable, as set by scheduled CI jobs.
  2. `gh auth token`, the developer's existing GitHub CLI session.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def _gh_cli_token() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source has one."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    token = _gh_cli_token()
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
    return token
