import os
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from prtriage_core.errors import ConfigError
from prtriage_core.triage import TriageBucket, TriagePolicy

DEFAULT_CONFIG: dict = {
    "repo": None,  # owner/name
    "team_prefix": None,  # None = "@<owner>/" derived from repo
    "codeowners_path": ".github/CODEOWNERS",
    "team_name": None,
    "team_members": [],
    "include_bot": False,
    "bot_login": "devin-ai-integration[bot]",
    "priority_labels": ["🚨 urgent", "Urgent", "High priority"],
    # Sole-owner team -> TriageBucket member name
    "fast_track_teams": {
        "foundation": "FOUNDATION_REVIEW",
        "platform": "PLATFORM_REVIEW",
        "consumer": "CONSUMER_REVIEW",
    },
    "community_review_teams": ["foundation", "consumer"],
    "staleness_policy": "all",  # "all" activity, or "team" members' activity only
    "attention_days": 7,
    "followup_days": 3,
    "merge_wait_days": 2,
    "attention_limit": 10,
    "concurrency": 15,
    "max_open_prs": 500,
    "timezone": "UTC",
}

_LIST_KEYS = ("team_members", "priority_labels", "community_review_teams")
STALENESS_POLICIES = ("all", "team")


def load_config(config_path: str = ".prtriage.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtriage.yml in the current directory
      3. CLI argument overrides
      4. TEAM_NAME / TEAM_MEMBERS / INCLUDE_DEVIN environment variables
    """
    config = {**DEFAULT_CONFIG, "fast_track_teams": dict(DEFAULT_CONFIG["fast_track_teams"])}
    for key in _LIST_KEYS:
        config[key] = list(DEFAULT_CONFIG[key])

    path = Path(config_path)
    if path.exists():
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # The reporting scripts were driven by these variables; keep honouring them.
    if os.environ.get("TEAM_NAME"):
        config["team_name"] = os.environ["TEAM_NAME"]
    if os.environ.get("TEAM_MEMBERS"):
        config["team_members"] = [m.strip() for m in os.environ["TEAM_MEMBERS"].split(",") if m.strip()]
    if "INCLUDE_DEVIN" in os.environ:
        config["include_bot"] = os.environ["INCLUDE_DEVIN"] == "true"

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def team_prefix(config: dict) -> str:
    """Return the CODEOWNERS owner prefix that marks a team, e.g. ``@calcom/``."""
    prefix = config.get("team_prefix")
    if prefix:
        return prefix
    repo = config.get("repo")
    if not repo or "/" not in repo:
        raise ConfigError("Set 'repo' as owner/name or an explicit 'team_prefix'.")
    return f"@{repo.split('/', 1)[0]}/"


def reference_zone(config: dict) -> tzinfo:
    """The time zone in which business days are counted."""
    name = config.get("timezone") or "UTC"
    if name == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"Unknown timezone: {name!r}")


def build_policy(config: dict) -> TriagePolicy:
    """Build the TriagePolicy described by a loaded config."""
    fast_track: dict[str, TriageBucket] = {}
    for team, bucket_name in (config.get("fast_track_teams") or {}).items():
        try:
            fast_track[team.lower()] = TriageBucket[bucket_name]
        except KeyError:
            choices = ", ".join(b.name for b in TriageBucket)
            raise ConfigError(f"Unknown bucket {bucket_name!r} for fast-track team {team!r}. Choose from: {choices}.")

    for key in ("attention_days", "followup_days", "merge_wait_days"):
        value = config.get(key)
        if not isinstance(value, int) or value < 0:
            raise ConfigError(f"'{key}' must be a non-negative integer, got {value!r}.")

    return TriagePolicy(
        priority_labels=frozenset(config.get("priority_labels") or ()),
        fast_track=fast_track,
        attention_days=config["attention_days"],
        followup_days=config["followup_days"],
        merge_wait_days=config["merge_wait_days"],
    )


def counted_authors(config: dict) -> Optional[frozenset]:
    """Logins whose activity counts toward staleness, or None for everyone."""
    policy = config.get("staleness_policy", "all")
    if policy not in STALENESS_POLICIES:
        raise ConfigError(f"Unknown staleness_policy {policy!r}. Choose 'all' or 'team'.")
    if policy == "all":
        return None
    return frozenset(config.get("team_members") or ())
