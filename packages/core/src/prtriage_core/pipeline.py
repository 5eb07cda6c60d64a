"""Triage run orchestration.

run_triage() is the single entry point used by the CLI. It takes a source
(GitHubSource in production, any object with the same methods in tests) and
moves every open PR through the stages in models.py:

    list -> mark community -> fetch files + owners -> fetch activity + metrics
         -> classify

Per-PR fetches run in windows of ``concurrency`` PRs. Every fetch in a window
completes before the next window starts, and one PR's failure never cancels
or drops its siblings: failed file fetches leave the PR ownerless, failed
activity fetches leave it with zeroed metrics.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Protocol

from requests.exceptions import RequestException

from prtriage_core.config import build_policy, counted_authors, reference_zone, team_prefix
from prtriage_core.errors import PartialDataError
from prtriage_core.metrics import compute_metrics
from prtriage_core.models import (
    ChangedFile,
    ClassifiedPR,
    CommentRecord,
    PRMetrics,
    PRWithFiles,
    PRWithMetrics,
    PullRequest,
    ReviewRecord,
)
from prtriage_core.ownership.index import OwnershipIndex
from prtriage_core.triage import TriagePolicy, classify, classify_attention

logger = logging.getLogger(__name__)


class PullRequestSource(Protocol):
    def codeowners(self, path: str) -> str: ...

    def org_members(self) -> set[str]: ...

    def open_pull_requests(self, limit: int) -> list[PullRequest]: ...

    def changed_files(self, number: int) -> list[ChangedFile]: ...

    def activity(self, number: int) -> tuple[list[CommentRecord], list[ReviewRecord]]: ...


@dataclass
class TriageRun:
    """Everything a report needs from one run."""

    classified: list[ClassifiedPR] = field(default_factory=list)
    org_members: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)
    skipped_rules: int = 0


def is_community_author(author: str, org_members: set[str], bot_login: str) -> bool:
    return author not in org_members and author != bot_login


def attach_files(source: PullRequestSource, pr: PullRequest, index: OwnershipIndex) -> PRWithFiles:
    files = tuple(source.changed_files(pr.number))
    return PRWithFiles(pr=pr, files=files, owning_teams=index.resolve(files))


def attach_metrics(
    source: PullRequestSource,
    staged: PRWithFiles,
    now: datetime,
    tz,
    authors,
) -> PRWithMetrics:
    comments, reviews = source.activity(staged.pr.number)
    metrics = compute_metrics(staged.pr, comments, reviews, now, tz=tz, counted_authors=authors)
    return PRWithMetrics(pr=staged.pr, metrics=metrics, files=staged.files, owning_teams=staged.owning_teams)


def _as_partial(pr: PullRequest, what: str, error: Exception) -> PartialDataError:
    if isinstance(error, PartialDataError):
        return error
    return PartialDataError(pr.number, what, error)


def _enrich(source, pr, index, now, tz, authors) -> tuple[PRWithMetrics, list[str]]:
    warnings: list[str] = []

    # A timeout surfaces as a requests error rather than PartialDataError
    # when the source does not wrap it.
    try:
        staged = attach_files(source, pr, index)
    except (PartialDataError, RequestException) as e:
        failure = _as_partial(pr, "files", e)
        logger.warning("%s", failure)
        warnings.append(str(failure))
        staged = PRWithFiles(pr=pr)

    try:
        return attach_metrics(source, staged, now, tz, authors), warnings
    except (PartialDataError, RequestException) as e:
        failure = _as_partial(pr, "comments and reviews", e)
        logger.warning("%s", failure)
        warnings.append(str(failure))
        degraded = PRWithMetrics(
            pr=pr,
            metrics=PRMetrics.zero(),
            files=staged.files,
            owning_teams=staged.owning_teams,
            partial=True,
        )
        return degraded, warnings


def enrich_all(
    source: PullRequestSource,
    prs: list[PullRequest],
    index: OwnershipIndex,
    now: datetime,
    tz=timezone.utc,
    authors=None,
    concurrency: int = 15,
) -> tuple[list[PRWithMetrics], list[str]]:
    """Fetch files and activity for every PR, ``concurrency`` PRs at a time.

    Results keep the input order.
    """
    enriched: list[PRWithMetrics] = []
    warnings: list[str] = []
    window = max(1, concurrency)

    with ThreadPoolExecutor(max_workers=window) as pool:
        for start in range(0, len(prs), window):
            batch = prs[start : start + window]
            futures = [pool.submit(_enrich, source, pr, index, now, tz, authors) for pr in batch]
            for future in futures:
                result, batch_warnings = future.result()
                enriched.append(result)
                warnings.extend(batch_warnings)

    return enriched, warnings


def classify_all(prs: list[PRWithMetrics], policy: TriagePolicy) -> list[ClassifiedPR]:
    return [
        ClassifiedPR(
            pr=item.pr,
            metrics=item.metrics,
            bucket=classify(item.pr, item.metrics, item.owning_teams, policy),
            attention=classify_attention(item.pr, item.metrics, policy),
            owning_teams=item.owning_teams,
            partial=item.partial,
            files=item.files,
        )
        for item in prs
    ]


def run_triage(source: PullRequestSource, config: dict, now: datetime | None = None) -> TriageRun:
    """Fetch, enrich and classify every open PR in the configured repository.

    Failures loading CODEOWNERS, org members or the PR list propagate: without
    them there is nothing meaningful to report.
    """
    now = now or datetime.now(timezone.utc)
    policy = build_policy(config)
    tz = reference_zone(config)
    authors = counted_authors(config)

    index = OwnershipIndex.from_text(source.codeowners(config["codeowners_path"]), team_prefix(config))
    members = source.org_members()
    bot_login = config["bot_login"]

    prs = [
        replace(pr, is_community=is_community_author(pr.author, members, bot_login))
        for pr in source.open_pull_requests(config["max_open_prs"])
    ]
    logger.info("Triaging %d open PR(s).", len(prs))

    enriched, warnings = enrich_all(source, prs, index, now, tz, authors, config["concurrency"])

    return TriageRun(
        classified=classify_all(enriched, policy),
        org_members=members,
        warnings=[str(e) for e in index.skipped] + warnings,
        skipped_rules=len(index.skipped),
    )


def _is_team_pr(pr: PullRequest, config: dict) -> bool:
    members = set(config.get("team_members") or ())
    if pr.author in members:
        return True
    if config.get("include_bot") and pr.author == config["bot_login"]:
        return any(assignee in members for assignee in pr.assignees)
    return False


def select_team(run: TriageRun, config: dict) -> list[ClassifiedPR]:
    """PRs for one team's report.

    Ready PRs by team members (and bot PRs assigned to one when enabled), plus
    community PRs whose owners include the team.
    """
    team = (config.get("team_name") or "").lower()
    selected = []
    for item in run.classified:
        if item.pr.is_community:
            if team and team in {t.lower() for t in item.owning_teams}:
                selected.append(item)
        elif not item.pr.draft and _is_team_pr(item.pr, config):
            selected.append(item)
    return selected


def select_repo(run: TriageRun, config: dict) -> list[ClassifiedPR]:
    """PRs for the whole-repository report.

    Ready PRs by org members (and the bot when enabled), plus approved
    community PRs still waiting on one of ``community_review_teams``.
    """
    review_teams = {t.lower() for t in config.get("community_review_teams") or ()}
    selected = []
    for item in run.classified:
        if item.pr.is_community:
            owners = {t.lower() for t in item.owning_teams}
            if item.metrics.is_approved and owners & review_teams:
                selected.append(item)
            continue
        if item.pr.draft:
            continue
        if item.pr.author == config["bot_login"] and not config.get("include_bot"):
            continue
        selected.append(item)
    return selected


def select_attention(run: TriageRun, config: dict) -> list[ClassifiedPR]:
    """The oldest community PRs, drafts included, that need attention."""
    stalled = [item for item in run.classified if item.pr.is_community and item.attention is not None]
    stalled.sort(key=lambda item: item.age, reverse=True)
    return stalled[: config["attention_limit"]]
