"""Triage bucket assignment.

Two independent classifications are made for every PR:

- ``classify`` picks the TriageBucket that drives the team and repository
  reports. Rules are checked in a fixed order and the first match wins.
- ``classify_attention`` picks the AttentionBucket used by the stale-PR
  report, or None when the PR does not need attention.

Both are pure functions of the PR, its metrics and its owning teams.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from prtriage_core.models import PRMetrics, PullRequest


class _Bucket(Enum):
    """Enum whose members carry a presentation priority and a display label."""

    def __init__(self, priority: int, label: str):
        self.priority = priority
        self.label = label

    @classmethod
    def ordered(cls) -> list:
        return sorted(cls, key=lambda b: b.priority)


class TriageBucket(_Bucket):
    HIGH_PRIORITY = (0, "🚨 High Priority")
    FOUNDATION_REVIEW = (1, "⚡ Needs Foundation Review")
    PLATFORM_REVIEW = (2, "🔧 Needs Platform Review")
    CONSUMER_REVIEW = (3, "👥 Needs Consumer Review")
    NEEDS_REVIEW = (4, "👀 Needs Review")
    CHANGES_REQUESTED = (5, "🔄 Changes Requested")
    APPROVED = (6, "✅ Approved")
    COMMUNITY = (7, "🌟 Community PRs")


class AttentionBucket(_Bucket):
    NEEDS_ATTENTION = (0, "🚨 Needs Attention")
    DRAFT_STUCK = (1, "📝 Draft Stuck (1+ week)")
    CHANGES_REQUESTED_NO_FOLLOWUP = (2, "🔄 Changes Requested - No Follow-up")
    APPROVED_WAITING_MERGE = (3, "✅ Approved - Waiting to Merge")


@dataclass(frozen=True)
class TriagePolicy:
    """Configurable inputs to classification.

    ``fast_track`` maps a lower-cased team name to the bucket a PR goes to
    when that team is its only owner.
    """

    priority_labels: frozenset[str] = frozenset()
    fast_track: Mapping[str, TriageBucket] = field(default_factory=dict)
    attention_days: int = 7
    followup_days: int = 3
    merge_wait_days: int = 2


def _fast_track_bucket(owning_teams: Iterable[str], policy: TriagePolicy) -> TriageBucket | None:
    teams = {team.lower() for team in owning_teams}
    if len(teams) != 1:
        return None
    (only,) = teams
    return policy.fast_track.get(only)


def classify(
    pr: PullRequest,
    metrics: PRMetrics,
    owning_teams: Iterable[str],
    policy: TriagePolicy,
) -> TriageBucket:
    """Assign a PR to exactly one TriageBucket."""
    if pr.is_community:
        return TriageBucket.COMMUNITY
    if pr.labels & policy.priority_labels:
        return TriageBucket.HIGH_PRIORITY

    fast_track = _fast_track_bucket(owning_teams, policy)
    if fast_track is not None:
        return fast_track

    if metrics.has_changes_requested:
        return TriageBucket.CHANGES_REQUESTED
    if metrics.is_approved:
        return TriageBucket.APPROVED
    return TriageBucket.NEEDS_REVIEW


def is_draft_stuck(pr: PullRequest, metrics: PRMetrics, policy: TriagePolicy) -> bool:
    return pr.draft and metrics.age >= policy.attention_days and metrics.staleness >= policy.attention_days


def needs_attention(pr: PullRequest, metrics: PRMetrics, policy: TriagePolicy) -> bool:
    """Drafts need attention once stuck; everything else once idle long enough."""
    if pr.draft:
        return is_draft_stuck(pr, metrics, policy)
    return metrics.staleness >= policy.attention_days


def classify_attention(pr: PullRequest, metrics: PRMetrics, policy: TriagePolicy) -> AttentionBucket | None:
    """Assign a PR to an AttentionBucket, or None if nothing about it is stalled."""
    if is_draft_stuck(pr, metrics, policy):
        return AttentionBucket.DRAFT_STUCK
    if metrics.has_changes_requested and metrics.staleness >= policy.followup_days:
        return AttentionBucket.CHANGES_REQUESTED_NO_FOLLOWUP
    if metrics.is_approved and metrics.staleness >= policy.merge_wait_days:
        return AttentionBucket.APPROVED_WAITING_MERGE
    if needs_attention(pr, metrics, policy):
        return AttentionBucket.NEEDS_ATTENTION
    return None


B = TypeVar("B", bound=_Bucket)
T = TypeVar("T")


def group_by_bucket(
    items: Iterable[T],
    buckets: type[B],
    key: Callable[[T], B | None],
    staleness: Callable[[T], int] = lambda item: item.staleness,
) -> dict[B, list[T]]:
    """Group items under every bucket in priority order, most stale first.

    Every bucket gets an entry, possibly empty. Items whose key is None are
    left out.
    """
    grouped: dict[B, list[T]] = {bucket: [] for bucket in buckets.ordered()}
    for item in items:
        bucket = key(item)
        if bucket is not None:
            grouped[bucket].append(item)
    for group in grouped.values():
        group.sort(key=staleness, reverse=True)
    return grouped
