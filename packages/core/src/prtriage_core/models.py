"""Records passed between the stages of a triage run.

Every record is a frozen dataclass. A run moves a PR through explicit stages
instead of attaching fields to one object as it goes:

    PullRequest -> PRWithFiles -> PRWithMetrics -> ClassifiedPR

The GitHub layer produces PullRequest, ChangedFile, CommentRecord and
ReviewRecord; everything else is derived and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prtriage_core.triage import AttentionBucket, TriageBucket


class ReviewState(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"


@dataclass(frozen=True)
class OwnershipRule:
    """One CODEOWNERS line: a glob pattern and the teams that own matches."""

    pattern: str
    teams: tuple[str, ...]


@dataclass(frozen=True)
class ChangedFile:
    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class CommentRecord:
    author: str
    created_at: datetime


@dataclass(frozen=True)
class ReviewRecord:
    author: str
    state: ReviewState
    submitted_at: datetime


@dataclass(frozen=True)
class PullRequest:
    """An open pull request as listed by GitHub, before any enrichment.

    ``is_community`` is decided by the pipeline from org membership; the
    GitHub layer always leaves it False.
    """

    number: int
    title: str
    author: str
    created_at: datetime
    draft: bool = False
    labels: frozenset[str] = frozenset()
    assignees: tuple[str, ...] = ()
    requested_teams: tuple[str, ...] = ()
    url: str = ""
    is_community: bool = False


@dataclass(frozen=True)
class PRMetrics:
    age: int
    staleness: int
    is_approved: bool
    has_changes_requested: bool

    @classmethod
    def zero(cls) -> PRMetrics:
        """The record substituted for a PR whose activity could not be fetched."""
        return cls(age=0, staleness=0, is_approved=False, has_changes_requested=False)


@dataclass(frozen=True)
class PRWithFiles:
    pr: PullRequest
    files: tuple[ChangedFile, ...] = ()
    owning_teams: frozenset[str] = frozenset()


@dataclass(frozen=True)
class PRWithMetrics:
    pr: PullRequest
    metrics: PRMetrics
    files: tuple[ChangedFile, ...] = ()
    owning_teams: frozenset[str] = frozenset()
    # True when comments/reviews could not be fetched and metrics are zeroed.
    partial: bool = False


@dataclass(frozen=True)
class ClassifiedPR:
    pr: PullRequest
    metrics: PRMetrics
    bucket: TriageBucket
    attention: AttentionBucket | None = None
    owning_teams: frozenset[str] = frozenset()
    partial: bool = False
    files: tuple[ChangedFile, ...] = field(default=(), repr=False)

    @property
    def staleness(self) -> int:
        return self.metrics.staleness

    @property
    def age(self) -> int:
        return self.metrics.age
