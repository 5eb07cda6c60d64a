"""Per-PR age, staleness and review state."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from datetime import datetime, timezone, tzinfo

from prtriage_core.clock import business_days_between
from prtriage_core.models import CommentRecord, PRMetrics, PullRequest, ReviewRecord, ReviewState


def latest_reviews(reviews: Iterable[ReviewRecord]) -> dict[str, ReviewRecord]:
    """Keep only the most recent review from each author.

    A later COMMENTED review replaces an earlier APPROVED one from the same
    author. When two reviews share a timestamp the first one seen stays.
    """
    latest: dict[str, ReviewRecord] = {}
    for review in reviews:
        current = latest.get(review.author)
        if current is None or review.submitted_at > current.submitted_at:
            latest[review.author] = review
    return latest


def last_activity(
    pr: PullRequest,
    comments: Iterable[CommentRecord],
    reviews: Iterable[ReviewRecord],
    counted_authors: Collection[str] | None = None,
) -> datetime | None:
    """Most recent activity instant on a PR.

    With ``counted_authors`` unset, creation, every comment and every review
    count. Otherwise only comments and reviews by those logins count, never
    the PR author's own, and None is returned when there are none.
    """
    if counted_authors is None:
        timeline = [pr.created_at]
        timeline.extend(c.created_at for c in comments)
        timeline.extend(r.submitted_at for r in reviews)
        return max(timeline)

    def counts(author: str) -> bool:
        return author in counted_authors and author != pr.author

    timeline = [c.created_at for c in comments if counts(c.author)]
    timeline.extend(r.submitted_at for r in reviews if counts(r.author))
    return max(timeline) if timeline else None


def compute_metrics(
    pr: PullRequest,
    comments: Iterable[CommentRecord],
    reviews: Iterable[ReviewRecord],
    now: datetime,
    tz: tzinfo = timezone.utc,
    counted_authors: Collection[str] | None = None,
) -> PRMetrics:
    """Derive PRMetrics from a PR and its already-fetched activity.

    Approval and change requests come from each reviewer's latest review, so
    both flags can be true when different reviewers disagree. A PR with no
    comments or reviews has ``staleness == age``.
    """
    comments = list(comments)
    reviews = list(reviews)

    age = business_days_between(pr.created_at, now, tz)

    states = {review.state for review in latest_reviews(reviews).values()}

    latest = last_activity(pr, comments, reviews, counted_authors)
    staleness = age if latest is None else business_days_between(latest, now, tz)

    return PRMetrics(
        age=age,
        staleness=staleness,
        is_approved=ReviewState.APPROVED in states,
        has_changes_requested=ReviewState.CHANGES_REQUESTED in states,
    )
