from __future__ import annotations

import logging
from itertools import islice

from github import Github, GithubException
from requests.exceptions import RequestException

from prtriage_core.errors import PartialDataError
from prtriage_core.models import ChangedFile, CommentRecord, PullRequest, ReviewRecord, ReviewState

logger = logging.getLogger(__name__)

# GitHub reports deleted accounts with a null user.
_GHOST = "ghost"


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def _login(user) -> str:
    return user.login if user is not None else _GHOST


def to_pull_request(pull) -> PullRequest:
    """Snapshot a PyGithub PullRequest into a PullRequest record."""
    return PullRequest(
        number=pull.number,
        title=(pull.title or "").strip(),
        author=_login(pull.user),
        created_at=pull.created_at,
        draft=bool(pull.draft),
        labels=frozenset(label.name for label in pull.labels),
        assignees=tuple(_login(a) for a in pull.assignees),
        requested_teams=tuple(team.slug for team in (pull.requested_teams or [])),
        url=pull.html_url or "",
    )


def to_review(review) -> ReviewRecord | None:
    """Return a ReviewRecord, or None for a review that was never submitted."""
    if review.submitted_at is None:
        return None
    try:
        state = ReviewState(review.state)
    except ValueError:
        logger.debug("Treating unknown review state %r as COMMENTED.", review.state)
        state = ReviewState.COMMENTED
    return ReviewRecord(author=_login(review.user), state=state, submitted_at=review.submitted_at)


class GitHubSource:
    """Reads everything a triage run needs from one repository.

    open_pull_requests() keeps the PyGithub objects it listed so per-PR
    fetches do not spend an extra request looking each PR up again.
    """

    def __init__(self, repo):
        self._repo = repo
        self._pulls: dict[int, object] = {}

    @property
    def full_name(self) -> str:
        return self._repo.full_name

    def codeowners(self, path: str = ".github/CODEOWNERS") -> str:
        return self._repo.get_contents(path).decoded_content.decode("utf-8", errors="replace")

    def org_members(self) -> set[str]:
        """Logins of the owning organisation's members; empty for a user-owned repo."""
        org = self._repo.organization
        if org is None:
            return set()
        return {member.login for member in org.get_members()}

    def open_pull_requests(self, limit: int = 500) -> list[PullRequest]:
        pulls = list(islice(self._repo.get_pulls(state="open"), limit))
        self._pulls.update((p.number, p) for p in pulls)
        return [to_pull_request(p) for p in pulls]

    def _pull(self, number: int):
        if number not in self._pulls:
            self._pulls[number] = self._repo.get_pull(number)
        return self._pulls[number]

    def changed_files(self, number: int) -> list[ChangedFile]:
        try:
            return [
                ChangedFile(filename=f.filename, status=f.status, additions=f.additions, deletions=f.deletions)
                for f in self._pull(number).get_files()
            ]
        except (GithubException, RequestException) as e:
            raise PartialDataError(number, "files", e) from e

    def activity(self, number: int) -> tuple[list[CommentRecord], list[ReviewRecord]]:
        """Return the review comments and submitted reviews on a PR."""
        try:
            pull = self._pull(number)
            comments = [CommentRecord(author=_login(c.user), created_at=c.created_at) for c in pull.get_review_comments()]
            reviews = [r for r in (to_review(review) for review in pull.get_reviews()) if r is not None]
        except (GithubException, RequestException) as e:
            raise PartialDataError(number, "comments and reviews", e) from e
        return comments, reviews
