"""Team ownership resolution from a CODEOWNERS file.

An OwnershipIndex is built once per triage run from the raw CODEOWNERS text
and passed explicitly to whatever needs it. Resolution is a union over every
matching rule, not GitHub's last-match-wins: a PR touching a path listed by
several rules needs every one of those teams.
"""

from __future__ import annotations

import logging
from typing import Iterable

from prtriage_core.errors import PatternError
from prtriage_core.models import ChangedFile, OwnershipRule
from prtriage_core.ownership.pattern import CompiledMatcher, compile_pattern

logger = logging.getLogger(__name__)


def parse_rules(text: str, team_prefix: str) -> list[OwnershipRule]:
    """Parse CODEOWNERS text into rules that name at least one team.

    Owner tokens are kept only when they start with ``team_prefix`` (for
    example ``@calcom/``); the prefix is stripped to give the team name.
    Individual users and emails are ignored, and a line left with no team is
    dropped entirely. Rule order follows the file.
    """
    rules: list[OwnershipRule] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        pattern, *owners = stripped.split()
        teams = tuple(owner[len(team_prefix) :] for owner in owners if owner.startswith(team_prefix))
        if teams:
            rules.append(OwnershipRule(pattern=pattern, teams=teams))

    return rules


class OwnershipIndex:
    """Ordered, compiled CODEOWNERS team rules for one triage run."""

    def __init__(self, rules: Iterable[OwnershipRule]):
        self._entries: list[tuple[OwnershipRule, CompiledMatcher]] = []
        self.skipped: list[PatternError] = []

        for rule in rules:
            try:
                matcher = compile_pattern(rule.pattern)
            except PatternError as e:
                logger.warning("Skipping CODEOWNERS rule: %s", e)
                self.skipped.append(e)
                continue
            self._entries.append((rule, matcher))

    @classmethod
    def from_text(cls, text: str, team_prefix: str) -> OwnershipIndex:
        index = cls(parse_rules(text, team_prefix))
        logger.debug("Loaded %d CODEOWNERS team rule(s), skipped %d.", len(index), len(index.skipped))
        return index

    @property
    def rules(self) -> list[OwnershipRule]:
        return [rule for rule, _ in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def owners_of(self, path: str) -> frozenset[str]:
        """Teams owning a single path."""
        teams: set[str] = set()
        for rule, matcher in self._entries:
            if matcher.test(path):
                teams.update(rule.teams)
        return frozenset(teams)

    def resolve(self, files: Iterable[ChangedFile]) -> frozenset[str]:
        """Return the union of owning teams across every changed file.

        No files or no matching rule gives an empty set.
        """
        teams: set[str] = set()
        for changed in files:
            teams.update(self.owners_of(changed.filename))
        return frozenset(teams)
