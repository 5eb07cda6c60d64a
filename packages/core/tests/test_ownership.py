"""Tests for CODEOWNERS parsing and team resolution."""

import itertools
import logging

from prtriage_core.models import ChangedFile, OwnershipRule
from prtriage_core.ownership.index import OwnershipIndex, parse_rules

PREFIX = "@calcom/"

CODEOWNERS = """\
# Lines starting with # are comments.

/docs/                      @calcom/docs
/packages/prisma/           @calcom/foundation @someuser
apps/api/**                 @calcom/platform
*.sql                       @calcom/foundation
/apps/web/                  @calcom/consumer @calcom/foundation
README.md                   @octocat
   # indented comment
/packages/app-store/        @calcom/consumer
"""


def _files(*names):
    return [ChangedFile(filename=n) for n in names]


# ---------------------------------------------------------------------------
# parse_rules
# ---------------------------------------------------------------------------


class TestParseRules:
    def test_skips_comments_and_blank_lines(self):
        rules = parse_rules(CODEOWNERS, PREFIX)
        assert all(not r.pattern.startswith("#") for r in rules)

    def test_strips_team_prefix(self):
        rules = parse_rules("/docs/ @calcom/docs\n", PREFIX)
        assert rules == [OwnershipRule(pattern="/docs/", teams=("docs",))]

    def test_ignores_user_owners(self):
        rules = parse_rules("/packages/prisma/ @calcom/foundation @someuser\n", PREFIX)
        assert rules[0].teams == ("foundation",)

    def test_drops_rule_without_teams(self):
        rules = parse_rules(CODEOWNERS, PREFIX)
        assert "README.md" not in [r.pattern for r in rules]

    def test_ignores_teams_of_other_orgs(self):
        assert parse_rules("/x/ @other/team\n", PREFIX) == []

    def test_preserves_file_order(self):
        rules = parse_rules(CODEOWNERS, PREFIX)
        assert [r.pattern for r in rules] == [
            "/docs/",
            "/packages/prisma/",
            "apps/api/**",
            "*.sql",
            "/apps/web/",
            "/packages/app-store/",
        ]

    def test_keeps_team_order_within_rule(self):
        rules = parse_rules("/apps/web/ @calcom/consumer @calcom/foundation\n", PREFIX)
        assert rules[0].teams == ("consumer", "foundation")

    def test_splits_on_any_whitespace(self):
        rules = parse_rules("/docs/\t\t@calcom/docs   @calcom/foundation\r\n", PREFIX)
        assert rules[0].teams == ("docs", "foundation")

    def test_empty_text(self):
        assert parse_rules("", PREFIX) == []


# ---------------------------------------------------------------------------
# OwnershipIndex
# ---------------------------------------------------------------------------


class TestOwnershipIndex:
    def test_from_text_compiles_every_rule(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        assert len(index) == 6
        assert index.skipped == []

    def test_invalid_pattern_skipped_with_warning(self, caplog):
        text = "*** @calcom/broken\n/docs/ @calcom/docs\n"
        with caplog.at_level(logging.WARNING):
            index = OwnershipIndex.from_text(text, PREFIX)
        assert len(index) == 1
        assert index.skipped[0].pattern == "***"
        assert "Skipping CODEOWNERS rule" in caplog.text
        assert index.resolve(_files("docs/intro.md")) == {"docs"}

    def test_resolve_single_file(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        assert index.resolve(_files("packages/prisma/schema.prisma")) == {"foundation"}

    def test_resolve_unions_all_matching_rules(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        # Both /packages/prisma/ and *.sql match; later rules do not override.
        teams = index.resolve(_files("packages/prisma/migrations/0001.sql"))
        assert teams == {"foundation"}

    def test_resolve_unions_across_files(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        teams = index.resolve(_files("docs/intro.md", "apps/api/v2/index.ts", "apps/web/pages/index.tsx"))
        assert teams == {"docs", "platform", "consumer", "foundation"}

    def test_unmatched_file_yields_empty_set(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        assert index.resolve(_files("turbo.json")) == frozenset()

    def test_no_files_yields_empty_set(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        assert index.resolve([]) == frozenset()

    def test_no_rules_yields_empty_set(self):
        assert OwnershipIndex([]).resolve(_files("docs/intro.md")) == frozenset()

    def test_owners_of(self):
        index = OwnershipIndex.from_text(CODEOWNERS, PREFIX)
        assert index.owners_of("apps/web/lib/x.ts") == {"consumer", "foundation"}

    def test_resolution_independent_of_rule_and_file_order(self):
        rules = parse_rules(CODEOWNERS, PREFIX)
        files = _files("docs/a.md", "apps/api/x.ts", "db/seed.sql", "packages/app-store/stripe/index.ts")
        expected = OwnershipIndex(rules).resolve(files)

        for permuted_rules in itertools.islice(itertools.permutations(rules), 50):
            assert OwnershipIndex(permuted_rules).resolve(files) == expected
        for permuted_files in itertools.permutations(files):
            assert OwnershipIndex(rules).resolve(permuted_files) == expected

    def test_rules_property_excludes_skipped(self):
        index = OwnershipIndex(
            [OwnershipRule(pattern="", teams=("x",)), OwnershipRule(pattern="/docs/", teams=("docs",))]
        )
        assert [r.pattern for r in index.rules] == ["/docs/"]
