"""Tests for CODEOWNERS pattern compilation.

These pin down the glob edge cases that decide who gets asked to review:
anchoring, single-name patterns, trailing slashes, ``**`` placement and
escaping.
"""

import pytest

from prtriage_core.errors import PatternError
from prtriage_core.ownership.pattern import compile_pattern, translate

# ---------------------------------------------------------------------------
# Invalid patterns
# ---------------------------------------------------------------------------


class TestInvalidPatterns:
    def test_empty_pattern_raises(self):
        with pytest.raises(PatternError):
            compile_pattern("")

    def test_triple_asterisk_raises(self):
        with pytest.raises(PatternError):
            compile_pattern("***bad")

    def test_triple_asterisk_inside_path_raises(self):
        with pytest.raises(PatternError):
            compile_pattern("apps/***/web")

    def test_error_carries_pattern(self):
        with pytest.raises(PatternError) as exc_info:
            compile_pattern("***")
        assert exc_info.value.pattern == "***"

    def test_bare_slash_matches_nothing(self):
        matcher = compile_pattern("/")
        assert matcher.test("") is False
        assert matcher.test("README.md") is False
        assert matcher.test("a/b/c") is False
        assert matcher.regex is None


# ---------------------------------------------------------------------------
# Single-name patterns match at any depth
# ---------------------------------------------------------------------------


class TestUnanchoredNames:
    def test_name_matches_at_root(self):
        assert compile_pattern("README.md").test("README.md")

    def test_name_matches_at_any_depth(self):
        assert compile_pattern("README.md").test("a/b/README.md")

    def test_name_does_not_match_longer_name(self):
        assert not compile_pattern("README.md").test("README.mdx")
        assert not compile_pattern("README.md").test("a/OLD_README.md")

    def test_dot_is_literal(self):
        assert not compile_pattern("a.b").test("aXb")

    def test_name_matches_directory_contents(self):
        matcher = compile_pattern("migrations")
        assert matcher.test("migrations/0001.sql")
        assert matcher.test("packages/prisma/migrations/0001.sql")

    def test_extension_glob_matches_anywhere(self):
        matcher = compile_pattern("*.js")
        assert matcher.test("index.js")
        assert matcher.test("apps/web/index.js")
        assert not matcher.test("apps/web/index.ts")

    def test_question_mark_is_one_character(self):
        matcher = compile_pattern("?.md")
        assert matcher.test("a.md")
        assert matcher.test("docs/b.md")
        assert not matcher.test("ab.md")

    def test_unanchored_directory_with_trailing_slash(self):
        matcher = compile_pattern("docs/")
        assert matcher.test("docs/intro.md")
        assert matcher.test("apps/docs/intro.md")
        assert not matcher.test("docs")


# ---------------------------------------------------------------------------
# Root-anchored patterns
# ---------------------------------------------------------------------------


class TestAnchoredPatterns:
    def test_trailing_slash_matches_everything_below(self):
        assert compile_pattern("/docs/").test("docs/anything/here.md")

    def test_trailing_slash_does_not_match_prefixed_sibling(self):
        assert not compile_pattern("/docs/").test("docsother/x")

    def test_trailing_slash_does_not_match_directory_itself(self):
        assert not compile_pattern("/docs/").test("docs")

    def test_leading_slash_anchors_to_root(self):
        assert not compile_pattern("/docs/").test("apps/docs/intro.md")

    def test_anchored_file_and_its_descendants(self):
        matcher = compile_pattern("/apps/api")
        assert matcher.test("apps/api")
        assert matcher.test("apps/api/v1/index.ts")
        assert not matcher.test("apps/api-v2/index.ts")
        assert not matcher.test("x/apps/api")

    def test_single_star_segment_is_direct_children_only(self):
        matcher = compile_pattern("/apps/*")
        assert matcher.test("apps/web")
        assert not matcher.test("apps/web/pages/index.tsx")

    def test_multi_segment_pattern_without_leading_slash_is_anchored(self):
        matcher = compile_pattern("packages/lib/")
        assert matcher.test("packages/lib/date.ts")
        assert not matcher.test("apps/packages/lib/date.ts")


# ---------------------------------------------------------------------------
# ** placement
# ---------------------------------------------------------------------------


class TestGlobstar:
    def test_sole_globstar_matches_everything(self):
        matcher = compile_pattern("**")
        assert matcher.test("README.md")
        assert matcher.test("a/b/c.ts")

    def test_leading_globstar_matches_zero_directories(self):
        assert compile_pattern("**/x.ts").test("x.ts")

    def test_leading_globstar_matches_many_directories(self):
        assert compile_pattern("**/x.ts").test("a/b/x.ts")

    def test_trailing_globstar(self):
        matcher = compile_pattern("/packages/**")
        assert matcher.test("packages/ui/button.tsx")
        assert not matcher.test("packages")

    def test_middle_globstar_matches_zero_or_more_directories(self):
        matcher = compile_pattern("apps/**/test")
        assert matcher.test("apps/test")
        assert matcher.test("apps/web/test")
        assert matcher.test("apps/web/deep/test/spec.ts")
        assert not matcher.test("apps/testing")


# ---------------------------------------------------------------------------
# Escaping and translation
# ---------------------------------------------------------------------------


class TestEscaping:
    def test_backslash_makes_star_literal(self):
        matcher = compile_pattern("foo\\*bar")
        assert matcher.test("foo*bar")
        assert not matcher.test("fooxbar")

    def test_backslash_makes_question_mark_literal(self):
        matcher = compile_pattern("what\\?.md")
        assert matcher.test("what?.md")
        assert not matcher.test("whatx.md")

    def test_regex_metacharacters_are_literal(self):
        matcher = compile_pattern("/apps/(group)/[id].tsx")
        assert matcher.test("apps/(group)/[id].tsx")
        assert not matcher.test("apps/group/i.tsx")


class TestTranslate:
    def test_anchored_directory(self):
        assert translate("/docs/") == "^docs/.*$"

    def test_single_name(self):
        assert translate("README.md") == "^(?:.+/)?README\\.md(?:/.*)?$"

    def test_sole_globstar(self):
        assert translate("**") == "^.+$"

    def test_compilation_is_deterministic(self):
        assert compile_pattern("/apps/**/x.ts").regex == compile_pattern("/apps/**/x.ts").regex
