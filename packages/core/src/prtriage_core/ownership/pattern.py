"""CODEOWNERS glob pattern compiler.

Patterns follow gitignore-style rules as GitHub applies them to CODEOWNERS:

- A leading ``/`` anchors the pattern to the repository root.
- A pattern that is a single name (``README.md``, ``docs/``) with no leading
  slash matches that name at any depth.
- A trailing ``/`` means "everything under this directory" and does not match
  the directory name itself or siblings sharing its prefix.
- ``**`` spans zero or more path components, ``*`` and ``?`` never cross a
  ``/``, and ``\\`` makes the next character literal.
- A pattern whose last component is a plain name also matches everything
  below a directory of that name.

Each pattern becomes one regular expression anchored at both ends. The same
pattern string always compiles to an equivalent matcher.
"""

from __future__ import annotations

import re

from prtriage_core.errors import PatternError

_SEP = "/"

# Translations for a "**" segment depending on where it sits.
_GLOBSTAR_ONLY = ".+"
_GLOBSTAR_LEADING = f"(?:.+{_SEP})?"
_GLOBSTAR_TRAILING = f"{_SEP}.*"
_GLOBSTAR_MIDDLE = f"(?:{_SEP}.+)?"

_STAR_SEGMENT = f"[^{_SEP}]+"
_STAR = f"[^{_SEP}]*"
_QUESTION = f"[^{_SEP}]"
_DESCENDANTS = f"(?:{_SEP}.*)?"


class CompiledMatcher:
    """Exact-match predicate over a ``/``-separated repository-relative path."""

    __slots__ = ("pattern", "_regex")

    def __init__(self, pattern: str, regex: re.Pattern | None):
        self.pattern = pattern
        self._regex = regex

    @property
    def regex(self) -> str | None:
        """The compiled expression source, or None for a never-matching pattern."""
        return self._regex.pattern if self._regex is not None else None

    def test(self, path: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.fullmatch(path) is not None

    def __repr__(self) -> str:
        return f"CompiledMatcher({self.pattern!r})"


def _split_segments(pattern: str) -> list[str]:
    segments = pattern.split(_SEP)

    if segments[0] == "":
        segments = segments[1:]
    elif len(segments) == 1 or (len(segments) == 2 and segments[1] == ""):
        if segments[0] != "**":
            segments = ["**", *segments]

    if len(segments) > 1 and segments[-1] == "":
        segments[-1] = "**"

    return segments


def _translate_literal(segment: str) -> str:
    parts: list[str] = []
    escaping = False
    for ch in segment:
        if escaping:
            escaping = False
            parts.append(re.escape(ch))
        elif ch == "\\":
            escaping = True
        elif ch == "*":
            parts.append(_STAR)
        elif ch == "?":
            parts.append(_QUESTION)
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def translate(pattern: str) -> str:
    """Return the anchored regular expression source for a CODEOWNERS pattern."""
    segments = _split_segments(pattern)
    last = len(segments) - 1
    need_slash = False
    out = ["^"]

    for i, seg in enumerate(segments):
        if seg == "**":
            if i == 0 and i == last:
                out.append(_GLOBSTAR_ONLY)
            elif i == 0:
                out.append(_GLOBSTAR_LEADING)
                need_slash = False
            elif i == last:
                out.append(_GLOBSTAR_TRAILING)
            else:
                out.append(_GLOBSTAR_MIDDLE)
                need_slash = True
        elif seg == "*":
            if need_slash:
                out.append(_SEP)
            out.append(_STAR_SEGMENT)
            need_slash = True
        else:
            if need_slash:
                out.append(_SEP)
            out.append(_translate_literal(seg))
            if i == last:
                out.append(_DESCENDANTS)
            need_slash = True

    out.append("$")
    return "".join(out)


def compile_pattern(pattern: str) -> CompiledMatcher:
    """Compile a CODEOWNERS pattern into a matcher.

    Raises PatternError for an empty pattern or one containing three or more
    consecutive asterisks. The bare root pattern ``/`` compiles to a matcher
    that never succeeds.
    """
    if "***" in pattern:
        raise PatternError(pattern, "pattern cannot contain three consecutive asterisks")
    if pattern == "":
        raise PatternError(pattern, "empty pattern")
    if pattern == _SEP:
        return CompiledMatcher(pattern, None)

    return CompiledMatcher(pattern, re.compile(translate(pattern)))
