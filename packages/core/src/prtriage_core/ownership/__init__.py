"""CODEOWNERS pattern compilation and team resolution."""

from prtriage_core.ownership.index import OwnershipIndex, parse_rules
from prtriage_core.ownership.pattern import CompiledMatcher, compile_pattern

__all__ = ["CompiledMatcher", "OwnershipIndex", "compile_pattern", "parse_rules"]
