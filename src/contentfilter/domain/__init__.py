"""Domain model for contentfilter.

Re-exports all public types for convenient access:
    from contentfilter.domain import LiteralMatcher, RegexMatcher, Verdict
"""
from contentfilter.domain.decisions import Verdict
from contentfilter.domain.matchers import (
    DEFAULT_ENGINE,
    Blacklist,
    CompiledPattern,
    LiteralMatcher,
    Matcher,
    MatcherKind,
    PatternEngine,
    ReEngine,
    RegexMatcher,
)
from contentfilter.domain.types import Field, SessionId, Token

__all__ = [
    "DEFAULT_ENGINE",
    "Blacklist",
    "CompiledPattern",
    "LiteralMatcher",
    "Matcher",
    "MatcherKind",
    "PatternEngine",
    "ReEngine",
    "RegexMatcher",
    "Verdict",
    "Field",
    "SessionId",
    "Token",
]
