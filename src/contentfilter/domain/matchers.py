"""Blacklist matchers: exact substrings and regular expressions.

A blacklist is an ordered tuple of matchers, loaded once at startup:

    LiteralMatcher("badword")        -- case-sensitive containment
    RegexMatcher.compile(r"sp[a@]m") -- pattern found anywhere in text

Matcher is a closed union of exactly these two variants. The regex
engine sits behind the small PatternEngine protocol so a different
engine can be dropped in without touching the scanner; the default
wraps the standard library's ``re`` module.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeAlias, Union


class MatcherKind(Enum):
    LITERAL = "literal"
    REGEX = "regex"


class CompiledPattern(Protocol):
    """Anything with a ``search`` that returns a match or None."""

    def search(self, string: str, /) -> object | None: ...


class PatternEngine(Protocol):
    """Compiles pattern source text.

    Must raise ValueError on bad syntax.
    """

    def compile(self, source: str) -> CompiledPattern: ...


class ReEngine:
    """PatternEngine backed by the standard ``re`` module."""

    def __init__(self, flags: int = 0) -> None:
        self._flags = flags

    def compile(self, source: str) -> CompiledPattern:
        try:
            return re.compile(source, self._flags)
        except re.error as exc:
            raise ValueError(str(exc)) from exc


DEFAULT_ENGINE: PatternEngine = ReEngine()


@dataclass(frozen=True, slots=True)
class LiteralMatcher:
    """Exact, case-sensitive substring."""
    text: str

    @property
    def kind(self) -> MatcherKind:
        return MatcherKind.LITERAL

    @property
    def pattern(self) -> str:
        return self.text

    def matches(self, content: str) -> bool:
        return self.text in content


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """Compiled regular expression, matched anywhere in the text."""
    source: str
    compiled: CompiledPattern

    @classmethod
    def compile(
        cls, source: str, engine: PatternEngine = DEFAULT_ENGINE
    ) -> RegexMatcher:
        """Factory: compile ``source`` with ``engine``.

        Raises:
            ValueError: if the engine rejects the pattern
        """
        return cls(source=source, compiled=engine.compile(source))

    @property
    def kind(self) -> MatcherKind:
        return MatcherKind.REGEX

    @property
    def pattern(self) -> str:
        return self.source

    def matches(self, content: str) -> bool:
        return self.compiled.search(content) is not None


Matcher: TypeAlias = Union[LiteralMatcher, RegexMatcher]
Blacklist: TypeAlias = tuple[Matcher, ...]
