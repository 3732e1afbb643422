"""Blacklist loading from ``(kind, file)`` command-line pairs.

Usage:
    contentfilter literal words.txt regex patterns.txt

Each file is newline-delimited, one pattern per line; empty lines are
skipped. Every line of a ``literal`` file becomes a LiteralMatcher,
every line of a ``regex`` file a compiled RegexMatcher, in file order,
files in argument order.

Loading is all-or-nothing: the first problem raises a BlacklistError
naming the 1-based position of the offending argument, and nothing is
returned. The filter must never run with half a blacklist.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from contentfilter.domain.matchers import (
    DEFAULT_ENGINE,
    Blacklist,
    LiteralMatcher,
    Matcher,
    MatcherKind,
    PatternEngine,
    RegexMatcher,
)

log = logging.getLogger(__name__)


class BlacklistError(Exception):
    """Base for every blacklist configuration error.

    ``position`` is the 1-based index of the CLI argument at fault.
    """

    def __init__(self, position: int, message: str) -> None:
        super().__init__(message)
        self.position = position


class UnknownMatcherKind(BlacklistError):
    def __init__(self, position: int, kind: str) -> None:
        super().__init__(
            position,
            f'Unknown kind of pattern (CLI argument #{position}), '
            f'expected "literal"/"regex".',
        )
        self.kind = kind


class MissingPatternFile(BlacklistError):
    def __init__(self, position: int) -> None:
        super().__init__(
            position, "Unexpected end of CLI arguments, expected file."
        )


class EmptyFileName(BlacklistError):
    def __init__(self, position: int) -> None:
        super().__init__(
            position,
            f"Illegal empty string (CLI argument #{position}), expected file.",
        )


class InaccessibleFile(BlacklistError):
    def __init__(self, position: int, error: OSError) -> None:
        super().__init__(
            position,
            f"Inaccessible file (CLI argument #{position}), error: {error}",
        )


class UnreadableLine(BlacklistError):
    def __init__(self, position: int, line_no: int, error: Exception) -> None:
        super().__init__(
            position,
            f"File read error (CLI argument #{position}, line #{line_no}): {error}",
        )
        self.line_no = line_no


class InvalidRegex(BlacklistError):
    def __init__(self, position: int, line_no: int, error: Exception) -> None:
        super().__init__(
            position,
            f"Invalid regular expression (CLI argument #{position}, "
            f"line #{line_no}): {error}",
        )
        self.line_no = line_no


def _pattern_lines(path: str, position: int) -> Iterator[tuple[int, str]]:
    """Yield (line_no, text) for every non-empty line of ``path``.

    Lines are decoded one at a time so a bad byte sequence is blamed
    on the exact line it sits on.
    """
    if not path:
        raise EmptyFileName(position)
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise InaccessibleFile(position, exc) from exc

    raw_lines = data.split(b"\n")
    if raw_lines and raw_lines[-1] == b"":
        raw_lines.pop()  # trailing newline does not open another line
    for line_no, raw in enumerate(raw_lines, start=1):
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnreadableLine(position, line_no, exc) from exc
        if text:
            yield line_no, text


_KINDS = {kind.value: kind for kind in MatcherKind}


def _make_matcher(kind: MatcherKind, text: str, engine: PatternEngine) -> Matcher:
    if kind is MatcherKind.LITERAL:
        return LiteralMatcher(text)
    return RegexMatcher.compile(text, engine)


def load_blacklist(
    args: Sequence[str],
    engine: PatternEngine = DEFAULT_ENGINE,
) -> Blacklist:
    """Turn ``[kind, file, kind, file, ...]`` into an immutable blacklist.

    Raises:
        BlacklistError: on the first malformed argument, unreadable
            file or invalid pattern
    """
    matchers: list[Matcher] = []
    position = 0
    it = iter(args)
    for kind in it:
        position += 1
        matcher_kind = _KINDS.get(kind)
        if matcher_kind is None:
            raise UnknownMatcherKind(position, kind)

        path = next(it, None)
        if path is None:
            raise MissingPatternFile(position)
        position += 1

        before = len(matchers)
        for line_no, text in _pattern_lines(path, position):
            try:
                matchers.append(_make_matcher(matcher_kind, text, engine))
            except ValueError as exc:
                raise InvalidRegex(position, line_no, exc) from exc
        log.debug(
            "Loaded %d %s pattern(s) from %s",
            len(matchers) - before, kind, path,
        )

    return tuple(matchers)
